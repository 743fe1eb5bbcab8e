"""
Job platforms known to the system and their static metadata.
"""
from __future__ import annotations

from typing import Dict

LINKEDIN = "LINKEDIN"
NAUKRI = "NAUKRI"
INDEED = "INDEED"
WELLFOUND = "WELLFOUND"
INSTAHYRE = "INSTAHYRE"
GLASSDOOR = "GLASSDOOR"
CUTSHORT = "CUTSHORT"
REMOTEOK = "REMOTEOK"

PLATFORMS = (LINKEDIN, NAUKRI, INDEED, WELLFOUND, INSTAHYRE, GLASSDOOR, CUTSHORT, REMOTEOK)

PLATFORM_CONFIG: Dict[str, Dict] = {
    LINKEDIN: {
        "display_name": "LinkedIn",
        "base_url": "https://www.linkedin.com",
        "login_url": "https://www.linkedin.com/login",
        "search_url": "https://www.linkedin.com/jobs/search",
        "requires_auth": True,
        "has_easy_apply": True,
        "delay_between_requests_ms": 6000,
    },
    NAUKRI: {
        "display_name": "Naukri.com",
        "base_url": "https://www.naukri.com",
        "login_url": "https://www.naukri.com/nlogin/login",
        "search_url": "https://www.naukri.com/jobs",
        "requires_auth": True,
        "has_easy_apply": True,
        "delay_between_requests_ms": 6000,
        "max_applications_per_session": 10,
    },
    INDEED: {
        "display_name": "Indeed",
        "base_url": "https://in.indeed.com",
        "login_url": "https://secure.indeed.com/account/login",
        "search_url": "https://in.indeed.com/jobs",
        "requires_auth": False,
        "has_easy_apply": True,
        "delay_between_requests_ms": 5000,
    },
    WELLFOUND: {
        "display_name": "Wellfound",
        "base_url": "https://wellfound.com",
        "login_url": "https://wellfound.com/login",
        "search_url": "https://wellfound.com/jobs",
        "requires_auth": True,
        "has_easy_apply": True,
        "delay_between_requests_ms": 5000,
    },
    INSTAHYRE: {
        "display_name": "Instahyre",
        "base_url": "https://www.instahyre.com",
        "login_url": "https://www.instahyre.com/login/",
        "search_url": "https://www.instahyre.com/search-jobs/",
        "requires_auth": True,
        "has_easy_apply": True,
        "delay_between_requests_ms": 5000,
    },
    GLASSDOOR: {
        "display_name": "Glassdoor",
        "base_url": "https://www.glassdoor.co.in",
        "login_url": "https://www.glassdoor.co.in/profile/login_input.htm",
        "search_url": "https://www.glassdoor.co.in/Job/jobs.htm",
        "requires_auth": False,
        "has_easy_apply": False,
        "delay_between_requests_ms": 8000,
    },
    CUTSHORT: {
        "display_name": "Cutshort",
        "base_url": "https://cutshort.io",
        "login_url": "https://cutshort.io/login",
        "search_url": "https://cutshort.io/jobs",
        "requires_auth": True,
        "has_easy_apply": True,
        "delay_between_requests_ms": 5000,
    },
    REMOTEOK: {
        "display_name": "RemoteOK",
        "base_url": "https://remoteok.com",
        "login_url": "https://remoteok.com",
        "search_url": "https://remoteok.com/api",
        "requires_auth": False,
        "has_easy_apply": False,
        "delay_between_requests_ms": 2000,
    },
}


def display_name(platform: str) -> str:
    return PLATFORM_CONFIG.get(platform, {}).get("display_name", platform)
