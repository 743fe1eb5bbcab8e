"""
Find recruiter / HR email addresses for a company.

Sources, in order: Hunter domain search, Apollo people search (only while
fewer than 3 addresses are known), then generated role addresses.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional
from urllib.parse import urlparse

import requests

from core import config

log = logging.getLogger("email_finder")

REQUEST_TIMEOUT = 20

HR_KEYWORDS = ("hr", "human resource", "recruiter", "recruiting", "talent", "hiring", "people", "acquisition", "staffing")

PATTERN_PREFIXES = [
    "hr",
    "careers",
    "jobs",
    "recruiting",
    "talent",
    "hiring",
    "recruitment",
    "people",
    "humanresources",
    "hr.india",
    "india.hr",
    "careers.india",
]

APOLLO_TITLES = [
    "HR",
    "Human Resources",
    "Recruiter",
    "Talent Acquisition",
    "People Operations",
    "Hiring Manager",
    "Technical Recruiter",
]

_LEGAL_SUFFIXES = re.compile(
    r"\s+(pvt\.?|private|ltd\.?|limited|inc\.?|incorporated|llc|corp\.?|corporation)\s*",
    re.IGNORECASE,
)


def is_hr_role(position: Optional[str]) -> bool:
    position = (position or "").lower()
    return any(k in position for k in HR_KEYWORDS)


def guess_domain(company_name: str) -> str:
    name = _LEGAL_SUFFIXES.sub("", (company_name or "").lower())
    return re.sub(r"[^a-z0-9]", "", name) + ".com"


def domain_from_url(url: Optional[str]) -> Optional[str]:
    """Registered host of a URL without a leading ``www.``, skipping search engines and job boards."""
    if not url:
        return None
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    if not host or any(s in host for s in ("google.", "linkedin.", "naukri.", "indeed.", "remoteok.", "remotive.")):
        return None
    return host


def find_with_hunter(domain: str) -> List[Dict]:
    if not config.HUNTER_API_KEY:
        return []
    emails: List[Dict] = []
    try:
        resp = requests.get(
            "https://api.hunter.io/v2/domain-search",
            params={"domain": domain, "api_key": config.HUNTER_API_KEY, "limit": 10},
            timeout=REQUEST_TIMEOUT,
        )
        resp.raise_for_status()
        for item in (resp.json().get("data") or {}).get("emails") or []:
            if is_hr_role(item.get("position")) or len(emails) < 5:
                emails.append(
                    {
                        "email": item.get("value"),
                        "confidence": item.get("confidence") or 50,
                        "source": "hunter",
                        "first_name": item.get("first_name"),
                        "last_name": item.get("last_name"),
                        "position": item.get("position"),
                    }
                )
    except Exception as e:
        log.error("Hunter lookup failed", extra={"domain": domain, "error": str(e)})
    return [e for e in emails if e.get("email")]


def find_with_apollo(domain: str) -> List[Dict]:
    if not config.APOLLO_API_KEY:
        return []
    emails: List[Dict] = []
    try:
        resp = requests.post(
            "https://api.apollo.io/v1/mixed_people/search",
            json={
                "q_organization_domains": domain,
                "page": 1,
                "per_page": 10,
                "person_titles": APOLLO_TITLES,
            },
            headers={"Cache-Control": "no-cache", "X-Api-Key": config.APOLLO_API_KEY},
            timeout=REQUEST_TIMEOUT,
        )
        resp.raise_for_status()
        for person in resp.json().get("people") or []:
            if not person.get("email"):
                continue
            emails.append(
                {
                    "email": person["email"],
                    "confidence": 90 if person.get("email_status") == "verified" else 60,
                    "source": "apollo",
                    "first_name": person.get("first_name"),
                    "last_name": person.get("last_name"),
                    "position": person.get("title"),
                }
            )
    except Exception as e:
        log.error("Apollo lookup failed", extra={"domain": domain, "error": str(e)})
    return emails


def generate_pattern_emails(domain: str) -> List[Dict]:
    emails = [
        {"email": f"{prefix}@{domain}", "confidence": 30, "source": "pattern", "position": "HR Department"}
        for prefix in PATTERN_PREFIXES
    ]
    emails.append({"email": f"info@{domain}", "confidence": 20, "source": "pattern", "position": "General Contact"})
    return emails


def find_company_emails(company_name: str, domain: Optional[str] = None) -> List[Dict]:
    domain = domain or guess_domain(company_name)
    emails = find_with_hunter(domain)
    if len(emails) < 3:
        emails.extend(find_with_apollo(domain))
    if not emails:
        emails = generate_pattern_emails(domain)

    seen = set()
    unique = []
    for e in emails:
        key = e["email"].lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(e)
    return unique


def get_best_email(company_name: str, domain: Optional[str] = None) -> Optional[Dict]:
    """HR roles first, then highest confidence."""
    emails = find_company_emails(company_name, domain)
    if not emails:
        return None
    return sorted(emails, key=lambda e: (not is_hr_role(e.get("position")), -int(e.get("confidence") or 0)))[0]


__all__ = [
    "is_hr_role",
    "guess_domain",
    "domain_from_url",
    "find_with_hunter",
    "find_with_apollo",
    "generate_pattern_emails",
    "find_company_emails",
    "get_best_email",
]
