"""
Search links for reaching a company's recruiters.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, Optional
from urllib.parse import quote, quote_plus

log = logging.getLogger("hr_finder")

_COMPANY_SUFFIXES = re.compile(
    r"\s+(pvt|private|ltd|limited|inc|llc|llp|technologies|tech|software|solutions|consulting|services)\.?",
    re.IGNORECASE,
)


def clean_company_slug(company_name: str) -> str:
    name = _COMPANY_SUFFIXES.sub("", (company_name or "").lower())
    return re.sub(r"[^a-z0-9]", "", name)


def guess_career_page(company_name: str) -> Optional[str]:
    """Most likely careers URL; it is not verified."""
    slug = clean_company_slug(company_name)
    if not slug:
        return None
    return f"https://{slug}.com/careers"


def linkedin_people_search_url(company_name: str) -> str:
    return (
        "https://www.linkedin.com/search/results/people/"
        f"?keywords=HR%20recruiter%20{quote(company_name or '')}&origin=GLOBAL_SEARCH_HEADER"
    )


def linkedin_company_search_url(company_name: str) -> str:
    return f"https://www.linkedin.com/search/results/companies/?keywords={quote(company_name or '')}"


def google_careers_search_url(company_name: str) -> str:
    return f"https://www.google.com/search?q={quote_plus(f'{company_name} careers jobs')}"


def find_hr(company_name: str) -> Dict:
    result = {
        "career_page_url": guess_career_page(company_name),
        "linkedin_url": linkedin_people_search_url(company_name),
    }
    log.info("HR lookup links built", extra={"company": company_name})
    return result


def get_all_search_links(company_name: str) -> Dict[str, str]:
    encoded = quote(company_name or "")
    return {
        "linkedin_hr": linkedin_people_search_url(company_name),
        "linkedin_company": linkedin_company_search_url(company_name),
        "google_careers": google_careers_search_url(company_name),
        "glassdoor": f"https://www.glassdoor.co.in/Search/results.htm?keyword={encoded}",
        "ambitionbox": f"https://www.ambitionbox.com/overview/{encoded.lower().replace('%20', '-')}-overview",
    }
