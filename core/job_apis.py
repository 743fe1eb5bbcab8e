"""
Public job board APIs (Remotive, RemoteOK, Arbeitnow, Adzuna, JSearch, Findwork).

Every fetcher returns a list of normalized dicts:
  {source, external_id, title, company_name, location, description, url,
   salary, posted_at, tags, remote}
and logs + returns [] when its source fails, so one bad source never stops the rest.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import requests

from core import config
from core import platforms
from core.criteria import SEARCH_CRITERIA

log = logging.getLogger("job_apis")

REQUEST_TIMEOUT = 30
USER_AGENT = "JobApplicationBot/1.0"

REMOTIVE_CATEGORIES = ["software-dev", "devops", "data"]
REMOTEOK_TAGS = ["javascript", "nodejs", "react", "typescript", "backend", "fullstack"]
REMOTEOK_LOCATION_WORDS = ("worldwide", "anywhere", "remote", "india", "asia")
JSEARCH_QUERIES = ["fullstack developer remote india", "nodejs developer remote"]

SOURCE_PLATFORM = {
    "remotive": platforms.REMOTEOK,
    "remoteok": platforms.REMOTEOK,
    "arbeitnow": platforms.REMOTEOK,
    "adzuna": platforms.INDEED,
    "jsearch": platforms.INDEED,
    "findwork": platforms.WELLFOUND,
}


def map_source_to_platform(source: str) -> str:
    return SOURCE_PLATFORM.get((source or "").lower(), platforms.INDEED)


def _iso(value) -> Optional[str]:
    """Normalize API dates (ISO strings or unix seconds) to UTC ISO text."""
    if value in (None, ""):
        return None
    try:
        if isinstance(value, (int, float)):
            dt = datetime.fromtimestamp(value, tz=timezone.utc)
        else:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).isoformat(timespec="seconds")
    except (ValueError, OverflowError, OSError):
        return None


def _title_matches(title: str) -> bool:
    title = (title or "").lower()
    return any(kw.lower() in title for kw in SEARCH_CRITERIA["keywords"])


def _get_json(url: str, params: Optional[Dict] = None, headers: Optional[Dict] = None):
    resp = requests.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def fetch_remotive() -> List[Dict]:
    jobs: List[Dict] = []
    for category in REMOTIVE_CATEGORIES:
        data = _get_json("https://remotive.com/api/remote-jobs", params={"category": category, "limit": 50})
        for job in data.get("jobs") or []:
            if not _title_matches(job.get("title")):
                continue
            jobs.append(
                {
                    "source": "remotive",
                    "external_id": f"remotive_{job.get('id')}",
                    "title": job.get("title"),
                    "company_name": job.get("company_name") or "Unknown",
                    "location": job.get("candidate_required_location") or "Remote",
                    "description": job.get("description") or "",
                    "url": job.get("url"),
                    "salary": job.get("salary") or None,
                    "posted_at": _iso(job.get("publication_date")),
                    "tags": job.get("tags") or [],
                    "remote": True,
                }
            )
        time.sleep(1)
    return jobs


def fetch_remoteok() -> List[Dict]:
    by_id: Dict[str, Dict] = {}
    for tag in REMOTEOK_TAGS:
        data = _get_json("https://remoteok.com/api", params={"tag": tag}, headers={"User-Agent": USER_AGENT})
        # First element is API metadata.
        listing = data[1:] if isinstance(data, list) else []
        for job in listing:
            if not job.get("id") or not job.get("position"):
                continue
            location = job.get("location") or "Worldwide"
            if not any(word in location.lower() for word in REMOTEOK_LOCATION_WORDS):
                continue
            salary = None
            if job.get("salary_min") and job.get("salary_max"):
                salary = f"${job['salary_min']} - ${job['salary_max']}"
            external_id = f"remoteok_{job['id']}"
            by_id[external_id] = {
                "source": "remoteok",
                "external_id": external_id,
                "title": job.get("position"),
                "company_name": job.get("company") or "Unknown",
                "location": location,
                "description": job.get("description") or "",
                "url": job.get("url") or f"https://remoteok.com/l/{job['id']}",
                "salary": salary,
                "posted_at": _iso(job.get("date")),
                "tags": job.get("tags") or [],
                "remote": True,
            }
        time.sleep(2)
    return list(by_id.values())


def fetch_arbeitnow() -> List[Dict]:
    data = _get_json("https://arbeitnow.com/api/job-board-api")
    jobs: List[Dict] = []
    for job in data.get("data") or []:
        is_remote = job.get("remote") is True or "remote" in (job.get("location") or "").lower()
        if not is_remote or not _title_matches(job.get("title")):
            continue
        jobs.append(
            {
                "source": "arbeitnow",
                "external_id": f"arbeitnow_{job.get('slug')}",
                "title": job.get("title"),
                "company_name": job.get("company_name") or "Unknown",
                "location": job.get("location") or "Remote",
                "description": job.get("description") or "",
                "url": job.get("url"),
                "salary": None,
                "posted_at": _iso(job.get("created_at")),
                "tags": job.get("tags") or [],
                "remote": True,
            }
        )
    return jobs


def fetch_adzuna() -> List[Dict]:
    if not (config.ADZUNA_APP_ID and config.ADZUNA_APP_KEY):
        return []
    jobs: List[Dict] = []
    for keyword in SEARCH_CRITERIA["keywords"][:2]:
        for location in SEARCH_CRITERIA["locations"][:1]:
            data = _get_json(
                "https://api.adzuna.com/v1/api/jobs/in/search/1",
                params={
                    "app_id": config.ADZUNA_APP_ID,
                    "app_key": config.ADZUNA_APP_KEY,
                    "what": keyword,
                    "where": location,
                    "results_per_page": 20,
                    "max_days_old": 7,
                },
            )
            for job in data.get("results") or []:
                salary = None
                if job.get("salary_min") and job.get("salary_max"):
                    salary = f"₹{job['salary_min']} - ₹{job['salary_max']}"
                location_name = (job.get("location") or {}).get("display_name") or "India"
                jobs.append(
                    {
                        "source": "adzuna",
                        "external_id": f"adzuna_{job.get('id')}",
                        "title": job.get("title"),
                        "company_name": (job.get("company") or {}).get("display_name") or "Unknown",
                        "location": location_name,
                        "description": job.get("description") or "",
                        "url": job.get("redirect_url"),
                        "salary": salary,
                        "posted_at": _iso(job.get("created")),
                        "tags": [],
                        "remote": "remote" in location_name.lower(),
                    }
                )
            time.sleep(1)
    return jobs


def fetch_jsearch() -> List[Dict]:
    if not config.RAPIDAPI_KEY:
        return []
    headers = {
        "X-RapidAPI-Key": config.RAPIDAPI_KEY,
        "X-RapidAPI-Host": "jsearch.p.rapidapi.com",
    }
    jobs: List[Dict] = []
    for query in JSEARCH_QUERIES:
        data = _get_json(
            "https://jsearch.p.rapidapi.com/search",
            params={"query": query, "num_pages": 1, "date_posted": "week"},
            headers=headers,
        )
        for job in data.get("data") or []:
            if job.get("job_city"):
                location = f"{job['job_city']}, {job.get('job_country') or ''}".strip(", ")
            else:
                location = job.get("job_country") or "Remote"
            salary = None
            if job.get("job_min_salary") and job.get("job_max_salary"):
                salary = f"{job.get('job_salary_currency') or '$'}{job['job_min_salary']} - {job['job_max_salary']}"
            jobs.append(
                {
                    "source": "jsearch",
                    "external_id": f"jsearch_{job.get('job_id')}",
                    "title": job.get("job_title"),
                    "company_name": job.get("employer_name") or "Unknown",
                    "location": location,
                    "description": job.get("job_description") or "",
                    "url": job.get("job_apply_link") or job.get("job_google_link"),
                    "salary": salary,
                    "posted_at": _iso(job.get("job_posted_at_datetime_utc")),
                    "tags": [],
                    "remote": bool(job.get("job_is_remote")),
                }
            )
        time.sleep(1)
    return jobs


def fetch_findwork() -> List[Dict]:
    if not config.FINDWORK_API_KEY:
        return []
    data = _get_json(
        "https://findwork.dev/api/jobs/",
        params={"search": "javascript nodejs react", "remote": "true"},
        headers={"Authorization": f"Token {config.FINDWORK_API_KEY}"},
    )
    jobs: List[Dict] = []
    for job in data.get("results") or []:
        jobs.append(
            {
                "source": "findwork",
                "external_id": f"findwork_{job.get('id')}",
                "title": job.get("role"),
                "company_name": job.get("company_name") or "Unknown",
                "location": job.get("location") or "Remote",
                "description": job.get("text") or "",
                "url": job.get("url"),
                "salary": None,
                "posted_at": _iso(job.get("date_posted")),
                "tags": job.get("keywords") or [],
                "remote": bool(job.get("remote", True)),
            }
        )
    return jobs


SOURCES: Dict[str, Callable[[], List[Dict]]] = {
    "remotive": fetch_remotive,
    "remoteok": fetch_remoteok,
    "arbeitnow": fetch_arbeitnow,
    "adzuna": fetch_adzuna,
    "jsearch": fetch_jsearch,
    "findwork": fetch_findwork,
}


def fetch_all_jobs(sources: Optional[List[str]] = None) -> List[Dict]:
    """Fetch every (or the named) source in turn; failures are logged and skipped."""
    names = sources or list(SOURCES)
    all_jobs: List[Dict] = []
    for name in names:
        fetcher = SOURCES.get(name)
        if fetcher is None:
            log.warning("Unknown job API source", extra={"source": name})
            continue
        try:
            jobs = fetcher()
        except Exception as e:
            log.error("Job API fetch failed", extra={"source": name, "error": str(e)})
            continue
        jobs = [j for j in jobs if j.get("title") and j.get("url")]
        log.info("Fetched jobs from API", extra={"source": name, "count": len(jobs)})
        all_jobs.extend(jobs)
    log.info("Fetched %d jobs from APIs", len(all_jobs))
    return all_jobs


__all__ = [
    "SOURCES",
    "map_source_to_platform",
    "fetch_remotive",
    "fetch_remoteok",
    "fetch_arbeitnow",
    "fetch_adzuna",
    "fetch_jsearch",
    "fetch_findwork",
    "fetch_all_jobs",
]
