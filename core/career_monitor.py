"""
Career page monitor.

Fetches each company's careers page, asks the LLM to pull job listings out of
the page text (regex title patterns when that is unavailable), stores jobs not
seen before and notifies about the run.
"""
from __future__ import annotations

import hashlib
import json
import logging
import re
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import requests
from bs4 import BeautifulSoup

from core import ai_matcher, config, notifications
from core import platforms
from core.companies import list_companies
from core.database import create_job, job_exists_for_company
from core.messages import generate_messages

log = logging.getLogger("career_monitor")

FETCH_TIMEOUT = 15
MAX_PAGE_CHARS = 15000
DELAY_BETWEEN_COMPANIES = 1.5
BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_TITLE_PATTERNS = [
    re.compile(
        r"(?:hiring|opening|position|role|job)[:\s]+([A-Za-z\s]+(?:Developer|Engineer|Designer|Manager|Analyst|Lead|Architect))",
        re.IGNORECASE,
    ),
    re.compile(
        r"((?:Senior|Junior|Lead|Staff|Principal)?\s*(?:Software|Full Stack|Frontend|Backend|DevOps|QA|Data|ML|AI)\s*(?:Developer|Engineer))",
        re.IGNORECASE,
    ),
    re.compile(r"((?:React|Node|Python|Java|Angular|Vue|AWS|Cloud)\s*Developer)", re.IGNORECASE),
]

_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def fetch_page_text(url: str) -> str:
    """Download a page and return its visible text (scripts, styles and chrome removed)."""
    resp = requests.get(
        url,
        timeout=FETCH_TIMEOUT,
        headers={
            "User-Agent": BROWSER_UA,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        },
    )
    resp.raise_for_status()
    soup = BeautifulSoup(resp.text, "html.parser")
    for tag in soup(["script", "style", "noscript", "nav", "footer", "header", "svg"]):
        tag.decompose()
    text = soup.get_text(separator=" ")
    text = re.sub(r"\s+", " ", text).strip()
    return text[:MAX_PAGE_CHARS]


def fallback_extraction(text: str, company: Dict) -> List[Dict]:
    """Pull likely job titles out of page text with regex patterns."""
    jobs: List[Dict] = []
    seen = set()
    for pattern in _TITLE_PATTERNS:
        for match in pattern.finditer(text):
            title = re.sub(r"\s+", " ", match.group(1)).strip()
            key = title.lower()
            if 5 < len(title) < 60 and key not in seen:
                seen.add(key)
                jobs.append({"title": title, "location": company.get("city"), "apply_url": company.get("careers")})
    return jobs


def _extraction_prompt(company: Dict, text: str) -> str:
    return f"""
Extract the open job positions listed on this careers page of {company['name']}.

PAGE TEXT:
{text}

For each job return: title, location, type (remote/hybrid/onsite/full-time),
experience, skills (array), description (short), applyUrl (if present).

Return a JSON array of jobs. Return [] if the page lists no jobs.
Only return valid JSON, no other text.
"""


def extract_jobs(company: Dict, text: str) -> List[Dict]:
    """LLM extraction of job listings from page text, regex patterns as fallback."""
    if not text:
        return []
    if not ai_matcher.ai_enabled():
        log.warning("No AI provider configured, using pattern extraction", extra={"company": company["name"]})
        return fallback_extraction(text, company)

    try:
        reply = ai_matcher.complete_text(_extraction_prompt(company, text), temperature=0.1, max_tokens=4000)
        match = _ARRAY_RE.search(reply)
        if not match:
            return []
        items = json.loads(match.group(0))
    except Exception as e:
        log.error("AI extraction failed", extra={"company": company["name"], "error": str(e)})
        return fallback_extraction(text, company)

    jobs = []
    for item in items:
        if not isinstance(item, dict) or not item.get("title"):
            continue
        jobs.append(
            {
                "title": str(item["title"]).strip(),
                "location": item.get("location"),
                "type": item.get("type"),
                "experience": item.get("experience"),
                "skills": item.get("skills") if isinstance(item.get("skills"), list) else [],
                "description": item.get("description") or "",
                "apply_url": item.get("applyUrl") or item.get("apply_url"),
            }
        )
    return jobs


def career_external_id(company_name: str, title: str) -> str:
    digest = hashlib.sha1(f"{company_name}{title}".lower().encode("utf-8")).hexdigest()
    return f"career_{digest[:10]}"


def map_job_type(value: Optional[str]) -> Optional[str]:
    lower = (value or "").lower()
    if "remote" in lower:
        return "REMOTE"
    if "hybrid" in lower:
        return "HYBRID"
    if "onsite" in lower or "on-site" in lower or "office" in lower:
        return "ONSITE"
    if "full" in lower:
        return "FULL_TIME"
    return None


def save_extracted_job(job: Dict, company: Dict) -> bool:
    """Store an extracted job unless it is already known. Returns True when stored."""
    external_id = career_external_id(company["name"], job["title"])
    if job_exists_for_company(company["name"], job["title"], external_id=external_id):
        return False

    location = job.get("location") or company.get("city")
    info = {
        "title": job["title"],
        "company_name": company["name"],
        "location": location,
        "description": job.get("description") or "",
        "skills": job.get("skills") or [],
    }
    match = ai_matcher.match_job(info)
    messages = generate_messages(info)

    stored = create_job(
        {
            **info,
            "platform": platforms.INDEED,
            "external_id": external_id,
            "job_type": map_job_type(job.get("type")),
            "experience_range": job.get("experience"),
            "url": job.get("apply_url") or company.get("careers"),
            "is_easy_apply": False,
            "ai_match_score": match["score"],
            "ai_match_reason": match["reason"],
            "linkedin_message": messages["linkedin_message"],
            "application_form_data": messages["form_data"],
            "career_page_url": company.get("careers"),
        }
    )
    if stored is None:
        return False
    log.info("Saved career page job", extra={"company": company["name"], "title": job["title"]})
    if match["score"] >= config.NOTIFY_MATCH_THRESHOLD:
        notifications.notify_new_job(stored)
    return True


def monitor_company(company: Dict) -> Dict:
    result = {"company": company["name"], "careers_url": company.get("careers"), "jobs_found": 0, "new_jobs": 0, "error": None}
    try:
        text = fetch_page_text(company["careers"])
        jobs = extract_jobs(company, text)
        result["jobs_found"] = len(jobs)
        for job in jobs:
            try:
                if save_extracted_job(job, company):
                    result["new_jobs"] += 1
            except Exception as e:
                log.error("Failed to save job", extra={"company": company["name"], "title": job.get("title"), "error": str(e)})
    except Exception as e:
        result["error"] = str(e)
        log.error("Career page check failed", extra={"company": company["name"], "error": str(e)})
    return result


def _run(companies: List[Dict], notify: bool = True) -> Dict:
    summary = {"companies": len(companies), "total": 0, "new_jobs": 0, "errors": 0, "results": []}
    for idx, company in enumerate(companies):
        result = monitor_company(company)
        summary["results"].append(result)
        summary["total"] += result["jobs_found"]
        summary["new_jobs"] += result["new_jobs"]
        if result["error"]:
            summary["errors"] += 1
        if idx < len(companies) - 1:
            time.sleep(DELAY_BETWEEN_COMPANIES)

    log.info(
        "Career monitoring complete: companies=%d jobs=%d new=%d errors=%d",
        summary["companies"],
        summary["total"],
        summary["new_jobs"],
        summary["errors"],
    )
    if notify and companies:
        notifications.notify_monitor_summary(
            summary["total"], summary["new_jobs"], summary["errors"], summary["companies"]
        )
    return summary


def load_companies(path: Optional[Path] = None) -> List[Dict]:
    return list_companies(path, with_careers_only=True)


def monitor_all() -> Dict:
    return _run(load_companies())


def monitor_by_names(names: Iterable[str]) -> Dict:
    wanted = [n.strip().lower() for n in names if n and n.strip()]
    companies = [
        c for c in load_companies() if any(w in c["name"].lower() for w in wanted)
    ]
    if not companies:
        log.warning("No companies matched", extra={"names": wanted})
    return _run(companies)


def monitor_top(limit: int) -> Dict:
    """Quick check of the first ``limit`` companies in the file."""
    return _run(load_companies()[:limit], notify=False)


def register_tasks(scheduler) -> None:
    scheduler.add_daily_task("career_monitor", config.CAREER_MONITOR_TIMES, monitor_all)
    scheduler.add_interval_task(
        "career_quick_check",
        config.QUICK_CHECK_HOURS,
        lambda: monitor_top(config.QUICK_CHECK_COMPANIES),
    )


__all__ = [
    "fetch_page_text",
    "fallback_extraction",
    "extract_jobs",
    "career_external_id",
    "map_job_type",
    "save_extracted_job",
    "monitor_company",
    "load_companies",
    "monitor_all",
    "monitor_by_names",
    "monitor_top",
    "register_tasks",
]
