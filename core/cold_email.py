"""
Cold email outreach to company HR contacts.

A company is emailed at most once per 30 days; at most COLD_EMAIL_DAILY_LIMIT
emails go out per day (the counter resets at midnight via the scheduler).
"""
from __future__ import annotations

import html
import logging
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from app.email_utils import email_configured, send_email
from core import ai_matcher, config
from core.criteria import SEARCH_CRITERIA, USER_PROFILE
from core.database import (
    get_contacted_companies,
    get_outreach_candidates,
    get_outreach_stats,
    record_outreach,
    was_contacted_since,
)
from core.email_finder import domain_from_url, get_best_email
from core.messages import email_body, email_subject, get_relevant_skills

log = logging.getLogger("cold_email")

RECONTACT_DAYS = 30

_sent_today = 0


def is_enabled() -> bool:
    return config.COLD_EMAIL_ENABLED and email_configured()


def can_send_email() -> bool:
    return _sent_today < config.COLD_EMAIL_DAILY_LIMIT


def remaining_today() -> int:
    return max(0, config.COLD_EMAIL_DAILY_LIMIT - _sent_today)


def reset_daily_count() -> None:
    global _sent_today
    _sent_today = 0
    log.info("Cold email daily counter reset")


def _plain_to_html(text: str) -> str:
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    return "".join(f"<p>{html.escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs)


def _html_to_plain(body: str) -> str:
    text = re.sub(r"<br\s*/?>", "\n", body, flags=re.IGNORECASE)
    text = re.sub(r"</p>", "\n\n", text, flags=re.IGNORECASE)
    return html.unescape(re.sub(r"<[^>]+>", "", text)).strip()


def template_email(target: Dict) -> Dict:
    job = {
        "title": target.get("job_title") or USER_PROFILE["title"],
        "company_name": target["company_name"],
        "description": target.get("job_description") or "",
    }
    body = email_body(job)
    return {"subject": email_subject(job), "body": body, "html": _plain_to_html(body)}


def ai_email(target: Dict, recipient: Dict) -> Optional[Dict]:
    name = " ".join(filter(None, [recipient.get("first_name"), recipient.get("last_name")]))
    job_line = f"JOB OF INTEREST: {target['job_title']}" if target.get("job_title") else "GENERAL INQUIRY"
    recipient_line = f"RECIPIENT: {name} ({recipient.get('position') or 'HR'})" if name else ""
    context = (target.get("job_description") or "")[:500]
    skills = ", ".join(get_relevant_skills({"description": context}))
    prompt = f"""
Write a professional cold email for a job inquiry.

CANDIDATE:
- Name: {USER_PROFILE['name']}
- Title: {USER_PROFILE['title']}
- Experience: {USER_PROFILE['years_of_experience']} years
- Key skills: {skills}
- Key achievement: {USER_PROFILE['achievements'][0]}

TARGET COMPANY: {target['company_name']}
{job_line}
{recipient_line}

JOB CONTEXT:
{context}

Subject under 60 characters. Body 150-200 words as HTML paragraphs with a clear call to action.
Reply with JSON only: {{"subject": "...", "body": "<p>...</p>"}}
"""
    reply = ai_matcher.complete_text(
        prompt,
        system="You write concise, professional cold emails to recruiters. Always respond with valid JSON only.",
        temperature=0.7,
        max_tokens=1000,
        json_mode=True,
    )
    data = ai_matcher.parse_json_object(reply)
    if not data.get("subject") or not data.get("body"):
        return None
    return {"subject": data["subject"], "body": _html_to_plain(data["body"]), "html": data["body"]}


def compose_email(target: Dict, recipient: Dict) -> Dict:
    if target.get("job_description") and ai_matcher.ai_enabled():
        try:
            content = ai_email(target, recipient)
            if content:
                return content
        except Exception as e:
            log.warning("AI email generation failed, using template", extra={"error": str(e)})
    return template_email(target)


def send_cold_email(target: Dict) -> Dict:
    """
    Email the best HR contact of ``target["company_name"]``.
    Returns {success, email, error}.
    """
    global _sent_today
    company = target["company_name"]
    if not is_enabled():
        return {"success": False, "email": None, "error": "Cold email not enabled"}
    if not can_send_email():
        return {"success": False, "email": None, "error": "Daily email limit reached"}

    since = (datetime.now(timezone.utc) - timedelta(days=RECONTACT_DAYS)).isoformat(timespec="seconds")
    if was_contacted_since(company, since):
        log.info("Company emailed recently, skipping", extra={"company": company})
        return {"success": False, "email": None, "error": "Already contacted this company recently"}

    recipient = get_best_email(company, target.get("company_domain"))
    if not recipient:
        return {"success": False, "email": None, "error": "Could not find HR email"}

    content = compose_email(target, recipient)
    error = None
    try:
        send_email(
            recipient["email"],
            content["subject"],
            content["body"],
            html_body=content.get("html"),
            attachment=config.RESUME_PATH,
        )
        _sent_today += 1
    except Exception as e:
        error = str(e)
        log.error("Cold email failed", extra={"company": company, "to": recipient["email"], "error": error})

    name = " ".join(filter(None, [recipient.get("first_name"), recipient.get("last_name")])) or None
    record_outreach(
        company_name=company,
        company_domain=target.get("company_domain"),
        recipient_email=recipient["email"],
        recipient_name=name,
        recipient_position=recipient.get("position"),
        email_subject=content["subject"],
        status="FAILED" if error else "SENT",
        error_message=error,
        job_title=target.get("job_title"),
        job_url=target.get("job_url"),
    )
    if not error:
        log.info("Cold email sent", extra={"company": company, "to": recipient["email"]})
    return {"success": error is None, "email": recipient["email"], "error": error}


def process_companies_from_jobs(limit: int = 10) -> Dict:
    """Email companies behind high-scoring jobs that were never contacted."""
    result = {"processed": 0, "sent": 0, "failed": 0}
    if not is_enabled():
        log.info("Cold email disabled, skipping outreach run")
        return result

    exclude = set(get_contacted_companies()) | set(SEARCH_CRITERIA["exclude_companies"])
    jobs = get_outreach_candidates(config.AI_MATCH_THRESHOLD, limit, exclude_companies=exclude)
    log.info("Processing companies for cold email outreach", extra={"count": len(jobs)})

    for idx, job in enumerate(jobs):
        if not can_send_email():
            log.info("Daily email limit reached, stopping")
            break
        outcome = send_cold_email(
            {
                "company_name": job["company_name"],
                "company_domain": domain_from_url(job.get("career_page_url")),
                "job_title": job["title"],
                "job_url": job.get("url"),
                "job_description": job.get("description"),
            }
        )
        result["processed"] += 1
        if outcome["success"]:
            result["sent"] += 1
        else:
            result["failed"] += 1
        if idx < len(jobs) - 1:
            time.sleep(config.COLD_EMAIL_DELAY_MS / 1000)
    return result


def get_stats() -> Dict:
    stats = get_outreach_stats()
    total = stats["total_sent"]
    return {
        "total_sent": total,
        "sent_today": stats["sent_today"],
        "remaining_today": remaining_today(),
        "response_rate": round(stats["responded"] / total * 100, 1) if total else 0.0,
    }


def register_tasks(scheduler) -> None:
    def send_batch():
        if is_enabled():
            process_companies_from_jobs()

    scheduler.add_daily_task("cold_email", ["10:00", "15:00"], send_batch)
    scheduler.add_daily_task("cold_email_reset", ["00:00"], reset_daily_count)


__all__ = [
    "is_enabled",
    "can_send_email",
    "remaining_today",
    "reset_daily_count",
    "template_email",
    "compose_email",
    "send_cold_email",
    "process_companies_from_jobs",
    "get_stats",
    "register_tasks",
]
