import asyncio
import logging
import signal
import threading
from typing import Dict, List, Optional

from core import config, notifications, platforms
from core.ai_matcher import generate_cover_letter, match_job
from core.criteria import SEARCH_CRITERIA, is_excluded_company
from core.database import (
    complete_scraping_session,
    count_applications_since,
    create_application,
    create_job,
    fail_scraping_session,
    get_pending_applications,
    init_db,
    job_exists,
    start_scraping_session,
    update_application_status,
    upsert_application_history,
    was_applied_before,
)
from core.db.base import start_of_today
from core.job_apis import fetch_all_jobs, map_source_to_platform
from core.messages import generate_messages
from core.scheduler import TaskScheduler
from worker.linkedin_engine import LinkedInScraper
from worker.naukri_apply import NaukriApplicator
from worker.naukri_engine import NaukriScraper

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("worker")

SCRAPERS = {
    platforms.LINKEDIN: LinkedInScraper,
    platforms.NAUKRI: NaukriScraper,
}
APPLICATORS = {
    platforms.NAUKRI: NaukriApplicator,
}

SEARCH_KEYWORDS = 3
SEARCH_LOCATIONS = 2
POLL_SECONDS = 30

daily_stats: Dict[str, int] = {
    "jobs_found": 0,
    "applications_sent": 0,
    "applications_failed": 0,
    "applications_queued": 0,
}


def reset_daily_stats() -> None:
    for key in daily_stats:
        daily_stats[key] = 0
    log.info("Daily counters reset")


def map_job_type(location: Optional[str]) -> Optional[str]:
    lower = (location or "").lower()
    if "remote" in lower:
        return "REMOTE"
    if "hybrid" in lower:
        return "HYBRID"
    return None


def enabled_scrapers() -> List[str]:
    enabled = []
    if config.LINKEDIN_ENABLED and config.LINKEDIN_EMAIL and config.LINKEDIN_PASSWORD:
        enabled.append(platforms.LINKEDIN)
    if config.NAUKRI_EMAIL and config.NAUKRI_PASSWORD:
        enabled.append(platforms.NAUKRI)
    return enabled


def enabled_applicators() -> Dict:
    if config.NAUKRI_EMAIL and config.NAUKRI_PASSWORD:
        return dict(APPLICATORS)
    return {}


def _store_job(job: Dict, require_easy_apply: bool) -> bool:
    """Match, store, notify and queue one job. Returns True when it was new."""
    if job_exists(job["platform"], job["external_id"]):
        return False
    if is_excluded_company(job.get("company_name")):
        log.debug("Skipping excluded company", extra={"company": job.get("company_name")})
        return False

    match = match_job(job)
    messages = generate_messages(job)
    stored = create_job(
        {
            **job,
            "ai_match_score": match["score"],
            "ai_match_reason": match["reason"],
            "linkedin_message": messages["linkedin_message"],
            "application_form_data": messages["form_data"],
        }
    )
    if stored is None:
        return False
    daily_stats["jobs_found"] += 1

    if match["score"] >= config.NOTIFY_MATCH_THRESHOLD:
        notifications.notify_new_job(stored)

    wants_apply = match["should_apply"] and (stored["is_easy_apply"] or not require_easy_apply)
    if wants_apply and not was_applied_before(stored["company_name"], stored["title"]):
        create_application(stored["id"])
    return True


def process_api_jobs(jobs: List[Dict]) -> int:
    new_count = 0
    for job in jobs:
        try:
            row = {
                "platform": map_source_to_platform(job["source"]),
                "external_id": job["external_id"],
                "title": job["title"],
                "company_name": job.get("company_name"),
                "location": job.get("location"),
                "description": job.get("description"),
                "url": job["url"],
                "salary_range": job.get("salary"),
                "posted_at": job.get("posted_at"),
                "skills": job.get("tags") or [],
                "job_type": "REMOTE" if job.get("remote") else map_job_type(job.get("location")),
                "is_easy_apply": False,
            }
            if _store_job(row, require_easy_apply=False):
                new_count += 1
        except Exception as e:
            log.error("Failed to process API job", extra={"title": job.get("title"), "error": str(e)})
    log.info("Processed API jobs: total=%d new=%d", len(jobs), new_count)
    return new_count


def process_scraped_jobs(platform: str, jobs: List[Dict]) -> int:
    new_count = 0
    for job in jobs:
        try:
            row = {**job, "platform": platform, "job_type": map_job_type(job.get("location"))}
            if _store_job(row, require_easy_apply=True):
                new_count += 1
        except Exception as e:
            log.error("Failed to process scraped job", extra={"platform": platform, "title": job.get("title"), "error": str(e)})
    log.info("Processed scraped jobs: platform=%s total=%d new=%d", platform, len(jobs), new_count)
    return new_count


async def run_api_cycle() -> int:
    log.info("Fetching jobs from public APIs...")
    jobs = fetch_all_jobs()
    return process_api_jobs(jobs)


async def run_scraper(platform: str) -> int:
    session_id = start_scraping_session(platform)
    scraper = SCRAPERS[platform]()
    try:
        await scraper.initialize()
        if not await scraper.login():
            fail_scraping_session(session_id, "Login failed")
            notifications.notify_error(f"{platforms.display_name(platform)} scraper", "Login failed")
            return 0

        found: Dict[str, Dict] = {}
        for keyword in SEARCH_CRITERIA["keywords"][:SEARCH_KEYWORDS]:
            for location in SEARCH_CRITERIA["locations"][:SEARCH_LOCATIONS]:
                for job in await scraper.search_jobs(keyword, location):
                    found.setdefault(job["external_id"], job)

        new_jobs = process_scraped_jobs(platform, list(found.values()))
        complete_scraping_session(session_id, len(found), new_jobs)
        return new_jobs
    except Exception as e:
        log.exception("Scraper run failed", extra={"platform": platform})
        fail_scraping_session(session_id, str(e))
        notifications.notify_error(f"{platforms.display_name(platform)} scraper", e)
        return 0
    finally:
        await scraper.close()


async def run_scrapers(platform_list: Optional[List[str]] = None) -> int:
    total = 0
    for platform in platform_list if platform_list is not None else enabled_scrapers():
        total += await run_scraper(platform)
    return total


async def _apply_with(applicator, applications: List[Dict]) -> None:
    await applicator.initialize()
    try:
        for app in applications:
            job = app["job"]
            try:
                update_application_status(app["id"], "APPLYING")
                cover_letter = generate_cover_letter(job)["cover_letter"]
                log.info("Auto-applying", extra={"title": job["title"], "company": job["company_name"]})
                result = await applicator.apply_to_job(job["url"], cover_letter)

                if result["success"]:
                    update_application_status(
                        app["id"],
                        "APPLIED",
                        cover_letter=cover_letter,
                        screenshot_path=result.get("screenshot_path"),
                        error_message=result.get("error_message"),
                    )
                    upsert_application_history(job["company_name"], job["title"], job["platform"])
                    daily_stats["applications_sent"] += 1
                    notifications.notify_application_result(job, True)
                else:
                    update_application_status(
                        app["id"],
                        "FAILED",
                        increment_attempts=True,
                        screenshot_path=result.get("screenshot_path"),
                        error_message=result.get("error_message"),
                    )
                    daily_stats["applications_failed"] += 1
                    notifications.notify_application_result(job, False, result.get("error_message"))
            except Exception as e:
                log.error("Auto-apply failed", extra={"application_id": app["id"], "error": str(e)})
                daily_stats["applications_failed"] += 1
                try:
                    update_application_status(app["id"], "FAILED", increment_attempts=True, error_message=str(e))
                except Exception as update_error:
                    log.error("Could not mark application failed", extra={"application_id": app["id"], "error": str(update_error)})
            await asyncio.sleep(config.APPLICATION_DELAY_MS / 1000)
    finally:
        await applicator.close()


def _queue_for_manual(applications: List[Dict]) -> None:
    for app in applications:
        job = app["job"]
        try:
            update_application_status(app["id"], "APPLYING")
            cover_letter = generate_cover_letter(job)["cover_letter"]
            update_application_status(app["id"], "QUEUED", cover_letter=cover_letter)
            daily_stats["applications_queued"] += 1
            notifications.notify_manual_apply(job)
        except Exception as e:
            log.error("Failed to queue application", extra={"application_id": app["id"], "error": str(e)})
            daily_stats["applications_failed"] += 1
            try:
                update_application_status(app["id"], "FAILED", increment_attempts=True, error_message=str(e))
            except Exception as update_error:
                log.error("Could not mark application failed", extra={"application_id": app["id"], "error": str(update_error)})


async def process_applications() -> int:
    """Work through PENDING applications up to the daily limit. Returns how many were handled."""
    used = count_applications_since(start_of_today())
    remaining = config.MAX_DAILY_APPLICATIONS - used
    if remaining <= 0:
        log.info("Daily application limit reached", extra={"limit": config.MAX_DAILY_APPLICATIONS})
        return 0

    pending = get_pending_applications(remaining)
    if not pending:
        return 0
    log.info("Processing pending applications", extra={"count": len(pending)})

    by_platform: Dict[str, List[Dict]] = {}
    for app in pending:
        by_platform.setdefault(app["job"]["platform"], []).append(app)

    applicators = enabled_applicators()
    for platform, apps in by_platform.items():
        factory = applicators.get(platform)
        if factory:
            await _apply_with(factory(), apps)
        else:
            _queue_for_manual(apps)
    return len(pending)


async def run_fetch_cycle() -> None:
    log.info("Starting fetch cycle")
    await run_api_cycle()
    await run_scrapers()
    await process_applications()
    log.info("Fetch cycle complete", extra=dict(daily_stats))


def send_daily_summary() -> None:
    notifications.notify_daily_summary(dict(daily_stats))


def register_tasks(scheduler: TaskScheduler) -> None:
    async def api_then_apply():
        await run_api_cycle()
        await process_applications()

    async def scrape_then_apply(platform):
        if platform in enabled_scrapers():
            await run_scrapers([platform])
            await process_applications()

    scheduler.add_interval_task("job_apis", 2, api_then_apply)
    scheduler.add_interval_task("naukri", config.SCRAPE_INTERVAL_HOURS, lambda: scrape_then_apply(platforms.NAUKRI))
    scheduler.add_interval_task("linkedin", 8, lambda: scrape_then_apply(platforms.LINKEDIN))
    scheduler.add_daily_task("reset_daily_counters", ["00:00"], reset_daily_stats)
    scheduler.add_daily_task("daily_summary", ["21:00"], send_daily_summary)


def main():
    init_db()
    notifications.notify_startup()

    try:
        asyncio.run(run_fetch_cycle())
    except Exception as e:
        log.exception("Error during run", extra={"error": str(e)})

    if config.TEST_MODE:
        notifications.notify_shutdown()
        return

    stop = threading.Event()

    def _stop(signum, _frame):
        log.info("Shutting down", extra={"signal": signum})
        stop.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    scheduler = TaskScheduler()
    register_tasks(scheduler)
    scheduler.run_forever(stop, poll_seconds=POLL_SECONDS)
    notifications.notify_shutdown()


if __name__ == "__main__":
    main()
