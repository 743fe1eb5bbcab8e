"""
Run one job-API fetch cycle and process pending applications, then exit.

Usage:
  python -m scripts.search_jobs
"""
import asyncio
import logging

from core import config
from core.database import init_db
from worker.main import daily_stats, process_applications, run_api_cycle


async def run() -> None:
    stored = await run_api_cycle()
    print(f"Stored {stored} new jobs")
    await process_applications()


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    init_db()
    asyncio.run(run())
    print(
        "Applications: {applications_sent} sent, {applications_failed} failed, "
        "{applications_queued} queued for manual apply".format(**daily_stats)
    )


if __name__ == "__main__":
    main()
