"""
Run the dashboard/API, the Telegram bot and (optionally) the scheduler in one process.

Usage:
  python -m scripts.command_center                 # API + bot
  python -m scripts.command_center --scheduler     # API + bot + scheduled jobs
  python -m scripts.command_center --no-bot
"""
import argparse
import logging
import threading

import uvicorn

from app.telegram_bot import TelegramBot
from core import career_monitor, cold_email, config
from core.database import init_db
from core.scheduler import default_scheduler
from worker import main as worker

log = logging.getLogger("command_center")


def start_thread(name: str, target, *args) -> threading.Thread:
    thread = threading.Thread(target=target, args=args, name=name, daemon=True)
    thread.start()
    return thread


def main(argv=None):
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = argparse.ArgumentParser(description="Job Pilot command center")
    parser.add_argument("--scheduler", action="store_true", help="run scheduled scraping, monitoring and outreach")
    parser.add_argument("--no-bot", action="store_true", help="do not start the Telegram bot")
    args = parser.parse_args(argv)

    init_db()
    stop = threading.Event()

    if not args.no_bot:
        if config.telegram_configured():
            start_thread("telegram-bot", TelegramBot().poll_forever, stop)
        else:
            log.warning("Telegram not configured; bot disabled")

    if args.scheduler:
        worker.register_tasks(default_scheduler)
        career_monitor.register_tasks(default_scheduler)
        cold_email.register_tasks(default_scheduler)
        start_thread("scheduler", default_scheduler.run_forever, stop)

    log.info("Dashboard on http://localhost:%d", config.API_PORT)
    try:
        uvicorn.run("app.api:app", host="0.0.0.0", port=config.API_PORT, log_level=config.LOG_LEVEL.lower())
    finally:
        stop.set()


if __name__ == "__main__":
    main()
