"""
Named periodic tasks on top of the `schedule` library.

Daily times are local server time (set TZ=Asia/Kolkata for IST).
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional

import schedule

from core.db.base import utcnow

log = logging.getLogger("scheduler")


class TaskScheduler:
    def __init__(self) -> None:
        self._schedule = schedule.Scheduler()
        self.tasks: Dict[str, Dict] = {}

    def _register(self, name: str, description: str, fn: Callable[[], object]) -> Dict:
        if name in self.tasks:
            raise ValueError(f"Task already registered: {name}")
        task = {
            "name": name,
            "schedule": description,
            "fn": fn,
            "jobs": [],
            "last_run": None,
            "last_error": None,
            "running": False,
        }
        self.tasks[name] = task
        return task

    def _runner(self, name: str) -> Callable[[], None]:
        def run() -> None:
            self.run_task(name)

        return run

    def add_interval_task(self, name: str, hours: float, fn: Callable[[], object]) -> None:
        """``fn`` may be a plain function or return a coroutine, which is run to completion."""
        task = self._register(name, f"every {hours:g}h", fn)
        minutes = max(1, int(round(hours * 60)))
        task["jobs"].append(self._schedule.every(minutes).minutes.do(self._runner(name)))
        log.info("Scheduled task", extra={"task": name, "every_minutes": minutes})

    def add_daily_task(self, name: str, times: Iterable[str], fn: Callable[[], object]) -> None:
        times = [t.strip() for t in times if t and t.strip()]
        if not times:
            raise ValueError(f"No times given for task {name}")
        task = self._register(name, "daily at " + ", ".join(times), fn)
        for at in times:
            task["jobs"].append(self._schedule.every().day.at(at).do(self._runner(name)))
        log.info("Scheduled task", extra={"task": name, "times": times})

    def run_task(self, name: str) -> bool:
        """Run a task now. Returns False when it raised or is already running."""
        task = self.tasks.get(name)
        if task is None:
            raise KeyError(name)
        if task["running"]:
            log.warning("Task still running, skipping", extra={"task": name})
            return False

        task["running"] = True
        task["last_run"] = utcnow()
        log.info("Running scheduled task", extra={"task": name})
        try:
            result = task["fn"]()
            if asyncio.iscoroutine(result):
                asyncio.run(result)
            task["last_error"] = None
            return True
        except Exception as e:
            task["last_error"] = str(e)
            log.exception("Scheduled task failed", extra={"task": name})
            return False
        finally:
            task["running"] = False

    def next_run(self, name: str) -> Optional[str]:
        runs = [j.next_run for j in self.tasks[name]["jobs"] if j.next_run]
        return min(runs).isoformat(timespec="seconds") if runs else None

    def get_status(self) -> List[Dict]:
        return [
            {
                "name": t["name"],
                "schedule": t["schedule"],
                "last_run": t["last_run"],
                "last_error": t["last_error"],
                "running": t["running"],
                "next_run": self.next_run(t["name"]),
            }
            for t in self.tasks.values()
        ]

    def run_pending(self) -> None:
        self._schedule.run_pending()

    def run_forever(self, stop_event: threading.Event, poll_seconds: float = 30) -> None:
        log.info("Scheduler started", extra={"tasks": list(self.tasks)})
        while not stop_event.is_set():
            self.run_pending()
            stop_event.wait(poll_seconds)
        log.info("Scheduler stopped")

    def clear(self) -> None:
        self._schedule.clear()
        self.tasks.clear()


# Shared instance for the dashboard and command center.
default_scheduler = TaskScheduler()


__all__ = ["TaskScheduler", "default_scheduler"]
