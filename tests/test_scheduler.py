import threading
from datetime import datetime, timedelta

import pytest

from core import career_monitor, cold_email
from core.scheduler import TaskScheduler
from worker import main as worker


@pytest.fixture
def scheduler():
    s = TaskScheduler()
    yield s
    s.clear()


def test_interval_and_daily_tasks_are_listed(scheduler):
    scheduler.add_interval_task("job_apis", 2, lambda: None)
    scheduler.add_daily_task("career_monitor", ["08:00", " 18:00 "], lambda: None)

    status = {t["name"]: t for t in scheduler.get_status()}
    assert status["job_apis"]["schedule"] == "every 2h"
    assert status["career_monitor"]["schedule"] == "daily at 08:00, 18:00"
    assert status["job_apis"]["next_run"] is not None
    assert status["job_apis"]["last_run"] is None
    assert len(scheduler.tasks["career_monitor"]["jobs"]) == 2


def test_duplicate_or_empty_registrations_are_rejected(scheduler):
    scheduler.add_interval_task("job_apis", 2, lambda: None)
    with pytest.raises(ValueError):
        scheduler.add_interval_task("job_apis", 4, lambda: None)
    with pytest.raises(ValueError):
        scheduler.add_daily_task("nothing", [" "], lambda: None)


def test_run_task_handles_sync_async_and_failures(scheduler, caplog):
    calls = []

    async def async_task():
        calls.append("async")

    def failing():
        raise RuntimeError("portal down")

    scheduler.add_interval_task("sync", 1, lambda: calls.append("sync"))
    scheduler.add_interval_task("async", 1, async_task)
    scheduler.add_interval_task("coro_lambda", 1, lambda: async_task())
    scheduler.add_interval_task("failing", 1, failing)

    assert scheduler.run_task("sync") is True
    assert scheduler.run_task("async") is True
    assert scheduler.run_task("coro_lambda") is True
    assert calls == ["sync", "async", "async"]

    assert scheduler.run_task("failing") is False
    failed = scheduler.tasks["failing"]
    assert failed["last_error"] == "portal down"
    assert failed["last_run"] is not None
    assert failed["running"] is False
    assert "Scheduled task failed" in caplog.text

    with pytest.raises(KeyError):
        scheduler.run_task("missing")


def test_running_task_is_not_started_twice(scheduler):
    scheduler.add_interval_task("slow", 1, lambda: None)
    scheduler.tasks["slow"]["running"] = True
    assert scheduler.run_task("slow") is False


def test_run_pending_runs_due_jobs(scheduler):
    calls = []
    scheduler.add_interval_task("due", 1, lambda: calls.append(1))
    scheduler.tasks["due"]["jobs"][0].next_run = datetime.now() - timedelta(minutes=1)
    scheduler.run_pending()
    assert calls == [1]


def test_run_forever_returns_when_stopped(scheduler):
    stop = threading.Event()
    stop.set()
    scheduler.run_forever(stop, poll_seconds=0)


def test_all_modules_register_their_tasks(scheduler):
    worker.register_tasks(scheduler)
    career_monitor.register_tasks(scheduler)
    cold_email.register_tasks(scheduler)
    assert set(scheduler.tasks) == {
        "job_apis",
        "naukri",
        "linkedin",
        "reset_daily_counters",
        "daily_summary",
        "career_monitor",
        "career_quick_check",
        "cold_email",
        "cold_email_reset",
    }
