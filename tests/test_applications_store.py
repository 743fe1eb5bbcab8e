import asyncio

import pytest

from conftest import make_job
from core import config
from core.db.applications import applications_store as apps
from core.db.jobs import jobs_store
from core.db.schema import InvalidStatusError
from core.db.base import start_of_today
import worker.main as worker


@pytest.fixture
def job(db):
    return jobs_store.create_job(make_job())


def test_create_application_is_once_per_job(job):
    app_id = apps.create_application(job["id"])
    assert app_id is not None
    assert apps.create_application(job["id"]) is None
    assert apps.get_application_for_job(job["id"])["status"] == "PENDING"


def test_pending_applications_carry_their_job(job):
    apps.create_application(job["id"])
    pending = apps.get_pending_applications(10)
    assert len(pending) == 1
    assert pending[0]["job"]["company_name"] == "Acme Labs"
    assert pending[0]["job"]["platform"] == "NAUKRI"
    assert apps.get_pending_applications(0) == []


def test_happy_path_sets_applied_at(job):
    app_id = apps.create_application(job["id"])
    apps.update_application_status(app_id, "APPLYING")
    row = apps.update_application_status(app_id, "APPLIED", cover_letter="Dear team")
    assert row["status"] == "APPLIED"
    assert row["applied_at"]
    assert row["cover_letter"] == "Dear team"
    assert apps.get_pending_applications(10) == []


def test_failure_increments_attempts_and_allows_retry(job):
    app_id = apps.create_application(job["id"])
    apps.update_application_status(app_id, "APPLYING")
    row = apps.update_application_status(app_id, "FAILED", increment_attempts=True, error_message="No apply button")
    assert row["attempts"] == 1
    assert row["error_message"] == "No apply button"
    assert apps.update_application_status(app_id, "PENDING")["status"] == "PENDING"


@pytest.mark.parametrize(
    "path,forbidden",
    [
        ([], "APPLIED"),
        ([], "QUEUED"),
        (["APPLYING", "APPLIED"], "PENDING"),
        (["APPLYING", "QUEUED"], "FAILED"),
    ],
)
def test_forbidden_transitions_raise(job, path, forbidden):
    app_id = apps.create_application(job["id"])
    for status in path:
        apps.update_application_status(app_id, status)
    with pytest.raises(InvalidStatusError):
        apps.update_application_status(app_id, forbidden)


def test_unknown_status_and_missing_application(job):
    app_id = apps.create_application(job["id"])
    with pytest.raises(InvalidStatusError):
        apps.update_application_status(app_id, "WITHDRAWN")
    with pytest.raises(LookupError):
        apps.update_application_status(9999, "APPLYING")


def test_daily_count_and_stats(job):
    other = jobs_store.create_job(make_job(external_id="naukri-2002"))
    first = apps.create_application(job["id"])
    apps.create_application(other["id"])
    apps.update_application_status(first, "APPLYING")
    apps.update_application_status(first, "APPLIED")

    assert apps.count_applications_since(start_of_today()) == 1
    stats = apps.get_application_stats()
    assert stats["APPLIED"] == 1
    assert stats["PENDING"] == 1
    assert stats["total"] == 2


def _queued(job):
    app_id = apps.create_application(job["id"])
    apps.update_application_status(app_id, "APPLYING")
    apps.update_application_status(app_id, "QUEUED", cover_letter="Dear team")
    return app_id


def test_queued_applications_use_up_the_daily_limit(job, monkeypatch):
    _queued(job)
    _queued(jobs_store.create_job(make_job(external_id="naukri-2002")))
    apps.create_application(jobs_store.create_job(make_job(external_id="naukri-3003"))["id"])
    assert apps.count_applications_since(start_of_today()) == 2

    monkeypatch.setattr(config, "MAX_DAILY_APPLICATIONS", 2)
    monkeypatch.setattr(worker, "get_pending_applications", lambda limit: pytest.fail("limit already used"))
    assert asyncio.run(worker.process_applications()) == 0


def test_manual_apply_closes_queued_application(job):
    app_id = _queued(job)
    row = apps.record_manual_apply(job)
    assert row["id"] == app_id
    assert row["status"] == "APPLIED"
    assert row["applied_at"]
    assert apps.was_applied_before("Acme Labs", "Senior Python Developer")
    # nothing left to close
    assert apps.record_manual_apply(job) is None


def test_manual_apply_ignores_jobs_without_queued_application(job):
    assert apps.record_manual_apply(job) is None
    apps.create_application(job["id"])
    assert apps.record_manual_apply(job) is None
    assert apps.get_application_for_job(job["id"])["status"] == "PENDING"
    assert not apps.was_applied_before("Acme Labs", "Senior Python Developer")


def test_retry_requeues_failed_application(job):
    app_id = apps.create_application(job["id"])
    assert apps.retry_application(job["id"]) is None
    apps.update_application_status(app_id, "APPLYING")
    apps.update_application_status(app_id, "FAILED", increment_attempts=True, error_message="Login failed")

    row = apps.retry_application(job["id"])
    assert row["status"] == "PENDING"
    assert row["attempts"] == 1
    assert [p["id"] for p in apps.get_pending_applications(10)] == [app_id]


def test_application_history_upsert_and_lookup(db):
    apps.upsert_application_history("Acme Labs", "Senior Python Developer", "NAUKRI")
    apps.upsert_application_history("Acme Labs", "Senior Python Developer", "NAUKRI")
    assert apps.was_applied_before("acme labs", "SENIOR PYTHON DEVELOPER")
    assert not apps.was_applied_before("Acme Labs", "QA Engineer")
