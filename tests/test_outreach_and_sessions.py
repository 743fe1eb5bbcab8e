import pytest

from core.db.base import start_of_today
from core.db.outreach import outreach_store
from core.db.schema import InvalidStatusError
from core.db.sessions import sessions_store


def test_outreach_records_and_stats(db):
    sent = outreach_store.record_outreach("Acme Labs", "hr@acme.dev", "SENT", company_domain="acme.dev")
    outreach_store.record_outreach("Pixel Co", "careers@pixel.co", "FAILED", error_message="SMTP timeout")

    assert outreach_store.was_contacted_since("acme labs", start_of_today())
    assert sorted(outreach_store.get_contacted_companies()) == ["Acme Labs", "Pixel Co"]

    assert outreach_store.mark_outreach_responded(sent)
    assert not outreach_store.mark_outreach_responded(sent)

    stats = outreach_store.get_outreach_stats()
    assert stats == {"total_sent": 1, "sent_today": 1, "responded": 1, "failed": 1}


def test_outreach_rejects_unknown_status(db):
    with pytest.raises(InvalidStatusError):
        outreach_store.record_outreach("Acme Labs", "hr@acme.dev", "QUEUED")


def test_scraping_session_lifecycle(db):
    ok = sessions_store.start_scraping_session("NAUKRI")
    bad = sessions_store.start_scraping_session("LINKEDIN")
    sessions_store.complete_scraping_session(ok, jobs_found=12, new_jobs=4)
    sessions_store.fail_scraping_session(bad, "Login failed")

    by_id = {s["id"]: s for s in sessions_store.get_recent_sessions()}
    assert by_id[ok]["status"] == "completed"
    assert by_id[ok]["new_jobs"] == 4
    assert by_id[bad]["status"] == "failed"
    assert by_id[bad]["error_message"] == "Login failed"
    assert by_id[bad]["completed_at"]
