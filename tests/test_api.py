import pytest

pytest.importorskip("httpx")
from fastapi.testclient import TestClient

import app.api as api_module
import app.routes.api as api_routes
import app.routes.dashboard as dashboard_routes
from core import career_monitor, cold_email
from core.database import InvalidStatusError


def stored_job(**overrides):
    job = {
        "id": "a1b2c3d4e5f60718293a4b5c6d7e8f90",
        "platform": "NAUKRI",
        "external_id": "naukri-1001",
        "title": "Senior Python Developer",
        "company_name": "Acme Labs",
        "location": "Ahmedabad",
        "description": "Python, Django, PostgreSQL and AWS.",
        "url": "https://www.naukri.com/job-listings-1001",
        "skills": ["Python", "Django"],
        "ai_match_score": 0.82,
        "ai_match_reason": "Strong backend overlap",
        "user_status": "NEW",
        "saved_by_user": False,
        "user_notes": None,
        "linkedin_message": None,
        "application_form_data": None,
        "career_page_url": None,
        "scraped_at": "2026-10-19T08:00:00+00:00",
    }
    job.update(overrides)
    return job


@pytest.fixture
def client():
    return TestClient(api_module.app)


@pytest.fixture
def job_store(monkeypatch):
    """Single-job in-memory stand-in for the jobs table."""
    state = {"job": stored_job(), "updates": [], "manual": []}

    def get_job_by_prefix(ref):
        job = state["job"]
        return dict(job) if ref and job["id"].startswith(ref) else None

    def update_job(job_id, **fields):
        if fields.get("user_status") == "BOGUS":
            raise InvalidStatusError("Invalid user_status: BOGUS")
        state["updates"].append(fields)
        state["job"].update(fields)
        return dict(state["job"])

    def set_user_status(job_id, status):
        return update_job(job_id, user_status=status)

    monkeypatch.setattr(api_routes, "get_job_by_prefix", get_job_by_prefix)
    monkeypatch.setattr(api_routes, "update_job", update_job)
    monkeypatch.setattr(api_routes, "set_user_status", set_user_status)
    monkeypatch.setattr(api_routes, "record_manual_apply", lambda job: state["manual"].append(job["user_status"]))
    return state


def test_list_jobs_returns_pagination(client, monkeypatch):
    calls = []

    def fake_list_jobs(filter_name, search=None, page=1, limit=20):
        calls.append((filter_name, search, page, limit))
        return [stored_job()], 45

    monkeypatch.setattr(api_routes, "list_jobs", fake_list_jobs)

    resp = client.get("/api/jobs", params={"filter": "new", "search": "python", "page": 2, "limit": 20})
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"] == {"page": 2, "limit": 20, "total": 45, "total_pages": 3}
    assert body["jobs"][0]["title"] == "Senior Python Developer"
    assert calls == [("new", "python", 2, 20)]


def test_list_jobs_caps_limit(client, monkeypatch):
    monkeypatch.setattr(api_routes, "list_jobs", lambda *a, **k: ([], 0))
    resp = client.get("/api/jobs", params={"limit": 500})
    assert resp.status_code == 200
    assert resp.json()["pagination"]["limit"] == 100
    assert resp.json()["pagination"]["total_pages"] == 0


def test_list_jobs_rejects_unknown_filter(client):
    resp = client.get("/api/jobs", params={"filter": "archived"})
    assert resp.status_code == 400
    assert "archived" in resp.json()["error"]


def test_list_jobs_rejects_non_numeric_page(client):
    resp = client.get("/api/jobs", params={"page": "abc"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request"


def test_unknown_job_is_404(client, job_store):
    resp = client.get("/api/jobs/ffffffff")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}


def test_unknown_route_is_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}


def test_job_detail_fills_messages_and_marks_viewed(client, job_store):
    resp = client.get("/api/jobs/a1b2c3d4")
    assert resp.status_code == 200
    body = resp.json()
    assert body["job"]["user_status"] == "VIEWED"
    assert "Acme Labs" in body["job"]["linkedin_message"]
    assert body["job"]["application_form_data"]["cover_letter"]
    assert set(body["search_links"]) >= {"linkedin_hr", "google_careers"}

    # second view keeps the generated text and status
    job_store["updates"].clear()
    resp = client.get("/api/jobs/a1b2c3d4")
    assert resp.json()["job"]["user_status"] == "VIEWED"
    assert job_store["updates"] == []


def test_put_job_updates_editable_fields(client, job_store):
    resp = client.put(
        "/api/jobs/a1b2c3d4",
        json={"user_status": "APPLIED", "user_notes": "Referred by Priya", "id": "hijack"},
    )
    assert resp.status_code == 200
    job = resp.json()["job"]
    assert job["user_status"] == "APPLIED"
    assert job["user_notes"] == "Referred by Priya"
    assert job["id"].startswith("a1b2c3d4")
    assert job_store["updates"] == [{"user_status": "APPLIED", "user_notes": "Referred by Priya"}]


def test_put_applied_closes_queued_application(client, job_store):
    client.put("/api/jobs/a1b2c3d4", json={"user_notes": "Call back Monday"})
    assert job_store["manual"] == []
    client.put("/api/jobs/a1b2c3d4", json={"user_status": "APPLIED"})
    assert job_store["manual"] == ["APPLIED"]


def test_retry_failed_application(client, job_store, monkeypatch):
    monkeypatch.setattr(api_routes, "retry_application", lambda job_id: {"id": 3, "job_id": job_id, "status": "PENDING"})
    resp = client.post("/api/jobs/a1b2c3d4/retry")
    assert resp.status_code == 200
    assert resp.json()["application"]["status"] == "PENDING"

    monkeypatch.setattr(api_routes, "retry_application", lambda job_id: None)
    resp = client.post("/api/jobs/a1b2c3d4/retry")
    assert resp.status_code == 409
    assert resp.json() == {"error": "No failed application to retry"}


def test_recent_scraping_sessions(client, monkeypatch):
    seen = []

    def recent(limit):
        seen.append(limit)
        return [{"id": 11, "platform": "NAUKRI", "status": "completed", "new_jobs": 4}]

    monkeypatch.setattr(api_routes, "get_recent_sessions", recent)
    assert client.get("/api/sessions").json()["sessions"][0]["new_jobs"] == 4
    client.get("/api/sessions", params={"limit": 500})
    assert seen == [20, 100]
    assert client.get("/api/sessions", params={"limit": 0}).status_code == 400


def test_mark_outreach_responded(client, monkeypatch):
    monkeypatch.setattr(api_routes, "mark_outreach_responded", lambda outreach_id: outreach_id == 5)
    assert client.post("/api/outreach/5/responded").json() == {"success": True}
    resp = client.post("/api/outreach/6/responded")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}


def test_put_job_requires_known_field(client, job_store):
    resp = client.put("/api/jobs/a1b2c3d4", json={"title": "CTO"})
    assert resp.status_code == 400


def test_put_job_rejects_invalid_status(client, job_store):
    resp = client.put("/api/jobs/a1b2c3d4", json={"user_status": "BOGUS"})
    assert resp.status_code == 400
    assert "BOGUS" in resp.json()["error"]


def test_job_messages_endpoint(client, job_store):
    resp = client.get("/api/jobs/a1b2c3d4/messages")
    assert resp.status_code == 200
    body = resp.json()
    assert "linkedin_message" in body
    assert "form_data" in body


def test_job_hr_stores_career_page(client, job_store, monkeypatch):
    monkeypatch.setattr(
        api_routes,
        "find_hr",
        lambda name: {"career_page_url": "https://acmelabs.com/careers", "linkedin_url": "https://linkedin.example"},
    )
    resp = client.get("/api/jobs/a1b2c3d4/hr")
    assert resp.status_code == 200
    assert resp.json()["hr_info"]["career_page_url"] == "https://acmelabs.com/careers"
    assert job_store["updates"] == [{"career_page_url": "https://acmelabs.com/careers"}]


def test_stats_combines_sources(client, monkeypatch):
    monkeypatch.setattr(api_routes, "get_job_stats", lambda: {"total": 7, "new": 2})
    monkeypatch.setattr(api_routes, "get_application_stats", lambda: {"APPLIED": 1, "QUEUED": 3, "FAILED": 0})
    monkeypatch.setattr(cold_email, "get_stats", lambda: {"sent_today": 4})

    body = client.get("/api/stats").json()
    assert body["total"] == 7
    assert body["applications"]["QUEUED"] == 3
    assert body["outreach"] == {"sent_today": 4}


def test_companies_endpoint(client, monkeypatch):
    companies = [{"name": "Simform", "city": "ahmedabad", "category": "product", "careers": ""}]
    monkeypatch.setattr(api_routes, "list_companies", lambda: companies)
    assert client.get("/api/companies").json() == {"total": 1, "companies": companies}


def test_scheduler_status_reports_tasks(client):
    body = client.get("/api/scheduler/status").json()
    assert set(body) == {"active", "tasks"}
    assert isinstance(body["tasks"], list)


def test_monitor_run_starts_in_background(client, monkeypatch):
    seen = []
    monkeypatch.setattr(career_monitor, "monitor_by_names", lambda names: seen.append(names))
    monkeypatch.setattr(career_monitor, "monitor_all", lambda: seen.append("all"))

    resp = client.post("/api/monitor/run", json={"companies": ["Simform", " "]})
    assert resp.json() == {"success": True, "started": True, "companies": ["Simform"]}
    resp = client.post("/api/monitor/run")
    assert resp.json()["companies"] == "all"
    assert seen == [["Simform"], "all"]


def test_monitor_run_is_rate_limited(client, monkeypatch):
    monkeypatch.setattr(career_monitor, "monitor_all", lambda: None)
    for _ in range(api_routes.RUN_LIMIT):
        assert client.post("/api/monitor/run").status_code == 200
    resp = client.post("/api/monitor/run")
    assert resp.status_code == 429
    assert "Too many" in resp.json()["error"]


def test_discover_run_aggregates_company_files(client, monkeypatch, tmp_path):
    files = [tmp_path / "ahmedabad.csv", tmp_path / "remote.json"]
    aggregated = []
    monkeypatch.setattr(api_routes, "find_company_files", lambda: files)
    monkeypatch.setattr(api_routes, "aggregate", lambda paths: aggregated.append(paths))

    resp = client.post("/api/discover/run")
    assert resp.json() == {"success": True, "started": True, "files": ["ahmedabad.csv", "remote.json"]}
    assert aggregated == [files]


def test_unexpected_error_returns_500(monkeypatch):
    def boom():
        raise RuntimeError("database down")

    monkeypatch.setattr(api_routes, "get_job_stats", boom)
    client = TestClient(api_module.app, raise_server_exceptions=False)
    resp = client.get("/api/stats")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_dashboard_renders_jobs(client, monkeypatch):
    monkeypatch.setattr(
        dashboard_routes,
        "list_jobs",
        lambda *a, **k: ([stored_job(title="Backend <Engineer>", user_status="SAVED")], 30),
    )
    monkeypatch.setattr(dashboard_routes, "get_job_stats", lambda: {"total": 30, "new": 5})

    resp = client.get("/", params={"filter": "saved", "page": 1})
    assert resp.status_code == 200
    html = resp.text
    assert "Backend &lt;Engineer&gt;" in html
    assert "a1b2c3d4" in html
    assert "Page 1 of 2" in html
    assert "/?filter=saved&page=2" in html


def test_dashboard_falls_back_to_all_filter(client, monkeypatch):
    calls = []
    monkeypatch.setattr(dashboard_routes, "list_jobs", lambda f, **k: calls.append(f) or ([], 0))
    monkeypatch.setattr(dashboard_routes, "get_job_stats", lambda: {})

    resp = client.get("/", params={"filter": "weird"})
    assert resp.status_code == 200
    assert "No jobs match this view yet." in resp.text
    assert calls == ["all"]


def test_companies_page_lists_companies(client, monkeypatch):
    monkeypatch.setattr(
        dashboard_routes,
        "list_companies",
        lambda: [
            {"name": "Postman", "city": "remote", "category": "product", "careers": "https://postman.com/careers"},
            {"name": "Simform", "city": "ahmedabad", "category": "services", "careers": ""},
        ],
    )
    resp = client.get("/companies")
    assert resp.status_code == 200
    assert "2 companies monitored" in resp.text
    assert resp.text.index("Simform") < resp.text.index("Postman")
