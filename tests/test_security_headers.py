import pytest

pytest.importorskip("httpx")
from fastapi.testclient import TestClient

import app.api as api_module
import app.routes.api as api_routes
import app.routes.dashboard as dashboard_routes
from app import security


def assert_hardened(resp):
    for name, value in security.SECURITY_HEADERS.items():
        assert resp.headers.get(name) == value, name


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(api_routes, "list_jobs", lambda *a, **k: ([], 0))
    monkeypatch.setattr(dashboard_routes, "list_companies", lambda: [])
    return TestClient(api_module.app, raise_server_exceptions=False)


def test_json_api_responses_carry_headers(client):
    resp = client.get("/api/jobs")
    assert resp.status_code == 200
    assert_hardened(resp)


def test_html_pages_carry_headers(client):
    resp = client.get("/companies")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert_hardened(resp)


def test_error_responses_carry_headers(client, monkeypatch):
    assert_hardened(client.get("/api/missing-route"))
    assert_hardened(client.get("/api/jobs", params={"filter": "archived"}))

    def broken():
        raise RuntimeError("stats table missing")

    monkeypatch.setattr(api_routes, "get_job_stats", broken)
    resp = client.get("/api/stats")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert_hardened(resp)


def test_cors_preflight_allows_dashboard_clients(client):
    resp = client.options(
        "/api/jobs",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "PUT"},
    )
    assert resp.status_code == 200
    assert resp.headers.get("access-control-allow-origin") == "*"


def test_rate_limit_window_counts_down(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(security.time, "time", lambda: now[0])

    assert security.allow_request_with_remaining("monitor:1.2.3.4", limit=2, window_seconds=60) == (True, 1)
    assert security.allow_request_with_remaining("monitor:1.2.3.4", limit=2, window_seconds=60) == (True, 0)
    assert security.allow_request_with_remaining("monitor:1.2.3.4", limit=2, window_seconds=60) == (False, 0)
    # other clients have their own budget
    assert security.allow_request("monitor:5.6.7.8", limit=2, window_seconds=60)

    now[0] += 61
    assert security.allow_request("monitor:1.2.3.4", limit=2, window_seconds=60)
