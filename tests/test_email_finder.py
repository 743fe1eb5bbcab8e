import pytest

from core import config, email_finder


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


@pytest.fixture
def no_keys(monkeypatch):
    monkeypatch.setattr(config, "HUNTER_API_KEY", None)
    monkeypatch.setattr(config, "APOLLO_API_KEY", None)


def test_guess_domain_and_domain_from_url():
    assert email_finder.guess_domain("Acme Labs Pvt. Ltd.") == "acmelabs.com"
    assert email_finder.domain_from_url("https://www.acme.dev/careers") == "acme.dev"
    assert email_finder.domain_from_url("https://www.google.com/search?q=acme") is None
    assert email_finder.domain_from_url("https://www.naukri.com/job-listings-1") is None
    assert email_finder.domain_from_url(None) is None


@pytest.mark.parametrize(
    "position,expected",
    [("Senior Technical Recruiter", True), ("Talent Acquisition Lead", True), ("CTO", False), (None, False)],
)
def test_is_hr_role(position, expected):
    assert email_finder.is_hr_role(position) is expected


def test_pattern_emails_when_no_provider_is_configured(no_keys):
    emails = email_finder.find_company_emails("Acme Labs", "acme.dev")
    assert emails[0] == {"email": "hr@acme.dev", "confidence": 30, "source": "pattern", "position": "HR Department"}
    assert emails[-1]["email"] == "info@acme.dev"
    assert emails[-1]["confidence"] == 20

    best = email_finder.get_best_email("Acme Labs", "acme.dev")
    assert best["email"] == "hr@acme.dev"


def test_hunter_results_prefer_hr_then_confidence(monkeypatch):
    monkeypatch.setattr(config, "HUNTER_API_KEY", "hunter-key")
    monkeypatch.setattr(config, "APOLLO_API_KEY", None)
    payload = {
        "data": {
            "emails": [
                {"value": "ceo@acme.dev", "confidence": 99, "position": "CEO"},
                {"value": "priya@acme.dev", "confidence": 70, "position": "HR Manager", "first_name": "Priya"},
                {"value": "talent@acme.dev", "confidence": 90, "position": "Talent Partner"},
                {"value": "ceo@ACME.dev", "confidence": 10, "position": "CEO"},
            ]
        }
    }
    monkeypatch.setattr(email_finder.requests, "get", lambda *a, **kw: FakeResponse(payload))

    emails = email_finder.find_company_emails("Acme", "acme.dev")
    assert [e["email"] for e in emails] == ["ceo@acme.dev", "priya@acme.dev", "talent@acme.dev"]

    best = email_finder.get_best_email("Acme", "acme.dev")
    assert best["email"] == "talent@acme.dev"


def test_apollo_is_consulted_when_hunter_finds_few(monkeypatch):
    monkeypatch.setattr(config, "HUNTER_API_KEY", None)
    monkeypatch.setattr(config, "APOLLO_API_KEY", "apollo-key")
    people = {
        "people": [
            {"email": "rec@acme.dev", "email_status": "verified", "title": "Recruiter"},
            {"email": None, "title": "HR"},
        ]
    }
    monkeypatch.setattr(email_finder.requests, "post", lambda *a, **kw: FakeResponse(people))

    emails = email_finder.find_company_emails("Acme", "acme.dev")
    assert emails == [
        {
            "email": "rec@acme.dev",
            "confidence": 90,
            "source": "apollo",
            "first_name": None,
            "last_name": None,
            "position": "Recruiter",
        }
    ]


def test_provider_errors_are_logged_and_fall_back(monkeypatch, caplog):
    monkeypatch.setattr(config, "HUNTER_API_KEY", "hunter-key")
    monkeypatch.setattr(config, "APOLLO_API_KEY", None)

    def boom(*a, **kw):
        raise email_finder.requests.ConnectionError("down")

    monkeypatch.setattr(email_finder.requests, "get", boom)
    emails = email_finder.find_company_emails("Acme", "acme.dev")
    assert emails[0]["source"] == "pattern"
    assert "Hunter lookup failed" in caplog.text
