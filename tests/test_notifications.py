import logging

import pytest

from core import config, notifications


@pytest.fixture
def sent(monkeypatch):
    calls = []

    def fake_api(method, payload, timeout=15):
        calls.append((method, payload))
        return {"ok": True, "result": {}}

    monkeypatch.setattr(config, "TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setattr(config, "TELEGRAM_CHAT_ID", "42")
    monkeypatch.setattr(notifications, "telegram_api", fake_api)
    return calls


def test_send_message_skips_when_not_configured(monkeypatch):
    monkeypatch.setattr(config, "TELEGRAM_BOT_TOKEN", None)
    monkeypatch.setattr(notifications, "telegram_api", lambda *a, **kw: pytest.fail("should not call Telegram"))
    assert notifications.send_message("hello") is False


def test_long_messages_are_split_and_keyboard_goes_last(sent):
    keyboard = {"inline_keyboard": [[{"text": "Open", "callback_data": "details_x"}]]}
    assert notifications.send_message("a" * 9000, reply_markup=keyboard) is True

    assert [len(p["text"]) for _, p in sent] == [4000, 4000, 1000]
    assert all(p["chat_id"] == "42" and p["parse_mode"] == "HTML" for _, p in sent)
    assert "reply_markup" not in sent[0][1]
    assert sent[-1][1]["reply_markup"] == keyboard


def test_long_html_messages_split_between_lines(sent):
    text = "\n".join(f"<b>Acme &amp; Co #{i}</b>" for i in range(600))
    assert notifications.send_message(text) is True

    parts = [p["text"] for _, p in sent]
    assert len(parts) > 1
    assert all(len(part) <= notifications.MAX_MESSAGE_CHARS for part in parts)
    assert all(part.startswith("<b>Acme &amp; Co") and part.endswith("</b>") for part in parts)
    assert "\n".join(parts) == text


def test_split_message_breaks_long_lines_at_spaces():
    assert notifications.split_message("alpha beta gamma", limit=11) == ["alpha beta", "gamma"]
    assert notifications.split_message("") == [""]


def test_new_job_notification_escapes_html(sent):
    job = {
        "title": "C++ <Systems> Engineer",
        "company_name": "R&D Labs",
        "platform": "NAUKRI",
        "ai_match_score": 0.93,
        "ai_match_reason": "Great fit",
        "url": "https://example.com/jobs?id=1&src=x",
    }
    assert notifications.notify_new_job(job)
    text = sent[0][1]["text"]
    assert text.startswith("🔥 <b>New job match: 93%</b>")
    assert "C++ &lt;Systems&gt; Engineer" in text
    assert "R&amp;D Labs" in text
    assert "Naukri" in text


def test_daily_summary_success_rate(sent):
    notifications.notify_daily_summary(
        {"jobs_found": 12, "applications_sent": 3, "applications_failed": 1, "applications_queued": 2}
    )
    text = sent[0][1]["text"]
    assert "Jobs found: 12" in text
    assert "Success rate: 75%" in text


def test_api_failures_are_logged_not_raised(monkeypatch, caplog):
    monkeypatch.setattr(config, "TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setattr(config, "TELEGRAM_CHAT_ID", "42")

    class Resp:
        status_code = 400

        def json(self):
            return {"ok": False, "description": "Bad Request: can't parse entities"}

    monkeypatch.setattr(notifications.requests, "post", lambda *a, **kw: Resp())
    with caplog.at_level(logging.ERROR, logger="notifications"):
        assert notifications.notify_error("scraper", "boom") is False
    assert "Failed to send Telegram message" in caplog.text


@pytest.mark.parametrize("score,emoji", [(0.95, "🔥"), (0.85, "⭐"), (0.7, "✅")])
def test_score_emoji(score, emoji):
    assert notifications.score_emoji(score) == emoji
