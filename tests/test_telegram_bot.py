import threading

import pytest

import app.telegram_bot as bot_module
from app.telegram_bot import HELP_TEXT, TelegramBot, short_id
from core import config

JOB_A = {
    "id": "aaaa1111bbbb2222cccc3333dddd4444",
    "platform": "NAUKRI",
    "title": "Python Developer",
    "company_name": "Acme Labs",
    "location": "Ahmedabad",
    "skills": ["Python", "Django"],
    "ai_match_score": 0.91,
    "ai_match_reason": "Strong backend overlap",
    "user_status": "NEW",
    "saved_by_user": False,
    "url": "https://www.naukri.com/job-listings-1",
    "linkedin_message": "Hi Acme!",
    "application_form_data": {"full_name": "Test User", "cover_letter": "Dear Acme"},
}
JOB_B = dict(JOB_A, id="bbbb2222cccc3333dddd4444eeee5555", title="Data Engineer <Spark>", ai_match_score=0.64)


def message(text, chat_id=42):
    return {"update_id": 1, "message": {"text": text, "chat": {"id": chat_id}}}


def callback(data, chat_id=42, message_id=7):
    return {
        "update_id": 2,
        "callback_query": {"id": "cb-1", "data": data, "message": {"message_id": message_id, "chat": {"id": chat_id}}},
    }


@pytest.fixture
def chat(monkeypatch):
    """Bot wired to in-memory jobs; replies and raw API calls are recorded."""
    state = {"replies": [], "api": [], "updates": [], "jobs": {JOB_A["id"]: dict(JOB_A), JOB_B["id"]: dict(JOB_B)}}

    def fake_send(text, chat_id=None, reply_markup=None):
        state["replies"].append({"text": text, "chat_id": chat_id, "markup": reply_markup})
        return True

    def fake_api(method, payload, timeout=15):
        state["api"].append((method, payload))
        return {"ok": True, "result": []}

    def by_prefix(ref):
        for job_id, job in state["jobs"].items():
            if ref and job_id.startswith(ref):
                return dict(job)
        return None

    def update(job_id, **fields):
        state["updates"].append((job_id, fields))
        state["jobs"][job_id].update(fields)
        return dict(state["jobs"][job_id])

    monkeypatch.setattr(config, "TELEGRAM_CHAT_ID", "42")
    monkeypatch.setattr(bot_module, "send_message", fake_send)
    monkeypatch.setattr(bot_module, "telegram_api", fake_api)
    monkeypatch.setattr(bot_module, "get_job_by_prefix", by_prefix)
    monkeypatch.setattr(bot_module, "update_job", update)
    monkeypatch.setattr(bot_module, "save_job", lambda job_id: update(job_id, saved_by_user=True, user_status="SAVED"))
    monkeypatch.setattr(bot_module, "set_user_status", lambda job_id, status: update(job_id, user_status=status))
    monkeypatch.setattr(bot_module, "get_jobs_by_status", lambda statuses, saved_only=False, limit=50: [JOB_A, JOB_B])
    monkeypatch.setattr(bot_module, "get_top_jobs", lambda limit=10: [JOB_A, JOB_B])
    monkeypatch.setattr(bot_module, "search_jobs", lambda text, limit=50: [JOB_B] if "data" in text.lower() else [])

    monkeypatch.setattr(bot_module, "record_manual_apply", lambda job: state["manual"].append(job["id"]))
    monkeypatch.setattr(
        bot_module,
        "retry_application",
        lambda job_id: {"status": "PENDING"} if job_id == JOB_B["id"] else None,
    )

    state["manual"] = []
    state["bot"] = TelegramBot()
    return state


def test_short_id_is_first_eight_chars():
    assert short_id(JOB_A) == "aaaa1111"


def test_help_command(chat):
    chat["bot"].handle_update(message("/help"))
    assert chat["replies"][0]["text"] == HELP_TEXT
    assert chat["replies"][0]["chat_id"] == "42"


def test_command_with_bot_suffix_is_understood(chat):
    chat["bot"].handle_update(message("/start@JobPilotBot"))
    assert chat["replies"][0]["text"] == HELP_TEXT


def test_unknown_command_gets_hint(chat):
    chat["bot"].handle_update(message("/dance"))
    assert "Unknown command" in chat["replies"][0]["text"]


def test_other_chats_and_plain_text_are_ignored(chat):
    chat["bot"].handle_update(message("/help", chat_id=99))
    chat["bot"].handle_update(message("hello there"))
    assert chat["replies"] == []


def test_browse_and_page_through_jobs(chat):
    bot = chat["bot"]
    bot.handle_update(message("/new"))
    first = chat["replies"][0]
    assert "1/2" in first["text"]
    assert "Python Developer" in first["text"]
    assert "<code>aaaa1111</code>" in first["text"]
    buttons = [b.get("callback_data") for row in first["markup"]["inline_keyboard"] for b in row]
    assert "next_new" in buttons
    assert f"save_{JOB_A['id']}" in buttons

    bot.handle_update(callback("next_new"))
    method, payload = chat["api"][0]
    assert method == "editMessageText"
    assert payload["message_id"] == 7
    assert "Data Engineer &lt;Spark&gt;" in payload["text"]
    assert chat["api"][-1] == ("answerCallbackQuery", {"callback_query_id": "cb-1", "text": "Job 2/2"})

    # wraps around
    bot.handle_update(callback("next_new"))
    assert bot.sessions["42"]["index"] == 0


def test_empty_list_reports_nothing_found(chat, monkeypatch):
    monkeypatch.setattr(bot_module, "get_jobs_by_status", lambda statuses, saved_only=False, limit=50: [])
    chat["bot"].handle_update(message("/saved"))
    assert chat["replies"][0]["text"] == "No saved jobs found."


def test_save_apply_and_skip_commands(chat):
    bot = chat["bot"]
    bot.handle_update(message("/save aaaa1111"))
    bot.handle_update(message("/apply bbbb2222"))
    bot.handle_update(message("/skip aaaa1111"))

    assert chat["jobs"][JOB_A["id"]]["saved_by_user"] is True
    assert chat["jobs"][JOB_A["id"]]["user_status"] == "NOT_INTERESTED"
    assert chat["jobs"][JOB_B["id"]]["user_status"] == "APPLIED"
    assert chat["replies"][0]["text"].startswith("💾 Saved: Python Developer")
    assert chat["replies"][1]["text"].startswith("✅ Marked as applied")


def test_marking_applied_closes_the_queued_application(chat):
    chat["bot"].handle_update(message("/apply bbbb2222"))
    chat["bot"].handle_update(callback(f"applied_{JOB_A['id']}"))
    assert chat["manual"] == [JOB_B["id"], JOB_A["id"]]

    chat["bot"].handle_update(message("/skip aaaa1111"))
    assert chat["manual"] == [JOB_B["id"], JOB_A["id"]]


def test_retry_command(chat):
    bot = chat["bot"]
    bot.handle_update(message("/retry bbbb2222"))
    bot.handle_update(message("/retry aaaa1111"))
    assert chat["replies"][0]["text"].startswith("🔁 Queued again: Data Engineer &lt;Spark&gt;")
    assert chat["replies"][1]["text"] == "Nothing to retry: this job has no failed application."


def test_action_on_unknown_job(chat):
    chat["bot"].handle_update(message("/save zzzz9999"))
    assert "Job not found" in chat["replies"][0]["text"]
    assert chat["updates"] == []


def test_save_button_answers_callback(chat):
    chat["bot"].handle_update(callback(f"save_{JOB_A['id']}"))
    assert chat["jobs"][JOB_A["id"]]["user_status"] == "SAVED"
    assert chat["api"][-1] == ("answerCallbackQuery", {"callback_query_id": "cb-1", "text": "Saved!"})


def test_job_details_generate_missing_messages(chat):
    chat["jobs"][JOB_B["id"]]["linkedin_message"] = None
    chat["bot"].handle_update(message("/job bbbb2222"))

    job_id, fields = chat["updates"][0]
    assert job_id == JOB_B["id"]
    assert "linkedin_message" in fields and "application_form_data" in fields
    text = chat["replies"][0]["text"]
    assert "Job details" in text
    assert "64%" in text
    assert "Python, Django" in text


def test_job_command_requires_id(chat):
    chat["bot"].handle_update(message("/job"))
    assert chat["replies"][0]["text"].startswith("Usage: /job")


def test_linkedin_and_form_buttons(chat):
    bot = chat["bot"]
    bot.handle_update(callback(f"linkedin_msg_{JOB_A['id']}"))
    bot.handle_update(callback(f"app_info_{JOB_A['id']}"))
    assert "<pre>Hi Acme!</pre>" in chat["replies"][0]["text"]
    assert "<code>Test User</code>" in chat["replies"][1]["text"]
    assert "Dear Acme" in chat["replies"][1]["text"]


def test_find_hr_button_stores_career_page(chat, monkeypatch):
    monkeypatch.setattr(
        bot_module,
        "find_hr",
        lambda name: {"career_page_url": "https://acmelabs.com/careers", "linkedin_url": "https://linkedin.example/hr"},
    )
    chat["bot"].handle_update(callback(f"find_hr_{JOB_A['id']}"))
    assert chat["updates"] == [(JOB_A["id"], {"career_page_url": "https://acmelabs.com/careers"})]
    assert "Recruiters on LinkedIn" in chat["replies"][0]["text"]


def test_top_and_search(chat):
    bot = chat["bot"]
    bot.handle_update(message("/top"))
    top = chat["replies"][0]["text"]
    assert top.index("Python Developer") < top.index("Data Engineer")
    assert "91%" in top

    bot.handle_update(message("/search data engineer"))
    assert "Data Engineer" in chat["replies"][1]["text"]
    bot.handle_update(message("/search cobol"))
    assert "No jobs found" in chat["replies"][2]["text"]
    bot.handle_update(message("/search"))
    assert chat["replies"][3]["text"].startswith("Usage: /search")


def test_stats_command(chat, monkeypatch):
    monkeypatch.setattr(
        bot_module,
        "get_job_stats",
        lambda: {"total": 12, "new": 4, "saved": 2, "applied": 3, "interviewing": 1, "today": 5, "by_platform": {"NAUKRI": 12}},
    )
    monkeypatch.setattr(bot_module, "get_application_stats", lambda: {"APPLIED": 3, "QUEUED": 2, "FAILED": 1})
    chat["bot"].handle_update(message("/stats"))
    text = chat["replies"][0]["text"]
    assert "Total jobs: 12" in text
    assert "Queued for manual apply: 2" in text
    assert "By platform" in text


def test_monitor_command_scans_named_companies(chat, monkeypatch):
    calls = []

    def fake_by_names(names):
        calls.append(names)
        return {"companies": 2, "total": 9, "new_jobs": 3, "errors": 0, "results": []}

    monkeypatch.setattr(bot_module.career_monitor, "monitor_by_names", fake_by_names)
    chat["bot"].handle_update(message("/monitor TCS Infosys"))
    assert calls == [["TCS", "Infosys"]]
    assert "New jobs: 3" in chat["replies"][-1]["text"]


def test_companies_command_groups_by_city(chat, monkeypatch):
    monkeypatch.setattr(
        bot_module.career_monitor,
        "load_companies",
        lambda: [{"name": "A", "city": "ahmedabad"}, {"name": "B", "city": "ahmedabad"}, {"name": "C", "city": "remote"}],
    )
    chat["bot"].handle_update(message("/companies"))
    text = chat["replies"][0]["text"]
    assert "Companies monitored: 3" in text
    assert "ahmedabad: 2 companies" in text


def test_command_errors_are_reported_to_chat(chat, monkeypatch):
    def broken(limit=10):
        raise RuntimeError("db down")

    monkeypatch.setattr(bot_module, "get_top_jobs", broken)
    chat["bot"].handle_update(message("/top"))
    assert "Something went wrong: db down" in chat["replies"][0]["text"]


def test_poll_once_advances_offset(chat, monkeypatch):
    updates = [dict(message("/help"), update_id=100), dict(message("/help"), update_id=101)]
    seen = []

    def fake_api(method, payload, timeout=15):
        seen.append((method, payload))
        return {"ok": True, "result": updates}

    monkeypatch.setattr(bot_module, "telegram_api", fake_api)
    bot = chat["bot"]
    assert bot.poll_once() == 2
    assert bot.offset == 102
    assert len(chat["replies"]) == 2

    updates.clear()
    bot.poll_once()
    assert seen[-1][1]["offset"] == 102


def test_poll_forever_without_token_returns(chat, monkeypatch):
    monkeypatch.setattr(config, "TELEGRAM_BOT_TOKEN", "")
    chat["bot"].poll_forever(threading.Event())
    assert chat["api"] == []
