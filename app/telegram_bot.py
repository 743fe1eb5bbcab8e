"""
Interactive Telegram bot: browse, save and triage stored jobs from chat.

Runs a getUpdates long-polling loop (see `poll_forever`). Jobs are referenced
by the first 8 characters of their id.
"""
from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import Callable, Dict, List, Optional

from core import career_monitor, config
from core.criteria import USER_PROFILE
from core.database import (
    get_application_stats,
    get_job_by_prefix,
    get_job_stats,
    get_jobs_by_status,
    get_top_jobs,
    record_manual_apply,
    retry_application,
    save_job,
    search_jobs,
    set_user_status,
    update_job,
)
from core.hr_finder import find_hr
from core.messages import generate_messages
from core.notifications import escape_html, score_emoji, send_message, telegram_api
from core.platforms import display_name

log = logging.getLogger("telegram_bot")

LIST_LIMIT = 50
POLL_TIMEOUT = 30

# list command -> (statuses, saved_only)
LIST_FILTERS = {
    "jobs": (None, False),
    "new": (["NEW"], False),
    "saved": (None, True),
    "applied": (["APPLIED"], False),
}

HELP_TEXT = """<b>Job Command Center</b>

<b>Browse</b>
/jobs - all jobs
/new - new jobs
/saved - saved jobs
/applied - applied jobs
/top - top 10 matches

<b>Actions</b>
/job &lt;id&gt; - job details
/save &lt;id&gt; - save a job
/apply &lt;id&gt; - mark as applied
/skip &lt;id&gt; - not interested
/retry &lt;id&gt; - retry a failed auto-apply

<b>Career pages</b>
/monitor - scan all company career pages
/monitor TCS Infosys - scan specific companies
/companies - monitored companies

<b>Info</b>
/stats - your stats
/search &lt;keyword&gt; - search jobs
/help - this message"""


def short_id(job: Dict) -> str:
    return job["id"][:8]


def _button(text: str, data: str) -> Dict:
    return {"text": text, "callback_data": data}


def _percent(job: Dict) -> int:
    return round(float(job.get("ai_match_score") or 0) * 100)


class TelegramBot:
    def __init__(self):
        # chat id -> {"job_ids": [...], "index": int, "filter": str}
        self.sessions: Dict[str, Dict] = {}
        self.offset: Optional[int] = None
        self.commands: Dict[str, Callable[[str, List[str]], None]] = {
            "start": self.cmd_help,
            "help": self.cmd_help,
            "jobs": self.cmd_list,
            "new": self.cmd_list,
            "saved": self.cmd_list,
            "applied": self.cmd_list,
            "top": self.cmd_top,
            "job": self.cmd_job,
            "save": self.cmd_save,
            "apply": self.cmd_apply,
            "skip": self.cmd_skip,
            "retry": self.cmd_retry,
            "stats": self.cmd_stats,
            "search": self.cmd_search,
            "monitor": self.cmd_monitor,
            "companies": self.cmd_companies,
        }

    # -------- plumbing --------

    def reply(self, chat_id: str, text: str, keyboard: Optional[List[List[Dict]]] = None) -> bool:
        markup = {"inline_keyboard": keyboard} if keyboard else None
        return send_message(text, chat_id=chat_id, reply_markup=markup)

    def allowed(self, chat_id: str) -> bool:
        return not config.TELEGRAM_CHAT_ID or str(chat_id) == str(config.TELEGRAM_CHAT_ID)

    def handle_update(self, update: Dict) -> None:
        if "callback_query" in update:
            self.handle_callback(update["callback_query"])
            return
        message = update.get("message") or {}
        text = (message.get("text") or "").strip()
        chat_id = str((message.get("chat") or {}).get("id") or "")
        if not chat_id or not text.startswith("/"):
            return
        if not self.allowed(chat_id):
            log.warning("Ignoring message from unknown chat", extra={"chat_id": chat_id})
            return

        parts = text.split()
        command = parts[0][1:].split("@", 1)[0].lower()
        handler = self.commands.get(command)
        if handler is None:
            self.reply(chat_id, "Unknown command. Use /help to see what I can do.")
            return
        try:
            if command in LIST_FILTERS:
                handler(chat_id, [command])
            else:
                handler(chat_id, parts[1:])
        except Exception as e:
            log.exception("Command failed", extra={"command": command})
            self.reply(chat_id, f"Something went wrong: {escape_html(e)}")

    def handle_callback(self, query: Dict) -> None:
        data = query.get("data") or ""
        message = query.get("message") or {}
        chat_id = str((message.get("chat") or {}).get("id") or "")
        if not chat_id or not self.allowed(chat_id):
            return

        notice = None
        try:
            if data.startswith("next_") or data.startswith("prev_"):
                notice = self.step(chat_id, 1 if data.startswith("next_") else -1, message.get("message_id"))
            elif data.startswith("details_"):
                self.show_details(chat_id, data[len("details_"):])
            elif data.startswith("save_"):
                self.cmd_save(chat_id, [data[len("save_"):]])
                notice = "Saved!"
            elif data.startswith("applied_"):
                self.cmd_apply(chat_id, [data[len("applied_"):]])
                notice = "Marked as applied!"
            elif data.startswith("skip_"):
                self.cmd_skip(chat_id, [data[len("skip_"):]])
                notice = "Skipped!"
            elif data.startswith("linkedin_msg_"):
                self.send_linkedin_message(chat_id, data[len("linkedin_msg_"):])
            elif data.startswith("app_info_"):
                self.send_application_info(chat_id, data[len("app_info_"):])
            elif data.startswith("find_hr_"):
                notice = "Searching for HR..."
                self.send_hr_info(chat_id, data[len("find_hr_"):])
        except Exception:
            log.exception("Callback failed", extra={"data": data})

        try:
            payload = {"callback_query_id": query.get("id")}
            if notice:
                payload["text"] = notice
            telegram_api("answerCallbackQuery", payload)
        except Exception as e:
            log.debug("answerCallbackQuery failed", extra={"error": str(e)})

    def _job_or_reply(self, chat_id: str, ref: Optional[str]) -> Optional[Dict]:
        job = get_job_by_prefix(ref or "")
        if not job:
            self.reply(chat_id, "Job not found. Use /jobs to browse available jobs.")
        return job

    # -------- browsing --------

    def card_text(self, job: Dict, position: int, total: int) -> str:
        flags = ("💾" if job.get("saved_by_user") else "") + (
            "✅" if job.get("user_status") == "APPLIED" else "⏭️" if job.get("user_status") == "NOT_INTERESTED" else ""
        )
        return (
            f"{score_emoji(float(job.get('ai_match_score') or 0))} <b>{position}/{total}</b> {flags}\n\n"
            f"<b>{escape_html(job['title'])}</b>\n"
            f"🏢 {escape_html(job['company_name'])}\n"
            f"📍 {escape_html(job.get('location') or 'Not specified')}\n"
            f"📊 Match: {_percent(job)}%\n"
            f"💼 {escape_html(display_name(job['platform']))}\n\n"
            f"ID: <code>{short_id(job)}</code>"
        )

    def card_keyboard(self, job: Dict, filter_name: str) -> List[List[Dict]]:
        rows = [
            [_button("⬅️ Prev", f"prev_{filter_name}"), _button("➡️ Next", f"next_{filter_name}")],
            [_button("📋 Details", f"details_{job['id']}"), _button("💾 Save", f"save_{job['id']}")],
            [_button("✅ Applied", f"applied_{job['id']}"), _button("⏭️ Skip", f"skip_{job['id']}")],
        ]
        if job.get("url"):
            rows.append([{"text": "🔗 Apply", "url": job["url"]}])
        return rows

    def show_current(self, chat_id: str, message_id: Optional[int] = None) -> None:
        session = self.sessions[chat_id]
        job = get_job_by_prefix(session["job_ids"][session["index"]])
        if not job:
            self.reply(chat_id, "Job not found")
            return
        text = self.card_text(job, session["index"] + 1, len(session["job_ids"]))
        keyboard = self.card_keyboard(job, session["filter"])
        if message_id:
            try:
                telegram_api(
                    "editMessageText",
                    {
                        "chat_id": chat_id,
                        "message_id": message_id,
                        "text": text,
                        "parse_mode": "HTML",
                        "disable_web_page_preview": True,
                        "reply_markup": {"inline_keyboard": keyboard},
                    },
                )
                return
            except Exception:
                pass
        self.reply(chat_id, text, keyboard)

    def step(self, chat_id: str, delta: int, message_id: Optional[int] = None) -> str:
        session = self.sessions.get(chat_id)
        if not session or not session["job_ids"]:
            return "No jobs"
        session["index"] = (session["index"] + delta) % len(session["job_ids"])
        self.show_current(chat_id, message_id)
        return f"Job {session['index'] + 1}/{len(session['job_ids'])}"

    def start_browsing(self, chat_id: str, jobs: List[Dict], filter_name: str) -> None:
        if not jobs:
            self.reply(chat_id, f"No {filter_name} jobs found.")
            return
        self.sessions[chat_id] = {"job_ids": [j["id"] for j in jobs], "index": 0, "filter": filter_name}
        self.show_current(chat_id)

    # -------- commands --------

    def cmd_help(self, chat_id: str, args: List[str]) -> None:
        self.reply(chat_id, HELP_TEXT)

    def cmd_list(self, chat_id: str, args: List[str]) -> None:
        name = args[0] if args else "jobs"
        statuses, saved_only = LIST_FILTERS[name]
        jobs = get_jobs_by_status(statuses, saved_only=saved_only, limit=LIST_LIMIT)
        self.start_browsing(chat_id, jobs, "all" if name == "jobs" else name)

    def cmd_top(self, chat_id: str, args: List[str]) -> None:
        jobs = get_top_jobs(10)
        if not jobs:
            self.reply(chat_id, "No matching jobs yet.")
            return
        lines = ["🏆 <b>Top matches</b>\n"]
        for idx, job in enumerate(jobs, start=1):
            lines.append(
                f"{idx}. {score_emoji(float(job.get('ai_match_score') or 0))} <b>{escape_html(job['title'])}</b>\n"
                f"   🏢 {escape_html(job['company_name'])} | {_percent(job)}% | <code>{short_id(job)}</code>"
            )
        lines.append("\nUse /job &lt;id&gt; for details.")
        self.reply(chat_id, "\n".join(lines))

    def cmd_job(self, chat_id: str, args: List[str]) -> None:
        if not args:
            self.reply(chat_id, "Usage: /job &lt;job_id&gt;")
            return
        self.show_details(chat_id, args[0])

    def show_details(self, chat_id: str, ref: str) -> None:
        job = self._job_or_reply(chat_id, ref)
        if not job:
            return
        if not job.get("linkedin_message"):
            messages = generate_messages(job)
            job = update_job(
                job["id"],
                linkedin_message=messages["linkedin_message"],
                application_form_data=messages["form_data"],
            )

        text = (
            f"{score_emoji(float(job.get('ai_match_score') or 0))} <b>Job details</b>\n\n"
            f"<b>{escape_html(job['title'])}</b>\n\n"
            f"🏢 <b>Company:</b> {escape_html(job['company_name'])}\n"
            f"📍 <b>Location:</b> {escape_html(job.get('location') or 'Not specified')}\n"
            f"💰 <b>Salary:</b> {escape_html(job.get('salary_range') or 'Not disclosed')}\n"
            f"📊 <b>Match:</b> {_percent(job)}%\n"
            f"💼 <b>Platform:</b> {escape_html(display_name(job['platform']))}\n"
            f"🔧 <b>Skills:</b> {escape_html(', '.join(job.get('skills')[:5]) or 'N/A')}\n"
        )
        if job.get("career_page_url"):
            text += f'🌐 <a href="{escape_html(job["career_page_url"])}">Career page</a>\n'
        text += (
            f"\n<b>Why this matches:</b>\n{escape_html(job.get('ai_match_reason') or 'Good match based on your profile')}\n\n"
            f"ID: <code>{short_id(job)}</code>"
        )
        keyboard = [
            [_button("💬 LinkedIn Msg", f"linkedin_msg_{job['id']}"), _button("📝 Form Info", f"app_info_{job['id']}")],
            [_button("🔍 Find HR", f"find_hr_{job['id']}"), _button("💾 Save", f"save_{job['id']}")],
            [_button("✅ Applied", f"applied_{job['id']}"), _button("⏭️ Skip", f"skip_{job['id']}")],
        ]
        if job.get("url"):
            keyboard.append([{"text": "🔗 Apply Now", "url": job["url"]}])
        self.reply(chat_id, text, keyboard)

    def cmd_save(self, chat_id: str, args: List[str]) -> None:
        job = self._job_or_reply(chat_id, args[0] if args else None)
        if job:
            save_job(job["id"])
            self.reply(chat_id, f"💾 Saved: {escape_html(job['title'])} at {escape_html(job['company_name'])}")

    def cmd_apply(self, chat_id: str, args: List[str]) -> None:
        job = self._job_or_reply(chat_id, args[0] if args else None)
        if job:
            set_user_status(job["id"], "APPLIED")
            record_manual_apply(job)
            self.reply(chat_id, f"✅ Marked as applied: {escape_html(job['title'])} at {escape_html(job['company_name'])}")

    def cmd_skip(self, chat_id: str, args: List[str]) -> None:
        job = self._job_or_reply(chat_id, args[0] if args else None)
        if job:
            set_user_status(job["id"], "NOT_INTERESTED")
            self.reply(chat_id, f"⏭️ Skipped: {escape_html(job['title'])} at {escape_html(job['company_name'])}")

    def cmd_retry(self, chat_id: str, args: List[str]) -> None:
        job = self._job_or_reply(chat_id, args[0] if args else None)
        if not job:
            return
        if retry_application(job["id"]):
            self.reply(chat_id, f"🔁 Queued again: {escape_html(job['title'])} at {escape_html(job['company_name'])}")
        else:
            self.reply(chat_id, "Nothing to retry: this job has no failed application.")

    def cmd_stats(self, chat_id: str, args: List[str]) -> None:
        jobs = get_job_stats()
        apps = get_application_stats()
        platforms = "\n".join(
            f"  {escape_html(display_name(p))}: {n}" for p, n in (jobs.get("by_platform") or {}).items()
        )
        self.reply(
            chat_id,
            f"📊 <b>Your stats</b>\n\n"
            f"Total jobs: {jobs['total']}\n"
            f"New: {jobs['new']}\n"
            f"Saved: {jobs['saved']}\n"
            f"Applied: {jobs['applied']}\n"
            f"Interviewing: {jobs['interviewing']}\n"
            f"Found today: {jobs['today']}\n\n"
            f"<b>Applications</b>\n"
            f"Auto-applied: {apps['APPLIED']}\n"
            f"Queued for manual apply: {apps['QUEUED']}\n"
            f"Failed: {apps['FAILED']}\n"
            + (f"\n<b>By platform</b>\n{platforms}" if platforms else ""),
        )

    def cmd_search(self, chat_id: str, args: List[str]) -> None:
        text = " ".join(args).strip()
        if not text:
            self.reply(chat_id, "Usage: /search &lt;keyword&gt;\nExample: /search react developer")
            return
        jobs = search_jobs(text, limit=LIST_LIMIT)
        if not jobs:
            self.reply(chat_id, f"No jobs found for \"{escape_html(text)}\".")
            return
        self.start_browsing(chat_id, jobs, "search")

    def cmd_monitor(self, chat_id: str, args: List[str]) -> None:
        self.reply(chat_id, "Starting career page monitoring... This may take a few minutes.")
        result = career_monitor.monitor_by_names(args) if args else career_monitor.monitor_all()
        self.reply(
            chat_id,
            f"<b>Career monitor complete</b>\n\n"
            f"Companies: {result['companies']}\n"
            f"Jobs found: {result['total']}\n"
            f"New jobs: {result['new_jobs']}\n\n"
            f"Use /new to see new jobs!",
        )

    def cmd_companies(self, chat_id: str, args: List[str]) -> None:
        companies = career_monitor.load_companies()
        by_city = Counter(c["city"] for c in companies)
        lines = [f"🏢 <b>Companies monitored: {len(companies)}</b>\n"]
        lines.extend(f"{escape_html(city)}: {count} companies" for city, count in by_city.items())
        lines.append(f"\nView all at: http://localhost:{config.API_PORT}/companies")
        self.reply(chat_id, "\n".join(lines))

    # -------- job extras --------

    def send_linkedin_message(self, chat_id: str, ref: str) -> None:
        job = self._job_or_reply(chat_id, ref)
        if not job:
            return
        message = job.get("linkedin_message")
        if not message:
            message = generate_messages(job)["linkedin_message"]
            update_job(job["id"], linkedin_message=message)
        self.reply(
            chat_id,
            f"<b>LinkedIn connection message</b>\n(Copy and send to HR/recruiter)\n\n<pre>{escape_html(message)}</pre>",
        )

    def send_application_info(self, chat_id: str, ref: str) -> None:
        job = self._job_or_reply(chat_id, ref)
        if not job:
            return
        form = job.get("application_form_data")
        if not form:
            form = generate_messages(job)["form_data"]
            update_job(job["id"], application_form_data=form)

        fields = [
            ("Full name", form.get("full_name")),
            ("Email", form.get("email")),
            ("Phone", form.get("phone")),
            ("LinkedIn", form.get("linkedin_url")),
            ("Location", form.get("current_location")),
            ("Experience", f"{form.get('years_of_experience')} years"),
            ("Current CTC", form.get("current_ctc")),
            ("Expected CTC", form.get("expected_ctc")),
            ("Notice period", form.get("notice_period")),
            ("Skills", form.get("skills") or ", ".join(USER_PROFILE["skills"]["expert"])),
        ]
        lines = [f"<b>Application form info</b>\n(Copy-paste for {escape_html(job['company_name'])})\n"]
        lines.extend(f"<b>{label}:</b> <code>{escape_html(value)}</code>" for label, value in fields if value)
        lines.append(f"\n<b>Cover letter:</b>\n<pre>{escape_html(form.get('cover_letter') or '')}</pre>")
        self.reply(chat_id, "\n".join(lines))

    def send_hr_info(self, chat_id: str, ref: str) -> None:
        job = self._job_or_reply(chat_id, ref)
        if not job:
            return
        info = find_hr(job["company_name"])
        if not job.get("career_page_url") and info.get("career_page_url"):
            update_job(job["id"], career_page_url=info["career_page_url"])

        text = f"<b>HR search for {escape_html(job['company_name'])}</b>\n\n"
        if info.get("linkedin_url"):
            text += f'🔗 <a href="{escape_html(info["linkedin_url"])}">Recruiters on LinkedIn</a>\n'
        career = job.get("career_page_url") or info.get("career_page_url")
        if career:
            text += f'🌐 <a href="{escape_html(career)}">Career page</a>\n'
        self.reply(chat_id, text)

    # -------- polling --------

    def poll_once(self) -> int:
        payload = {"timeout": POLL_TIMEOUT, "allowed_updates": ["message", "callback_query"]}
        if self.offset is not None:
            payload["offset"] = self.offset
        updates = telegram_api("getUpdates", payload, timeout=POLL_TIMEOUT + 10).get("result") or []
        for update in updates:
            self.offset = update["update_id"] + 1
            self.handle_update(update)
        return len(updates)

    def poll_forever(self, stop_event: threading.Event) -> None:
        if not config.TELEGRAM_BOT_TOKEN:
            log.warning("TELEGRAM_BOT_TOKEN not set, bot not started")
            return
        log.info("Telegram bot polling started")
        while not stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                log.error("Polling failed", extra={"error": str(e)})
                stop_event.wait(5)
        log.info("Telegram bot stopped")


__all__ = ["TelegramBot", "short_id", "HELP_TEXT"]
