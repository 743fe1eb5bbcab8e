"""
Telegram notifications (Bot API sendMessage, HTML parse mode).

Every notify_* helper returns True when Telegram accepted the message and False
when the bot is not configured or the request failed.
"""
from __future__ import annotations

import html
import logging
from typing import Dict, List, Optional

import requests

from core import config
from core.platforms import display_name

log = logging.getLogger("notifications")

TELEGRAM_API = "https://api.telegram.org/bot{token}/{method}"
MAX_MESSAGE_CHARS = 4000


def escape_html(text) -> str:
    return html.escape(str(text or ""), quote=False)


def split_message(text: str, limit: int = MAX_MESSAGE_CHARS) -> List[str]:
    """
    Break a message into chunks of at most ``limit`` characters on line
    boundaries, so HTML tags and entities are never cut. A single line longer
    than ``limit`` is split at its last space.
    """
    chunks: List[str] = []
    current = ""
    for line in (text or "").split("\n"):
        while len(line) > limit:
            cut = line.rfind(" ", 0, limit)
            cut = cut if cut > 0 else limit
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:cut])
            line = line[cut:].lstrip(" ")
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current or not chunks:
        chunks.append(current)
    return chunks


def telegram_api(method: str, payload: Dict, timeout: int = 15) -> Dict:
    """Call a Bot API method and return its decoded JSON body."""
    url = TELEGRAM_API.format(token=config.TELEGRAM_BOT_TOKEN, method=method)
    resp = requests.post(url, json=payload, timeout=timeout)
    data = resp.json()
    if not data.get("ok"):
        raise RuntimeError(f"Telegram {method} failed: {data.get('description') or resp.status_code}")
    return data


def send_message(text: str, chat_id: Optional[str] = None, reply_markup: Optional[Dict] = None) -> bool:
    """Send an HTML message, splitting it into chunks Telegram accepts."""
    chat_id = chat_id or config.TELEGRAM_CHAT_ID
    if not (config.TELEGRAM_BOT_TOKEN and chat_id):
        log.debug("Telegram not configured, skipping message")
        return False

    chunks = split_message(text)
    try:
        for idx, chunk in enumerate(chunks):
            payload = {
                "chat_id": chat_id,
                "text": chunk,
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            }
            if reply_markup and idx == len(chunks) - 1:
                payload["reply_markup"] = reply_markup
            telegram_api("sendMessage", payload)
    except Exception as e:
        log.error("Failed to send Telegram message", extra={"error": str(e)})
        return False
    return True


def score_emoji(score: float) -> str:
    if score >= 0.9:
        return "🔥"
    if score >= 0.8:
        return "⭐"
    return "✅"


def notify_new_job(job: Dict) -> bool:
    score = float(job.get("ai_match_score") or 0)
    text = (
        f"{score_emoji(score)} <b>New job match: {round(score * 100)}%</b>\n\n"
        f"<b>{escape_html(job.get('title'))}</b>\n"
        f"🏢 {escape_html(job.get('company_name'))}\n"
        f"📍 {escape_html(job.get('location') or 'Not specified')}\n"
        f"🌐 {escape_html(display_name(job.get('platform') or ''))}\n"
    )
    if job.get("ai_match_reason"):
        text += f"\n💡 {escape_html(job['ai_match_reason'])}\n"
    if job.get("url"):
        text += f'\n<a href="{escape_html(job["url"])}">View job</a>'
    return send_message(text)


def notify_application_result(job: Dict, success: bool, error: Optional[str] = None) -> bool:
    if success:
        text = (
            f"✅ <b>Applied</b>\n\n"
            f"<b>{escape_html(job.get('title'))}</b> at {escape_html(job.get('company_name'))}\n"
            f"🌐 {escape_html(display_name(job.get('platform') or ''))}"
        )
    else:
        text = (
            f"❌ <b>Application failed</b>\n\n"
            f"<b>{escape_html(job.get('title'))}</b> at {escape_html(job.get('company_name'))}\n"
            f"Error: {escape_html(error or 'unknown')}"
        )
    return send_message(text)


def notify_manual_apply(job: Dict) -> bool:
    text = (
        f"📝 <b>Ready to apply manually</b>\n\n"
        f"<b>{escape_html(job.get('title'))}</b> at {escape_html(job.get('company_name'))}\n"
        f"Match: {round(float(job.get('ai_match_score') or 0) * 100)}%\n"
        f"A cover letter has been generated.\n"
    )
    if job.get("url"):
        text += f'\n<a href="{escape_html(job["url"])}">Apply here</a>'
    return send_message(text)


def notify_daily_summary(stats: Dict) -> bool:
    applied = int(stats.get("applications_sent") or 0)
    failed = int(stats.get("applications_failed") or 0)
    attempted = applied + failed
    success_rate = round(applied / attempted * 100) if attempted else 0
    text = (
        f"📊 <b>Daily summary</b>\n\n"
        f"🔍 Jobs found: {stats.get('jobs_found', 0)}\n"
        f"✅ Applications sent: {applied}\n"
        f"❌ Failed: {failed}\n"
        f"📝 Queued for manual apply: {stats.get('applications_queued', 0)}\n"
        f"📈 Success rate: {success_rate}%"
    )
    return send_message(text)


def notify_monitor_summary(total: int, new_jobs: int, errors: int, companies: int) -> bool:
    text = (
        f"🏢 <b>Career page check complete</b>\n\n"
        f"Companies checked: {companies}\n"
        f"Jobs found: {total}\n"
        f"New jobs: {new_jobs}\n"
        f"Errors: {errors}"
    )
    return send_message(text)


def notify_error(context: str, error) -> bool:
    return send_message(f"⚠️ <b>Error</b> in {escape_html(context)}\n\n<code>{escape_html(error)[:1000]}</code>")


def notify_startup() -> bool:
    return send_message("🚀 <b>Job bot started</b>\nWatching job boards and career pages.")


def notify_shutdown() -> bool:
    return send_message("🛑 <b>Job bot stopped</b>")


__all__ = [
    "escape_html",
    "split_message",
    "telegram_api",
    "send_message",
    "score_emoji",
    "notify_new_job",
    "notify_application_result",
    "notify_manual_apply",
    "notify_daily_summary",
    "notify_monitor_summary",
    "notify_error",
    "notify_startup",
    "notify_shutdown",
]
