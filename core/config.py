"""
Environment-driven settings shared by the worker, the API and the scripts.

Other modules import this module (``from core import config``) and read
``config.NAME`` at call time, so tests can monkeypatch individual values.
"""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load `.env` for local/dev runs (override=True so updates take effect after restart).
load_dotenv(override=True)


def _bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


# -------- AI --------
AI_PROVIDER = os.getenv("AI_PROVIDER", "groq").lower()
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")

AI_MATCH_THRESHOLD = float(os.getenv("AI_MATCH_THRESHOLD", "0.7"))
NOTIFY_MATCH_THRESHOLD = float(os.getenv("NOTIFY_MATCH_THRESHOLD", "0.8"))

# -------- Telegram --------
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID")

# -------- Browser --------
HEADLESS = _bool("PLAYWRIGHT_HEADLESS", "true")
PROXY_ENABLED = _bool("PROXY_ENABLED")
PROXY_URL = os.getenv("PROXY_URL")

# -------- Platform credentials --------
LINKEDIN_ENABLED = _bool("LINKEDIN_ENABLED")
LINKEDIN_EMAIL = os.getenv("LINKEDIN_EMAIL")
LINKEDIN_PASSWORD = os.getenv("LINKEDIN_PASSWORD")
NAUKRI_EMAIL = os.getenv("NAUKRI_EMAIL")
NAUKRI_PASSWORD = os.getenv("NAUKRI_PASSWORD")

# -------- Job APIs --------
ADZUNA_APP_ID = os.getenv("ADZUNA_APP_ID")
ADZUNA_APP_KEY = os.getenv("ADZUNA_APP_KEY")
RAPIDAPI_KEY = os.getenv("RAPIDAPI_KEY")
FINDWORK_API_KEY = os.getenv("FINDWORK_API_KEY")

# -------- Bot behaviour --------
MAX_DAILY_APPLICATIONS = int(os.getenv("MAX_DAILY_APPLICATIONS", "50"))
SCRAPE_INTERVAL_HOURS = int(os.getenv("SCRAPE_INTERVAL_HOURS", "4"))
APPLICATION_DELAY_MS = int(os.getenv("APPLICATION_DELAY_MS", "30000"))
TEST_MODE = _bool("TEST_MODE")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
API_PORT = int(os.getenv("API_PORT", "3456"))

# -------- SMTP / cold email --------
EMAIL_USER = os.getenv("EMAIL_USER")
EMAIL_PASSWORD = os.getenv("EMAIL_PASSWORD")
EMAIL_FROM = os.getenv("EMAIL_FROM")
SMTP_SERVER = os.getenv("SMTP_SERVER", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))

HUNTER_API_KEY = os.getenv("HUNTER_API_KEY")
APOLLO_API_KEY = os.getenv("APOLLO_API_KEY")
COLD_EMAIL_ENABLED = _bool("COLD_EMAIL_ENABLED")
COLD_EMAIL_DAILY_LIMIT = int(os.getenv("COLD_EMAIL_DAILY_LIMIT", "40"))
COLD_EMAIL_DELAY_MS = int(os.getenv("COLD_EMAIL_DELAY_MS", "60000"))

# -------- Career monitor --------
CAREER_MONITOR_TIMES = [
    t.strip() for t in os.getenv("CAREER_MONITOR_TIMES", "08:00,18:00").split(",") if t.strip()
]
QUICK_CHECK_HOURS = int(os.getenv("QUICK_CHECK_HOURS", "4"))
QUICK_CHECK_COMPANIES = int(os.getenv("QUICK_CHECK_COMPANIES", "10"))

# -------- Files --------
DATA_DIR = Path(os.getenv("DATA_DIR", "data"))
COMPANIES_FILE = Path(os.getenv("COMPANIES_FILE", str(DATA_DIR / "companies.json")))
SCREENSHOT_DIR = DATA_DIR / "screenshots"
SESSION_DIR = DATA_DIR / "browser-session"
RESUME_PATH = Path(os.getenv("RESUME_PATH", str(DATA_DIR / "resume.pdf")))


def ai_api_key() -> str | None:
    """Key for the configured AI provider, or None when it is not set."""
    return {
        "groq": GROQ_API_KEY,
        "openai": OPENAI_API_KEY,
        "gemini": GEMINI_API_KEY,
    }.get(AI_PROVIDER)


def telegram_configured() -> bool:
    return bool(TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID)
