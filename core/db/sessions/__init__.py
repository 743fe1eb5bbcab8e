"""
Scraping session re-exports.
"""
from core.db.sessions.sessions_store import (
    start_scraping_session,
    complete_scraping_session,
    fail_scraping_session,
    get_recent_sessions,
)

__all__ = [
    "start_scraping_session",
    "complete_scraping_session",
    "fail_scraping_session",
    "get_recent_sessions",
]
