"""
Scraping session bookkeeping (one row per scraper run).
"""
from __future__ import annotations

from typing import Dict, List

from core.db.base import get_conn, utcnow


def start_scraping_session(platform: str) -> int:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO scraping_sessions (platform, status, started_at)
        VALUES (?, 'running', ?)
        RETURNING id
        """,
        (platform, utcnow()),
    )
    row = cur.fetchone()
    conn.commit()
    conn.close()
    return row["id"]


def complete_scraping_session(session_id: int, jobs_found: int, new_jobs: int) -> None:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        UPDATE scraping_sessions
        SET status = 'completed', jobs_found = ?, new_jobs = ?, completed_at = ?
        WHERE id = ?
        """,
        (jobs_found, new_jobs, utcnow(), session_id),
    )
    conn.commit()
    conn.close()


def fail_scraping_session(session_id: int, error: str) -> None:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        UPDATE scraping_sessions
        SET status = 'failed', error_message = ?, completed_at = ?
        WHERE id = ?
        """,
        (error[:1000], utcnow(), session_id),
    )
    conn.commit()
    conn.close()


def get_recent_sessions(limit: int = 20) -> List[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "SELECT * FROM scraping_sessions ORDER BY started_at DESC, id DESC LIMIT ?",
        (limit,),
    )
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


__all__ = [
    "start_scraping_session",
    "complete_scraping_session",
    "fail_scraping_session",
    "get_recent_sessions",
]
