"""
Cold email outreach records.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from core.db.base import get_conn, start_of_today, utcnow
from core.db.schema import OUTREACH_STATUSES, InvalidStatusError


def was_contacted_since(company_name: str, since: str) -> bool:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT 1 AS found FROM cold_email_outreach
        WHERE LOWER(company_name) = LOWER(?) AND sent_at >= ?
        LIMIT 1
        """,
        (company_name, since),
    )
    row = cur.fetchone()
    conn.close()
    return row is not None


def record_outreach(
    company_name: str,
    recipient_email: str,
    status: str,
    company_domain: Optional[str] = None,
    recipient_name: Optional[str] = None,
    recipient_position: Optional[str] = None,
    email_subject: Optional[str] = None,
    error_message: Optional[str] = None,
    job_title: Optional[str] = None,
    job_url: Optional[str] = None,
) -> int:
    if status not in OUTREACH_STATUSES:
        raise InvalidStatusError(f"Unknown outreach status: {status!r}")
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO cold_email_outreach (
            company_name, company_domain, recipient_email, recipient_name, recipient_position,
            email_subject, status, error_message, job_title, job_url, sent_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        RETURNING id
        """,
        (
            company_name,
            company_domain,
            recipient_email,
            recipient_name,
            recipient_position,
            email_subject,
            status,
            error_message,
            job_title,
            job_url,
            utcnow(),
        ),
    )
    row = cur.fetchone()
    conn.commit()
    conn.close()
    return row["id"]


def mark_outreach_responded(outreach_id: int) -> bool:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "UPDATE cold_email_outreach SET status = 'RESPONDED', responded_at = ? WHERE id = ? AND status = 'SENT'",
        (utcnow(), outreach_id),
    )
    updated = cur.rowcount
    conn.commit()
    conn.close()
    return updated > 0


def get_contacted_companies() -> List[str]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT DISTINCT company_name FROM cold_email_outreach ORDER BY company_name")
    rows = cur.fetchall()
    conn.close()
    return [r["company_name"] for r in rows]


def get_outreach_stats() -> Dict:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT
            COUNT(*) FILTER (WHERE status IN ('SENT', 'RESPONDED')) AS total_sent,
            COUNT(*) FILTER (WHERE status IN ('SENT', 'RESPONDED') AND sent_at >= ?) AS sent_today,
            COUNT(*) FILTER (WHERE status = 'RESPONDED') AS responded,
            COUNT(*) FILTER (WHERE status = 'FAILED') AS failed
        FROM cold_email_outreach
        """,
        (start_of_today(),),
    )
    row = dict(cur.fetchone() or {})
    conn.close()
    return {
        "total_sent": row.get("total_sent") or 0,
        "sent_today": row.get("sent_today") or 0,
        "responded": row.get("responded") or 0,
        "failed": row.get("failed") or 0,
    }


__all__ = [
    "was_contacted_since",
    "record_outreach",
    "mark_outreach_responded",
    "get_contacted_companies",
    "get_outreach_stats",
]
