"""
Application queue and application history helpers.

Status flow:
  PENDING -> APPLYING -> APPLIED | FAILED | QUEUED
  FAILED  -> PENDING   (retry)
  QUEUED  -> APPLIED   (applied by hand)
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from core.db.base import get_conn, utcnow
from core.db.schema import APPLICATION_STATUSES, InvalidStatusError

ALLOWED_TRANSITIONS = {
    "PENDING": {"APPLYING"},
    "APPLYING": {"APPLIED", "FAILED", "QUEUED"},
    "FAILED": {"PENDING"},
    "QUEUED": {"APPLIED"},
    "APPLIED": set(),
}

_UPDATABLE = {"cover_letter", "screenshot_path", "error_message", "applied_at"}

# Statuses that use up the daily application budget; QUEUED covers manual-apply hand-offs.
DAILY_LIMIT_STATUSES = ("APPLYING", "APPLIED", "QUEUED")


def create_application(job_id: str) -> Optional[int]:
    """Queue a PENDING application for a job. Returns None if one already exists."""
    now = utcnow()
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO applications (job_id, status, created_at, updated_at)
        VALUES (?, 'PENDING', ?, ?)
        ON CONFLICT (job_id) DO NOTHING
        RETURNING id
        """,
        (job_id, now, now),
    )
    row = cur.fetchone()
    conn.commit()
    conn.close()
    return row["id"] if row else None


def get_application(application_id: int) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT * FROM applications WHERE id = ?", (application_id,))
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def get_application_for_job(job_id: str) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT * FROM applications WHERE job_id = ?", (job_id,))
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def get_pending_applications(limit: int) -> List[Dict]:
    """
    PENDING applications joined with their job, best match first.
    Each row carries the application columns plus a nested ``job`` dict.
    """
    if limit <= 0:
        return []
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT a.id, a.job_id, a.status, a.attempts, a.created_at,
               j.platform, j.title, j.company_name, j.location, j.description,
               j.url, j.ai_match_score, j.skills
        FROM applications a
        JOIN jobs j ON j.id = a.job_id
        WHERE a.status = 'PENDING'
        ORDER BY j.ai_match_score DESC NULLS LAST, a.created_at ASC
        LIMIT ?
        """,
        (limit,),
    )
    rows = cur.fetchall()
    conn.close()

    result: List[Dict] = []
    for r in rows:
        r = dict(r)
        job = {
            "id": r["job_id"],
            "platform": r.pop("platform"),
            "title": r.pop("title"),
            "company_name": r.pop("company_name"),
            "location": r.pop("location"),
            "description": r.pop("description"),
            "url": r.pop("url"),
            "ai_match_score": r.pop("ai_match_score"),
            "skills": r.pop("skills"),
        }
        r["job"] = job
        result.append(r)
    return result


def update_application_status(
    application_id: int,
    status: str,
    increment_attempts: bool = False,
    **fields,
) -> Dict:
    """
    Move an application to ``status`` and store any extra columns.
    Raises InvalidStatusError for unknown statuses or forbidden transitions.
    """
    status = (status or "").upper()
    if status not in APPLICATION_STATUSES:
        raise InvalidStatusError(f"Unknown application status: {status!r}")
    unknown = set(fields) - _UPDATABLE
    if unknown:
        raise ValueError(f"Cannot update application fields: {sorted(unknown)}")

    current = get_application(application_id)
    if not current:
        raise LookupError(f"Application {application_id} not found")
    if status not in ALLOWED_TRANSITIONS.get(current["status"], set()):
        raise InvalidStatusError(f"Cannot move application from {current['status']} to {status}")

    if status == "APPLIED" and "applied_at" not in fields:
        fields["applied_at"] = utcnow()

    assignments = ["status = ?", "updated_at = ?"]
    params: List = [status, utcnow()]
    for name, value in fields.items():
        assignments.append(f"{name} = ?")
        params.append(value)
    if increment_attempts:
        assignments.append("attempts = attempts + 1")

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"UPDATE applications SET {', '.join(assignments)} WHERE id = ? RETURNING *",
        params + [application_id],
    )
    row = cur.fetchone()
    conn.commit()
    conn.close()
    return dict(row)


def count_applications_since(since: str, statuses: Iterable[str] = DAILY_LIMIT_STATUSES) -> int:
    """
    Applications whose last status change (``updated_at``) happened since the
    given timestamp and that are now in one of ``statuses``.
    """
    statuses = list(statuses)
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"""
        SELECT COUNT(*) AS count FROM applications
        WHERE status IN ({', '.join('?' for _ in statuses)}) AND updated_at >= ?
        """,
        statuses + [since],
    )
    row = cur.fetchone()
    conn.close()
    return row["count"] if row else 0


def upsert_application_history(company_name: str, job_title: str, platform: str) -> None:
    now = utcnow()
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO application_history (company_name, job_title, platform, applied_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT (company_name, job_title, platform) DO UPDATE SET applied_at = EXCLUDED.applied_at
        """,
        (company_name, job_title, platform, now),
    )
    conn.commit()
    conn.close()


def was_applied_before(company_name: str, job_title: str) -> bool:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT 1 AS found FROM application_history
        WHERE LOWER(company_name) = LOWER(?) AND LOWER(job_title) = LOWER(?)
        LIMIT 1
        """,
        (company_name, job_title),
    )
    row = cur.fetchone()
    conn.close()
    return row is not None


def record_manual_apply(job: Dict) -> Optional[Dict]:
    """
    The user applied by hand: close a QUEUED application as APPLIED and remember
    it in the history. Returns the updated application, or None when the job has
    no QUEUED application.
    """
    app = get_application_for_job(job["id"])
    if not app or app["status"] != "QUEUED":
        return None
    row = update_application_status(app["id"], "APPLIED")
    upsert_application_history(job["company_name"], job["title"], job["platform"])
    return row


def retry_application(job_id: str) -> Optional[Dict]:
    """Put a FAILED application back in the PENDING queue. None when there is nothing to retry."""
    app = get_application_for_job(job_id)
    if not app or app["status"] != "FAILED":
        return None
    return update_application_status(app["id"], "PENDING")


def get_application_stats(since: Optional[str] = None) -> Dict:
    """Counts per status; when ``since`` is given, only rows updated after it."""
    conn = get_conn()
    cur = conn.cursor()
    if since:
        cur.execute(
            "SELECT status, COUNT(*) AS count FROM applications WHERE updated_at >= ? GROUP BY status",
            (since,),
        )
    else:
        cur.execute("SELECT status, COUNT(*) AS count FROM applications GROUP BY status")
    counts = {s: 0 for s in APPLICATION_STATUSES}
    for r in cur.fetchall():
        counts[r["status"]] = r["count"]
    conn.close()
    counts["total"] = sum(counts[s] for s in APPLICATION_STATUSES)
    return counts


__all__ = [
    "ALLOWED_TRANSITIONS",
    "DAILY_LIMIT_STATUSES",
    "create_application",
    "get_application",
    "get_application_for_job",
    "get_pending_applications",
    "update_application_status",
    "count_applications_since",
    "upsert_application_history",
    "was_applied_before",
    "record_manual_apply",
    "retry_application",
    "get_application_stats",
]
