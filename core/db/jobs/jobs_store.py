"""
Jobs storage helpers.
"""
from __future__ import annotations

import json
from typing import Dict, Iterable, List, Optional, Tuple

from core.db.base import decode_json, get_conn, new_id, start_of_today, utcnow
from core.db.schema import JOB_USER_STATUSES, InvalidStatusError

_JOB_COLUMNS = (
    "id, platform, external_id, title, company_name, location, job_type, experience_range, "
    "salary_range, description, url, posted_at, scraped_at, is_easy_apply, skills, "
    "ai_match_score, ai_match_reason, user_status, saved_by_user, user_notes, "
    "linkedin_message, application_form_data, career_page_url, updated_at"
)

# Columns a caller may change through update_job().
_UPDATABLE = {
    "user_status",
    "saved_by_user",
    "user_notes",
    "linkedin_message",
    "application_form_data",
    "career_page_url",
    "ai_match_score",
    "ai_match_reason",
    "description",
}

# filter name -> SQL condition used by the dashboard/API listing
LIST_FILTERS = {
    "all": "",
    "new": "user_status = 'NEW'",
    "saved": "saved_by_user = 1",
    "applied": "user_status = 'APPLIED'",
    "interviewing": "user_status = 'INTERVIEWING'",
}


def _row_to_job(row) -> Dict:
    job = dict(row)
    job["skills"] = decode_json(job.get("skills"), [])
    job["application_form_data"] = decode_json(job.get("application_form_data"), None)
    job["is_easy_apply"] = bool(job.get("is_easy_apply"))
    job["saved_by_user"] = bool(job.get("saved_by_user"))
    return job


def _check_status(status: str) -> str:
    status = (status or "").strip().upper()
    if status not in JOB_USER_STATUSES:
        raise InvalidStatusError(f"Unknown job status: {status!r}")
    return status


def job_exists(platform: str, external_id: str) -> bool:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "SELECT 1 AS found FROM jobs WHERE platform = ? AND external_id = ? LIMIT 1",
        (platform, external_id),
    )
    row = cur.fetchone()
    conn.close()
    return row is not None


def job_exists_for_company(company_name: str, title: str, external_id: Optional[str] = None) -> bool:
    """True when a job with this external id, or the same company + title, is stored."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT 1 AS found FROM jobs
        WHERE external_id = ?
           OR (LOWER(company_name) = LOWER(?) AND LOWER(title) = LOWER(?))
        LIMIT 1
        """,
        (external_id or "", company_name, title),
    )
    row = cur.fetchone()
    conn.close()
    return row is not None


def create_job(job: Dict) -> Optional[Dict]:
    """
    Insert a job unless (platform, external_id) is already stored.
    Returns the stored job, or None when it already existed.
    """
    now = utcnow()
    job_id = new_id()
    form_data = job.get("application_form_data")
    if isinstance(form_data, dict):
        form_data = json.dumps(form_data)

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO jobs (
            id, platform, external_id, title, company_name, location, job_type,
            experience_range, salary_range, description, url, posted_at, scraped_at,
            is_easy_apply, skills, ai_match_score, ai_match_reason,
            linkedin_message, application_form_data, career_page_url, updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (platform, external_id) DO NOTHING
        RETURNING id
        """,
        (
            job_id,
            job["platform"],
            job["external_id"],
            job.get("title") or "Untitled",
            job.get("company_name") or "Unknown",
            job.get("location"),
            job.get("job_type"),
            job.get("experience_range"),
            job.get("salary_range"),
            job.get("description"),
            job.get("url") or "",
            job.get("posted_at"),
            now,
            1 if job.get("is_easy_apply") else 0,
            json.dumps(list(job.get("skills") or [])),
            job.get("ai_match_score"),
            job.get("ai_match_reason"),
            job.get("linkedin_message"),
            form_data,
            job.get("career_page_url"),
            now,
        ),
    )
    row = cur.fetchone()
    conn.commit()
    conn.close()
    if not row:
        return None
    return get_job(row["id"])


def get_job(job_id: str) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(f"SELECT {_JOB_COLUMNS} FROM jobs WHERE id = ?", (job_id,))
    row = cur.fetchone()
    conn.close()
    return _row_to_job(row) if row else None


def get_job_by_prefix(short_id: str) -> Optional[Dict]:
    """Resolve a full id or a short-id prefix (the bot shows 8 chars) to a job."""
    short_id = (short_id or "").strip().lower()
    if not short_id or not short_id.isalnum():
        return None
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"SELECT {_JOB_COLUMNS} FROM jobs WHERE id LIKE ? ORDER BY scraped_at DESC LIMIT 1",
        (short_id + "%",),
    )
    row = cur.fetchone()
    conn.close()
    return _row_to_job(row) if row else None


def list_jobs(
    filter_name: str = "all",
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Dict], int]:
    """Paged listing for the dashboard. Returns (jobs, total)."""
    if filter_name not in LIST_FILTERS:
        raise ValueError(f"Unknown filter: {filter_name!r}")
    page = max(1, int(page))
    limit = max(1, min(100, int(limit)))

    clauses: List[str] = []
    params: List = []
    if LIST_FILTERS[filter_name]:
        clauses.append(LIST_FILTERS[filter_name])
    if search:
        clauses.append("(title ILIKE ? OR company_name ILIKE ?)")
        like = f"%{search.strip()}%"
        params.extend([like, like])
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(f"SELECT COUNT(*) AS count FROM jobs {where}", params)
    total_row = cur.fetchone()
    total = total_row["count"] if total_row else 0

    cur.execute(
        f"""
        SELECT {_JOB_COLUMNS} FROM jobs {where}
        ORDER BY ai_match_score DESC NULLS LAST, scraped_at DESC
        LIMIT ? OFFSET ?
        """,
        params + [limit, (page - 1) * limit],
    )
    rows = cur.fetchall()
    conn.close()
    return [_row_to_job(r) for r in rows], total


def get_jobs_by_status(statuses: Optional[Iterable[str]] = None, saved_only: bool = False, limit: int = 50) -> List[Dict]:
    """Jobs for the bot's browsing lists, best match first."""
    clauses: List[str] = []
    params: List = []
    if statuses:
        statuses = [_check_status(s) for s in statuses]
        clauses.append("user_status IN (" + ", ".join("?" for _ in statuses) + ")")
        params.extend(statuses)
    if saved_only:
        clauses.append("saved_by_user = 1")
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"""
        SELECT {_JOB_COLUMNS} FROM jobs {where}
        ORDER BY ai_match_score DESC NULLS LAST, scraped_at DESC
        LIMIT ?
        """,
        params + [limit],
    )
    rows = cur.fetchall()
    conn.close()
    return [_row_to_job(r) for r in rows]


def get_top_jobs(limit: int = 10) -> List[Dict]:
    return get_jobs_by_status(["NEW", "VIEWED", "SAVED"], limit=limit)


def search_jobs(text: str, limit: int = 20) -> List[Dict]:
    jobs, _ = list_jobs("all", search=text, page=1, limit=limit)
    return jobs


def update_job(job_id: str, **fields) -> Optional[Dict]:
    """Update whitelisted columns of a job and return the fresh row."""
    unknown = set(fields) - _UPDATABLE
    if unknown:
        raise ValueError(f"Cannot update job fields: {sorted(unknown)}")
    if "user_status" in fields:
        fields["user_status"] = _check_status(fields["user_status"])
    if "saved_by_user" in fields:
        fields["saved_by_user"] = 1 if fields["saved_by_user"] else 0
    if isinstance(fields.get("application_form_data"), dict):
        fields["application_form_data"] = json.dumps(fields["application_form_data"])
    if not fields:
        return get_job(job_id)

    assignments = ", ".join(f"{name} = ?" for name in fields)
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"UPDATE jobs SET {assignments}, updated_at = ? WHERE id = ?",
        list(fields.values()) + [utcnow(), job_id],
    )
    conn.commit()
    conn.close()
    return get_job(job_id)


def set_user_status(job_id: str, status: str) -> Optional[Dict]:
    return update_job(job_id, user_status=status)


def save_job(job_id: str) -> Optional[Dict]:
    return update_job(job_id, saved_by_user=True, user_status="SAVED")


def get_job_stats() -> Dict:
    """Counts shown by the bot's /stats and the dashboard."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT
            COUNT(*) AS total,
            COUNT(*) FILTER (WHERE user_status = 'NEW') AS new,
            COUNT(*) FILTER (WHERE saved_by_user = 1) AS saved,
            COUNT(*) FILTER (WHERE user_status = 'APPLIED') AS applied,
            COUNT(*) FILTER (WHERE user_status = 'INTERVIEWING') AS interviewing,
            COUNT(*) FILTER (WHERE scraped_at >= ?) AS today
        FROM jobs
        """,
        (start_of_today(),),
    )
    stats = dict(cur.fetchone() or {})

    cur.execute("SELECT platform, COUNT(*) AS count FROM jobs GROUP BY platform ORDER BY count DESC")
    stats["by_platform"] = {r["platform"]: r["count"] for r in cur.fetchall()}
    conn.close()
    return stats


def get_outreach_candidates(min_score: float, limit: int, exclude_companies: Iterable[str] = ()) -> List[Dict]:
    """Best job per company above the score threshold, skipping excluded companies."""
    excluded = sorted({c.lower() for c in exclude_companies if c})
    clause = ""
    params: List = [min_score]
    if excluded:
        clause = "AND LOWER(company_name) NOT IN (" + ", ".join("?" for _ in excluded) + ")"
        params.extend(excluded)

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"""
        SELECT * FROM (
            SELECT DISTINCT ON (LOWER(company_name)) {_JOB_COLUMNS}
            FROM jobs
            WHERE ai_match_score >= ? {clause}
            ORDER BY LOWER(company_name), ai_match_score DESC
        ) best
        ORDER BY ai_match_score DESC
        LIMIT ?
        """,
        params + [limit],
    )
    rows = cur.fetchall()
    conn.close()
    return [_row_to_job(r) for r in rows]


__all__ = [
    "LIST_FILTERS",
    "job_exists",
    "job_exists_for_company",
    "create_job",
    "get_job",
    "get_job_by_prefix",
    "list_jobs",
    "get_jobs_by_status",
    "get_top_jobs",
    "search_jobs",
    "update_job",
    "set_user_status",
    "save_job",
    "get_job_stats",
    "get_outreach_candidates",
]
