"""
Schema helpers for Postgres.
"""
from __future__ import annotations

from core.db.base import get_conn

JOB_USER_STATUSES = ("NEW", "VIEWED", "SAVED", "APPLIED", "INTERVIEWING", "NOT_INTERESTED")
APPLICATION_STATUSES = ("PENDING", "APPLYING", "APPLIED", "FAILED", "QUEUED")
JOB_TYPES = ("REMOTE", "HYBRID", "ONSITE", "FULL_TIME")
SESSION_STATUSES = ("running", "completed", "failed")
OUTREACH_STATUSES = ("SENT", "FAILED", "RESPONDED", "BOUNCED")

ALL_TABLES = [
    "cold_email_outreach",
    "application_history",
    "scraping_sessions",
    "applications",
    "jobs",
]


class InvalidStatusError(ValueError):
    """Raised for unknown status values or forbidden status transitions."""


def init_db() -> None:
    """Create the jobs, applications, scraping_sessions, application_history and cold_email_outreach tables."""
    conn = get_conn()
    cur = conn.cursor()

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS jobs(
            id TEXT PRIMARY KEY,
            platform TEXT NOT NULL,
            external_id TEXT NOT NULL,
            title TEXT NOT NULL,
            company_name TEXT NOT NULL,
            location TEXT,
            job_type TEXT,
            experience_range TEXT,
            salary_range TEXT,
            description TEXT,
            url TEXT NOT NULL,
            posted_at TEXT,
            scraped_at TEXT NOT NULL,
            is_easy_apply INTEGER NOT NULL DEFAULT 0,
            skills TEXT,
            ai_match_score REAL,
            ai_match_reason TEXT,
            user_status TEXT NOT NULL DEFAULT 'NEW',
            saved_by_user INTEGER NOT NULL DEFAULT 0,
            user_notes TEXT,
            linkedin_message TEXT,
            application_form_data TEXT,
            career_page_url TEXT,
            updated_at TEXT,
            UNIQUE(platform, external_id)
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS applications(
            id SERIAL PRIMARY KEY,
            job_id TEXT NOT NULL UNIQUE,
            status TEXT NOT NULL DEFAULT 'PENDING',
            cover_letter TEXT,
            screenshot_path TEXT,
            error_message TEXT,
            attempts INTEGER NOT NULL DEFAULT 0,
            applied_at TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT,
            FOREIGN KEY(job_id) REFERENCES jobs(id) ON DELETE CASCADE
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS scraping_sessions(
            id SERIAL PRIMARY KEY,
            platform TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'running',
            jobs_found INTEGER NOT NULL DEFAULT 0,
            new_jobs INTEGER NOT NULL DEFAULT 0,
            error_message TEXT,
            started_at TEXT NOT NULL,
            completed_at TEXT
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS application_history(
            id SERIAL PRIMARY KEY,
            company_name TEXT NOT NULL,
            job_title TEXT NOT NULL,
            platform TEXT NOT NULL,
            applied_at TEXT NOT NULL,
            UNIQUE(company_name, job_title, platform)
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS cold_email_outreach(
            id SERIAL PRIMARY KEY,
            company_name TEXT NOT NULL,
            company_domain TEXT,
            recipient_email TEXT NOT NULL,
            recipient_name TEXT,
            recipient_position TEXT,
            email_subject TEXT,
            status TEXT NOT NULL,
            error_message TEXT,
            job_title TEXT,
            job_url TEXT,
            sent_at TEXT NOT NULL,
            responded_at TEXT
        )
        """
    )

    cur.execute("CREATE INDEX IF NOT EXISTS idx_jobs_user_status ON jobs(user_status)")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_jobs_score ON jobs(ai_match_score DESC)")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_jobs_company_title ON jobs(company_name, title)")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_applications_status ON applications(status)")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_outreach_company ON cold_email_outreach(company_name)")

    conn.commit()
    conn.close()


__all__ = [
    "init_db",
    "InvalidStatusError",
    "ALL_TABLES",
    "JOB_USER_STATUSES",
    "APPLICATION_STATUSES",
    "JOB_TYPES",
    "SESSION_STATUSES",
    "OUTREACH_STATUSES",
]
