"""
Application queue and history re-exports.

Jobs are stored globally in the `jobs` table; `applications` holds at most one
auto-apply attempt record per job and `application_history` remembers which
(company, title, platform) combinations were already applied to.
"""
from core.db.applications.applications_store import (
    ALLOWED_TRANSITIONS,
    DAILY_LIMIT_STATUSES,
    create_application,
    get_application,
    get_application_for_job,
    get_pending_applications,
    update_application_status,
    count_applications_since,
    upsert_application_history,
    was_applied_before,
    record_manual_apply,
    retry_application,
    get_application_stats,
)

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
