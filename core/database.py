"""
Single import point for the storage layer used by the worker, API, bot and scripts.
"""
from core.db.schema import (
    ALL_TABLES,
    APPLICATION_STATUSES,
    JOB_USER_STATUSES,
    InvalidStatusError,
    init_db,
)
from core.db.jobs import (
    LIST_FILTERS,
    create_job,
    get_job,
    get_job_by_prefix,
    get_job_stats,
    get_jobs_by_status,
    get_outreach_candidates,
    get_top_jobs,
    job_exists,
    job_exists_for_company,
    list_jobs,
    save_job,
    search_jobs,
    set_user_status,
    update_job,
)
from core.db.applications import (
    count_applications_since,
    create_application,
    get_application,
    get_application_for_job,
    get_application_stats,
    get_pending_applications,
    record_manual_apply,
    retry_application,
    update_application_status,
    upsert_application_history,
    was_applied_before,
)
from core.db.sessions import (
    complete_scraping_session,
    fail_scraping_session,
    get_recent_sessions,
    start_scraping_session,
)
from core.db.outreach import (
    get_contacted_companies,
    get_outreach_stats,
    mark_outreach_responded,
    record_outreach,
    was_contacted_since,
)

__all__ = [
    "ALL_TABLES",
    "APPLICATION_STATUSES",
    "JOB_USER_STATUSES",
    "InvalidStatusError",
    "init_db",
    "LIST_FILTERS",
    "create_job",
    "get_job",
    "get_job_by_prefix",
    "get_job_stats",
    "get_jobs_by_status",
    "get_outreach_candidates",
    "get_top_jobs",
    "job_exists",
    "job_exists_for_company",
    "list_jobs",
    "save_job",
    "search_jobs",
    "set_user_status",
    "update_job",
    "count_applications_since",
    "create_application",
    "get_application",
    "get_application_for_job",
    "get_application_stats",
    "get_pending_applications",
    "record_manual_apply",
    "retry_application",
    "update_application_status",
    "upsert_application_history",
    "was_applied_before",
    "complete_scraping_session",
    "fail_scraping_session",
    "get_recent_sessions",
    "start_scraping_session",
    "get_contacted_companies",
    "get_outreach_stats",
    "mark_outreach_responded",
    "record_outreach",
    "was_contacted_since",
]
