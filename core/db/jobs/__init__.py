"""
Jobs storage re-exports.
"""
from core.db.jobs.jobs_store import (
    LIST_FILTERS,
    job_exists,
    job_exists_for_company,
    create_job,
    get_job,
    get_job_by_prefix,
    list_jobs,
    get_jobs_by_status,
    get_top_jobs,
    search_jobs,
    update_job,
    set_user_status,
    save_job,
    get_job_stats,
    get_outreach_candidates,
)

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
