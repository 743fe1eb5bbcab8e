"""
Cold email outreach re-exports.
"""
from core.db.outreach.outreach_store import (
    was_contacted_since,
    record_outreach,
    mark_outreach_responded,
    get_contacted_companies,
    get_outreach_stats,
)

__all__ = [
    "was_contacted_since",
    "record_outreach",
    "mark_outreach_responded",
    "get_contacted_companies",
    "get_outreach_stats",
]
