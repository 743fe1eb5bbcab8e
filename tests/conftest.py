import os

import pytest

from app import security
from core.cold_email import reset_daily_count


@pytest.fixture
def db():
    """Fresh Postgres schema for tests that hit the database."""
    if not os.getenv("DATABASE_URL"):
        pytest.skip("DATABASE_URL must be set for Postgres-only tests.")

    from core.db.base import get_conn
    from core.db.schema import ALL_TABLES, init_db

    def _truncate_all():
        conn = get_conn()
        cur = conn.cursor()
        cur.execute("TRUNCATE " + ", ".join(ALL_TABLES) + " RESTART IDENTITY CASCADE")
        conn.commit()
        conn.close()

    init_db()
    _truncate_all()
    yield
    _truncate_all()


@pytest.fixture(autouse=True)
def _reset_in_memory_state():
    security.reset_rate_limits()
    reset_daily_count()
    yield
    security.reset_rate_limits()


def make_job(**overrides):
    job = {
        "platform": "NAUKRI",
        "external_id": "naukri-1001",
        "title": "Senior Python Developer",
        "company_name": "Acme Labs",
        "location": "Ahmedabad",
        "job_type": "ONSITE",
        "description": "Python, Django, PostgreSQL and AWS. 3-6 years.",
        "url": "https://www.naukri.com/job-listings-1001",
        "is_easy_apply": True,
        "skills": ["Python", "Django"],
        "ai_match_score": 0.82,
        "ai_match_reason": "Strong backend overlap",
    }
    job.update(overrides)
    return job
