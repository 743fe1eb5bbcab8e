from html import escape
from urllib.parse import urlencode

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from app.layout import render_page, score_badge
from core.companies import list_companies
from core.database import LIST_FILTERS, get_job_stats, list_jobs

router = APIRouter()

PAGE_SIZE = 25

STATUS_LABELS = {
    "NEW": "🆕 New",
    "VIEWED": "👀 Viewed",
    "SAVED": "⭐ Saved",
    "APPLIED": "✅ Applied",
    "INTERVIEWING": "🎤 Interviewing",
    "NOT_INTERESTED": "⏭ Skipped",
}


def _query(filter_name: str, search: str, page: int) -> str:
    params = {"filter": filter_name, "page": page}
    if search:
        params["search"] = search
    return "/?" + urlencode(params)


@router.get("/", response_class=HTMLResponse)
def jobs_page(filter: str = "all", search: str = "", page: int = 1):
    if filter not in LIST_FILTERS:
        filter = "all"
    page = max(1, page)
    jobs, total = list_jobs(filter, search=search or None, page=page, limit=PAGE_SIZE)
    stats = get_job_stats()
    total_pages = max(1, -(-total // PAGE_SIZE))

    stats_html = "".join(
        f"""
        <div class="stat">
          <div class="label">{label}</div>
          <div class="value">{stats.get(key, 0)}</div>
        </div>
        """
        for key, label in (
            ("total", "Jobs stored"),
            ("new", "New"),
            ("today", "Found today"),
            ("saved", "Saved"),
            ("applied", "Applied"),
            ("interviewing", "Interviewing"),
        )
    )

    chips = "".join(
        f'<a href="{_query(name, search, 1)}" class="{"active" if name == filter else ""}">{name.title()}</a>'
        for name in LIST_FILTERS
    )

    rows_html = ""
    for job in jobs:
        rows_html += f"""
        <tr>
          <td>{score_badge(job.get("ai_match_score"))}</td>
          <td><a href="{escape(job.get("url") or "#")}" target="_blank" rel="noopener">{escape(job["title"])}</a>
            <div class="muted">{escape(job["id"][:8])}</div></td>
          <td>{escape(job["company_name"])}</td>
          <td>{escape(job.get("location") or "")}</td>
          <td>{escape(job["platform"])}</td>
          <td>{STATUS_LABELS.get(job["user_status"], job["user_status"])}</td>
          <td class="muted">{escape((job.get("scraped_at") or "")[:10])}</td>
        </tr>
        """
    if not rows_html:
        rows_html = '<tr><td colspan="7">No jobs match this view yet.</td></tr>'

    pager = ""
    if page > 1:
        pager += f'<a href="{_query(filter, search, page - 1)}">← Previous</a>'
    pager += f'<span class="muted">Page {page} of {total_pages} ({total} jobs)</span>'
    if page < total_pages:
        pager += f'<a href="{_query(filter, search, page + 1)}">Next →</a>'

    body = f"""
    <div class="stats">{stats_html}</div>
    <div class="card">
      <form class="filters" method="get" action="/">
        {chips}
        <input type="hidden" name="filter" value="{escape(filter)}" />
        <input type="search" name="search" value="{escape(search)}" placeholder="Search title or company" />
      </form>
      <table>
        <tr>
          <th>Match</th><th>Title</th><th>Company</th><th>Location</th>
          <th>Platform</th><th>Status</th><th>Found</th>
        </tr>
        {rows_html}
      </table>
      <div class="pager">{pager}</div>
    </div>
    """
    return render_page("Job Pilot", body, active="/")


@router.get("/companies", response_class=HTMLResponse)
def companies_page():
    companies = list_companies()
    rows_html = ""
    for company in sorted(companies, key=lambda c: (c["city"], c["category"], c["name"].lower())):
        careers = company.get("careers") or ""
        link = f'<a href="{escape(careers)}" target="_blank" rel="noopener">careers</a>' if careers else "-"
        rows_html += f"""
        <tr>
          <td>{escape(company["name"])}</td>
          <td>{escape(company["city"])}</td>
          <td>{escape(company["category"])}</td>
          <td>{escape(company.get("specialty") or "")}</td>
          <td>{link}</td>
        </tr>
        """
    if not rows_html:
        rows_html = '<tr><td colspan="5">No companies yet. Run scripts/import_companies.py to add some.</td></tr>'

    body = f"""
    <div class="card">
      <div class="muted">{len(companies)} companies monitored</div>
      <table>
        <tr><th>Name</th><th>City</th><th>Category</th><th>Specialty</th><th>Careers page</th></tr>
        {rows_html}
      </table>
    </div>
    """
    return render_page("Companies", body, active="/companies")
