import logging
import math
from typing import Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Body, HTTPException, Request
from fastapi.responses import JSONResponse

from app.security import allow_request, client_key
from core import career_monitor, cold_email
from core.companies import aggregate, find_company_files, list_companies
from core.database import (
    LIST_FILTERS,
    InvalidStatusError,
    get_application_stats,
    get_job_by_prefix,
    get_job_stats,
    get_recent_sessions,
    list_jobs,
    mark_outreach_responded,
    record_manual_apply,
    retry_application,
    set_user_status,
    update_job,
)
from core.hr_finder import find_hr, get_all_search_links
from core.messages import generate_messages
from core.scheduler import default_scheduler

log = logging.getLogger("api")

router = APIRouter(prefix="/api")

# Fields a client may change through PUT /api/jobs/{id}
EDITABLE_FIELDS = ("user_status", "saved_by_user", "user_notes")

RUN_LIMIT = 3
RUN_WINDOW_SECONDS = 600


def _find_job(job_id: str) -> Dict:
    job = get_job_by_prefix(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Not found")
    return job


def _too_many() -> JSONResponse:
    return JSONResponse({"error": "Too many requests. Please try again later."}, status_code=429)


@router.get("/jobs")
def get_jobs(filter: str = "all", search: str = "", page: int = 1, limit: int = 20):
    if filter not in LIST_FILTERS:
        raise HTTPException(status_code=400, detail=f"Unknown filter: {filter}")
    if page < 1 or limit < 1:
        raise HTTPException(status_code=400, detail="page and limit must be positive")
    limit = min(limit, 100)
    jobs, total = list_jobs(filter, search=search or None, page=page, limit=limit)
    return {
        "jobs": jobs,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        },
    }


@router.get("/jobs/{job_id}")
def get_job_detail(job_id: str):
    job = _find_job(job_id)
    if not job.get("linkedin_message") or not job.get("application_form_data"):
        messages = generate_messages(job)
        job = update_job(
            job["id"],
            linkedin_message=job.get("linkedin_message") or messages["linkedin_message"],
            application_form_data=job.get("application_form_data") or messages["form_data"],
        )
    if job["user_status"] == "NEW":
        job = set_user_status(job["id"], "VIEWED")
    return {"job": job, "search_links": get_all_search_links(job["company_name"])}


@router.put("/jobs/{job_id}")
def put_job(job_id: str, payload: Dict = Body(...)):
    job = _find_job(job_id)
    changes = {k: payload[k] for k in EDITABLE_FIELDS if k in payload}
    if not changes:
        raise HTTPException(status_code=400, detail=f"Nothing to update; expected one of {list(EDITABLE_FIELDS)}")
    try:
        job = update_job(job["id"], **changes)
    except InvalidStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if "user_status" in changes and job["user_status"] == "APPLIED":
        record_manual_apply(job)
    return {"job": job}


@router.post("/jobs/{job_id}/retry")
def retry_job_application(job_id: str):
    job = _find_job(job_id)
    application = retry_application(job["id"])
    if not application:
        raise HTTPException(status_code=409, detail="No failed application to retry")
    return {"application": application}


@router.get("/jobs/{job_id}/messages")
def get_job_messages(job_id: str):
    return generate_messages(_find_job(job_id))


@router.get("/jobs/{job_id}/hr")
def get_job_hr(job_id: str):
    job = _find_job(job_id)
    hr_info = find_hr(job["company_name"])
    if not job.get("career_page_url") and hr_info.get("career_page_url"):
        update_job(job["id"], career_page_url=hr_info["career_page_url"])
    return {"hr_info": hr_info, "search_links": get_all_search_links(job["company_name"])}


@router.get("/stats")
def get_stats():
    stats = get_job_stats()
    stats["applications"] = get_application_stats()
    stats["outreach"] = cold_email.get_stats()
    return stats


@router.get("/sessions")
def get_sessions(limit: int = 20):
    if limit < 1:
        raise HTTPException(status_code=400, detail="limit must be positive")
    return {"sessions": get_recent_sessions(min(limit, 100))}


@router.post("/outreach/{outreach_id}/responded")
def outreach_responded(outreach_id: int):
    if not mark_outreach_responded(outreach_id):
        raise HTTPException(status_code=404, detail="Not found")
    return {"success": True}


@router.get("/companies")
def get_companies():
    companies = list_companies()
    return {"total": len(companies), "companies": companies}


@router.get("/scheduler/status")
def scheduler_status():
    return {"active": bool(default_scheduler.tasks), "tasks": default_scheduler.get_status()}


@router.post("/monitor/run")
def run_monitor(request: Request, background_tasks: BackgroundTasks, payload: Optional[Dict] = Body(None)):
    if not allow_request(client_key(request, "monitor"), limit=RUN_LIMIT, window_seconds=RUN_WINDOW_SECONDS):
        return _too_many()
    names = [n for n in (payload or {}).get("companies") or [] if isinstance(n, str) and n.strip()]
    if names:
        background_tasks.add_task(career_monitor.monitor_by_names, names)
    else:
        background_tasks.add_task(career_monitor.monitor_all)
    log.info("Career monitor run requested", extra={"companies": names or "all"})
    return {"success": True, "started": True, "companies": names or "all"}


@router.post("/discover/run")
def run_discovery(request: Request, background_tasks: BackgroundTasks):
    if not allow_request(client_key(request, "discover"), limit=RUN_LIMIT, window_seconds=RUN_WINDOW_SECONDS):
        return _too_many()
    files = find_company_files()
    background_tasks.add_task(aggregate, files)
    return {"success": True, "started": True, "files": [f.name for f in files]}
