from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from fixit.auth import require_session_user
from fixit.deps import get_job_service, get_store, raise_http_error
from fixit.errors import MarketplaceError, MarketplaceValidationError
from fixit.models import Job, JobCompleteRequest, JobDraft, JobFeedItem, JobRateRequest, User
from fixit.services import job_feed
from fixit.services.job_service import JobService
from fixit.services.role_resolver import Route, require_route
from fixit.services.state_store import AppStore, SelectJob
from fixit.services.validation import SERVICE_CATEGORY_VALUES

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _backend_failure(store: AppStore) -> HTTPException:
    return HTTPException(status_code=503, detail=store.get_state().jobs.error or "Job backend unavailable")


@router.get("", response_model=list[Job])
def list_jobs(
    category: str = Query(default=job_feed.ALL_CATEGORIES),
    mine: bool = Query(default=False),
    user: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
):
    if category != job_feed.ALL_CATEGORIES and category not in SERVICE_CATEGORY_VALUES:
        raise_http_error(MarketplaceValidationError({"category": "Unknown service category"}))
    rows = jobs.list_jobs()
    if mine:
        if user.user_type == "customer":
            rows = job_feed.jobs_for_customer(rows, user.id)
        else:
            rows = job_feed.jobs_for_professional(rows, user.id)
    return list(job_feed.filter_by_category(rows, category))


@router.post("", response_model=Job)
async def create_job(
    draft: JobDraft,
    _: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    try:
        created = await jobs.create_job(draft)
    except MarketplaceError as exc:
        raise_http_error(exc)
    if created is None:
        raise _backend_failure(store)
    return created


@router.post("/refresh", response_model=list[Job])
async def refresh_jobs(
    _: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    refreshed = await jobs.refresh_jobs()
    if refreshed is None:
        raise _backend_failure(store)
    return list(store.get_state().jobs.jobs)


@router.get("/feed", response_model=list[JobFeedItem])
def job_feed_view(
    category: str = Query(default=job_feed.ALL_CATEGORIES),
    user: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    try:
        require_route(store.get_state().auth, Route.PROFESSIONAL_HOME)
        if category != job_feed.ALL_CATEGORIES and category not in SERVICE_CATEGORY_VALUES:
            raise MarketplaceValidationError({"category": "Unknown service category"})
    except MarketplaceError as exc:
        raise_http_error(exc)

    available = job_feed.available_jobs_for(jobs.list_jobs(), user)
    return [
        JobFeedItem(
            job=job,
            distance=job_feed.format_distance(job.address),
            posted=job_feed.format_time_ago(job.created_at),
            status_label=job_feed.status_label(job.status),
        )
        for job in job_feed.filter_by_category(available, category)
    ]


@router.get("/recent", response_model=list[Job])
def recent_jobs_view(
    limit: int = Query(default=3, ge=1, le=50),
    user: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    try:
        require_route(store.get_state().auth, Route.CUSTOMER_HOME)
    except MarketplaceError as exc:
        raise_http_error(exc)
    own = job_feed.jobs_for_customer(jobs.list_jobs(), user.id)
    return list(job_feed.recent_jobs(own, limit=limit))


@router.get("/{job_id}", response_model=Job)
def get_job(
    job_id: str,
    _: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
):
    try:
        return jobs.get_job(job_id)
    except MarketplaceError as exc:
        raise_http_error(exc)


@router.post("/{job_id}/select", response_model=Optional[Job])
def select_job(
    job_id: str,
    _: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    try:
        jobs.get_job(job_id)
    except MarketplaceError as exc:
        raise_http_error(exc)
    return store.dispatch(SelectJob(job_id)).jobs.current_job


@router.post("/{job_id}/accept", response_model=Job)
async def accept_job(
    job_id: str,
    _: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    try:
        updated = await jobs.accept_job(job_id)
    except MarketplaceError as exc:
        raise_http_error(exc)
    if updated is None:
        raise _backend_failure(store)
    return updated


@router.post("/{job_id}/start", response_model=Job)
async def start_job(
    job_id: str,
    _: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    try:
        updated = await jobs.start_job(job_id)
    except MarketplaceError as exc:
        raise_http_error(exc)
    if updated is None:
        raise _backend_failure(store)
    return updated


@router.post("/{job_id}/complete", response_model=Job)
async def complete_job(
    job_id: str,
    payload: JobCompleteRequest,
    _: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    try:
        updated = await jobs.complete_job(job_id, payload.final_price)
    except MarketplaceError as exc:
        raise_http_error(exc)
    if updated is None:
        raise _backend_failure(store)
    return updated


@router.post("/{job_id}/cancel", response_model=Job)
async def cancel_job(
    job_id: str,
    _: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    try:
        updated = await jobs.cancel_job(job_id)
    except MarketplaceError as exc:
        raise_http_error(exc)
    if updated is None:
        raise _backend_failure(store)
    return updated


@router.post("/{job_id}/rate", response_model=Job)
async def rate_job(
    job_id: str,
    payload: JobRateRequest,
    _: User = Depends(require_session_user),
    jobs: JobService = Depends(get_job_service),
    store: AppStore = Depends(get_store),
):
    try:
        updated = await jobs.rate_job(job_id, payload.rating, payload.review)
    except MarketplaceError as exc:
        raise_http_error(exc)
    if updated is None:
        raise _backend_failure(store)
    return updated
