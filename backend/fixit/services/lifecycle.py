"""Job status state machine.

    pending -> accepted -> in_progress -> completed
    pending | accepted -> cancelled

Every event function takes the current Job and returns a new one; the input
is never modified. Illegal events raise InvalidTransitionError, wrong
parties raise MarketplacePermissionError.
"""

import math
from datetime import datetime
from typing import Dict, List, Optional

from fixit.errors import InvalidTransitionError, MarketplacePermissionError, MarketplaceValidationError
from fixit.models import Job, JobStatus, ProfessionalProfile, User, utcnow

VALID_JOB_TRANSITIONS: Dict[JobStatus, Dict[str, JobStatus]] = {
    JobStatus.PENDING: {"accept": JobStatus.ACCEPTED, "cancel": JobStatus.CANCELLED},
    JobStatus.ACCEPTED: {"start": JobStatus.IN_PROGRESS, "cancel": JobStatus.CANCELLED},
    JobStatus.IN_PROGRESS: {"complete": JobStatus.COMPLETED},
    JobStatus.COMPLETED: {"rate": JobStatus.COMPLETED},
    JobStatus.CANCELLED: {},
}

JOB_TERMINAL_STATUSES = {JobStatus.COMPLETED, JobStatus.CANCELLED}


def _target_status(job: Job, event: str) -> JobStatus:
    target = VALID_JOB_TRANSITIONS.get(job.status, {}).get(event)
    if target is None:
        raise InvalidTransitionError(job.status.value, event)
    # rate is a self-loop that may fire only once
    if event == "rate" and job.rating is not None:
        raise InvalidTransitionError(job.status.value, event)
    return target


def _apply(job: Job, status: JobStatus, now: Optional[datetime], **changes) -> Job:
    return job.model_copy(update={"status": status, "updated_at": now or utcnow(), **changes})


def available_events(job: Job) -> List[str]:
    # Terminal jobs only take the one-off rating.
    if job.status in JOB_TERMINAL_STATUSES and job.rating is not None:
        return []
    return list(VALID_JOB_TRANSITIONS.get(job.status, {}))


def is_owner(job: Job, actor: User) -> bool:
    return actor.user_type == "customer" and actor.id == job.customer_id


def is_assigned_professional(job: Job, actor: User) -> bool:
    return actor.user_type == "professional" and job.professional_id is not None and actor.id == job.professional_id


def is_party(job: Job, actor: User) -> bool:
    return is_owner(job, actor) or is_assigned_professional(job, actor)


def accept(job: Job, professional: User, *, now: Optional[datetime] = None, require_approval: bool = False) -> Job:
    target = _target_status(job, "accept")
    profile = professional.profile
    if not isinstance(profile, ProfessionalProfile):
        raise MarketplacePermissionError()
    if require_approval and not profile.is_approved:
        raise MarketplacePermissionError("Your professional account is awaiting approval")
    if job.service_category not in profile.service_categories:
        raise MarketplacePermissionError("This job is outside your service categories")
    return _apply(job, target, now, professional_id=professional.id)


def start(job: Job, actor: User, *, now: Optional[datetime] = None) -> Job:
    target = _target_status(job, "start")
    if not is_assigned_professional(job, actor):
        raise MarketplacePermissionError()
    return _apply(job, target, now)


def complete(job: Job, actor: User, final_price: float, *, now: Optional[datetime] = None) -> Job:
    target = _target_status(job, "complete")
    if not is_assigned_professional(job, actor):
        raise MarketplacePermissionError()
    if final_price is None or not math.isfinite(final_price) or final_price < 0:
        raise MarketplaceValidationError({"final_price": "Final price must be zero or greater"})
    now = now or utcnow()
    return _apply(job, target, now, final_price=float(final_price), completed_at=now)


def cancel(job: Job, actor: User, *, now: Optional[datetime] = None) -> Job:
    target = _target_status(job, "cancel")
    if job.status == JobStatus.PENDING:
        allowed = is_owner(job, actor)
    else:
        allowed = is_party(job, actor)
    if not allowed:
        raise MarketplacePermissionError()
    return _apply(job, target, now, professional_id=None)


def rate(job: Job, actor: User, rating: int, review: str = "", *, now: Optional[datetime] = None) -> Job:
    target = _target_status(job, "rate")
    if not is_owner(job, actor):
        raise MarketplacePermissionError()
    if not isinstance(rating, int) or not 1 <= rating <= 5:
        raise MarketplaceValidationError({"rating": "Rating must be between 1 and 5"})
    return _apply(job, target, now, rating=rating, review=review or None)
