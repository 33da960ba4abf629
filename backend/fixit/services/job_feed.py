"""Read-only views over the jobs list. Nothing here mutates its input."""

from datetime import datetime
from typing import Iterable, Optional, Tuple, Union

from fixit.models import Job, JobStatus, ProfessionalProfile, ServiceCategory, User, utcnow

ALL_CATEGORIES = "all"

# Stands in for a geolocation collaborator. Not a real distance.
PLACEHOLDER_DISTANCE_MILES = 2.3

STATUS_LABELS = {
    JobStatus.PENDING: "Waiting for Pro",
    JobStatus.ACCEPTED: "Pro Assigned",
    JobStatus.IN_PROGRESS: "In Progress",
    JobStatus.COMPLETED: "Completed",
    JobStatus.CANCELLED: "Cancelled",
}


def filter_by_category(jobs: Iterable[Job], category: Union[ServiceCategory, str, None]) -> Tuple[Job, ...]:
    if category is None or category == ALL_CATEGORIES:
        return tuple(jobs)
    wanted = ServiceCategory(category)
    return tuple(job for job in jobs if job.service_category == wanted)


def sort_by_recency(jobs: Iterable[Job]) -> Tuple[Job, ...]:
    # Stable, so equal timestamps keep store order (already newest-first).
    return tuple(sorted(jobs, key=lambda job: job.created_at, reverse=True))


def available_jobs_for(jobs: Iterable[Job], professional: User) -> Tuple[Job, ...]:
    profile = professional.profile
    if not isinstance(profile, ProfessionalProfile):
        return ()
    categories = set(profile.service_categories)
    return tuple(
        job for job in jobs if job.status == JobStatus.PENDING and job.service_category in categories
    )


def jobs_for_customer(jobs: Iterable[Job], customer_id: str) -> Tuple[Job, ...]:
    return tuple(job for job in jobs if job.customer_id == customer_id)


def jobs_for_professional(jobs: Iterable[Job], professional_id: str) -> Tuple[Job, ...]:
    return tuple(job for job in jobs if job.professional_id == professional_id)


def recent_jobs(jobs: Iterable[Job], limit: int = 3) -> Tuple[Job, ...]:
    return tuple(jobs)[: max(limit, 0)]


def estimate_distance_miles(address: str) -> float:
    """Placeholder until a geolocation service is wired in; ignores the address."""
    return PLACEHOLDER_DISTANCE_MILES


def format_distance(address: str) -> str:
    return f"{estimate_distance_miles(address):.1f} miles away"


def format_time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    minutes = int((now - created_at).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if minutes < 1440:
        return f"{minutes // 60}h ago"
    return f"{minutes // 1440}d ago"


def status_label(status: JobStatus) -> str:
    return STATUS_LABELS.get(status, status.value)
