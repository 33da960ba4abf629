import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from fixit.errors import AuthGatewayError, MarketplaceError, MarketplaceNotFoundError, MarketplacePermissionError
from fixit.models import CustomerProfile, Job, JobDraft, ProfessionalProfile, ServiceCategory, User, utcnow
from fixit.services import lifecycle
from fixit.services.gateways import JobGateway
from fixit.services.notification_store import NotificationStore
from fixit.services.role_resolver import Route, require_route
from fixit.services.state_store import AddJob, AppStore, SetError, SetJobs, SetLoading, SetUser, UpdateJob
from fixit.services.validation import ensure_valid, is_valid_job_draft, parse_preferred_date

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JobIdGenerator:
    """Millisecond-timestamp ids, bumped by one when the clock has not moved on."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0

    def next_id(self) -> str:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)


class JobService:
    """Job creation, refresh and lifecycle events for the signed-in user.

    Lifecycle rules are checked before anything reaches the store; a rejected
    event raises and leaves state untouched. Backend failures are folded into
    ``jobs.error`` and the call returns None.
    """

    def __init__(
        self,
        store: AppStore,
        gateway: JobGateway,
        notifications: NotificationStore,
        *,
        require_professional_approval: bool = False,
        id_generator: Optional[JobIdGenerator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.gateway = gateway
        self.notifications = notifications
        self.require_professional_approval = require_professional_approval
        self.id_generator = id_generator or JobIdGenerator()
        self.clock = clock

    # ── lookups ─────────────────────────────────────────────────────────

    def session_user(self) -> User:
        user = self.store.get_state().auth.user
        if user is None:
            raise MarketplacePermissionError("Sign in to continue")
        return user

    def get_job(self, job_id: str) -> Job:
        for job in self.store.get_state().jobs.jobs:
            if job.id == job_id:
                return job
        raise MarketplaceNotFoundError("Job not found")

    def list_jobs(self) -> Tuple[Job, ...]:
        return self.store.get_state().jobs.jobs

    # ── async boundary ──────────────────────────────────────────────────

    async def _run(self, call: Awaitable[T], on_success: Callable[[T], None], failure_message: str) -> Optional[T]:
        self.store.dispatch(SetLoading(True))
        try:
            result = await call
        except AuthGatewayError as exc:
            logger.warning("Job backend rejected request: %s", exc)
            self.store.dispatch(SetError(str(exc)))
            return None
        except Exception:
            logger.exception("Job backend failed")
            self.store.dispatch(SetError(failure_message))
            return None
        else:
            on_success(result)
            if self.store.get_state().jobs.error is not None:
                self.store.dispatch(SetError(None))
            return result
        finally:
            self.store.dispatch(SetLoading(False))

    # ── customer actions ────────────────────────────────────────────────

    async def create_job(self, draft: JobDraft) -> Optional[Job]:
        user = self.session_user()
        require_route(self.store.get_state().auth, Route.CUSTOMER_HOME)
        now = self.clock()
        ensure_valid(is_valid_job_draft(draft, today=now.date()))

        job = Job(
            id=self.id_generator.next_id(),
            customer_id=user.id,
            service_category=ServiceCategory(draft.service_category),
            description=draft.description.strip(),
            photos=tuple(draft.photos),
            address=draft.address.strip(),
            preferred_date=parse_preferred_date(draft.preferred_date),
            created_at=now,
            updated_at=now,
        )

        def on_created(saved: Job) -> None:
            self.store.dispatch(AddJob(saved))
            self._update_session_profile(
                user.id,
                CustomerProfile,
                lambda profile: {"job_ids": (saved.id,) + profile.job_ids},
                updated_at=now,
            )

        created = await self._run(self.gateway.submit(job), on_created, "Failed to create job. Please try again.")
        if created is not None:
            logger.info("Job %s created by %s (%s)", created.id, user.id, created.service_category.value)
        return created

    async def refresh_jobs(self) -> Optional[Tuple[Job, ...]]:
        return await self._run(
            self.gateway.fetch_jobs(),
            lambda jobs: self.store.dispatch(SetJobs(tuple(jobs))),
            "Failed to load jobs. Please pull to refresh.",
        )

    async def cancel_job(self, job_id: str) -> Optional[Job]:
        actor = self.session_user()
        return await self._transition(job_id, "cancel", lambda job: lifecycle.cancel(job, actor, now=self.clock()))

    async def rate_job(self, job_id: str, rating: int, review: str = "") -> Optional[Job]:
        actor = self.session_user()
        return await self._transition(
            job_id, "rate", lambda job: lifecycle.rate(job, actor, rating, review, now=self.clock())
        )

    # ── professional actions ────────────────────────────────────────────

    async def accept_job(self, job_id: str) -> Optional[Job]:
        actor = self.session_user()
        require_route(self.store.get_state().auth, Route.PROFESSIONAL_HOME)
        accepted = await self._transition(
            job_id,
            "accept",
            lambda job: lifecycle.accept(
                job, actor, now=self.clock(), require_approval=self.require_professional_approval
            ),
        )
        if accepted is not None:
            self.notifications.create(
                user_id=accepted.customer_id,
                title="Job accepted",
                body=f"{actor.name} accepted your {accepted.service_category.value} request.",
                type="job_accepted",
                data={"job_id": accepted.id, "professional_id": actor.id},
            )
        return accepted

    async def start_job(self, job_id: str) -> Optional[Job]:
        actor = self.session_user()
        return await self._transition(job_id, "start", lambda job: lifecycle.start(job, actor, now=self.clock()))

    async def complete_job(self, job_id: str, final_price: float) -> Optional[Job]:
        actor = self.session_user()
        completed = await self._transition(
            job_id, "complete", lambda job: lifecycle.complete(job, actor, final_price, now=self.clock())
        )
        if completed is None:
            return None

        self._update_session_profile(
            actor.id,
            ProfessionalProfile,
            lambda profile: {
                "completed_job_ids": profile.completed_job_ids + (completed.id,),
                "earnings": profile.earnings + (completed.final_price or 0.0),
            },
        )
        self.notifications.create(
            user_id=completed.customer_id,
            title="Job completed",
            body=f"Your {completed.service_category.value} job is complete. Final price: ${completed.final_price:.2f}",
            type="job_completed",
            data={"job_id": completed.id, "final_price": completed.final_price},
        )
        return completed

    # ── shared ──────────────────────────────────────────────────────────

    def _update_session_profile(
        self,
        user_id: str,
        profile_type: type,
        changes: Callable[[Any], Dict[str, Any]],
        updated_at: Optional[datetime] = None,
    ) -> None:
        # Re-read after the await: the session may have signed out or switched users.
        current = self.store.get_state().auth.user
        if current is None or current.id != user_id or not isinstance(current.profile, profile_type):
            logger.info("Session changed while a job call was in flight; profile of %s not updated", user_id)
            return
        profile = current.profile.model_copy(update=changes(current.profile))
        update: Dict[str, Any] = {"profile": profile}
        if updated_at is not None:
            update["updated_at"] = updated_at
        self.store.dispatch(SetUser(current.model_copy(update=update)))

    async def _transition(self, job_id: str, event: str, apply: Callable[[Job], Job]) -> Optional[Job]:
        job = self.get_job(job_id)
        try:
            updated = apply(job)
        except MarketplaceError as exc:
            logger.warning("Rejected %s on job %s (%s): %s", event, job.id, job.status.value, exc)
            raise

        saved = await self._run(
            self.gateway.save(updated),
            lambda result: self.store.dispatch(UpdateJob(result)),
            f"Failed to {event} job. Please try again.",
        )
        if saved is not None:
            logger.info("Job %s: %s -> %s via %s", job.id, job.status.value, saved.status.value, event)
        return saved
