"""Application state store.

One versioned AppState tree, replaced wholesale on every dispatch. The
reducer is pure: it never mutates its input and always returns a new
snapshot, so callers can detect change by identity.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from fixit.models import AppState, Job, Message, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetUser:
    user: User


@dataclass(frozen=True)
class ClearUser:
    pass


@dataclass(frozen=True)
class AddJob:
    job: Job


@dataclass(frozen=True)
class UpdateJob:
    job: Job


@dataclass(frozen=True)
class SetJobs:
    jobs: Tuple[Job, ...]


@dataclass(frozen=True)
class SetLoading:
    is_loading: bool


@dataclass(frozen=True)
class SetError:
    error: Optional[str]


@dataclass(frozen=True)
class SetAuthLoading:
    is_loading: bool


@dataclass(frozen=True)
class SetAuthError:
    error: Optional[str]


@dataclass(frozen=True)
class SelectJob:
    job_id: Optional[str]


@dataclass(frozen=True)
class AddMessage:
    message: Message


@dataclass(frozen=True)
class SetChatLoading:
    is_loading: bool


@dataclass(frozen=True)
class SetChatError:
    error: Optional[str]


Action = Union[
    SetUser,
    ClearUser,
    AddJob,
    UpdateJob,
    SetJobs,
    SetLoading,
    SetError,
    SetAuthLoading,
    SetAuthError,
    SelectJob,
    AddMessage,
    SetChatLoading,
    SetChatError,
]

ACTION_TYPES = Action.__args__  # type: ignore[attr-defined]


def initial_state() -> AppState:
    return AppState()


def _dedupe_jobs(jobs: Tuple[Job, ...]) -> Tuple[Job, ...]:
    seen = set()
    result = []
    for job in jobs:
        if job.id in seen:
            continue
        seen.add(job.id)
        result.append(job)
    return tuple(result)


def reduce(state: AppState, action: Action) -> AppState:
    auth, jobs, chat = state.auth, state.jobs, state.chat

    if isinstance(action, SetUser):
        auth = auth.model_copy(update={"user": action.user, "is_authenticated": True, "error": None})
    elif isinstance(action, ClearUser):
        auth = auth.model_copy(update={"user": None, "is_authenticated": False})
    elif isinstance(action, AddJob):
        rest = tuple(job for job in jobs.jobs if job.id != action.job.id)
        jobs = jobs.model_copy(update={"jobs": (action.job,) + rest})
    elif isinstance(action, UpdateJob):
        # Unknown id is a silent no-op so replays stay idempotent.
        if any(job.id == action.job.id for job in jobs.jobs):
            updated = tuple(action.job if job.id == action.job.id else job for job in jobs.jobs)
            current = jobs.current_job
            if current is not None and current.id == action.job.id:
                current = action.job
            jobs = jobs.model_copy(update={"jobs": updated, "current_job": current})
    elif isinstance(action, SetJobs):
        refreshed = _dedupe_jobs(tuple(action.jobs))
        current = jobs.current_job
        if current is not None:
            current = next((job for job in refreshed if job.id == current.id), None)
        jobs = jobs.model_copy(update={"jobs": refreshed, "current_job": current})
    elif isinstance(action, SetLoading):
        jobs = jobs.model_copy(update={"is_loading": action.is_loading})
    elif isinstance(action, SetError):
        jobs = jobs.model_copy(update={"error": action.error})
    elif isinstance(action, SetAuthLoading):
        auth = auth.model_copy(update={"is_loading": action.is_loading})
    elif isinstance(action, SetAuthError):
        auth = auth.model_copy(update={"error": action.error})
    elif isinstance(action, SelectJob):
        selected = next((job for job in jobs.jobs if job.id == action.job_id), None)
        jobs = jobs.model_copy(update={"current_job": selected})
    elif isinstance(action, AddMessage):
        chat = chat.model_copy(update={"messages": chat.messages + (action.message,)})
    elif isinstance(action, SetChatLoading):
        chat = chat.model_copy(update={"is_loading": action.is_loading})
    elif isinstance(action, SetChatError):
        chat = chat.model_copy(update={"error": action.error})
    else:
        raise TypeError(f"Unhandled action type: {type(action).__name__}")

    return state.model_copy(update={"auth": auth, "jobs": jobs, "chat": chat, "version": state.version + 1})


Listener = Callable[[AppState], None]


class AppStore:
    """Owns the AppState. Reads go through get_state(), writes through dispatch()."""

    def __init__(self, state: Optional[AppState] = None):
        self._state = state if state is not None else initial_state()
        self._listeners: List[Listener] = []

    def get_state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        self._state = reduce(self._state, action)
        logger.debug("dispatched %s -> version %s", type(action).__name__, self._state.version)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener failed after %s", type(action).__name__)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
