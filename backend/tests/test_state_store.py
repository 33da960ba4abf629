import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from fixit.models import CustomerProfile, Job, JobStatus, Message, ServiceCategory, User
from fixit.services.state_store import (
    ACTION_TYPES,
    AddJob,
    AddMessage,
    AppStore,
    ClearUser,
    SelectJob,
    SetAuthError,
    SetAuthLoading,
    SetChatError,
    SetChatLoading,
    SetError,
    SetJobs,
    SetLoading,
    SetUser,
    UpdateJob,
    initial_state,
    reduce,
)

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def _user() -> User:
    return User(id="cust-1", email="casey@example.com", name="Casey", profile=CustomerProfile(address="1 Elm St"))


def _job(job_id: str, category: ServiceCategory = ServiceCategory.HVAC, minutes: int = 0) -> Job:
    created = NOW + timedelta(minutes=minutes)
    return Job(
        id=job_id,
        customer_id="cust-1",
        service_category=category,
        description=f"Job {job_id}",
        address="1 Elm St",
        preferred_date=NOW.date(),
        created_at=created,
        updated_at=created,
    )


def _message() -> Message:
    return Message(id="msg-1", job_id="1", sender_id="cust-1", sender_type="customer", content="Hello", timestamp=NOW)


SAMPLE_ACTIONS = [
    SetUser(_user()),
    AddJob(_job("1")),
    AddJob(_job("2")),
    UpdateJob(_job("1").model_copy(update={"description": "Updated"})),
    UpdateJob(_job("missing")),
    SelectJob("1"),
    SetLoading(True),
    SetError("Network down"),
    SetAuthLoading(True),
    SetAuthError("Bad password"),
    AddMessage(_message()),
    SetChatLoading(True),
    SetChatError("Chat offline"),
    SetJobs((_job("3"),)),
    ClearUser(),
]


def test_every_action_type_has_a_sample_and_is_handled():
    assert {type(action) for action in SAMPLE_ACTIONS} == set(ACTION_TYPES)
    state = initial_state()
    for action in SAMPLE_ACTIONS:
        state = reduce(state, action)
    assert state.version == len(SAMPLE_ACTIONS)


def test_unknown_action_type_is_a_programming_error():
    with pytest.raises(TypeError):
        reduce(initial_state(), object())  # type: ignore[arg-type]


def test_each_dispatch_yields_a_new_snapshot():
    store = AppStore()
    previous = store.get_state()
    for action in SAMPLE_ACTIONS:
        current = store.dispatch(action)
        assert current is not previous
        assert current is store.get_state()
        assert current.version == previous.version + 1
        previous = current


def test_reducer_never_mutates_its_input():
    state = initial_state()
    for action in SAMPLE_ACTIONS:
        before = state.model_dump()
        next_state = reduce(state, action)
        assert state.model_dump() == before
        state = next_state


def test_add_job_prepends_newest_first():
    j, k = _job("j"), _job("k")
    state = reduce(reduce(initial_state(), AddJob(j)), AddJob(k))
    assert [job.id for job in state.jobs.jobs[:2]] == ["k", "j"]


def test_add_job_keeps_ids_unique():
    state = reduce(reduce(reduce(initial_state(), AddJob(_job("a"))), AddJob(_job("b"))), AddJob(_job("a")))
    assert [job.id for job in state.jobs.jobs] == ["a", "b"]


def test_update_job_replaces_only_matching_entry_in_place():
    state = initial_state()
    for job_id in ("a", "b", "c"):
        state = reduce(state, AddJob(_job(job_id)))
    replacement = state.jobs.jobs[1].model_copy(update={"status": JobStatus.ACCEPTED, "professional_id": "pro-1"})

    updated = reduce(state, UpdateJob(replacement))

    assert [job.id for job in updated.jobs.jobs] == ["c", "b", "a"]
    assert updated.jobs.jobs[1] is replacement
    assert updated.jobs.jobs[0] is state.jobs.jobs[0]
    assert updated.jobs.jobs[2] is state.jobs.jobs[2]


def test_update_job_with_unknown_id_leaves_list_unchanged():
    state = reduce(initial_state(), AddJob(_job("a")))
    updated = reduce(state, UpdateJob(_job("zzz")))
    assert updated is not state
    assert updated.jobs.jobs == state.jobs.jobs


def test_update_job_refreshes_selected_job():
    state = reduce(reduce(initial_state(), AddJob(_job("a"))), SelectJob("a"))
    replacement = state.jobs.jobs[0].model_copy(update={"description": "New text"})
    updated = reduce(state, UpdateJob(replacement))
    assert updated.jobs.current_job is replacement


def test_select_unknown_job_clears_selection():
    state = reduce(reduce(initial_state(), AddJob(_job("a"))), SelectJob("a"))
    assert state.jobs.current_job is not None
    assert reduce(state, SelectJob("nope")).jobs.current_job is None


def test_set_jobs_dedupes_by_id():
    state = reduce(initial_state(), SetJobs((_job("a"), _job("b"), _job("a", ServiceCategory.PLUMBING))))
    assert [job.id for job in state.jobs.jobs] == ["a", "b"]
    assert state.jobs.jobs[0].service_category == ServiceCategory.HVAC


def test_set_jobs_reresolves_selected_job_by_id():
    state = reduce(reduce(initial_state(), AddJob(_job("a"))), SelectJob("a"))
    fresh = _job("a").model_copy(update={"status": JobStatus.ACCEPTED, "professional_id": "pro-1"})

    refreshed = reduce(state, SetJobs((fresh, _job("b"))))
    assert refreshed.jobs.current_job is fresh

    dropped = reduce(refreshed, SetJobs((_job("b"),)))
    assert dropped.jobs.current_job is None


def test_loading_and_error_only_touch_jobs_slice():
    state = reduce(initial_state(), SetUser(_user()))
    for action in (SetLoading(True), SetError("Failed to create job")):
        next_state = reduce(state, action)
        assert next_state.auth is state.auth
        assert next_state.chat is state.chat
        state = next_state
    assert state.jobs.is_loading is True
    assert state.jobs.error == "Failed to create job"


def test_auth_invariant_holds_across_set_and_clear_user():
    state = reduce(initial_state(), SetAuthError("old error"))
    state = reduce(state, SetUser(_user()))
    assert state.auth.is_authenticated is True
    assert state.auth.user is not None
    assert state.auth.error is None

    state = reduce(state, ClearUser())
    assert state.auth.is_authenticated is False
    assert state.auth.user is None


def test_add_message_appends_to_chat():
    state = reduce(initial_state(), AddMessage(_message()))
    assert [m.id for m in state.chat.messages] == ["msg-1"]
    assert state.jobs.jobs == ()


def test_listeners_are_notified_and_failures_do_not_break_dispatch():
    store = AppStore()
    seen = []

    def broken(_state):
        raise RuntimeError("boom")

    store.subscribe(broken)
    unsubscribe = store.subscribe(lambda state: seen.append(state.version))

    store.dispatch(SetLoading(True))
    unsubscribe()
    store.dispatch(SetLoading(False))

    assert seen == [1]
    assert store.get_state().version == 2
