"""Collaborator boundaries the core expects from the auth and job backends.

The Simulated* implementations keep everything in memory and only sleep to
stand in for network latency. Real backends plug in through the same
Protocols.
"""

import asyncio
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from typing import Dict, Iterable, Protocol, Tuple
from uuid import uuid4

from fixit.errors import AuthGatewayError
from fixit.models import (
    AuthSignUpRequest,
    CustomerProfile,
    Job,
    ProfessionalProfile,
    ServiceCategory,
    User,
    utcnow,
)

logger = logging.getLogger(__name__)


class AuthGateway(Protocol):
    async def sign_in(self, email: str, password: str, user_type: str) -> User: ...

    async def sign_up(self, form: AuthSignUpRequest) -> User: ...


class JobGateway(Protocol):
    async def submit(self, job: Job) -> Job: ...

    async def save(self, job: Job) -> Job: ...

    async def fetch_jobs(self) -> Tuple[Job, ...]: ...


async def _simulate_latency(latency_seconds: float) -> None:
    if latency_seconds > 0:
        await asyncio.sleep(latency_seconds)


def _hash_password(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class _Account:
    user: User
    salt: str
    password_digest: str


class SimulatedAuthGateway:
    def __init__(self, latency_seconds: float = 0.0):
        self.latency_seconds = latency_seconds
        self._accounts: Dict[str, _Account] = {}

    async def sign_up(self, form: AuthSignUpRequest) -> User:
        await _simulate_latency(self.latency_seconds)
        key = form.email.strip().lower()
        if key in self._accounts:
            raise AuthGatewayError("An account with this email already exists")

        if form.user_type == "professional":
            profile = ProfessionalProfile(
                business_name=form.business_name.strip(),
                license_number=form.license_number.strip(),
                insurance_number=form.insurance_number.strip(),
                service_categories=tuple(ServiceCategory(value) for value in form.service_categories),
            )
        else:
            profile = CustomerProfile(address=form.address.strip())

        now = utcnow()
        user = User(
            id=f"usr_{uuid4().hex[:10]}",
            email=form.email.strip(),
            phone=(form.phone or "").strip() or None,
            name=form.name.strip(),
            profile=profile,
            created_at=now,
            updated_at=now,
        )
        salt = secrets.token_hex(8)
        self._accounts[key] = _Account(user=user, salt=salt, password_digest=_hash_password(form.password, salt))
        logger.info("Registered %s account %s", user.user_type, user.id)
        return user

    async def sign_in(self, email: str, password: str, user_type: str) -> User:
        await _simulate_latency(self.latency_seconds)
        account = self._accounts.get(email.strip().lower())
        if account is None:
            raise AuthGatewayError("Invalid email or password")
        digest = _hash_password(password, account.salt)
        if not hmac.compare_digest(digest, account.password_digest):
            raise AuthGatewayError("Invalid email or password")
        if account.user.user_type != user_type:
            raise AuthGatewayError("Invalid email or password")
        return account.user


class SimulatedJobGateway:
    def __init__(self, latency_seconds: float = 0.0, seed_jobs: Iterable[Job] = ()):
        self.latency_seconds = latency_seconds
        self._jobs: Dict[str, Job] = {job.id: job for job in seed_jobs}

    async def submit(self, job: Job) -> Job:
        await _simulate_latency(self.latency_seconds)
        self._jobs[job.id] = job
        return job

    async def save(self, job: Job) -> Job:
        await _simulate_latency(self.latency_seconds)
        self._jobs[job.id] = job
        return job

    async def fetch_jobs(self) -> Tuple[Job, ...]:
        await _simulate_latency(self.latency_seconds)
        return tuple(sorted(self._jobs.values(), key=lambda job: job.created_at, reverse=True))
