"""App-wide configuration and environment settings."""

import os
from dataclasses import dataclass


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


def _parse_csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# Simulated collaborator latency (network stand-in)
SIMULATED_LATENCY_MS = _env_int("FIXIT_SIMULATED_LATENCY_MS", 0)

# Session tokens
AUTH_SECRET = os.getenv("AUTH_SECRET", "dev-insecure-secret-change-me")
TOKEN_TTL_HOURS = _env_int("AUTH_TOKEN_TTL_HOURS", 24, minimum=1)
AUTH_REQUIRED = _env_bool("AUTH_REQUIRED")

# Marketplace rules
REQUIRE_PROFESSIONAL_APPROVAL = _env_bool("REQUIRE_PROFESSIONAL_APPROVAL")
MAX_JOB_PHOTOS = 3
MIN_PASSWORD_LENGTH = 6

# Server
CORS_ORIGINS = _parse_csv_env("CORS_ORIGINS", "*")
TRUSTED_HOSTS = _parse_csv_env("TRUSTED_HOSTS", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class Settings:
    simulated_latency_ms: int = SIMULATED_LATENCY_MS
    auth_secret: str = AUTH_SECRET
    token_ttl_hours: int = TOKEN_TTL_HOURS
    auth_required: bool = AUTH_REQUIRED
    require_professional_approval: bool = REQUIRE_PROFESSIONAL_APPROVAL
    cors_origins: tuple[str, ...] = tuple(CORS_ORIGINS)
    trusted_hosts: tuple[str, ...] = tuple(TRUSTED_HOSTS)
    log_level: str = LOG_LEVEL

    @property
    def simulated_latency_seconds(self) -> float:
        return self.simulated_latency_ms / 1000.0
