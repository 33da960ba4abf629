from fastapi import HTTPException, Request

from fixit.config import Settings
from fixit.errors import (
    InvalidTransitionError,
    MarketplaceError,
    MarketplaceNotFoundError,
    MarketplacePermissionError,
    MarketplaceValidationError,
)
from fixit.services.chat_service import ChatService
from fixit.services.job_service import JobService
from fixit.services.notification_store import NotificationStore
from fixit.services.session_service import SessionService
from fixit.services.state_store import AppStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> AppStore:
    return request.app.state.store


def get_session_service(request: Request) -> SessionService:
    return request.app.state.session_service


def get_job_service(request: Request) -> JobService:
    return request.app.state.job_service


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_notification_store(request: Request) -> NotificationStore:
    return request.app.state.notification_store


def raise_http_error(exc: MarketplaceError) -> None:
    if isinstance(exc, MarketplaceValidationError):
        raise HTTPException(status_code=422, detail={"errors": exc.errors})
    if isinstance(exc, MarketplaceNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, MarketplacePermissionError):
        raise HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, InvalidTransitionError):
        raise HTTPException(
            status_code=409,
            detail={"message": str(exc), "current_status": exc.current_status, "event": exc.event},
        )
    raise HTTPException(status_code=400, detail=str(exc))
