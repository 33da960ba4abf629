import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from fixit.config import Settings
from fixit.routers import auth, chat, jobs, notifications, session
from fixit.services.chat_service import ChatService
from fixit.services.gateways import AuthGateway, JobGateway, SimulatedAuthGateway, SimulatedJobGateway
from fixit.services.job_service import JobService
from fixit.services.notification_store import NotificationStore
from fixit.services.role_resolver import resolve_route
from fixit.services.session_service import SessionService
from fixit.services.state_store import AppStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    auth_gateway: Optional[AuthGateway] = None,
    job_gateway: Optional[JobGateway] = None,
) -> FastAPI:
    """Build one app instance. The instance owns a single store, i.e. one client session."""
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="FixIt API", version="0.1.0")

    cors_origins = list(settings.cors_origins)
    allow_any_origin = len(cors_origins) == 1 and cors_origins[0] == "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        # Browsers reject wildcard CORS with credentials enabled.
        allow_credentials=not allow_any_origin,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    trusted_hosts = list(settings.trusted_hosts)
    if not (len(trusted_hosts) == 1 and trusted_hosts[0] == "*"):
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)

    latency = settings.simulated_latency_seconds
    store = AppStore()
    notification_store = NotificationStore()
    app.state.settings = settings
    app.state.store = store
    app.state.notification_store = notification_store
    app.state.session_service = SessionService(store, auth_gateway or SimulatedAuthGateway(latency_seconds=latency))
    app.state.job_service = JobService(
        store,
        job_gateway or SimulatedJobGateway(latency_seconds=latency),
        notification_store,
        require_professional_approval=settings.require_professional_approval,
    )
    app.state.chat_service = ChatService(store, notification_store)

    app.include_router(auth.router)
    app.include_router(session.router)
    app.include_router(jobs.router)
    app.include_router(chat.router)
    app.include_router(notifications.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/ready")
    def ready():
        state = store.get_state()
        return {
            "status": "ready",
            "route": resolve_route(state.auth).value,
            "state_version": state.version,
        }

    logger.info("FixIt app created (simulated latency %sms)", settings.simulated_latency_ms)
    return app


app = create_app()
