from fastapi import APIRouter, Depends, HTTPException

from fixit.auth import create_access_token, require_session_user
from fixit.config import Settings
from fixit.deps import get_session_service, get_settings, get_store, raise_http_error
from fixit.errors import MarketplaceError
from fixit.models import AuthLoginRequest, AuthLoginResponse, AuthSignUpRequest, User
from fixit.services.role_resolver import resolve_route
from fixit.services.session_service import SessionService
from fixit.services.state_store import AppStore

router = APIRouter(prefix="/auth", tags=["auth"])


def _login_response(user: User, store: AppStore, settings: Settings) -> AuthLoginResponse:
    token, expires_at = create_access_token(
        user_id=user.id, secret=settings.auth_secret, ttl_hours=settings.token_ttl_hours
    )
    route = resolve_route(store.get_state().auth)
    return AuthLoginResponse(access_token=token, user=user, expires_at=expires_at, route=route.value)


@router.post("/login", response_model=AuthLoginResponse)
async def login(
    payload: AuthLoginRequest,
    session: SessionService = Depends(get_session_service),
    store: AppStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    try:
        user = await session.sign_in(payload.email, payload.password, payload.user_type)
    except MarketplaceError as exc:
        raise_http_error(exc)
    if user is None:
        raise HTTPException(status_code=401, detail=store.get_state().auth.error or "Invalid credentials")
    return _login_response(user, store, settings)


@router.post("/signup", response_model=AuthLoginResponse)
async def signup(
    payload: AuthSignUpRequest,
    session: SessionService = Depends(get_session_service),
    store: AppStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    try:
        user = await session.sign_up(payload)
    except MarketplaceError as exc:
        raise_http_error(exc)
    if user is None:
        raise HTTPException(status_code=400, detail=store.get_state().auth.error or "Sign up failed")
    return _login_response(user, store, settings)


@router.post("/logout", response_model=dict)
def logout(
    session: SessionService = Depends(get_session_service),
    store: AppStore = Depends(get_store),
):
    session.logout()
    return {"status": "ok", "route": resolve_route(store.get_state().auth).value}


@router.get("/me", response_model=User)
def me(user: User = Depends(require_session_user)):
    return user
