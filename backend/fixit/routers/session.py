from fastapi import APIRouter, Depends

from fixit.deps import get_store
from fixit.models import AppState, SessionRouteResponse
from fixit.services.role_resolver import reachable_routes, resolve_route
from fixit.services.state_store import AppStore

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/route", response_model=SessionRouteResponse)
def current_route(store: AppStore = Depends(get_store)):
    auth = store.get_state().auth
    return SessionRouteResponse(
        route=resolve_route(auth).value,
        reachable=sorted(route.value for route in reachable_routes(auth)),
    )


@router.get("/state", response_model=AppState)
def current_state(store: AppStore = Depends(get_store)):
    return store.get_state()
