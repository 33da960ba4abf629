"""Deterministic route resolver: picks the navigation graph from the auth slice only."""

import logging
from enum import Enum
from typing import FrozenSet

from fixit.errors import MarketplacePermissionError
from fixit.models import AuthState

logger = logging.getLogger(__name__)


class Route(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    CUSTOMER_HOME = "customer_home"
    PROFESSIONAL_HOME = "professional_home"


ROLE_ROUTES = {
    "customer": Route.CUSTOMER_HOME,
    "professional": Route.PROFESSIONAL_HOME,
}


def resolve_route(auth: AuthState) -> Route:
    """
    Priority: loading > no user > role graph.
    Loading is a neutral waiting state, not a graph.
    """
    if auth.is_loading:
        return Route.LOADING
    if auth.user is None:
        return Route.UNAUTHENTICATED

    route = ROLE_ROUTES.get(auth.user.user_type)
    if route is None:
        # No client graph exists for admins.
        logger.warning("No route graph for user_type=%s; treating as signed out", auth.user.user_type)
        return Route.UNAUTHENTICATED
    return route


def reachable_routes(auth: AuthState) -> FrozenSet[Route]:
    route = resolve_route(auth)
    if route == Route.LOADING:
        return frozenset()
    return frozenset({route})


def require_route(auth: AuthState, route: Route) -> None:
    if route not in reachable_routes(auth):
        raise MarketplacePermissionError()
