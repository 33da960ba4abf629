import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from fixit.errors import MarketplacePermissionError
from fixit.models import AdminProfile, AuthState, CustomerProfile, ProfessionalProfile, ServiceCategory, User
from fixit.services.role_resolver import Route, reachable_routes, require_route, resolve_route

CUSTOMER = User(id="cust-1", email="casey@example.com", name="Casey", profile=CustomerProfile(address="1 Elm St"))
PROFESSIONAL = User(
    id="pro-1",
    email="pat@example.com",
    name="Pat",
    profile=ProfessionalProfile(
        business_name="Pat's Pipes",
        license_number="LIC-9",
        insurance_number="INS-9",
        service_categories=(ServiceCategory.PLUMBING,),
    ),
)
ADMIN = User(id="adm-1", email="admin@example.com", name="Ada", profile=AdminProfile())


def _auth(user=None, is_loading=False) -> AuthState:
    return AuthState(user=user, is_authenticated=user is not None, is_loading=is_loading)


def test_no_user_resolves_to_unauthenticated():
    assert resolve_route(_auth()) == Route.UNAUTHENTICATED


def test_customer_resolves_to_customer_home():
    assert resolve_route(_auth(CUSTOMER)) == Route.CUSTOMER_HOME


def test_professional_resolves_to_professional_home():
    assert resolve_route(_auth(PROFESSIONAL)) == Route.PROFESSIONAL_HOME


def test_admin_has_no_client_graph():
    assert resolve_route(_auth(ADMIN)) == Route.UNAUTHENTICATED


@pytest.mark.parametrize("user", [None, CUSTOMER, PROFESSIONAL])
def test_loading_suppresses_every_graph(user):
    auth = _auth(user, is_loading=True)
    assert resolve_route(auth) == Route.LOADING
    assert reachable_routes(auth) == frozenset()


@pytest.mark.parametrize("user", [None, CUSTOMER, PROFESSIONAL, ADMIN])
def test_exactly_one_graph_is_reachable(user):
    reachable = reachable_routes(_auth(user))
    assert len(reachable) == 1
    assert not {Route.CUSTOMER_HOME, Route.PROFESSIONAL_HOME} <= reachable


def test_require_route_blocks_the_other_role():
    require_route(_auth(CUSTOMER), Route.CUSTOMER_HOME)
    with pytest.raises(MarketplacePermissionError):
        require_route(_auth(CUSTOMER), Route.PROFESSIONAL_HOME)
    with pytest.raises(MarketplacePermissionError):
        require_route(_auth(PROFESSIONAL), Route.CUSTOMER_HOME)


def test_resolution_has_no_memory_of_previous_role():
    assert resolve_route(_auth(PROFESSIONAL)) == Route.PROFESSIONAL_HOME
    assert resolve_route(_auth()) == Route.UNAUTHENTICATED
    assert resolve_route(_auth(CUSTOMER)) == Route.CUSTOMER_HOME
