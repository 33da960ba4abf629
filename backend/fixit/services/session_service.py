import logging
from typing import Awaitable, Optional

from fixit.errors import AuthGatewayError
from fixit.models import AuthSignUpRequest, User
from fixit.services.gateways import AuthGateway
from fixit.services.state_store import AppStore, ClearUser, SetAuthError, SetAuthLoading, SetUser
from fixit.services.validation import ensure_valid, validate_sign_in, validate_sign_up

logger = logging.getLogger(__name__)


class SessionService:
    """Sign-in, sign-up and logout flows around the auth collaborator.

    Form errors raise MarketplaceValidationError before anything is
    dispatched. Collaborator failures never propagate: they end up in
    ``auth.error`` and the call returns None.
    """

    def __init__(self, store: AppStore, gateway: AuthGateway):
        self.store = store
        self.gateway = gateway

    async def sign_in(self, email: str, password: str, user_type: str) -> Optional[User]:
        ensure_valid(validate_sign_in(email, password))
        return await self._authenticate(
            self.gateway.sign_in(email.strip(), password, user_type),
            "Login failed. Please check your credentials and try again.",
        )

    async def sign_up(self, form: AuthSignUpRequest) -> Optional[User]:
        ensure_valid(validate_sign_up(form))
        return await self._authenticate(self.gateway.sign_up(form), "Sign up failed. Please try again.")

    def logout(self) -> None:
        user = self.store.get_state().auth.user
        self.store.dispatch(ClearUser())
        if user is not None:
            logger.info("User %s signed out", user.id)

    async def _authenticate(self, call: Awaitable[User], failure_message: str) -> Optional[User]:
        self.store.dispatch(SetAuthLoading(True))
        try:
            user = await call
        except AuthGatewayError as exc:
            logger.warning("Authentication rejected: %s", exc)
            self.store.dispatch(SetAuthError(str(exc)))
            return None
        except Exception:
            logger.exception("Authentication backend failed")
            self.store.dispatch(SetAuthError(failure_message))
            return None
        else:
            self.store.dispatch(SetUser(user))
            logger.info("User %s signed in as %s", user.id, user.user_type)
            return user
        finally:
            self.store.dispatch(SetAuthLoading(False))
