from typing import Dict


class MarketplaceError(ValueError):
    """Base class for user-visible marketplace errors."""


class MarketplaceValidationError(MarketplaceError):
    """Raised with one message per offending field so forms can highlight each."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid fields: {fields}")


class InvalidTransitionError(MarketplaceError):
    def __init__(self, current_status: str, event: str):
        self.current_status = current_status
        self.event = event
        super().__init__(f"Cannot {event} a job that is {current_status.replace('_', ' ')}")


class MarketplacePermissionError(MarketplaceError):
    def __init__(self, message: str = "You are not allowed to perform this action"):
        super().__init__(message)


class MarketplaceNotFoundError(MarketplaceError):
    pass


class AuthGatewayError(MarketplaceError):
    """Failure reported by an external collaborator (auth or job backend)."""
