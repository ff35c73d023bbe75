"""Exceptions shared by the portal state model and the auth service."""
from typing import Optional


class CanteenError(Exception):
    """Base class for portal errors."""


class Redirect(CanteenError):
    """A view cannot be shown and the user is sent elsewhere."""

    def __init__(self, to: str, reason: str = ""):
        self.to = to
        self.reason = reason
        super().__init__(reason or f"redirect to {to}")


class NotAuthenticated(Redirect):
    def __init__(self, reason: str = "Login required"):
        super().__init__("/login", reason)


class PaymentError(CanteenError):
    """Payment attempt used out of order."""


class OTPProviderError(CanteenError):
    """The verification provider rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthAPIError(CanteenError):
    """The authentication service could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
