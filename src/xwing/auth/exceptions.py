"""Custom exceptions for authentication."""


class AuthenticationError(Exception):
    """Base class for failures that must terminate the request with 403."""

    pass


class UnauthenticatedError(AuthenticationError):
    """Raised when the request carries no usable session."""

    def __init__(self, message: str = "Authentication via OAuth required") -> None:
        super().__init__(message)


class InvalidSessionError(AuthenticationError):
    """Raised when the session names a user that no longer exists."""

    def __init__(self, message: str = "Invalid user; re-authenticate with OAuth") -> None:
        super().__init__(message)


class OAuthCallbackError(AuthenticationError):
    """Raised when an OAuth callback cannot be completed (bad state, provider failure)."""

    pass
