"""Data models for authentication."""

from typing import Any

from pydantic import BaseModel


class OAuthIdentity(BaseModel):
    """
    Identity returned by an OAuth provider after a successful callback.

    Attributes:
        provider: Provider name as configured (e.g. ``google_oauth2``)
        uid: Provider-side user ID
        profile: Raw userinfo payload from the provider

    Example:
        >>> identity = OAuthIdentity(
        ...     provider="google_oauth2",
        ...     uid="1234567890",
        ...     profile={"name": "Wedge Antilles", "email": "wedge@example.com"},
        ... )
    """

    provider: str
    uid: str
    profile: dict[str, Any] = {}
