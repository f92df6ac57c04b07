"""Authentication module for cookie sessions backed by OAuth logins."""

from src.xwing.auth.exceptions import (
    AuthenticationError,
    InvalidSessionError,
    OAuthCallbackError,
    UnauthenticatedError,
)
from src.xwing.auth.gate import AuthGate
from src.xwing.auth.identity import IdentityStore
from src.xwing.auth.models import OAuthIdentity
from src.xwing.auth.oauth import OAuthProviderConfig, OAuthRegistry
from src.xwing.auth.session import SessionCodec

__all__ = [
    "AuthenticationError",
    "InvalidSessionError",
    "OAuthCallbackError",
    "UnauthenticatedError",
    "AuthGate",
    "IdentityStore",
    "OAuthIdentity",
    "OAuthProviderConfig",
    "OAuthRegistry",
    "SessionCodec",
]
