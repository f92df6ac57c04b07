"""Signed session and OAuth state tokens carried in cookies."""

import logging
import secrets
import time

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

SESSION_TOKEN_TYPE = "session"
STATE_TOKEN_TYPE = "oauth_state"


class SessionCodec:
    """
    Issues and reads HS256-signed tokens for the session cookie.

    The session token carries only the user document ID in ``sub``. The same
    secret also signs the short-lived OAuth state token, so the login flow
    keeps no server-side state between the redirect and the callback.

    Example:
        >>> codec = SessionCodec(secret="s3cret", max_age_seconds=3600)
        >>> token = codec.issue("user-google_oauth2-123")
        >>> codec.read(token)
        'user-google_oauth2-123'
    """

    def __init__(
        self,
        secret: str,
        max_age_seconds: int,
        state_max_age_seconds: int = 600,
        algorithm: str = "HS256",
    ):
        self.secret = secret
        self.max_age_seconds = max_age_seconds
        self.state_max_age_seconds = state_max_age_seconds
        self.algorithm = algorithm

    def _encode(self, claims: dict, max_age: int) -> str:
        now = int(time.time())
        return jwt.encode(
            {**claims, "iat": now, "exp": now + max_age},
            self.secret,
            algorithm=self.algorithm,
        )

    def _decode(self, token: str, token_type: str) -> dict | None:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Rejected {token_type} token: {e}", extra={"error": str(e)})
            return None
        if claims.get("typ") != token_type:
            logger.warning(f"Rejected token of type {claims.get('typ')!r}, expected {token_type!r}")
            return None
        return claims

    def issue(self, user_id: str) -> str:
        """Issue a session token for the given user document ID."""
        return self._encode({"sub": user_id, "typ": SESSION_TOKEN_TYPE}, self.max_age_seconds)

    def read(self, token: str) -> str | None:
        """
        Return the user ID embedded in a session token.

        Returns None for a forged, expired, or malformed token, or one
        without a ``sub`` claim.
        """
        claims = self._decode(token, SESSION_TOKEN_TYPE)
        if claims is None:
            return None
        return claims.get("sub") or None

    def issue_state(self, provider: str) -> tuple[str, str]:
        """
        Create an OAuth CSRF state value and the signed cookie token that vouches for it.

        Returns:
            Tuple of (state, state_token)
        """
        state = secrets.token_urlsafe(24)
        token = self._encode(
            {"state": state, "provider": provider, "typ": STATE_TOKEN_TYPE},
            self.state_max_age_seconds,
        )
        return state, token

    def verify_state(self, token: str | None, provider: str, state: str | None) -> bool:
        """Check that the callback's state matches the one issued for this provider."""
        if not token or not state:
            return False
        claims = self._decode(token, STATE_TOKEN_TYPE)
        if claims is None:
            return False
        return claims.get("provider") == provider and secrets.compare_digest(
            str(claims.get("state", "")), state
        )
