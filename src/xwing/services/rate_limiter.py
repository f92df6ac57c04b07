"""Rate limiting service for API endpoints."""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.xwing.config import settings
from src.xwing.services.database.models import User

logger = logging.getLogger(__name__)


def get_user_id_or_ip(request: Request) -> str:
    """
    Extract the session user ID or fall back to IP address.

    This function is used as the key_func for rate limiting:
    - Authenticated requests: Rate limited per user ID
    - Unauthenticated requests: Rate limited per IP address

    Args:
        request: FastAPI request object

    Returns:
        User key or IP key string
    """
    # Set by the session dependency once the caller is resolved
    user: User | None = getattr(request.state, "user", None)

    if user and user.id:
        return f"user:{user.id}"

    return f"ip:{get_remote_address(request)}"


# In-memory storage for single-instance deployment
limiter = Limiter(
    key_func=get_user_id_or_ip,
    default_limits=[],
    storage_uri="memory://",
    enabled=settings.rate_limit_enabled,
)


class RateLimitTiers:
    """
    Rate limit tiers for different endpoint categories.

    Session-scoped endpoints are limited per user; public endpoints per IP.
    """

    # Listings and session checks
    DEFAULT = ["100 per minute", "1000 per hour"]

    # Squad create / update / delete
    WRITE = ["30 per minute", "200 per hour"]

    # Public aggregate listing and OAuth entry points
    PUBLIC = ["60 per minute", "600 per hour"]


# Note: decorated endpoints need a 'request: Request' parameter (slowapi requirement)
default_rate_limit = limiter.limit(";".join(RateLimitTiers.DEFAULT))
write_rate_limit = limiter.limit(";".join(RateLimitTiers.WRITE))
public_rate_limit = limiter.limit(";".join(RateLimitTiers.PUBLIC))
