"""FastAPI dependencies for session authentication."""

import logging

from fastapi import Depends, HTTPException, Request, status

from src.xwing.auth.exceptions import AuthenticationError
from src.xwing.context import AppContext
from src.xwing.services.database import DatabaseError, User

logger = logging.getLogger(__name__)


def get_context(request: Request) -> AppContext:
    """
    Return the application context built at startup.

    Raises:
        RuntimeError: If the application lifespan has not run
    """
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError(
            "Application context not initialized. "
            "Ensure the application lifespan builds it before serving requests."
        )
    return context


async def get_current_user(
    request: Request,
    context: AppContext = Depends(get_context),
) -> User:
    """
    Resolve the session cookie to the calling user.

    Stores the user on ``request.state.user`` so rate limiting can key on it.

    Args:
        request: Incoming request carrying the session cookie
        context: Application context

    Returns:
        The authenticated user

    Raises:
        HTTPException: 403 if there is no valid session, 503 if the identity store is down

    Example:
        @router.get("/squads/list")
        async def list_mine(current_user: User = Depends(get_current_user)):
            ...
    """
    token = request.cookies.get(context.settings.session_cookie_name)

    try:
        user = context.auth_gate.resolve(token)
    except AuthenticationError as e:
        logger.warning(
            f"Auth failed: {e}",
            extra={"error_type": type(e).__name__, "path": request.url.path},
        )
        context.analytics.capture(
            distinct_id="anonymous",
            event="authentication_failed",
            properties={"error": type(e).__name__},
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except DatabaseError as e:
        logger.error(f"Session lookup failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to verify session, try again later",
        ) from e

    request.state.user = user
    return user
