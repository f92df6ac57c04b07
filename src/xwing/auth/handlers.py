"""API handlers for OAuth login, logout and provider discovery."""

import html
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from src.xwing.auth.dependencies import get_context
from src.xwing.auth.exceptions import OAuthCallbackError
from src.xwing.context import AppContext
from src.xwing.services.database import DatabaseError
from src.xwing.services.rate_limiter import public_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

STATE_COOKIE_NAME = "xwing_oauth_state"

AUTH_SUCCESS_PAGE = """<!DOCTYPE html>
<html>
  <head><title>Logged in</title></head>
  <body>
    <p>Logged in as {name}. You may close this window.</p>
    <script>
      if (window.opener) {{ window.opener.postMessage({{ command: "xwing:authenticated" }}, "*"); }}
      window.close();
    </script>
  </body>
</html>
"""


@router.get("/methods")
async def list_methods(context: AppContext = Depends(get_context)) -> dict[str, list[str]]:
    """List the OAuth providers users can log in with."""
    return {"methods": context.oauth.names()}


@router.get("/auth/failure")
async def auth_failure() -> None:
    """Landing route for failed OAuth callbacks."""
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Authentication failed")


@router.get("/auth/logout")
async def logout(context: AppContext = Depends(get_context)) -> PlainTextResponse:
    """Drop the session cookie."""
    response = PlainTextResponse("Logged out; reauthenticate with OAuth")
    response.delete_cookie(context.settings.session_cookie_name)
    return response


@router.get("/auth/{provider}")
@public_rate_limit
async def start_login(
    request: Request,
    provider: str,
    context: AppContext = Depends(get_context),
) -> RedirectResponse:
    """
    Start an OAuth login by redirecting to the provider.

    The CSRF state is mirrored into a short-lived signed cookie so the
    callback can be checked without server-side storage.

    Raises:
        HTTPException: 404 if the provider is not configured
    """
    config = context.oauth.get(provider)
    if config is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown provider")

    state, state_token = context.session_codec.issue_state(provider)
    response = RedirectResponse(context.oauth.authorization_url(config, state), status_code=302)
    response.set_cookie(
        key=STATE_COOKIE_NAME,
        value=state_token,
        max_age=context.settings.oauth_state_max_age_seconds,
        httponly=True,
        secure=context.settings.session_cookie_secure,
        samesite="lax",
    )
    return response


@router.api_route("/auth/{provider}/callback", methods=["GET", "POST"])
@public_rate_limit
async def oauth_callback(
    request: Request,
    provider: str,
    context: AppContext = Depends(get_context),
):
    """
    Complete an OAuth login.

    Finds or creates the user for (provider, uid), stores the session cookie
    and renders a page that tells the opener window login succeeded.
    Any failure redirects to ``/auth/failure``.
    """
    config = context.oauth.get(provider)
    if config is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown provider")

    params = dict(request.query_params)
    if request.method == "POST":
        form = await request.form()
        params.update({k: v for k, v in form.items() if isinstance(v, str)})

    try:
        if not context.session_codec.verify_state(
            request.cookies.get(STATE_COOKIE_NAME), provider, params.get("state")
        ):
            raise OAuthCallbackError("Invalid or expired OAuth state")
        if not params.get("code"):
            raise OAuthCallbackError("Missing authorization code")

        identity = await context.oauth.fetch_identity(config, params["code"])
        user = context.identity_store.get_or_create(identity.provider, identity.uid, identity.profile)
    except (OAuthCallbackError, DatabaseError) as e:
        logger.warning(f"OAuth callback for {provider} failed: {e}")
        context.analytics.capture(
            distinct_id="anonymous",
            event="authentication_failed",
            properties={"provider": provider, "error": type(e).__name__},
        )
        failure = RedirectResponse("/auth/failure", status_code=302)
        failure.delete_cookie(STATE_COOKIE_NAME)
        return failure

    logger.info(f"User authenticated: {user.id}")
    context.analytics.set_person_properties(
        user.id, {"provider": user.provider, "name": user.profile.get("name")}
    )
    context.analytics.capture(
        distinct_id=user.id,
        event="user_authenticated",
        properties={"provider": provider},
    )

    display_name = user.profile.get("name") or user.profile.get("email") or user.id
    response = HTMLResponse(AUTH_SUCCESS_PAGE.format(name=html.escape(str(display_name))))
    response.set_cookie(
        key=context.settings.session_cookie_name,
        value=context.session_codec.issue(user.id),
        max_age=context.settings.session_max_age_seconds,
        httponly=True,
        secure=context.settings.session_cookie_secure,
        samesite="lax",
    )
    response.delete_cookie(STATE_COOKIE_NAME)
    return response
