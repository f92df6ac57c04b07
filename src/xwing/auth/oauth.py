"""OAuth 2.0 provider configuration and code exchange."""

import logging
from dataclasses import dataclass, field
from typing import Any

from authlib.integrations.httpx_client import AsyncOAuth2Client

from src.xwing.auth.exceptions import OAuthCallbackError
from src.xwing.auth.models import OAuthIdentity
from src.xwing.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthProviderConfig:
    """Endpoints and credentials for one OAuth provider."""

    name: str
    client_id: str
    client_secret: str
    authorization_endpoint: str
    token_endpoint: str
    userinfo_endpoint: str
    scope: str
    uid_field: str = "id"
    authorization_params: dict[str, str] = field(default_factory=dict)


def _google(settings: Settings) -> OAuthProviderConfig:
    return OAuthProviderConfig(
        name="google_oauth2",
        client_id=settings.google_key or "",
        client_secret=settings.google_secret or "",
        authorization_endpoint="https://accounts.google.com/o/oauth2/v2/auth",
        token_endpoint="https://oauth2.googleapis.com/token",
        userinfo_endpoint="https://openidconnect.googleapis.com/v1/userinfo",
        scope="openid email profile",
        uid_field="sub",
        authorization_params={"access_type": "online"},
    )


def _facebook(settings: Settings) -> OAuthProviderConfig:
    return OAuthProviderConfig(
        name="facebook",
        client_id=settings.facebook_key or "",
        client_secret=settings.facebook_secret or "",
        authorization_endpoint="https://www.facebook.com/v19.0/dialog/oauth",
        token_endpoint="https://graph.facebook.com/v19.0/oauth/access_token",
        userinfo_endpoint="https://graph.facebook.com/me?fields=id,name,email",
        scope="email",
    )


class OAuthRegistry:
    """
    The OAuth providers this deployment accepts logins from.

    A provider is registered only when both its key and secret are configured.
    The protocol itself (authorization URL, code exchange, bearer requests) is
    delegated to authlib.
    """

    def __init__(self, providers: list[OAuthProviderConfig], redirect_base_url: str):
        self._providers = {p.name: p for p in providers}
        self.redirect_base_url = redirect_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "OAuthRegistry":
        candidates = [_google(settings), _facebook(settings)]
        providers = [p for p in candidates if p.client_id and p.client_secret]
        return cls(providers, settings.oauth_redirect_base_url)

    def names(self) -> list[str]:
        return list(self._providers)

    def get(self, name: str) -> OAuthProviderConfig | None:
        return self._providers.get(name)

    def redirect_uri(self, name: str) -> str:
        return f"{self.redirect_base_url}/auth/{name}/callback"

    def _client(self, provider: OAuthProviderConfig) -> AsyncOAuth2Client:
        return AsyncOAuth2Client(
            client_id=provider.client_id,
            client_secret=provider.client_secret,
            scope=provider.scope,
            redirect_uri=self.redirect_uri(provider.name),
            token_endpoint_auth_method="client_secret_post",
        )

    def authorization_url(self, provider: OAuthProviderConfig, state: str) -> str:
        """Build the provider URL the browser is redirected to."""
        client = self._client(provider)
        url, _ = client.create_authorization_url(
            provider.authorization_endpoint, state=state, **provider.authorization_params
        )
        return url

    async def fetch_identity(self, provider: OAuthProviderConfig, code: str) -> OAuthIdentity:
        """
        Exchange an authorization code and fetch the caller's profile.

        Raises:
            OAuthCallbackError: If the exchange or the userinfo request fails
        """
        try:
            async with self._client(provider) as client:
                await client.fetch_token(provider.token_endpoint, code=code)
                response = await client.get(provider.userinfo_endpoint)
                response.raise_for_status()
                profile: dict[str, Any] = response.json()
        except Exception as e:
            logger.warning(
                f"OAuth exchange with {provider.name} failed: {e}",
                extra={"provider": provider.name, "error": str(e)},
            )
            raise OAuthCallbackError(f"OAuth exchange with {provider.name} failed") from e

        uid = profile.get(provider.uid_field)
        if not uid:
            raise OAuthCallbackError(f"{provider.name} profile has no {provider.uid_field!r}")

        return OAuthIdentity(provider=provider.name, uid=str(uid), profile=profile)
