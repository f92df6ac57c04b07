"""PostHog analytics service for event tracking."""

import logging

from posthog import Posthog

logger = logging.getLogger(__name__)


class PostHogService:
    """
    Product analytics for logins and squad changes.

    Without an API key every call is a no-op, so development and tests never
    reach PostHog.
    """

    def __init__(self, api_key: str | None = None, host: str = "https://app.posthog.com") -> None:
        self._client = Posthog(api_key, host=host) if api_key else None

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def capture(self, distinct_id: str, event: str, properties: dict | None = None) -> None:
        """
        Track an event.

        Args:
            distinct_id: User document ID, or "anonymous" before login
            event: Event name (e.g., "squad_created", "authentication_failed")
            properties: Optional event properties

        Example:
            >>> service.capture(
            ...     "user-google_oauth2-123",
            ...     "squad_created",
            ...     {"squad_id": "squad_abc", "faction": "Rebel Alliance"}
            ... )
        """
        if self._client is None:
            return

        self._client.capture(distinct_id=distinct_id, event=event, properties=properties or {})

    def set_person_properties(self, distinct_id: str, properties: dict) -> None:
        """Attach profile fields (provider, display name) to a user's PostHog person."""
        if self._client is None:
            return

        self._client.set(distinct_id=distinct_id, properties=properties)

    def shutdown(self) -> None:
        """Flush queued events; called when the application stops."""
        if self._client is None:
            return

        try:
            self._client.shutdown()
        except Exception as e:
            logger.warning(f"PostHog shutdown failed: {e}")
