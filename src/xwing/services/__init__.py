"""Shared services module for external integrations."""

from src.xwing.services.analytics.posthog import PostHogService

__all__ = [
    "PostHogService",
]
