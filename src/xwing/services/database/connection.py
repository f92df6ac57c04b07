"""Supabase database connection management."""

from supabase import Client, create_client

from src.xwing.config import Settings


def create_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client with the service role key.

    The service role bypasses Row-Level Security; ownership is enforced by
    the squad repository instead. Called once at startup when the
    application context is built.

    Args:
        settings: Application settings

    Returns:
        Configured Supabase client
    """
    return create_client(settings.supabase_url, settings.supabase_service_role_key)
