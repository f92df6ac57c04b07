"""Application context: the components every request works with, built once at startup."""

from collections.abc import Callable
from dataclasses import dataclass

from supabase import Client

from src.xwing.auth.gate import AuthGate
from src.xwing.auth.identity import IdentityStore
from src.xwing.auth.oauth import OAuthRegistry
from src.xwing.auth.session import SessionCodec
from src.xwing.config import Settings
from src.xwing.features.squads.queries import QueryIndex
from src.xwing.features.squads.repository import SquadRepository, new_squad_id
from src.xwing.services import PostHogService
from src.xwing.services.database import SupabaseQueryBuilder, create_supabase_client


@dataclass
class AppContext:
    """Holds the store handle, token codec and the components built on them."""

    settings: Settings
    db: SupabaseQueryBuilder
    session_codec: SessionCodec
    identity_store: IdentityStore
    auth_gate: AuthGate
    queries: QueryIndex
    squads: SquadRepository
    oauth: OAuthRegistry
    analytics: PostHogService


def build_context(
    settings: Settings,
    client: Client | None = None,
    id_factory: Callable[[], str] = new_squad_id,
) -> AppContext:
    """
    Wire up the application components.

    Args:
        settings: Application settings
        client: Supabase client (created from settings if None)
        id_factory: Generator for new squad IDs

    Returns:
        Fully wired AppContext
    """
    db = SupabaseQueryBuilder(client or create_supabase_client(settings))
    session_codec = SessionCodec(
        secret=settings.session_secret,
        max_age_seconds=settings.session_max_age_seconds,
        state_max_age_seconds=settings.oauth_state_max_age_seconds,
    )
    identity_store = IdentityStore(db)
    queries = QueryIndex(db)

    return AppContext(
        settings=settings,
        db=db,
        session_codec=session_codec,
        identity_store=identity_store,
        auth_gate=AuthGate(identity_store, session_codec),
        queries=queries,
        squads=SquadRepository(db, queries, id_factory=id_factory),
        oauth=OAuthRegistry.from_settings(settings),
        analytics=PostHogService(settings.posthog_api_key, settings.posthog_host),
    )
