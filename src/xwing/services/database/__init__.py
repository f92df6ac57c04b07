"""Database connection, models and query helpers."""

from src.xwing.services.database.connection import create_supabase_client
from src.xwing.services.database.exceptions import DatabaseError, UniqueViolationError
from src.xwing.services.database.models import Faction, Squad, User
from src.xwing.services.database.utils import SupabaseQueryBuilder

__all__ = [
    "create_supabase_client",
    "DatabaseError",
    "UniqueViolationError",
    "Faction",
    "Squad",
    "User",
    "SupabaseQueryBuilder",
]
