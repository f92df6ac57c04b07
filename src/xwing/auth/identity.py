"""Persistence of user identity records keyed by (provider, external ID)."""

import logging
from typing import Any

from src.xwing.services.database import DatabaseError, SupabaseQueryBuilder, UniqueViolationError, User

logger = logging.getLogger(__name__)

USERS_TABLE = "users"


class IdentityStore:
    """Reads and creates ``users`` documents."""

    def __init__(self, db: SupabaseQueryBuilder):
        self.db = db

    def get(self, user_id: str) -> User | None:
        """
        Fetch a user by document ID.

        Raises:
            DatabaseError: If the store cannot be queried
        """
        doc = self.db.get_by_id(USERS_TABLE, user_id)
        return User.from_document(doc) if doc else None

    def get_or_create(self, provider: str, external_id: str, profile: dict[str, Any]) -> User:
        """
        Return the user for (provider, external_id), creating it on first sight.

        An existing record is returned unchanged. Two concurrent first logins
        for the same key race on the primary key; the loser re-reads and
        returns the winner's record, so only one document ever exists.

        Args:
            provider: OAuth provider name
            external_id: Provider-side user ID
            profile: Provider-supplied profile, stored verbatim on creation

        Returns:
            The persisted user

        Raises:
            DatabaseError: If the store cannot be read or written
        """
        user = User.new(provider, str(external_id), profile)

        existing = self.get(user.id)
        if existing is not None:
            return existing

        try:
            self.db.insert_record(USERS_TABLE, user.to_document())
        except UniqueViolationError:
            logger.info(f"Concurrent first login for {user.id}; using the stored record")
            existing = self.get(user.id)
            if existing is None:
                raise DatabaseError(f"User {user.id} rejected as duplicate but not found")
            return existing

        logger.info(f"Created user {user.id}", extra={"provider": provider})
        return user
