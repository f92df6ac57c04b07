"""Lifecycle of squad documents with ownership enforcement."""

import logging
import uuid
from collections.abc import Callable
from typing import Any

from src.xwing.features.squads.exceptions import (
    DuplicateNameError,
    InvalidSquadError,
    NotOwnerError,
    PersistenceError,
    SquadNotFoundError,
)
from src.xwing.features.squads.queries import SQUADS_TABLE, QueryIndex
from src.xwing.features.squads.schemas import SquadFields
from src.xwing.services.database import (
    DatabaseError,
    Faction,
    Squad,
    SupabaseQueryBuilder,
    UniqueViolationError,
)

logger = logging.getLogger(__name__)

FETCH_FAILED = "Something bad happened fetching that squad, try again later"
SAVE_FAILED = "Something bad happened saving that squad, try again later"
DELETE_FAILED = "Something bad happened deleting that squad, try again later"


def new_squad_id() -> str:
    return f"squad_{uuid.uuid4().hex}"


def _mapping_or_none(value: Any) -> dict[str, Any] | None:
    return dict(value) if isinstance(value, dict) else None


def _validate(
    name: str | None, faction: str | None, serialized: str | None
) -> tuple[str, Faction, str]:
    """Trim required fields and check the faction; raises InvalidSquadError."""
    if not isinstance(name, str) or not isinstance(faction, str) or not isinstance(serialized, str):
        raise InvalidSquadError()

    name, faction, serialized = name.strip(), faction.strip(), serialized.strip()
    if not name or not faction or not serialized:
        raise InvalidSquadError()

    try:
        return name, Faction(faction), serialized
    except ValueError:
        raise InvalidSquadError(f"Unknown faction: {faction}") from None


class SquadRepository:
    """
    Create, fetch, update and delete squads.

    Uniqueness of (owner, name) is checked up front through the query index
    for a friendly error, but the unique constraint on the ``squads`` table
    is what actually rejects a duplicate, including one created concurrently.
    """

    def __init__(
        self,
        db: SupabaseQueryBuilder,
        queries: QueryIndex,
        id_factory: Callable[[], str] = new_squad_id,
    ):
        self.db = db
        self.queries = queries
        self.id_factory = id_factory

    def create(
        self,
        owner_id: str,
        name: str | None,
        faction: str | None,
        serialized: str | None,
        additional_data: Any = None,
    ) -> str:
        """
        Create a squad owned by ``owner_id``.

        Args:
            owner_id: Document ID of the owning user
            name: Squad name; trimmed, must be non-empty
            faction: Faction name; must be a known faction
            serialized: Opaque payload; trimmed, must be non-empty
            additional_data: Optional mapping; anything else is stored as absent

        Returns:
            The new squad's ID

        Raises:
            InvalidSquadError: If a required field is missing or the faction is unknown
            DuplicateNameError: If the owner already has a squad with this name
            PersistenceError: If the store fails
        """
        name, faction_value, serialized = _validate(name, faction, serialized)

        if self.queries.exists_by_owner_and_name(owner_id, name):
            raise DuplicateNameError()

        squad = Squad(
            id=self.id_factory(),
            user_id=owner_id,
            name=name,
            faction=faction_value,
            serialized=serialized,
            additional_data=_mapping_or_none(additional_data),
        )

        try:
            self.db.insert_record(SQUADS_TABLE, squad.to_document())
        except UniqueViolationError as e:
            logger.info(f"Concurrent duplicate create rejected for {owner_id}: {name!r}")
            raise DuplicateNameError() from e
        except DatabaseError as e:
            raise PersistenceError(SAVE_FAILED) from e

        logger.info(f"Created {squad}", extra={"user_id": owner_id, "squad_id": squad.id})
        return squad.id

    def _fetch_document(self, squad_id: str) -> dict[str, Any]:
        try:
            doc = self.db.get_by_id(SQUADS_TABLE, squad_id.strip())
        except DatabaseError as e:
            raise PersistenceError(FETCH_FAILED) from e

        if doc is None:
            raise SquadNotFoundError()
        return doc

    def _owned_document(self, squad_id: str, caller_id: str) -> dict[str, Any]:
        doc = self._fetch_document(squad_id)
        if doc.get("user_id") != caller_id:
            logger.warning(f"{caller_id} attempted to modify {doc.get('id')} owned by {doc.get('user_id')}")
            raise NotOwnerError()
        return doc

    @staticmethod
    def _to_squad(doc: dict[str, Any]) -> Squad:
        try:
            return Squad.from_document(doc)
        except (KeyError, ValueError) as e:
            logger.error(f"Stored squad {doc.get('id')} is malformed: {e}")
            raise PersistenceError(FETCH_FAILED) from e

    def get(self, squad_id: str) -> Squad:
        """
        Fetch a squad by ID.

        Raises:
            SquadNotFoundError: If no squad has this ID
            PersistenceError: If the store fails or holds a malformed squad
        """
        return self._to_squad(self._fetch_document(squad_id))

    def load_owned(self, squad_id: str, caller_id: str) -> Squad:
        """
        Fetch a squad and check that ``caller_id`` owns it.

        Raises:
            SquadNotFoundError: If no squad has this ID
            NotOwnerError: If the squad belongs to someone else
            PersistenceError: If the store fails or holds a malformed squad
        """
        return self._to_squad(self._owned_document(squad_id, caller_id))

    def update(self, squad_id: str, caller_id: str, fields: SquadFields) -> None:
        """
        Replace name, serialized, faction and additional_data in a single write.

        Ownership is checked on the stored row itself, so a squad whose stored
        faction is no longer recognised can still be repaired by its owner.

        Raises:
            SquadNotFoundError: If no squad has this ID
            NotOwnerError: If the caller does not own the squad
            InvalidSquadError: If a required field is missing or the faction is unknown
            DuplicateNameError: If the new name collides with another of the owner's squads
            PersistenceError: If the store fails
        """
        doc = self._owned_document(squad_id, caller_id)
        name, faction_value, serialized = _validate(fields.name, fields.faction, fields.serialized)

        changes = {
            "name": name,
            "faction": faction_value.value,
            "serialized": serialized,
            "additional_data": _mapping_or_none(fields.additional_data),
        }

        try:
            updated = self.db.update_record(SQUADS_TABLE, doc["id"], changes)
        except UniqueViolationError as e:
            raise DuplicateNameError() from e
        except DatabaseError as e:
            raise PersistenceError(SAVE_FAILED) from e

        if updated is None:
            # Deleted between the ownership check and the write
            raise SquadNotFoundError()

        logger.info(f"Updated {doc['id']}", extra={"user_id": caller_id, "squad_id": doc["id"]})

    def delete(self, squad_id: str, caller_id: str) -> None:
        """
        Permanently remove a squad, including one stored with an unrecognised faction.

        Raises:
            SquadNotFoundError: If no squad has this ID
            NotOwnerError: If the caller does not own the squad
            PersistenceError: If the store fails
        """
        doc = self._owned_document(squad_id, caller_id)

        try:
            deleted = self.db.delete_record(SQUADS_TABLE, doc["id"])
        except DatabaseError as e:
            raise PersistenceError(DELETE_FAILED) from e

        if not deleted:
            raise SquadNotFoundError()

        logger.info(f"Deleted {doc['id']}", extra={"user_id": caller_id, "squad_id": doc["id"]})
