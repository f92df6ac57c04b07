"""Read-only listing views over squad documents."""

import logging
from typing import Any

from src.xwing.features.squads.exceptions import PersistenceError
from src.xwing.features.squads.schemas import SquadListing
from src.xwing.services.database import DatabaseError, Faction, SupabaseQueryBuilder

logger = logging.getLogger(__name__)

SQUADS_TABLE = "squads"

# Natural sort key of the (user_id, faction, name) index
SORT_KEY = ["user_id", "faction", "name"]
LISTING_COLUMNS = "user_id, faction, name, serialized, additional_data"

FETCH_FAILED = "Something bad happened fetching squads, try again later"


FactionListing = dict[str, list[SquadListing]]


class QueryIndex:
    """
    Listings grouped by faction and the (owner, name) existence check.

    All three read the same composite index, so the global view and the
    per-owner view never disagree about what exists. Nothing is cached.
    """

    def __init__(self, db: SupabaseQueryBuilder):
        self.db = db

    def list_all(self) -> FactionListing:
        """
        List every owner's squads grouped by faction.

        Within each faction, entries are ordered by owner ID, then name.

        Raises:
            PersistenceError: If the store cannot be queried
        """
        try:
            rows = self.db.list_records(SQUADS_TABLE, columns=LISTING_COLUMNS, order_by=SORT_KEY)
        except DatabaseError as e:
            raise PersistenceError(FETCH_FAILED) from e
        return self._group_by_faction(rows)

    def list_for_owner(self, owner_id: str) -> FactionListing:
        """
        List one owner's squads grouped by faction, ordered by name.

        Raises:
            PersistenceError: If the store cannot be queried
        """
        try:
            rows = self.db.list_records(
                SQUADS_TABLE,
                columns=LISTING_COLUMNS,
                filters={"user_id": owner_id},
                order_by=SORT_KEY,
            )
        except DatabaseError as e:
            raise PersistenceError(FETCH_FAILED) from e
        return self._group_by_faction(rows)

    def exists_by_owner_and_name(self, owner_id: str, name: str) -> bool:
        """
        Whether the owner has a squad with exactly this name.

        Raises:
            PersistenceError: If the store cannot be queried
        """
        try:
            return self.db.exists(SQUADS_TABLE, {"user_id": owner_id, "name": name})
        except DatabaseError as e:
            raise PersistenceError(FETCH_FAILED) from e

    @staticmethod
    def _group_by_faction(rows: list[dict[str, Any]]) -> FactionListing:
        out: FactionListing = {faction.value: [] for faction in Faction}
        for row in rows:
            faction = row.get("faction")
            if faction not in out:
                logger.warning(f"Skipping squad with unknown faction {faction!r}")
                continue
            additional_data = row.get("additional_data")
            out[faction].append(
                SquadListing(
                    name=row["name"],
                    serialized=row.get("serialized"),
                    additional_data=additional_data if isinstance(additional_data, dict) else None,
                )
            )
        return out
