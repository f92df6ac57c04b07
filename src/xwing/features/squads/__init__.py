"""Squad storage and faction listings."""

from src.xwing.features.squads.queries import QueryIndex
from src.xwing.features.squads.repository import SquadRepository
from src.xwing.features.squads.schemas import SquadFields, SquadListing

__all__ = [
    "QueryIndex",
    "SquadRepository",
    "SquadFields",
    "SquadListing",
]
