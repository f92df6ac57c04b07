"""Pydantic models for database entities."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel


class Faction(str, Enum):
    """Top-level groupings squads are listed under."""

    REBEL_ALLIANCE = "Rebel Alliance"
    GALACTIC_EMPIRE = "Galactic Empire"


def user_id_for(provider: str, uid: str) -> str:
    """Deterministic user document ID; the provider keeps IDs collision-free across providers."""
    return f"user-{provider}-{uid}"


class User(BaseModel):
    """
    Identity record created on the first OAuth callback for a (provider, uid) pair.

    Attributes:
        id: ``user-<provider>-<uid>``
        type: Document type tag, always ``"user"``
        provider: OAuth provider name (e.g. ``google_oauth2``)
        uid: Provider-side user ID
        profile: Provider-supplied profile fields, stored verbatim
    """

    id: str
    type: Literal["user"] = "user"
    provider: str
    uid: str
    profile: dict[str, Any] = {}

    @classmethod
    def new(cls, provider: str, uid: str, profile: dict[str, Any] | None = None) -> "User":
        return cls(id=user_id_for(provider, uid), provider=provider, uid=uid, profile=profile or {})

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "provider": self.provider,
            "uid": self.uid,
            "profile": self.profile,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "User":
        return cls(
            id=doc["id"],
            provider=doc["provider"],
            uid=str(doc["uid"]),
            profile=doc.get("profile") or {},
        )

    def __str__(self) -> str:
        return f"<User id={self.id}>"


class Squad(BaseModel):
    """
    A user's named, faction-tagged squad.

    ``serialized`` is opaque to this service. ``additional_data`` is None when
    absent, which is distinct from an empty mapping.
    """

    id: str
    type: Literal["squad"] = "squad"
    user_id: str
    name: str
    faction: Faction
    serialized: str | None = None
    additional_data: dict[str, Any] | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "user_id": self.user_id,
            "name": self.name,
            "faction": self.faction.value,
            "serialized": self.serialized,
            "additional_data": self.additional_data,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Squad":
        additional_data = doc.get("additional_data")
        return cls(
            id=doc["id"],
            user_id=doc["user_id"],
            name=doc["name"],
            faction=Faction(doc["faction"]),
            serialized=doc.get("serialized"),
            additional_data=additional_data if isinstance(additional_data, dict) else None,
        )

    def __str__(self) -> str:
        return f"<Squad id={self.id}, faction={self.faction.value}, name={self.name}>"
