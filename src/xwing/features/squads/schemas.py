"""Request and response models for squad endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SquadFields(BaseModel):
    """Mutable squad fields as submitted by the client, before validation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str | None = None
    faction: str | None = None
    serialized: str | None = None
    additional_data: Any = None
    # Form posts may tunnel DELETE through POST
    method_override: str | None = Field(default=None, alias="_method")


class SquadListing(BaseModel):
    """One entry of a faction listing. Missing values serialize as null."""

    name: str
    serialized: str | None
    additional_data: dict[str, Any] | None


class MutationResponse(BaseModel):
    """Envelope for create and update."""

    id: str | None
    success: bool
    error: str | None


class DeleteResponse(BaseModel):
    """Envelope for delete."""

    success: bool
    error: str | None


class PingResponse(BaseModel):
    """Session liveness check."""

    success: bool
