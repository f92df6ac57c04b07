"""API handlers for squad endpoints."""

import logging
import re
from collections.abc import Iterable
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from src.xwing.auth.dependencies import get_context, get_current_user
from src.xwing.context import AppContext
from src.xwing.features.squads.exceptions import InvalidSquadError, PersistenceError, SquadError
from src.xwing.features.squads.queries import FactionListing
from src.xwing.features.squads.schemas import (
    DeleteResponse,
    MutationResponse,
    PingResponse,
    SquadFields,
    SquadListing,
)
from src.xwing.services.database import User
from src.xwing.services.rate_limiter import default_rate_limit, public_rate_limit, write_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["squads"])

_FORM_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_FORM_KEY_PART = re.compile(r"\[([^\[\]]*)\]")


def _split_form_key(key: str) -> list[str]:
    """``a[b][]`` -> ``["a", "b", ""]``; a key that is not bracket-shaped is kept whole."""
    match = _FORM_KEY.match(key)
    if not match:
        return [key]
    head, brackets = match.groups()
    return [head, *_FORM_KEY_PART.findall(brackets)]


def _store_form_value(target: dict[str, Any], path: list[str], value: str) -> None:
    key, rest = path[0], path[1:]
    if not rest:
        if isinstance(target.get(key), (dict, list)):
            raise ValueError(f"Form field {key!r} is both a value and a group")
        target[key] = value
        return

    if rest[0] == "":
        items = target.setdefault(key, [])
        if not isinstance(items, list):
            raise ValueError(f"Form field {key!r} is both a list and a value or mapping")
        if len(rest) == 1:
            items.append(value)
            return
        # key[][child]=v builds a list of mappings; a repeated child starts a new one
        if not items or not isinstance(items[-1], dict) or rest[1] in items[-1]:
            items.append({})
        _store_form_value(items[-1], rest[1:], value)
        return

    nested = target.setdefault(key, {})
    if not isinstance(nested, dict):
        raise ValueError(f"Form field {key!r} is both a mapping and a value or list")
    _store_form_value(nested, rest, value)


def fold_form_fields(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """
    Turn flat form fields into a nested payload.

    ``outer[inner]=v`` descends into a mapping and ``outer[]=v`` appends to a
    list, to any depth. Uploaded files are ignored.

    Example:
        >>> fold_form_fields([
        ...     ("name", "Aces"),
        ...     ("additional_data[points]", "100"),
        ...     ("additional_data[obstacles][]", "core-asteroid-0"),
        ... ])
        {'name': 'Aces', 'additional_data': {'points': '100', 'obstacles': ['core-asteroid-0']}}

    Raises:
        ValueError: If the same field is used as both a value and a group
    """
    payload: dict[str, Any] = {}
    for key, value in items:
        if not isinstance(value, str):
            continue
        _store_form_value(payload, _split_form_key(key), value)
    return payload


async def read_squad_fields(request: Request) -> SquadFields:
    """
    Read squad fields from a JSON or form-encoded body.

    Raises:
        InvalidSquadError: If the body cannot be read as squad fields
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as e:
            raise InvalidSquadError("Request body is not valid JSON") from e
        if not isinstance(payload, dict):
            raise InvalidSquadError("Request body must be a JSON object")
    else:
        form = await request.form()
        try:
            payload = fold_form_fields(form.multi_items())
        except ValueError as e:
            raise InvalidSquadError("Form fields are malformed") from e

    try:
        return SquadFields.model_validate(payload)
    except ValidationError as e:
        raise InvalidSquadError() from e


@router.get("/all", response_model=dict[str, list[SquadListing]])
@public_rate_limit
async def list_all_squads(
    request: Request,
    context: AppContext = Depends(get_context),
) -> FactionListing:
    """
    Public listing of every user's squads, grouped by faction.

    Example Response:
        {
            "Rebel Alliance": [
                {"name": "Rogue Squadron", "serialized": "abc123", "additional_data": null}
            ],
            "Galactic Empire": []
        }
    """
    try:
        return context.queries.list_all()
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=e.message) from e


@router.get("/squads/list", response_model=dict[str, list[SquadListing]])
@default_rate_limit
async def list_my_squads(
    request: Request,
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_context),
) -> FactionListing:
    """The caller's own squads, grouped by faction."""
    try:
        return context.queries.list_for_owner(current_user.id)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=e.message) from e


@router.put("/squads/new", response_model=MutationResponse)
@write_rate_limit
async def create_squad(
    request: Request,
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_context),
) -> MutationResponse:
    """
    Create a squad owned by the caller.

    Business failures are reported in the envelope with HTTP 200.

    Example Response:
        {"id": "squad_5b0f...", "success": true, "error": null}
    """
    try:
        fields = await read_squad_fields(request)
        squad_id = context.squads.create(
            current_user.id,
            fields.name,
            fields.faction,
            fields.serialized,
            fields.additional_data,
        )
    except SquadError as e:
        logger.info(f"Create rejected for {current_user.id}: {e.message}")
        return MutationResponse(id=None, success=False, error=e.message)

    context.analytics.capture(
        distinct_id=current_user.id,
        event="squad_created",
        properties={"squad_id": squad_id, "faction": fields.faction.strip()},
    )
    return MutationResponse(id=squad_id, success=True, error=None)


def _delete(context: AppContext, squad_id: str, current_user: User) -> DeleteResponse:
    try:
        context.squads.delete(squad_id, current_user.id)
    except SquadError as e:
        logger.info(f"Delete of {squad_id} rejected for {current_user.id}: {e.message}")
        return DeleteResponse(success=False, error=e.message)

    context.analytics.capture(
        distinct_id=current_user.id,
        event="squad_deleted",
        properties={"squad_id": squad_id},
    )
    return DeleteResponse(success=True, error=None)


@router.post("/squads/{squad_id}", response_model=None)
@write_rate_limit
async def update_squad(
    request: Request,
    squad_id: str,
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_context),
) -> MutationResponse | DeleteResponse:
    """
    Replace a squad's name, serialized data, faction and additional data.

    A form post with ``_method=DELETE`` deletes the squad instead.
    """
    try:
        fields = await read_squad_fields(request)
        if (fields.method_override or "").upper() == "DELETE":
            return _delete(context, squad_id, current_user)
        context.squads.update(squad_id, current_user.id, fields)
    except SquadError as e:
        logger.info(f"Update of {squad_id} rejected for {current_user.id}: {e.message}")
        return MutationResponse(id=None, success=False, error=e.message)

    context.analytics.capture(
        distinct_id=current_user.id,
        event="squad_updated",
        properties={"squad_id": squad_id},
    )
    return MutationResponse(id=squad_id.strip(), success=True, error=None)


@router.delete("/squads/{squad_id}", response_model=DeleteResponse)
@write_rate_limit
async def delete_squad(
    request: Request,
    squad_id: str,
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_context),
) -> DeleteResponse:
    """Delete one of the caller's squads."""
    return _delete(context, squad_id, current_user)


@router.get("/ping", response_model=PingResponse)
@default_rate_limit
async def ping(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> PingResponse:
    """Check that the session is still valid."""
    return PingResponse(success=True)
