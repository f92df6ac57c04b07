"""Fixtures for squad feature tests."""

import pytest

from src.xwing.context import AppContext
from src.xwing.features.squads.queries import QueryIndex
from src.xwing.features.squads.repository import SquadRepository


@pytest.fixture
def squads(context: AppContext) -> SquadRepository:
    return context.squads


@pytest.fixture
def queries(context: AppContext) -> QueryIndex:
    return context.queries
