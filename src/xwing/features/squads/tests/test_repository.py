"""Tests for squad lifecycle and ownership rules."""

import threading
from unittest.mock import patch

import pytest

from src.xwing.features.squads.exceptions import (
    DuplicateNameError,
    InvalidSquadError,
    NotOwnerError,
    PersistenceError,
    SquadNotFoundError,
)
from src.xwing.features.squads.queries import QueryIndex
from src.xwing.features.squads.repository import SquadRepository, new_squad_id
from src.xwing.features.squads.schemas import SquadFields
from src.xwing.services.database import Faction, User


def test_new_squad_ids_are_unique() -> None:
    ids = {new_squad_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(i.startswith("squad_") for i in ids)


class TestCreate:
    def test_create_then_get(self, squads: SquadRepository, alice: User) -> None:
        squad_id = squads.create(alice.id, "  Rogue Squadron ", "Rebel Alliance", " abc123 ", {"points": 100})

        squad = squads.get(squad_id)

        assert squad.id == squad_id
        assert squad.user_id == alice.id
        assert squad.name == "Rogue Squadron"
        assert squad.faction == Faction.REBEL_ALLIANCE
        assert squad.serialized == "abc123"
        assert squad.additional_data == {"points": 100}

    def test_non_mapping_additional_data_is_dropped(self, squads: SquadRepository, alice: User) -> None:
        squad_id = squads.create(alice.id, "Aces", "Galactic Empire", "xyz", "not a mapping")

        assert squads.get(squad_id).additional_data is None

    @pytest.mark.parametrize(
        "name, faction, serialized",
        [
            (None, "Rebel Alliance", "abc"),
            ("   ", "Rebel Alliance", "abc"),
            ("Aces", None, "abc"),
            ("Aces", "Rebel Alliance", ""),
            ("Aces", "Scum and Villainy", "abc"),
        ],
    )
    def test_invalid_fields_are_rejected(
        self, squads: SquadRepository, alice: User, fake_supabase, name, faction, serialized
    ) -> None:
        with pytest.raises(InvalidSquadError):
            squads.create(alice.id, name, faction, serialized)

        assert fake_supabase.rows["squads"] == []

    def test_duplicate_name_for_same_owner(self, squads: SquadRepository, alice: User) -> None:
        squads.create(alice.id, "Aces", "Rebel Alliance", "abc")

        with pytest.raises(DuplicateNameError) as exc_info:
            squads.create(alice.id, "Aces", "Galactic Empire", "def")

        assert exc_info.value.message == "You already have a squad with that name"

    def test_same_name_for_different_owners(self, squads: SquadRepository, alice: User, bob: User) -> None:
        first = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")
        second = squads.create(bob.id, "Aces", "Rebel Alliance", "abc")

        assert first != second

    def test_name_is_reusable_after_delete(self, squads: SquadRepository, alice: User) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")
        squads.delete(squad_id, alice.id)

        assert squads.create(alice.id, "Aces", "Rebel Alliance", "abc")

    def test_concurrent_creates_admit_one(self, squads: SquadRepository, queries: QueryIndex, alice: User) -> None:
        """Both racers pass the existence check; the store constraint admits only one."""
        barrier = threading.Barrier(2)
        results: list[str] = []
        errors: list[Exception] = []

        def racing_exists(owner_id: str, name: str) -> bool:
            barrier.wait(timeout=5)
            return False

        def attempt() -> None:
            try:
                results.append(squads.create(alice.id, "Aces", "Rebel Alliance", "abc"))
            except DuplicateNameError as e:
                errors.append(e)

        with patch.object(queries, "exists_by_owner_and_name", side_effect=racing_exists):
            threads = [threading.Thread(target=attempt) for _ in range(2)]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=5)

        assert len(results) == 1
        assert len(errors) == 1
        assert len(queries.list_for_owner(alice.id)["Rebel Alliance"]) == 1

    def test_store_failure_is_persistence_error(self, squads: SquadRepository, alice: User, fake_supabase) -> None:
        fake_supabase.fail("squads", "insert")

        with pytest.raises(PersistenceError):
            squads.create(alice.id, "Aces", "Rebel Alliance", "abc")


class TestGet:
    def test_missing_squad(self, squads: SquadRepository) -> None:
        with pytest.raises(SquadNotFoundError) as exc_info:
            squads.get("squad_missing")

        assert exc_info.value.message == "That squad doesn't exist"

    def test_id_is_trimmed(self, squads: SquadRepository, alice: User) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")

        assert squads.get(f" {squad_id}\n").id == squad_id

    def test_store_failure(self, squads: SquadRepository, fake_supabase) -> None:
        fake_supabase.fail("squads", "select")

        with pytest.raises(PersistenceError):
            squads.get("squad_any")


class TestUpdate:
    def test_update_replaces_fields_including_faction(self, squads: SquadRepository, alice: User) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc", {"points": 100})

        squads.update(
            squad_id,
            alice.id,
            SquadFields(name="Black Squadron", faction="Galactic Empire", serialized="def"),
        )

        squad = squads.get(squad_id)
        assert squad.name == "Black Squadron"
        assert squad.faction == Faction.GALACTIC_EMPIRE
        assert squad.serialized == "def"
        assert squad.additional_data is None

    def test_update_by_non_owner(self, squads: SquadRepository, alice: User, bob: User) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")

        with pytest.raises(NotOwnerError):
            squads.update(squad_id, bob.id, SquadFields(name="Mine", faction="Rebel Alliance", serialized="x"))

        assert squads.get(squad_id).name == "Aces"

    def test_update_missing_squad(self, squads: SquadRepository, alice: User) -> None:
        with pytest.raises(SquadNotFoundError):
            squads.update("squad_missing", alice.id, SquadFields(name="A", faction="Rebel Alliance", serialized="x"))

    def test_update_with_invalid_fields(self, squads: SquadRepository, alice: User) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")

        with pytest.raises(InvalidSquadError):
            squads.update(squad_id, alice.id, SquadFields(name="", faction="Rebel Alliance", serialized="x"))

    def test_rename_onto_existing_name(self, squads: SquadRepository, alice: User) -> None:
        squads.create(alice.id, "Aces", "Rebel Alliance", "abc")
        other = squads.create(alice.id, "Rogues", "Rebel Alliance", "abc")

        with pytest.raises(DuplicateNameError):
            squads.update(other, alice.id, SquadFields(name="Aces", faction="Rebel Alliance", serialized="x"))

    def test_store_failure(self, squads: SquadRepository, alice: User, fake_supabase) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")
        fake_supabase.fail("squads", "update")

        with pytest.raises(PersistenceError):
            squads.update(squad_id, alice.id, SquadFields(name="A", faction="Rebel Alliance", serialized="x"))


class TestDelete:
    def test_delete_removes_squad(self, squads: SquadRepository, alice: User) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")

        squads.delete(squad_id, alice.id)

        with pytest.raises(SquadNotFoundError):
            squads.get(squad_id)

    def test_delete_by_non_owner(self, squads: SquadRepository, alice: User, bob: User) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")

        with pytest.raises(NotOwnerError) as exc_info:
            squads.delete(squad_id, bob.id)

        assert exc_info.value.message == "You don't own that squad"
        assert squads.get(squad_id).user_id == alice.id

    def test_delete_twice(self, squads: SquadRepository, alice: User) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")
        squads.delete(squad_id, alice.id)

        with pytest.raises(SquadNotFoundError):
            squads.delete(squad_id, alice.id)

    def test_store_failure(self, squads: SquadRepository, alice: User, fake_supabase) -> None:
        squad_id = squads.create(alice.id, "Aces", "Rebel Alliance", "abc")
        fake_supabase.fail("squads", "delete")

        with pytest.raises(PersistenceError):
            squads.delete(squad_id, alice.id)


class TestUnknownStoredFaction:
    """Rows written before the faction set was closed."""

    @pytest.fixture
    def legacy_id(self, fake_supabase, alice: User) -> str:
        fake_supabase.rows["squads"].append(
            {
                "id": "squad_legacy",
                "type": "squad",
                "user_id": alice.id,
                "name": "Old",
                "faction": "Scum",
                "serialized": "x",
                "additional_data": None,
            }
        )
        return "squad_legacy"

    def test_get_reports_persistence_error(self, squads: SquadRepository, legacy_id: str) -> None:
        with pytest.raises(PersistenceError) as exc_info:
            squads.get(legacy_id)

        assert "Scum" not in exc_info.value.message

    def test_owner_can_delete(self, squads: SquadRepository, alice: User, legacy_id: str, fake_supabase) -> None:
        squads.delete(legacy_id, alice.id)

        assert fake_supabase.rows["squads"] == []

    def test_owner_can_repair(self, squads: SquadRepository, alice: User, legacy_id: str) -> None:
        squads.update(legacy_id, alice.id, SquadFields(name="Old", faction="Galactic Empire", serialized="x"))

        assert squads.get(legacy_id).faction == Faction.GALACTIC_EMPIRE

    def test_non_owner_still_refused(self, squads: SquadRepository, bob: User, legacy_id: str) -> None:
        with pytest.raises(NotOwnerError):
            squads.delete(legacy_id, bob.id)
