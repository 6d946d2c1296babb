"""Tests for the OverrideWriter: partial writes, tier protection, batches."""

from __future__ import annotations

import threading
import time
from unittest.mock import patch

import pytest

from app.core.game_collection import GameCollection
from app.core.game_loader import GameLoader
from app.core.override_writer import CreatorTierProtectedError, OverrideWriter
from app.data.profile_store import GameProfileError, OverrideWriteError
from app.models.custom_override import CustomOverride, OverrideTier, TriState


@pytest.fixture
def setup(tree):
    tree.add_profile("hotd4", gun_game=True)
    tree.add_profile("id8")
    tree.add_profile("or2")
    tree.add_override("or2", OverrideTier.CREATOR, genre="Racing", description="Curated")
    tree.add_override("or2", tags=["sega", "classic"], genre="Driving")
    loader = GameLoader(tree.store)
    collection = GameCollection()
    collection.initialize(loader.load_all())
    writer = OverrideWriter(tree.store, loader, collection)
    return tree, collection, writer


class TestSetOverride:
    def test_partial_write_preserves_other_fields(self, setup) -> None:
        tree, _, writer = setup
        writer.set_override("or2", CustomOverride(description="Mine"))
        stored = tree.store.read_override("or2", OverrideTier.USER)
        assert stored.tags == ("sega", "classic")
        assert stored.genre == "Driving"
        assert stored.description == "Mine"
        assert stored.last_modified

    def test_creator_tier_untouched(self, setup) -> None:
        tree, _, writer = setup
        writer.set_override("or2", CustomOverride(genre="Arcade"))
        creator = tree.store.read_override("or2", OverrideTier.CREATOR)
        assert creator.genre == "Racing"
        assert creator.description == "Curated"

    def test_returns_and_stores_rebuilt_view(self, setup) -> None:
        _, collection, writer = setup
        view = writer.set_override("id8", CustomOverride(custom_name="Initial D 8"))
        assert view.name == "Initial D 8"
        assert view.has_custom_profile
        assert collection.get_by_id("id8") == view
        assert [v.game_id for v in collection.get_all()] == ["hotd4", "id8", "or2"]

    def test_clear(self, setup) -> None:
        tree, collection, writer = setup
        view = writer.set_override("or2", CustomOverride(), clear=["genre"])
        assert tree.store.read_override("or2", OverrideTier.USER).genre is None
        assert view.genre == "Racing"  # falls back to the creator tier

    def test_lightgun_false_overrides_profile(self, setup) -> None:
        _, _, writer = setup
        assert writer.set_override("hotd4", CustomOverride(lightgun=TriState.FALSE)).gun_game is False

    def test_unknown_game_writes_nothing(self, setup) -> None:
        tree, _, writer = setup
        with pytest.raises(GameProfileError):
            writer.set_override("missing", CustomOverride(genre="x"))
        assert tree.store.read_override("missing", OverrideTier.USER) is None

    def test_write_failure_leaves_collection(self, setup) -> None:
        tree, collection, writer = setup
        before = collection.get_by_id("id8")
        with patch.object(tree.store, "write_override", side_effect=OverrideWriteError("disk full")):
            with pytest.raises(OverrideWriteError):
                writer.set_override("id8", CustomOverride(custom_name="New"))
        assert collection.get_by_id("id8") == before


class TestConcurrentWrites:
    def test_parallel_edits_keep_both_fields(self, setup) -> None:
        tree, collection, writer = setup
        original = tree.store.read_override

        def slow_read(game_id, tier):
            override = original(game_id, tier)
            time.sleep(0.05)  # widen the read-to-write window
            return override

        errors: list[Exception] = []

        def edit(patch: CustomOverride) -> None:
            try:
                writer.set_override("id8", patch)
            except Exception as e:
                errors.append(e)

        with patch.object(tree.store, "read_override", side_effect=slow_read):
            threads = [
                threading.Thread(target=edit, args=(CustomOverride(year=1999),)),
                threading.Thread(target=edit, args=(CustomOverride(genre="Racing"),)),
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=10)

        assert errors == []
        stored = tree.store.read_override("id8", OverrideTier.USER)
        assert stored.year == 1999
        assert stored.genre == "Racing"
        assert collection.get_by_id("id8").genre == "Racing"
        assert collection.get_by_id("id8").year == 1999


class TestDeleteOverride:
    def test_creator_tier_protected(self, setup) -> None:
        tree, _, writer = setup
        with pytest.raises(CreatorTierProtectedError):
            writer.delete_override("or2", OverrideTier.CREATOR)
        assert tree.override_path("or2", OverrideTier.CREATOR).exists()

    def test_delete_user_falls_back_to_creator(self, setup) -> None:
        tree, collection, writer = setup
        view = writer.delete_override("or2")
        assert not tree.override_path("or2", OverrideTier.USER).exists()
        assert view.genre == "Racing"
        assert view.tags == ()
        assert collection.get_by_id("or2").genre == "Racing"


class TestBatch:
    def test_partial_failure_accounting(self, setup) -> None:
        _, _, writer = setup
        result = writer.batch_set_override(["hotd4", "missing", "id8", "bad id"], CustomOverride(genre="Arcade"))
        assert result.succeeded == ["hotd4", "id8"]
        assert set(result.failed) == {"missing", "bad id"}
        assert result.success_count == 2
        assert result.failure_count == 2

    def test_unset_lightgun_keeps_each_game(self, setup) -> None:
        tree, collection, writer = setup
        writer.set_override("id8", CustomOverride(lightgun=TriState.TRUE))
        writer.batch_set_override(["hotd4", "id8"], CustomOverride(platform="Custom"))
        assert collection.get_by_id("hotd4").gun_game is True
        assert collection.get_by_id("id8").gun_game is True
        assert tree.store.read_override("id8", OverrideTier.USER).lightgun is TriState.TRUE

    def test_write_error_does_not_abort(self, setup) -> None:
        tree, _, writer = setup
        original = tree.store.write_override

        def failing(game_id, tier, override):
            if game_id == "hotd4":
                raise OverrideWriteError("read-only")
            return original(game_id, tier, override)

        with patch.object(tree.store, "write_override", side_effect=failing):
            result = writer.batch_set_override(["hotd4", "id8"], CustomOverride(genre="Arcade"))
        assert result.succeeded == ["id8"]
        assert result.failed == {"hotd4": "read-only"}


class TestResetExportImport:
    def test_reset_only_user_tier(self, setup) -> None:
        tree, _, writer = setup
        writer.set_override("id8", CustomOverride(genre="x"))
        assert writer.reset_user_overrides() == 2
        assert tree.store.list_override_ids(OverrideTier.USER) == []
        assert tree.store.list_override_ids(OverrideTier.CREATOR) == ["or2"]

    def test_export(self, setup) -> None:
        _, _, writer = setup
        exported = writer.export_overrides()
        assert list(exported) == ["or2"]
        assert exported["or2"]["tags"] == ["sega", "classic"]
        assert exported["or2"]["genre"] == "Driving"

    def test_import_merges(self, setup) -> None:
        tree, collection, writer = setup
        result = writer.import_overrides(
            {
                "or2": {"description": "Imported"},
                "id8": {"customName": "Initial D"},
                "missing": {"genre": "x"},
                "hotd4": "not an object",
            }
        )
        assert sorted(result.succeeded) == ["id8", "or2"]
        assert set(result.failed) == {"missing", "hotd4"}
        assert tree.store.read_override("or2", OverrideTier.USER).tags == ("sega", "classic")
        assert collection.get_by_id("id8").name == "Initial D"
