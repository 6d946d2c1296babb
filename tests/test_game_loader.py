"""Tests for GameLoader against an on-disk profile tree."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from app.core.game_collection import GameCollection
from app.core.game_loader import GameLoader
from app.core.override_writer import OverrideWriter
from app.data.profile_store import GameProfileError
from app.models.custom_override import CustomOverride, OverrideTier


@pytest.fixture
def populated(tree):
    tree.add_profile("hotd4", gun_game=True, emulator_type="Lindbergh")
    tree.add_profile("id8", is_64bit=True)
    tree.add_profile("or2")
    tree.install("id8", internal_name="Initial D Arcade Stage 8")
    tree.add_metadata("hotd4", game_name="House of the Dead 4", platform="Lindbergh", release_year="2005")
    tree.add_override("or2", OverrideTier.CREATOR, genre="Racing", tags=["sega"])
    tree.add_override("or2", genre="Driving")
    return tree


class TestLoadAll:
    def test_loads_in_profile_order(self, populated) -> None:
        views = GameLoader(populated.store).load_all()
        assert [v.game_id for v in views] == ["hotd4", "id8", "or2"]

    def test_merges_sources(self, populated) -> None:
        views = {v.game_id: v for v in GameLoader(populated.store).load_all()}
        assert views["hotd4"].name == "House of the Dead 4"
        assert views["hotd4"].platform == "SEGA Lindbergh Yellow"
        assert views["hotd4"].gun_game
        assert views["id8"].is_installed
        assert views["id8"].name == "Initial D Arcade Stage 8"
        assert not views["hotd4"].is_installed
        assert views["or2"].genre == "Driving"
        assert views["or2"].tags == ("sega",)
        assert views["or2"].has_custom_profile

    def test_malformed_profile_excluded(self, populated) -> None:
        (populated.root / "GameProfiles" / "broken.xml").write_text("<GameProfile>", encoding="utf-8")
        views = GameLoader(populated.store).load_all()
        assert "broken" not in [v.game_id for v in views]
        assert len(views) == 3

    def test_user_profile_without_game_profile_excluded(self, populated) -> None:
        populated.install("orphan")
        views = GameLoader(populated.store).load_all()
        assert "orphan" not in [v.game_id for v in views]

    def test_malformed_metadata_ignored(self, populated) -> None:
        (populated.root / "Metadata" / "id8.json").write_text("{oops", encoding="utf-8")
        views = {v.game_id: v for v in GameLoader(populated.store).load_all()}
        assert not views["id8"].has_metadata

    def test_malformed_user_profile_still_installed(self, populated) -> None:
        (populated.root / "UserProfiles" / "or2.xml").write_text("<nope", encoding="utf-8")
        views = {v.game_id: v for v in GameLoader(populated.store).load_all()}
        assert views["or2"].is_installed

    def test_malformed_user_profile_survives_an_edit(self, populated) -> None:
        (populated.root / "UserProfiles" / "or2.xml").write_text("<nope", encoding="utf-8")
        loader = GameLoader(populated.store)
        collection = GameCollection()
        collection.initialize(loader.load_all())
        before = collection.get_stats()

        writer = OverrideWriter(populated.store, loader, collection)
        view = writer.set_override("or2", CustomOverride(year=1999))

        assert view.is_installed
        assert collection.get_by_id("or2").is_installed
        assert collection.get_stats() == before

    def test_unexpected_error_drops_only_that_game(self, populated) -> None:
        original = populated.store.read_metadata

        def flaky(game_id: str):
            if game_id == "id8":
                raise RuntimeError("boom")
            return original(game_id)

        with patch.object(populated.store, "read_metadata", side_effect=flaky):
            views = GameLoader(populated.store).load_all()
        assert [v.game_id for v in views] == ["hotd4", "or2"]

    @pytest.mark.parametrize("workers", [1, 4])
    def test_worker_count_does_not_change_result(self, populated, workers: int) -> None:
        expected = GameLoader(populated.store, max_workers=2).load_all()
        assert GameLoader(populated.store, max_workers=workers).load_all() == expected

    def test_empty_tree(self, tree) -> None:
        assert GameLoader(tree.store).load_all() == []


class TestLoadGame:
    def test_missing_profile_raises(self, tree) -> None:
        with pytest.raises(GameProfileError):
            GameLoader(tree.store).load_game("missing")

    def test_installed_state_from_user_profiles(self, populated) -> None:
        assert GameLoader(populated.store).load_game("id8").is_installed
        assert not GameLoader(populated.store).load_game("or2").is_installed

    def test_malformed_user_profile_counts_as_installed(self, populated) -> None:
        (populated.root / "UserProfiles" / "or2.xml").write_text("<nope", encoding="utf-8")
        assert GameLoader(populated.store).load_game("or2").is_installed
