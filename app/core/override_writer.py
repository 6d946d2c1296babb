"""Override writer: persist custom-profile edits and re-merge the affected game."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterable

from loguru import logger

from app.data.profile_store import GameProfileError, OverrideWriteError
from app.models.custom_override import CustomOverride, OverrideTier

if TYPE_CHECKING:
    from app.core.game_collection import GameCollection
    from app.core.game_loader import GameLoader
    from app.data.profile_store import ProfileStore
    from app.models.game_view import GameView


class CreatorTierProtectedError(Exception):
    """Creator-tier overrides cannot be deleted from the app."""


@dataclass
class BatchResult:
    """Per-id outcome of a batch edit."""

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # game_id → reason

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


class OverrideWriter:
    """
    Sole writer of override storage.

    Every successful write re-merges just the edited game and swaps the
    new view into the collection. A failed write raises and leaves the
    collection as it was. Writes are serialized: read, merge, write and
    rebuild happen under one lock.
    """

    def __init__(self, store: ProfileStore, loader: GameLoader, collection: GameCollection) -> None:
        self._store = store
        self._loader = loader
        self._collection = collection
        self._lock = threading.RLock()

    def _rebuild(self, game_id: str) -> GameView:
        view = self._loader.load_game(game_id)
        self._collection.replace(view)
        return view

    def set_override(
        self,
        game_id: str,
        patch: CustomOverride,
        tier: OverrideTier = OverrideTier.USER,
        clear: Iterable[str] = (),
    ) -> GameView:
        """
        Merge *patch* over the stored override of *tier* and persist it.

        Fields not set in *patch* keep their stored values; fields listed
        in *clear* are removed. Raises ``OverrideWriteError`` on a failed
        write and ``GameProfileError`` for an unknown game.
        """
        with self._lock:
            self._store.read_game_profile(game_id)
            existing = self._store.read_override(game_id, tier) or CustomOverride()
            merged = existing.merged_with(patch, clear)
            stamped = replace(merged, last_modified=datetime.now(tz=timezone.utc).isoformat())
            self._store.write_override(game_id, tier, stamped)
            logger.info(f"Saved {tier} override for {game_id}: {', '.join(stamped.set_fields()) or 'no fields'}")
            return self._rebuild(game_id)

    def delete_override(self, game_id: str, tier: OverrideTier = OverrideTier.USER) -> GameView:
        """Remove the user-tier override. Creator-tier deletes are refused."""
        if OverrideTier(tier) is not OverrideTier.USER:
            raise CreatorTierProtectedError(f"Refusing to delete creator override for {game_id}")
        with self._lock:
            self._store.delete_override(game_id, OverrideTier.USER)
            logger.info(f"Deleted user override for {game_id}")
            return self._rebuild(game_id)

    def batch_set_override(
        self,
        game_ids: Iterable[str],
        patch: CustomOverride,
        tier: OverrideTier = OverrideTier.USER,
    ) -> BatchResult:
        """
        Apply the same partial write to each id, one at a time.

        An unset lightgun in *patch* leaves every game's lightgun untouched.
        Failures are recorded per id and never stop the batch.
        """
        result = BatchResult()
        for game_id in game_ids:
            try:
                self.set_override(game_id, patch, tier)
            except (OverrideWriteError, GameProfileError, ValueError) as e:
                logger.warning(f"Batch edit failed for {game_id}: {e}")
                result.failed[game_id] = str(e)
            else:
                result.succeeded.append(game_id)
        logger.info(f"Batch edit: {result.success_count} succeeded, {result.failure_count} failed")
        return result

    def reset_user_overrides(self) -> int:
        """Delete every user-tier override; creator-tier data stays. Caller refreshes."""
        with self._lock:
            count = self._store.delete_all_overrides(OverrideTier.USER)
        logger.info(f"Reset: deleted {count} user override(s)")
        return count

    # ── Export / import ──

    def export_overrides(self) -> dict[str, dict[str, Any]]:
        """User-tier overrides as ``{game_id: override dict}``."""
        exported: dict[str, dict[str, Any]] = {}
        for game_id in self._store.list_override_ids(OverrideTier.USER):
            override = self._store.read_override(game_id, OverrideTier.USER)
            if override is not None:
                exported[game_id] = override.to_dict()
        return exported

    def import_overrides(self, data: dict[str, dict[str, Any]]) -> BatchResult:
        """Partial-merge each imported entry into the user tier."""
        result = BatchResult()
        for game_id, entry in data.items():
            try:
                if not isinstance(entry, dict):
                    raise ValueError("entry is not an object")
                self.set_override(game_id, CustomOverride.from_dict(entry))
            except (OverrideWriteError, GameProfileError, ValueError, TypeError) as e:
                logger.warning(f"Import failed for {game_id}: {e}")
                result.failed[game_id] = str(e)
            else:
                result.succeeded.append(game_id)
        logger.info(f"Imported {result.success_count} override(s), {result.failure_count} failed")
        return result
