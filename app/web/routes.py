"""API routes: game list/detail, override edits, library install/remove, preferences."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from loguru import logger
from pydantic import BaseModel

from app.core.library import LibraryService
from app.core.override_writer import BatchResult, CreatorTierProtectedError
from app.data.profile_store import (
    GameAlreadyInstalledError,
    GameNotInstalledError,
    GameProfileError,
    OverrideWriteError,
)
from app.models.custom_override import CustomOverride, OverrideTier
from app.models.filter_spec import FilterSpec, SortField, StatusFilter
from app.models.game_view import GameView

api_router = APIRouter()


def get_library(request: Request) -> LibraryService:
    return request.app.state.ctx.library


def _game_dict(view: GameView) -> dict[str, Any]:
    data = asdict(view)
    data["status"] = view.status_label
    return data


def _batch_dict(result: BatchResult) -> dict[str, Any]:
    return {
        "succeeded": result.success_count,
        "failed": result.failure_count,
        "succeeded_ids": result.succeeded,
        "errors": result.failed,
    }


# ── Request bodies ──


class OverrideFields(BaseModel):
    custom_name: str | None = None
    description: str | None = None
    video_link: str | None = None
    tags: list[str] | None = None
    genre: str | None = None
    year: int | str | None = None
    lightgun: bool | str | None = None
    platform: str | None = None
    emulator: str | None = None
    gpu: str | None = None

    def to_override(self) -> CustomOverride:
        return CustomOverride(**self.model_dump(include=set(OverrideFields.model_fields)))


class OverrideBody(OverrideFields):
    clear: list[str] = []
    tier: OverrideTier = OverrideTier.USER


class BatchBody(OverrideFields):
    game_ids: list[str]


# ── Games ──


@api_router.get("/games")
def list_games(
    request: Request,
    library: LibraryService = Depends(get_library),
    search: str = "",
    status: StatusFilter = StatusFilter.ALL,
    genre: list[str] = Query(default=[]),
    platform: list[str] = Query(default=[]),
    emulator: list[str] = Query(default=[]),
    year_min: int | None = None,
    year_max: int | None = None,
    gpu_nvidia: bool = False,
    gpu_amd: bool = False,
    gpu_intel: bool = False,
    subscription_only: bool = False,
    hide_subscription: bool = False,
    favorites_only: bool = False,
    has_test_mode: bool = False,
    gun_game: bool = False,
    is_64bit: bool = False,
    requires_admin: bool = False,
    show_hidden_games: bool = False,
    sort_by: SortField | None = None,
    ascending: bool | None = None,
):
    """
    Filtered, sorted game list. Repeat genre/platform/emulator to select
    several. Sort order defaults to the configured one.
    """
    config = request.app.state.ctx.config
    if sort_by is None:
        sort_by = SortField(config.default_sort_by)
    if ascending is None:
        ascending = config.default_sort_ascending
    spec = FilterSpec(
        search=search,
        status=status,
        genres=frozenset(genre),
        platforms=frozenset(platform),
        emulators=frozenset(emulator),
        year_min=year_min,
        year_max=year_max,
        gpu_nvidia=gpu_nvidia,
        gpu_amd=gpu_amd,
        gpu_intel=gpu_intel,
        subscription_only=subscription_only,
        hide_subscription=hide_subscription,
        favorites_only=favorites_only,
        has_test_mode=has_test_mode,
        gun_game=gun_game,
        is_64bit=is_64bit,
        requires_admin=requires_admin,
        show_hidden_games=show_hidden_games,
        sort_by=sort_by,
        ascending=ascending,
    )
    games = library.query(spec)
    library.preferences.remember_query(search, sort_by, ascending)
    return {
        "games": [_game_dict(view) for view in games],
        "total": len(games),
        "stats": asdict(library.stats()),
    }


@api_router.get("/games/{game_id}")
def get_game(game_id: str, library: LibraryService = Depends(get_library)):
    view = library.get_game(game_id)
    if view is None:
        raise HTTPException(status_code=404, detail="Game not found")
    library.preferences.remember_viewed(game_id)
    return _game_dict(view)


@api_router.get("/stats")
def get_stats(library: LibraryService = Depends(get_library)):
    return asdict(library.stats())


@api_router.get("/facets")
def get_facets(library: LibraryService = Depends(get_library)):
    """Distinct genres/platforms/emulators and the known year range, for filter pickers."""
    return library.facets()


@api_router.post("/refresh")
def refresh(library: LibraryService = Depends(get_library)):
    return asdict(library.refresh())


# ── Overrides ──


@api_router.patch("/games/{game_id}/override")
def set_override(game_id: str, body: OverrideBody, library: LibraryService = Depends(get_library)):
    """Partial update: omitted fields keep their stored value, *clear* drops fields."""
    try:
        view = library.writer.set_override(game_id, body.to_override(), body.tier, body.clear)
    except GameProfileError:
        raise HTTPException(status_code=404, detail="Game not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OverrideWriteError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail=str(e))
    return _game_dict(view)


@api_router.delete("/games/{game_id}/override")
def delete_override(
    game_id: str,
    tier: OverrideTier = OverrideTier.USER,
    library: LibraryService = Depends(get_library),
):
    try:
        view = library.writer.delete_override(game_id, tier)
    except CreatorTierProtectedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except GameProfileError:
        raise HTTPException(status_code=404, detail="Game not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OverrideWriteError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail=str(e))
    return _game_dict(view)


@api_router.post("/overrides/batch")
def batch_override(body: BatchBody, library: LibraryService = Depends(get_library)):
    try:
        patch = body.to_override()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _batch_dict(library.writer.batch_set_override(body.game_ids, patch))


@api_router.post("/overrides/reset")
def reset_overrides(library: LibraryService = Depends(get_library)):
    """Delete all user-tier overrides and reload; creator data is kept."""
    try:
        deleted = library.writer.reset_user_overrides()
    except OverrideWriteError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail=str(e))
    stats = library.refresh()
    return {"deleted": deleted, "stats": asdict(stats)}


@api_router.get("/overrides/export")
def export_overrides(library: LibraryService = Depends(get_library)):
    return library.writer.export_overrides()


@api_router.post("/overrides/import")
def import_overrides(body: dict[str, dict[str, Any]], library: LibraryService = Depends(get_library)):
    return _batch_dict(library.writer.import_overrides(body))


# ── Library ──


@api_router.post("/games/{game_id}/install")
def install_game(game_id: str, library: LibraryService = Depends(get_library)):
    try:
        view = library.install(game_id)
    except GameProfileError:
        raise HTTPException(status_code=404, detail="Game profile not found")
    except GameAlreadyInstalledError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.error(f"Install failed for {game_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return _game_dict(view)


@api_router.post("/games/{game_id}/remove")
def remove_game(game_id: str, library: LibraryService = Depends(get_library)):
    try:
        view = library.remove(game_id)
    except GameNotInstalledError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.error(f"Remove failed for {game_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return _game_dict(view)


# ── Preferences ──


@api_router.post("/games/{game_id}/favorite")
def toggle_favorite(game_id: str, library: LibraryService = Depends(get_library)):
    if library.get_game(game_id) is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return {"game_id": game_id, "favorite": library.toggle_favorite(game_id)}


@api_router.post("/games/{game_id}/hidden")
def toggle_hidden(game_id: str, library: LibraryService = Depends(get_library)):
    if library.get_game(game_id) is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return {"game_id": game_id, "hidden": library.toggle_hidden(game_id)}


@api_router.get("/preferences")
def get_preferences(library: LibraryService = Depends(get_library)):
    """UI layout, last query and session state, favourites and hidden games."""
    return library.preferences.export_data()


@api_router.put("/preferences")
def put_preferences(body: dict[str, Any], library: LibraryService = Depends(get_library)):
    """Replace preferences; sections that are missing or malformed fall back to defaults."""
    library.preferences.import_data(body)
    return library.preferences.export_data()
