"""Application entry point: wires services and serves the API."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import uvicorn
from loguru import logger

from app.config import Config, get_config
from app.context import AppContext
from app.core.game_loader import GameLoader
from app.core.library import LibraryService
from app.core.platform_normalizer import PlatformNormalizer
from app.data.preferences import PreferenceStore
from app.data.profile_store import ProfileStore
from app.logger import setup_logger
from app.web.app import create_app


def create_context(config: Config | None = None, debug: bool = False) -> AppContext:
    """Wire all services and return an AppContext."""
    config = config or get_config()

    # Logger
    setup_logger(config.log_dir, debug=debug)

    root = config.teknoparrot_root
    if root is None:
        logger.warning("teknoparrot_root is not configured; the library will be empty")
        root = config.data_dir / "teknoparrot"

    # Sources
    store = ProfileStore(root, config.data_dir)
    normalizer = PlatformNormalizer.from_file(config.platform_aliases_path)
    logger.info(f"Platform aliases loaded: {normalizer.alias_count}")
    preferences = PreferenceStore(config.storage_dir)
    preferences.load()

    # Pipeline
    loader = GameLoader(store, normalizer, max_workers=config.load_workers)
    library = LibraryService(store, preferences, loader)
    library.refresh()

    return AppContext(
        config=config,
        store=store,
        normalizer=normalizer,
        preferences=preferences,
        loader=loader,
        library=library,
    )


def main() -> int:
    """Application entry point."""
    parser = argparse.ArgumentParser(description="ParrotOrganizer API server")
    parser.add_argument("--data-dir", type=Path, help="Organizer directory (config, data, storage)")
    parser.add_argument("--root", type=Path, help="TeknoParrot installation directory")
    parser.add_argument("--host", help="Bind address (default from config)")
    parser.add_argument("--port", type=int, help="Port (default from config)")
    parser.add_argument("--debug", action="store_true", help="Show debug messages on the console")
    args = parser.parse_args()

    config = Config(args.data_dir) if args.data_dir else get_config()
    if args.root:
        config.teknoparrot_root = args.root

    ctx = create_context(config, debug=args.debug)
    app = create_app(ctx)
    uvicorn.run(
        app,
        host=args.host or config.server_host,
        port=args.port or config.server_port,
        reload=False,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
