"""Promote user-tier custom profiles into the creator tier.

Used when preparing curated data: edits made through the app land in
``storage/CustomProfiles``; this tool moves them to ``data/CustomProfiles``
so they ship with the organizer and survive a user reset.

Usage:
    python -m tools.promote_overrides [--data-dir DIR] [--dry-run]

Existing creator files with the same game ID are overwritten.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from app.config import Config, get_config
from app.data.profile_store import ProfileStore
from app.models.custom_override import OverrideTier


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Move user-tier custom profiles into the creator tier.",
    )
    parser.add_argument("--data-dir", type=Path, help="Organizer directory (default from config)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the profiles that would be moved without touching them",
    )
    args = parser.parse_args()

    config = Config(args.data_dir) if args.data_dir else get_config()
    store = ProfileStore(config.teknoparrot_root or config.data_dir, config.data_dir)

    pending = store.list_override_ids(OverrideTier.USER)
    if not pending:
        print("No user custom profiles to promote.")
        return 0

    creator = set(store.list_override_ids(OverrideTier.CREATOR))
    for game_id in pending:
        note = " (replaces creator profile)" if game_id in creator else ""
        print(f"  {game_id}{note}")

    if args.dry_run:
        print(f"Dry run: {len(pending)} profile(s) would be promoted.")
        return 0

    try:
        moved = store.promote_user_overrides()
    except OSError as e:
        print(f"Error: promotion failed: {e}")
        return 1

    print(f"Promoted {moved} profile(s) to {store.override_dir(OverrideTier.CREATOR)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
