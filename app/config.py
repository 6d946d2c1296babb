"""Application configuration: JSON-based, with file locking and batch update support."""

from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

_instance: "Config | None" = None

# Default organizer directory (holds config.json, data/, storage/, logs/)
_DEFAULT_DATA_DIR = Path.home() / "Documents" / "ParrotOrganizer"


def get_config() -> Config:
    """Module-level factory: single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config()
    return _instance


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


class Config:
    """JSON-based application configuration with file locking."""

    _DEFAULTS: dict[str, Any] = {
        "teknoparrot_root": "",
        "server": {
            "host": "127.0.0.1",
            "port": 8000,
        },
        "load_workers": 8,
        "default_sort_by": "name",
        "default_sort_ascending": True,
    }

    def __init__(self, data_dir: Path | None = None) -> None:
        self._data: dict[str, Any] = {}
        self._dir = data_dir or _DEFAULT_DATA_DIR
        self._path = self._dir / "config.json"
        self._lock = threading.Lock()
        self._defer_save = False
        self._load()

    def _load(self) -> None:
        """Load config from disk, merging with defaults."""
        self._data = json.loads(json.dumps(self._DEFAULTS))  # deep copy defaults
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as f:
                    user_data = json.load(f)
                if isinstance(user_data, dict):
                    self._deep_merge(self._data, user_data)
                else:
                    logger.warning("Ignoring config.json: expected an object")
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to load config, using defaults: {e}")

    def _deep_merge(self, base: dict, override: dict) -> None:
        """Recursively merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save(self) -> None:
        """Persist config to disk with file locking."""
        if self._defer_save:
            return
        with self._lock:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(".tmp")
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, ensure_ascii=False, indent=2)
                tmp_path.replace(self._path)
            except OSError as e:
                logger.error(f"Failed to save config: {e}")
                if tmp_path.exists():
                    tmp_path.unlink(missing_ok=True)

    @contextmanager
    def batch_update(self) -> Iterator[None]:
        """Context manager for batching multiple config changes into a single write."""
        self._defer_save = True
        try:
            yield
        finally:
            self._defer_save = False
            self._save()

    # ── Generic access ──

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key path."""
        node = self._data
        for part in key.split("."):
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a config value by dot-separated key path."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    # ── Typed properties ──

    @property
    def data_dir(self) -> Path:
        return self._dir

    @property
    def teknoparrot_root(self) -> Path | None:
        raw = self._data.get("teknoparrot_root", "")
        return Path(raw) if raw else None

    @teknoparrot_root.setter
    def teknoparrot_root(self, value: Path | None) -> None:
        self.set("teknoparrot_root", str(value) if value else "")

    @property
    def creator_dir(self) -> Path:
        """Curated data shipped with the organizer (creator overrides, platform aliases)."""
        return self._dir / "data"

    @property
    def storage_dir(self) -> Path:
        """Per-user writable state (user overrides, preferences)."""
        return self._dir / "storage"

    @property
    def log_dir(self) -> Path:
        return self._dir / "logs"

    @property
    def platform_aliases_path(self) -> Path:
        return self.creator_dir / "platformAliases.json"

    @property
    def server_host(self) -> str:
        return self.get("server.host", "127.0.0.1")

    @property
    def server_port(self) -> int:
        return int(self.get("server.port", 8000))

    @property
    def load_workers(self) -> int:
        return max(1, int(self._data.get("load_workers", 8)))

    @load_workers.setter
    def load_workers(self, value: int) -> None:
        self.set("load_workers", value)

    @property
    def default_sort_by(self) -> str:
        return self._data.get("default_sort_by", "name")

    @property
    def default_sort_ascending(self) -> bool:
        return bool(self._data.get("default_sort_ascending", True))
