"""
Configuration Manager - persisted parser, logging and server settings
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "GHOST_BACKEND_CONFIG_DIR"

DEFAULT_PARSER_OPTIONS: dict[str, Any] = {
    "cursorMarker": "<<<AUTOCOMPLETE_HERE>>>",
    "contextLines": 3,
    "tabWidth": 4,
}

DEFAULT_CONFIG: dict[str, dict[str, Any]] = {
    "parser": DEFAULT_PARSER_OPTIONS,
    "logging": {"level": "INFO", "dir": "~/.ghost_backend/logs"},
    "server": {"host": "127.0.0.1", "port": 8000},
}

_NON_NEGATIVE_PARSER_KEYS = ("contextLines", "tabWidth")


def validate_parser_options(options: dict[str, Any]) -> None:
    """Raise ValueError for parser options the engine cannot use"""
    for key in _NON_NEGATIVE_PARSER_KEYS:
        value = options.get(key)
        if key in options and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
            raise ValueError(f"{key} must be a non-negative integer")
    marker = options.get("cursorMarker")
    if marker is not None and not isinstance(marker, str):
        raise ValueError("cursorMarker must be a string")


class ConfigManager:
    """Singleton access to ``config.json``.

    Lookup order for the directory: ``$GHOST_BACKEND_CONFIG_DIR``, then
    ``~/.ghost_backend``, then a folder in the system temp dir.
    """

    _instance: ConfigManager | None = None

    def __init__(self, config_dir: str | Path | None = None):
        self._config_file = self._resolve_config_file(config_dir)
        self._config = self._load_config()

    @classmethod
    def get_instance(cls) -> ConfigManager:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the singleton so the next access reloads from disk"""
        cls._instance = None

    @staticmethod
    def _resolve_config_file(config_dir: str | Path | None) -> Path:
        candidates = [config_dir or os.environ.get(CONFIG_DIR_ENV), "~/.ghost_backend"]
        for candidate in candidates:
            if not candidate:
                continue
            directory = Path(candidate).expanduser()
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning("Cannot use config dir %s: %s", directory, e)
                continue
            return directory / "config.json"

        fallback = Path(tempfile.gettempdir()) / "ghost_backend"
        fallback.mkdir(parents=True, exist_ok=True)
        logger.info("Using temporary config dir: %s", fallback)
        return fallback / "config.json"

    @property
    def config_path(self) -> Path:
        return self._config_file

    def _load_config(self) -> dict[str, Any]:
        """Stored sections merged over the defaults"""
        config = copy.deepcopy(DEFAULT_CONFIG)
        if not self._config_file.exists():
            return config

        try:
            stored = json.loads(self._config_file.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Ignoring unreadable config %s: %s", self._config_file, e)
            return config

        if not isinstance(stored, dict):
            logger.error("Ignoring config %s: top level is not an object", self._config_file)
            return config

        for section, values in stored.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values
        return config

    def get_config(self) -> dict[str, Any]:
        """Current configuration, re-read from disk"""
        self._config = self._load_config()
        return copy.deepcopy(self._config)

    def parser_options(self) -> dict[str, Any]:
        return dict(self.get_config()["parser"])

    def update_section(self, section: str, values: dict[str, Any]) -> dict[str, Any]:
        """Merge ``values`` into one section and persist the result"""
        merged = {**self.get_config().get(section, {}), **values}
        if section == "parser":
            validate_parser_options(merged)
        self._config[section] = merged
        self._write()
        return merged

    def save_config(self, config: dict[str, Any]) -> None:
        """Replace whole sections and persist"""
        self._config.update(config)
        self._write()

    def get(self, key: str, default=None):
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.save_config({key: value})

    def _write(self) -> None:
        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._config_file.write_text(json.dumps(self._config, indent=2), encoding="utf-8")
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e
        logger.debug("Saved config to %s", self._config_file)
