"""Configuration loader for game settings.

Settings live in ``config/game_settings.json`` with one object per section
(``game`` for the rules, ``catalog`` for the movie database). The directory
can be moved with the MOVIE_MATCH_CONFIG_DIR environment variable.
"""
import json
import logging
import os
from typing import Any, Dict


logger = logging.getLogger(__name__)

SETTINGS_FILE = "game_settings.json"
DEFAULT_CONFIG_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config"
)


class ConfigLoader:
    """Singleton view over the settings file."""

    _instance = None
    _config_dir = os.environ.get("MOVIE_MATCH_CONFIG_DIR", DEFAULT_CONFIG_DIR)

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigLoader, cls).__new__(cls)
            cls._instance.reload()
        return cls._instance

    def reload(self) -> None:
        """Re-read the settings file from disk."""
        self.game_settings = self._read_settings(SETTINGS_FILE)
        logger.debug("Loaded settings sections: %s", ", ".join(self.game_settings) or "none")

    def _read_settings(self, filename: str) -> Dict[str, Any]:
        path = os.path.join(self._config_dir, filename)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning("Config file %s not found in %s. Using defaults.", filename, self._config_dir)
            return {}
        except json.JSONDecodeError as e:
            logger.warning("Error parsing %s: %s. Using defaults.", filename, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("%s must contain a JSON object. Using defaults.", filename)
            return {}
        return data

    def get(self, *keys, default=None):
        """Look up a nested value, e.g. ``get("game", "win_score")``."""
        node = self.game_settings
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def section(self, name: str) -> Dict[str, Any]:
        """One top-level section, or {} if it is missing or malformed."""
        value = self.game_settings.get(name, {})
        if not isinstance(value, dict):
            logger.warning("Settings section '%s' is not an object; ignoring it.", name)
            return {}
        return value

    def get_game_settings(self) -> Dict[str, Any]:
        return self.section('game')

    def get_catalog_settings(self) -> Dict[str, Any]:
        """Settings for the remote movie database."""
        return self.section('catalog')


# Global config instance
config = ConfigLoader()
