"""Configuration loader for server and session settings."""
import json
import logging
import os
from typing import Any, Dict


logger = logging.getLogger(__name__)


DEFAULT_SETTINGS: Dict[str, Any] = {
    "server": {
        "host": "0.0.0.0",
        "port": 5050,
        "log_level": "INFO",
    },
    "session": {
        "default_variant": "TRES_EN_LINEA",
        "max_players": 2,
        "start_when_full": True,
        "remove_abandoned": True,
    },
    "variants": {
        "TRES_EN_LINEA": {"rows": 3, "cols": 3},
        "AJEDREZ": {"rows": 8, "cols": 8},
        "DAMAS": {"rows": 8, "cols": 8},
        "GENERICO": {"rows": 8, "cols": 8},
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Loads and provides access to service configuration."""

    _instance = None
    _config_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config")

    def __new__(cls):
        """Singleton pattern to ensure only one config loader."""
        if cls._instance is None:
            cls._instance = super(ConfigLoader, cls).__new__(cls)
            cls._instance._load_all_configs()
        return cls._instance

    def _load_all_configs(self):
        """Load all configuration files, layered over the built-in defaults."""
        self.game_settings = _merge(DEFAULT_SETTINGS, self._load_json("game_settings.json"))

    def _load_json(self, filename: str) -> Dict[str, Any]:
        """Load a JSON configuration file."""
        filepath = os.path.join(self._config_dir, filename)
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            logger.warning("Config file %s not found. Using defaults.", filename)
            return {}
        except json.JSONDecodeError as e:
            logger.warning("Error parsing %s: %s. Using defaults.", filename, e)
            return {}

    def get(self, *keys, default=None):
        """Get a nested configuration value."""
        value = self.game_settings
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_board_size(self, variant_value: str):
        """(rows, cols) configured for a variant, by wire name."""
        size = self.get("variants", variant_value, default={}) or {}
        return int(size.get("rows", 8)), int(size.get("cols", 8))


def get_config() -> ConfigLoader:
    return ConfigLoader()
