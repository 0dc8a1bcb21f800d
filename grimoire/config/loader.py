# -*- coding: utf-8 -*-
import configparser
import os
from pathlib import Path

# environment overrides: (section, key) -> variable
_ENV_OVERRIDES = {
    ("PATHS", "DATA_DIR"): "GRIMOIRE_DATA_DIR",
    ("PATHS", "GAME_SYSTEM_FILE"): "GRIMOIRE_GAME_SYSTEM_FILE",
    ("SERVER", "HOST"): "GRIMOIRE_HOST",
    ("SERVER", "PORT"): "GRIMOIRE_PORT",
    ("SERVER", "ROOT_PATH"): "GRIMOIRE_ROOT_PATH",
}


class ConfigLoader:
    def __init__(self, config_path=None):
        # project root (grimoire/config/*)
        self.project_root = Path(__file__).resolve().parents[2]
        self.config_path = Path(config_path) if config_path else self.project_root / "conf" / "settings.ini"

        self.config = configparser.ConfigParser()
        # missing file: every lookup falls back to its default
        if self.config_path.exists():
            self.config.read(self.config_path, encoding="utf-8")

    def get(self, section, key, fallback=None):
        """Return the setting (env var wins over the ini file), with ~ expanded."""
        env_name = _ENV_OVERRIDES.get((section, key))
        val = os.environ.get(env_name) if env_name else None
        if not val:
            val = self.config.get(section, key, fallback=None)
        if not val:
            return fallback
        if "~" in val:
            return os.path.expanduser(val)
        return val

    def get_int(self, section, key, fallback=0):
        val = self.get(section, key)
        try:
            return int(str(val).strip())
        except (TypeError, ValueError):
            return fallback


# module-level singleton
grimoire_config = ConfigLoader()
