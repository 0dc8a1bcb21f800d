# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, List, Optional

from grimoire.config import ConfigLoader


@dataclass(frozen=True)
class CodexSettings:
    """Runtime settings for the Codex API server.

    `from_config` reads [PATHS]/[SERVER] from settings.ini (env vars win);
    command-line flags are applied on top as overrides.
    """

    data_dir: Optional[Path] = None
    game_system_file: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = 8080
    root_path: str = ""
    cors_allow_origins: Optional[List[str]] = None
    gzip_minimum_size: int = 800
    cache_max_age: int = 300

    @classmethod
    def from_config(cls, config: ConfigLoader, **overrides: Any) -> "CodexSettings":
        base = cls(
            game_system_file=config.get("PATHS", "GAME_SYSTEM_FILE"),
            host=config.get("SERVER", "HOST", "127.0.0.1"),
            port=config.get_int("SERVER", "PORT", 8080),
            root_path=config.get("SERVER", "ROOT_PATH", ""),
        )
        # None means "flag not given"
        given = {k: v for k, v in overrides.items() if v is not None}
        data_dir = given.pop("data_dir", None) or config.get("PATHS", "DATA_DIR")
        settings = replace(base, **given)
        return replace(
            settings,
            data_dir=Path(data_dir).expanduser() if data_dir else None,
            root_path=cls.normalize_root_path(settings.root_path),
        )

    @staticmethod
    def normalize_root_path(root_path: str) -> str:
        """'codex/' -> '/codex' (reverse-proxy mount)."""
        rp = (root_path or "").strip().rstrip("/")
        if rp and not rp.startswith("/"):
            rp = "/" + rp
        return rp
