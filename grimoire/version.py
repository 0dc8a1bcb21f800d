# -*- coding: utf-8 -*-
"""Version stamps reported by the API and CLI.

`conf/version.json` may pin `project_version` and `data_format`; missing keys
fall back to the package version and the newest BattleScribe schema the
loader understands.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict

from grimoire import __version__

logger = logging.getLogger(__name__)

# battleScribeVersion values the parser has been checked against
SUPPORTED_BATTLESCRIBE_VERSIONS = ("2.01", "2.02", "2.03")

VERSION_FILE = Path(__file__).resolve().parents[1] / "conf" / "version.json"


@dataclass(frozen=True)
class VersionInfo:
    project_version: str
    data_format: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _read_pins(path: Path) -> Dict[str, str]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable version file %s: %s", path, exc)
        return {}
    if not isinstance(raw, dict):
        return {}
    return {k: v.strip() for k, v in raw.items() if isinstance(v, str) and v.strip()}


@lru_cache(maxsize=1)
def version_info() -> VersionInfo:
    pins = _read_pins(VERSION_FILE)
    return VersionInfo(
        project_version=pins.get("project_version", __version__),
        data_format=pins.get("data_format", f"battlescribe-{SUPPORTED_BATTLESCRIBE_VERSIONS[-1]}"),
    )


def is_supported_battlescribe_version(version: str) -> bool:
    """Empty means the file didn't say; that is accepted."""
    v = (version or "").strip()
    return not v or v in SUPPORTED_BATTLESCRIBE_VERSIONS
