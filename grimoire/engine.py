# -*- coding: utf-8 -*-
"""GrimoireEngine (core)

This module is UI-agnostic.

Responsibilities
- Locate the BattleScribe data directory (explicit argument, env, settings.ini).
- Load it once into an immutable `CatalogueIndex`.
- Wire resolver, discovery, assembler, cache and services on top of it.

Design notes
- Engine must be usable by CLI and Web layers.
- Use `silent=True` to suppress info logs.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from grimoire.assembler import Assembler
from grimoire.cache import ResultCache
from grimoire.config import grimoire_config
from grimoire.discovery import DiscoveryEngine, ProfileTypeNames
from grimoire.errors import CatalogueLoadError
from grimoire.indexers.catalogue_index import CatalogueIndex
from grimoire.parsers.battlescribe import BattleScribeLoader
from grimoire.resolver import LinkResolver
from grimoire.services import CatalogueService, UnitService

logger = logging.getLogger(__name__)


class GrimoireEngine:
    """Main entry used by CLI / devtools / Web.

    Parameters
    - data_dir: BattleScribe data folder (overrides config).
    - game_system_file: explicit .gst file (overrides config).
    - index: prebuilt index (skips loading; used by tests and tooling).
    - type_names: profile type names (defaults to [PROFILES] in settings.ini).
    - silent: suppress all info logs.
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        *,
        game_system_file: Optional[str] = None,
        index: Optional[CatalogueIndex] = None,
        type_names: Optional[ProfileTypeNames] = None,
        silent: bool = False,
    ):
        self.silent = bool(silent)
        self.data_dir: Optional[str] = None

        if index is None:
            self.data_dir = data_dir or grimoire_config.get("PATHS", "DATA_DIR")
            if not self.data_dir:
                raise CatalogueLoadError("No data directory configured ([PATHS] DATA_DIR or GRIMOIRE_DATA_DIR).")
            gs_file = game_system_file or grimoire_config.get("PATHS", "GAME_SYSTEM_FILE")
            self._log(f"Loading BattleScribe data: {self.data_dir}")
            index = BattleScribeLoader(self.data_dir, gs_file, silent=self.silent).load()

        self.index: CatalogueIndex = index
        self.type_names = type_names or ProfileTypeNames.from_config(grimoire_config)

        self.resolver = LinkResolver(self.index)
        self.discovery = DiscoveryEngine(self.index, self.resolver, self.type_names)
        self.assembler = Assembler(self.index, self.discovery)
        self.cache = ResultCache()

        self.units = UnitService(self.index, self.resolver, self.assembler, self.cache)
        self.catalogues = CatalogueService(self.index, self.resolver, self.assembler, self.cache)

        stats = self.index.stats()
        self._log(f"Index ready: {stats['catalogues']} catalogues, {stats['libraries']} libraries")

    def _log(self, msg: str) -> None:
        if not self.silent:
            logger.info(msg)

    def summary(self) -> Dict[str, Any]:
        gs = self.index.game_system
        return {
            "data_dir": self.data_dir,
            "game_system": {
                "id": gs.id if gs else "",
                "name": gs.name if gs else "",
                "revision": gs.revision if gs else "",
            },
            "counts": self.index.stats(),
            "cache": self.cache.stats(),
        }
