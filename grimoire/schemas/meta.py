# -*- coding: utf-8 -*-
"""Metadata block for API payloads: who generated it, from which corpus."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from grimoire.indexers.catalogue_index import CatalogueIndex
from grimoire.version import version_info


def corpus_stamp(index: CatalogueIndex) -> Dict[str, str]:
    gs = index.game_system
    if gs is None:
        return {"id": "", "name": "", "revision": "", "battle_scribe_version": ""}
    return {
        "id": gs.id,
        "name": gs.name,
        "revision": gs.revision,
        "battle_scribe_version": gs.battle_scribe_version,
    }


def build_meta(*, tool: str, index: CatalogueIndex) -> Dict[str, Any]:
    meta: Dict[str, Any] = {
        "generated": datetime.now().astimezone().isoformat(timespec="seconds"),
        "tool": str(tool),
        "corpus": corpus_stamp(index),
        "counts": index.stats(),
    }
    meta.update(version_info().to_dict())
    return meta
