# -*- coding: utf-8 -*-
"""Grimoire: BattleScribe data resolution engine.

- core: typed tree, catalogue index, link resolver, override merger, discovery
- services: cached unit/catalogue queries used by the CLI and the Codex API
"""

__all__ = ["__version__"]
__version__ = "0.3.0"
