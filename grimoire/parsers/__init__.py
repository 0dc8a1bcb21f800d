# -*- coding: utf-8 -*-
"""Document parsers for BattleScribe data files."""

from grimoire.parsers.battlescribe import BattleScribeLoader, parse_catalogue, parse_game_system, read_document

__all__ = [
    "BattleScribeLoader",
    "parse_catalogue",
    "parse_game_system",
    "read_document",
]
