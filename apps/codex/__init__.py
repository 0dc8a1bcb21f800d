# -*- coding: utf-8 -*-
"""Codex: read-only HTTP API over a loaded BattleScribe corpus."""

from .app import create_app
from .settings import CodexSettings

__all__ = ["create_app", "CodexSettings"]
