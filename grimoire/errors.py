# -*- coding: utf-8 -*-
"""Error types shared by the engine, services and apps."""

from __future__ import annotations

from typing import Optional


class GrimoireError(RuntimeError):
    pass


class NotFoundError(GrimoireError):
    """A requested identifier does not exist anywhere in the loaded corpus.

    The corpus is static, so callers should never retry on this error.
    """

    def __init__(self, identifier: str, *, kind: str = "entry", message: Optional[str] = None):
        self.identifier = str(identifier or "")
        self.kind = str(kind or "entry")
        super().__init__(message or f"{self.kind} not found: {self.identifier}")


class CatalogueLoadError(GrimoireError):
    """A data file is missing or malformed (fatal at startup)."""
