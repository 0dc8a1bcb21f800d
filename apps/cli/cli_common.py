#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Shared helpers for CLI tools."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def setup_logging(verbose: int = 0) -> None:
    """Route library logs through rich (-v info, -vv debug)."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def fmt_costs(costs: dict) -> str:
    if not costs:
        return "-"
    return ", ".join(f"{k} {v}" for k, v in costs.items())


def clip(text: Optional[str], width: int = 80) -> str:
    s = " ".join(str(text or "").split())
    if len(s) <= width:
        return s
    return s[: width - 1] + "…"
