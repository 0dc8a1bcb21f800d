#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Unified CLI dispatcher for Grimoire."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from apps.cli.cli_common import console, setup_logging  # noqa: E402
from apps.cli.commands import codex  # noqa: E402
from grimoire.engine import GrimoireEngine  # noqa: E402
from grimoire.errors import CatalogueLoadError  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="grimoire", description="Query a BattleScribe data folder.")
    parser.add_argument("--data", default=None, help="BattleScribe data folder (default: [PATHS] DATA_DIR)")
    parser.add_argument("--gst", default=None, help="Game system file (default: first .gst found)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v info logs, -vv debug logs")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("summary", help="Corpus overview")
    sub.add_parser("catalogues", help="List catalogues")
    p_cat = sub.add_parser("catalogue", help="Show one catalogue and its units")
    p_cat.add_argument("catalogue_id")
    p_unit = sub.add_parser("unit", help="Show a fully resolved unit")
    p_unit.add_argument("unit_id")
    p_search = sub.add_parser("search", help="Search units by name")
    p_search.add_argument("query", nargs="+")
    p_search.add_argument("--limit", type=int, default=50)
    sub.add_parser("factions", help="List factions")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        engine = GrimoireEngine(args.data, game_system_file=args.gst, silent=args.verbose == 0)
    except CatalogueLoadError as exc:
        console.print(f"[red]Load failed: {exc}[/red]")
        return 2

    cmd = args.command or "summary"
    if cmd == "summary":
        codex.show_summary(engine)
    elif cmd == "catalogues":
        codex.show_catalogues(engine)
    elif cmd == "catalogue":
        return codex.show_catalogue(engine, args.catalogue_id)
    elif cmd == "unit":
        return codex.show_unit(engine, args.unit_id)
    elif cmd == "search":
        codex.show_search(engine, " ".join(args.query), limit=max(1, int(args.limit)))
    elif cmd == "factions":
        codex.show_factions(engine)
    return 0


if __name__ == "__main__":
    sys.exit(main())
