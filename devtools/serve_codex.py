#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Run the Codex API server (FastAPI + Uvicorn).

Usage:
  python3 devtools/serve_codex.py --data ~/battlescribe/wh40k-10e --port 8080

Flags default to conf/settings.ini ([PATHS], [SERVER]); GRIMOIRE_* env vars
override the file.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import uvicorn  # type: ignore  # noqa: E402

from apps.cli.cli_common import console, setup_logging  # noqa: E402
from apps.codex.app import create_app_from_settings  # noqa: E402
from apps.codex.settings import CodexSettings  # noqa: E402
from grimoire.config import grimoire_config  # noqa: E402
from grimoire.errors import CatalogueLoadError  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Grimoire Codex (FastAPI) server.")
    parser.add_argument("--data", default=None, help="BattleScribe data folder")
    parser.add_argument("--gst", default=None, help="Game system file (relative to --data or absolute)")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--root-path", default=None, help="Reverse proxy mount path, e.g. /codex")
    parser.add_argument("--cors-allow-origin", action="append", default=None, help="CORS allow origin (repeatable)")
    parser.add_argument("--cache-max-age", type=int, default=None, help="Cache-Control max-age (0 disables)")
    parser.add_argument("--log-level", default="info", choices=["critical", "error", "warning", "info", "debug", "trace"])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(2 if args.log_level in ("debug", "trace") else 1)

    settings = CodexSettings.from_config(
        grimoire_config,
        data_dir=args.data,
        game_system_file=args.gst,
        host=args.host,
        port=args.port,
        root_path=args.root_path,
        cors_allow_origins=args.cors_allow_origin,
        cache_max_age=args.cache_max_age,
    )
    if settings.data_dir is None or not settings.data_dir.is_dir():
        console.print(f"[red]Data folder not found: {settings.data_dir}[/red] (use --data or DATA_DIR in settings.ini)")
        return 2

    try:
        app = create_app_from_settings(settings)
    except CatalogueLoadError as exc:
        console.print(f"[red]Load failed: {exc}[/red]")
        return 2

    console.print(f"Grimoire Codex: http://{settings.host}:{settings.port}{settings.root_path}/docs")
    console.print(f"Data: {settings.data_dir}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=args.log_level,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
