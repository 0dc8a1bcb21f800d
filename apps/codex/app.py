# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from grimoire import __version__
from grimoire.engine import GrimoireEngine

from .api import router as api_router
from .settings import CodexSettings


def _install_middleware(app: FastAPI, *, gzip_minimum_size: int, cors_allow_origins: Optional[Sequence[str]]) -> None:
    if gzip_minimum_size > 0:
        app.add_middleware(GZipMiddleware, minimum_size=gzip_minimum_size)
    if cors_allow_origins:
        # read-only API: GET for data, POST only for the batch lookup
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cors_allow_origins),
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )


def create_app(
    data_dir: Optional[str] = None,
    *,
    engine: Optional[GrimoireEngine] = None,
    game_system_file: Optional[str] = None,
    root_path: str = "",
    cors_allow_origins: Optional[Sequence[str]] = None,
    gzip_minimum_size: int = 800,
    cache_max_age: int = 300,
) -> FastAPI:
    """Build the Codex app around one loaded corpus.

    Pass a prebuilt `engine` (tests, embedding) or a `data_dir` to load. The
    corpus is loaded here, before the app exists, so a broken data folder
    fails at startup instead of on the first request.
    """

    if engine is None:
        engine = GrimoireEngine(data_dir, game_system_file=game_system_file)

    app = FastAPI(
        title="Grimoire Codex API",
        description="Resolved BattleScribe units, catalogues and factions.",
        version=__version__,
        root_path=CodexSettings.normalize_root_path(root_path),
        docs_url="/docs",
        redoc_url=None,
    )
    app.state.engine = engine
    app.state.cache_max_age = int(cache_max_age)

    _install_middleware(app, gzip_minimum_size=int(gzip_minimum_size or 0), cors_allow_origins=cors_allow_origins)
    app.include_router(api_router)

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app


def create_app_from_settings(settings: CodexSettings) -> FastAPI:
    return create_app(
        str(settings.data_dir) if settings.data_dir else None,
        game_system_file=settings.game_system_file,
        root_path=settings.root_path,
        cors_allow_origins=settings.cors_allow_origins,
        gzip_minimum_size=settings.gzip_minimum_size,
        cache_max_age=settings.cache_max_age,
    )
