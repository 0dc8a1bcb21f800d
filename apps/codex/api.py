# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from grimoire.engine import GrimoireEngine
from grimoire.errors import NotFoundError
from grimoire.schemas.meta import build_meta


def get_engine(request: Request) -> GrimoireEngine:
    """Resolve the loaded engine from app state."""
    engine: Optional[GrimoireEngine] = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Corpus not loaded")
    return engine


def _cache_headers(request: Request, *, etag: Optional[str] = None, max_age: Optional[int] = None) -> Dict[str, str]:
    if max_age is None:
        max_age = int(getattr(request.app.state, "cache_max_age", 300))
    if max_age <= 0:
        return {}
    headers = {"Cache-Control": f"public, max-age={int(max_age)}"}
    if etag:
        headers["ETag"] = str(etag)
    return headers


def _json(data: Any, *, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(content=data, headers=headers or {})


def _corpus_tag(engine: GrimoireEngine) -> str:
    """Stable per-corpus stamp for ETags (the corpus never changes after load)."""
    gs = engine.index.game_system
    stats = engine.index.stats()
    rev = gs.revision if gs else "0"
    return f"{rev}-{stats['catalogues']}-{stats['libraries']}"


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"error": str(exc), "kind": exc.kind, "id": exc.identifier},
    )


router = APIRouter(prefix="/api/v1")


class UnitBatchRequest(BaseModel):
    ids: List[str] = Field(default_factory=list)


# ----------------- corpus -----------------


@router.get("/meta")
def meta(request: Request, engine: GrimoireEngine = Depends(get_engine)):
    m = build_meta(tool="codex", index=engine.index)
    headers = _cache_headers(request, etag=f'W/"meta-{_corpus_tag(engine)}"', max_age=60)
    return _json(m, headers=headers)


@router.get("/game-system")
def game_system(request: Request, engine: GrimoireEngine = Depends(get_engine)):
    try:
        record = engine.catalogues.get_game_system()
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    headers = _cache_headers(request, etag=f'W/"gst-{_corpus_tag(engine)}"')
    return _json(record.to_dict(), headers=headers)


# ----------------- catalogues -----------------


@router.get("/catalogues")
def catalogues(request: Request, engine: GrimoireEngine = Depends(get_engine)):
    rows = [asdict(c) for c in engine.catalogues.list_catalogues()]
    headers = _cache_headers(request, etag=f'W/"catalogues-{_corpus_tag(engine)}"')
    return _json({"catalogues": rows, "count": len(rows)}, headers=headers)


@router.get("/catalogues/{catalogue_id}")
def catalogue_detail(catalogue_id: str, request: Request, engine: GrimoireEngine = Depends(get_engine)):
    try:
        record = engine.catalogues.get_catalogue(catalogue_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    headers = _cache_headers(request, etag=f'W/"catalogue-{_corpus_tag(engine)}-{catalogue_id}"')
    return _json(record.to_dict(), headers=headers)


@router.get("/catalogues/{catalogue_id}/units")
def catalogue_units(catalogue_id: str, request: Request, engine: GrimoireEngine = Depends(get_engine)):
    try:
        units = engine.catalogues.get_catalogue_units(catalogue_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    rows = [u.to_dict() for u in units]
    headers = _cache_headers(request, etag=f'W/"catalogue-units-{_corpus_tag(engine)}-{catalogue_id}"')
    return _json({"catalogue_id": catalogue_id, "units": rows, "count": len(rows)}, headers=headers)


# ----------------- units -----------------


@router.get("/units")
def units(
    request: Request,
    engine: GrimoireEngine = Depends(get_engine),
    faction: str = Query(""),
    category: str = Query(""),
    search: str = Query(""),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    items, total = engine.units.list_units(
        faction=faction, category=category, search=search, limit=int(limit), offset=int(offset)
    )
    return _json(
        {
            "units": [u.to_dict() for u in items],
            "count": len(items),
            "total": total,
            "offset": int(offset),
            "limit": int(limit),
        }
    )


@router.post("/units/batch")
def units_batch(req: UnitBatchRequest, engine: GrimoireEngine = Depends(get_engine)):
    ids = [str(x).strip() for x in req.ids if str(x).strip()]
    if not ids:
        raise HTTPException(status_code=400, detail="ids is required")
    if len(ids) > 200:
        raise HTTPException(status_code=400, detail="at most 200 ids per request")
    found, missing = engine.units.get_units(ids)
    return {"units": [u.to_dict() for u in found], "missing": missing, "count": len(found)}


@router.get("/units/{unit_id}")
def unit_detail(unit_id: str, request: Request, engine: GrimoireEngine = Depends(get_engine)):
    try:
        record = engine.units.get_unit(unit_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    headers = _cache_headers(request, etag=f'W/"unit-{_corpus_tag(engine)}-{unit_id}"')
    return _json(record.to_dict(), headers=headers)


@router.get("/units/{unit_id}/weapons")
def unit_weapons(unit_id: str, request: Request, engine: GrimoireEngine = Depends(get_engine)):
    try:
        weapons = engine.units.get_unit_weapons(unit_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    headers = _cache_headers(request, etag=f'W/"weapons-{_corpus_tag(engine)}-{unit_id}"')
    return _json({"unit_id": unit_id, **weapons.to_dict()}, headers=headers)


# ----------------- factions / search -----------------


@router.get("/factions")
def factions(request: Request, engine: GrimoireEngine = Depends(get_engine)):
    rows = [f.to_dict() for f in engine.units.list_factions()]
    headers = _cache_headers(request, etag=f'W/"factions-{_corpus_tag(engine)}"')
    return _json({"factions": rows, "count": len(rows)}, headers=headers)


@router.get("/factions/{name}/units")
def faction_units(name: str, engine: GrimoireEngine = Depends(get_engine)):
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="faction name is required")
    rows = [u.to_dict() for u in engine.units.get_faction_units(name)]
    return _json({"faction": name, "units": rows, "count": len(rows)})


@router.get("/search")
def search(
    engine: GrimoireEngine = Depends(get_engine),
    q: str = Query(""),
    limit: int = Query(50, ge=1, le=200),
):
    query = (q or "").strip()
    if not query:
        raise HTTPException(status_code=400, detail="search query is required")
    results = [r.to_dict() for r in engine.units.search_units(query, limit=int(limit))]
    return {"query": query, "results": results, "total": len(results)}
