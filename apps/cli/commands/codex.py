#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""apps/cli/commands/codex.py

Terminal views over a loaded corpus.

Notes
- Thin UI layer: every query goes through `GrimoireEngine` services.
"""

from __future__ import annotations

from rich import box
from rich.panel import Panel
from rich.table import Table

from apps.cli.cli_common import clip, console, fmt_costs
from grimoire.engine import GrimoireEngine
from grimoire.errors import NotFoundError
from grimoire.schemas.records import UnitRecord


def show_summary(engine: GrimoireEngine) -> None:
    s = engine.summary()
    gs = s["game_system"]
    counts = s["counts"]

    grid = Table.grid(padding=(0, 2))
    grid.add_column(justify="right", style="bold", no_wrap=True)
    grid.add_column()
    grid.add_row("Data", str(s.get("data_dir") or "-"))
    grid.add_row("Game system", f"{gs['name']} (rev {gs['revision']})")
    grid.add_row("Catalogues", str(counts["catalogues"]))
    grid.add_row("Libraries", str(counts["libraries"]))
    grid.add_row("Profile types", str(counts["profile_types"]))
    grid.add_row("Root entry links", str(counts["root_entry_links"]))
    console.print(Panel(grid, title="Grimoire", border_style="cyan"))


def show_catalogues(engine: GrimoireEngine) -> None:
    rows = engine.catalogues.list_catalogues()
    table = Table(title=f"Catalogues ({len(rows)})", box=None, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Rev", justify="right")
    for c in rows:
        table.add_row(c.id, c.name, c.revision)
    console.print(table)


def show_catalogue(engine: GrimoireEngine, catalogue_id: str) -> int:
    try:
        rec = engine.catalogues.get_catalogue(catalogue_id)
    except NotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        return 1

    linked = ", ".join(c.name for c in rec.linked_catalogues) or "-"
    console.print(Panel(f"[bold]{rec.name}[/bold]  rev {rec.revision}\nLinks: {linked}", border_style="cyan"))

    table = Table(box=box.MINIMAL, show_header=True, header_style="bold cyan")
    table.add_column("Link ID", style="dim", no_wrap=True)
    table.add_column("Name")
    table.add_column("Costs", style="green")
    for u in engine.catalogues.get_catalogue_units(catalogue_id):
        table.add_row(u.id, u.name, fmt_costs(u.costs))
    console.print(table)
    return 0


def _unit_panel(rec: UnitRecord) -> Panel:
    grid = Table.grid(padding=(0, 2))
    grid.add_column(justify="right", style="bold", no_wrap=True)
    grid.add_column()
    grid.add_row("ID", rec.id)
    grid.add_row("Type", rec.type or "-")
    grid.add_row("Costs", fmt_costs(rec.costs))
    if rec.faction:
        grid.add_row("Faction", rec.faction.name)
    if rec.catalogue:
        grid.add_row("Catalogue", rec.catalogue.name)
    if rec.publication:
        pub = rec.publication.short_name or rec.publication.name or rec.publication.id
        grid.add_row("Source", f"{pub} p.{rec.publication.page}" if rec.publication.page else pub)
    if rec.constraints:
        c = rec.constraints
        grid.add_row("Limits", f"roster {c.min_per_roster}-{c.max_per_roster}, force {c.min_per_force}-{c.max_per_force}")
    return Panel(grid, title=f"[bold]{rec.name}[/bold]", border_style="gold1")


def show_unit(engine: GrimoireEngine, unit_id: str) -> int:
    try:
        rec = engine.units.get_unit(unit_id)
    except NotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        return 1

    console.print(_unit_panel(rec))

    stats = rec.stats
    if stats is None:
        console.print("[dim]No stat profile.[/dim]")
    else:
        st = Table(box=box.SIMPLE_HEAD, header_style="bold cyan")
        for col in ("M", "T", "SV", "W", "LD", "OC"):
            st.add_column(col, justify="center")
        st.add_row(
            stats.movement,
            str(stats.toughness),
            stats.save,
            str(stats.wounds),
            stats.leadership,
            str(stats.objective_control),
        )
        console.print(st)

    if rec.weapons.ranged:
        wt = Table(title="Ranged", box=box.MINIMAL, header_style="bold cyan")
        for col in ("Weapon", "Range", "A", "BS", "S", "AP", "D", "Keywords"):
            wt.add_column(col)
        for w in rec.weapons.ranged:
            wt.add_row(w.name, w.range, w.attacks, w.ballistic_skill, w.strength, w.armour_penetration, w.damage, ", ".join(w.keywords))
        console.print(wt)

    if rec.weapons.melee:
        mt = Table(title="Melee", box=box.MINIMAL, header_style="bold cyan")
        for col in ("Weapon", "Range", "A", "WS", "S", "AP", "D", "Keywords"):
            mt.add_column(col)
        for w in rec.weapons.melee:
            mt.add_row(w.name, w.range, w.attacks, w.weapon_skill, w.strength, w.armour_penetration, w.damage, ", ".join(w.keywords))
        console.print(mt)

    for ab in rec.profiles.abilities:
        console.print(f"[bold]{ab.name}[/bold]: {clip(ab.description, 120)}")
    if rec.categories:
        console.print("[dim]Keywords: " + ", ".join(c.name for c in rec.categories) + "[/dim]")
    return 0


def show_search(engine: GrimoireEngine, query: str, limit: int = 50) -> None:
    hits = engine.units.search_units(query, limit=limit)
    table = Table(title=f"'{query}' ({len(hits)})", box=None, show_header=True, header_style="bold dim")
    table.add_column("No.", justify="right", style="dim", width=4)
    table.add_column("Unit", style="cyan")
    table.add_column("ID", style="dim")
    for i, hit in enumerate(hits, 1):
        table.add_row(str(i), hit.name, hit.id)
    console.print(table)


def show_factions(engine: GrimoireEngine) -> None:
    rows = engine.units.list_factions()
    table = Table(title=f"Factions ({len(rows)})", box=None, show_header=True, header_style="bold cyan")
    table.add_column("Faction", style="bold")
    table.add_column("Catalogues", style="dim")
    for f in rows:
        table.add_row(f.name, ", ".join(f.catalogues))
    console.print(table)
