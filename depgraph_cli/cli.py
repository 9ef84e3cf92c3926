"""Typer-based CLI for DepGraph call-graph analysis."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import toml
import typer
from rich.console import Console
from rich.table import Table

from . import __version__, config
from .analyzer import analyze_project
from .config_manager import load_config, save_config
from .graph_export import export_dot, export_json
from .models import CALL_KINDS
from .storage import GraphStore

app = typer.Typer(
    help="DepGraph CLI: static call resolution for Python and Go projects.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

_CALL_KIND_VALUES = {k.value for k in CALL_KINDS}


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"DepGraph CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log resolution details to stderr."),
):
    """DepGraph CLI: resolve call targets and persist the dependency graph."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _open_store(db: Optional[Path], must_exist: bool = True) -> GraphStore:
    db_path = db or config.DEFAULT_DB
    if must_exist and not db_path.exists():
        raise typer.BadParameter(f"No graph database at {db_path}. Run 'dg analyze <path>' first.")
    return GraphStore(db_path)


@app.command("analyze")
def analyze(
    project_path: Path = typer.Argument(..., exists=True, file_okay=False, help="Path to source project."),
    languages: Optional[List[str]] = typer.Option(
        None, "--language", "-l", help="Language to analyze (repeatable): python, go.",
    ),
    db: Optional[Path] = typer.Option(None, "--db", help="Graph database path."),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Resolver threads."),
    show_unresolved: bool = typer.Option(False, "--show-unresolved", help="List calls that produced no edge."),
):
    """Parse a project, resolve every call and persist the graph."""
    settings = load_config()
    resolver_cfg = settings["resolver"]
    parser_cfg = settings["parser"]

    result = analyze_project(
        project_path,
        languages=languages or parser_cfg["languages"],
        workers=workers or resolver_cfg["workers"],
        extra_builtins=resolver_cfg["extra_builtins"],
        skip_dirs=parser_cfg["skip_dirs"],
    )
    summary = result.summary()

    store = _open_store(db, must_exist=False)
    try:
        store.save_analysis(
            result.store,
            result.relations,
            metadata={
                "source_path": str(project_path.resolve()),
                "analyzed_at": datetime.now().isoformat(),
            },
        )
    finally:
        store.close()

    table = Table(title=f"Analysis of {project_path}", title_style="bold cyan")
    table.add_column("Group", style="cyan")
    table.add_column("Item")
    table.add_column("Count", justify="right", style="green")
    for group in ("files", "entities", "relations", "calls"):
        for item, count in sorted(summary[group].items()):
            table.add_row(group, item, str(count))
    console.print(table)

    if show_unresolved:
        unresolved = result.unresolved()
        if not unresolved:
            console.print("[green]Every call was resolved.[/green]")
        else:
            rows = Table(title="Unresolved calls", title_style="bold yellow")
            rows.add_column("In")
            rows.add_column("Call")
            rows.add_column("Reason", style="yellow")
            for qualname, text, reason in unresolved:
                rows.add_row(qualname, text, reason)
            console.print(rows)

    console.print(f"Saved graph to {db or config.DEFAULT_DB}")


@app.command("calls")
def calls(
    symbol: str = typer.Argument(..., help="Name or qualified name of a function/method."),
    db: Optional[Path] = typer.Option(None, "--db", help="Graph database path."),
    callers: bool = typer.Option(False, "--callers", help="Show incoming calls instead of outgoing."),
):
    """List the resolved call edges of a symbol."""
    store = _open_store(db)
    try:
        matches = store.find_entities(symbol)
        if not matches:
            console.print(f"[red]Symbol '{symbol}' not found.[/red]")
            raise typer.Exit(code=1)

        table = Table(title=f"{'Callers of' if callers else 'Calls from'} {symbol}", title_style="bold cyan")
        table.add_column("From")
        table.add_column("Kind", style="magenta")
        table.add_column("To")
        for entity in matches:
            if callers:
                edges = [r for r in store.incoming(entity["entity_id"]) if r["kind"] in _CALL_KIND_VALUES]
            else:
                edges = [r for r in store.outgoing(entity["entity_id"]) if r["kind"] in _CALL_KIND_VALUES]
            for edge in edges:
                src = store.get_entity(edge["src"])
                dst = store.get_entity(edge["dst"])
                table.add_row(
                    src["qualname"] if src else str(edge["src"]),
                    edge["kind"],
                    dst["qualname"] if dst else str(edge["dst"]),
                )
        if table.row_count == 0:
            console.print(f"No {'callers' if callers else 'calls'} recorded for '{symbol}'.")
        else:
            console.print(table)
    finally:
        store.close()


@app.command("export")
def export(
    fmt: str = typer.Option("dot", "--format", "-f", help="Export format: dot or json."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path."),
    focus: str = typer.Option("", "--focus", help="Only export edges touching this symbol."),
    db: Optional[Path] = typer.Option(None, "--db", help="Graph database path."),
):
    """Export the persisted graph to Graphviz DOT or JSON."""
    fmt = fmt.lower()
    if fmt not in {"dot", "json"}:
        raise typer.BadParameter("Format must be one of: dot, json")

    if output is None:
        output = Path.cwd() / f"depgraph.{fmt}"

    store = _open_store(db)
    try:
        if fmt == "dot":
            export_dot(store, output, focus=focus)
        else:
            export_json(store, output, focus=focus)
    finally:
        store.close()

    typer.echo(f"Exported graph to {output}")


@app.command("show-config")
def show_config(
    init: bool = typer.Option(False, "--init", help="Write the effective configuration to the config file."),
):
    """Print the effective configuration."""
    settings = load_config()
    typer.echo(f"# {config.CONFIG_FILE}")
    typer.echo(f"# database: {config.DEFAULT_DB}")
    typer.echo(toml.dumps(settings))
    if init:
        if config.CONFIG_FILE.exists():
            raise typer.BadParameter(f"{config.CONFIG_FILE} already exists.")
        path = save_config(settings, config.CONFIG_FILE)
        typer.echo(f"Wrote {path}")
