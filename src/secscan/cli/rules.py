"""CLI commands for inspecting and exporting the active rule database."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.table import Table

from secscan.cli.scan import SEVERITY_COLORS, resolve_database
from secscan.config import ScannerConfig
from secscan.errors import ScanError
from secscan.rules.loader import save_rules
from secscan.rules.models import RuleDatabase

console = Console(stderr=True)


def _load(ctx: click.Context) -> RuleDatabase:
    try:
        return resolve_database(ctx, ScannerConfig.load())
    except ScanError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@click.group()
def rules() -> None:
    """Inspect and export vulnerability rules."""


@rules.command("list")
@click.pass_context
def list_rules(ctx: click.Context) -> None:
    """List rule categories in the active database."""
    database = _load(ctx)

    table = Table(title=f"Rules ({database.source})", show_lines=False)
    table.add_column("Category", style="cyan")
    table.add_column("Severity", style="bold", no_wrap=True)
    table.add_column("CWE", no_wrap=True)
    table.add_column("Patterns", justify="right", no_wrap=True)
    table.add_column("Languages")

    for rule in database.values():
        color = SEVERITY_COLORS.get(rule.severity.value, "white")
        table.add_row(
            rule.category,
            f"[{color}]{rule.severity.value}[/{color}]",
            rule.cwe_id,
            str(len(rule.patterns)),
            ", ".join(sorted(rule.languages)),
        )

    Console().print(table)
    console.print(f"{len(database)} rules, {database.pattern_count} patterns")


@rules.command("export")
@click.argument("path", type=click.Path())
@click.pass_context
def export_rules(ctx: click.Context, path: str) -> None:
    """Write the active rule database to PATH (.json, .yaml or .yml)."""
    database = _load(ctx)
    save_rules(database, path)
    console.print(f"[green]{len(database)} rules written to {path}[/green]")
