"""CLI command: secscan scan <directory> — run the rule database over a tree."""

from __future__ import annotations

import logging
import signal
import sys
from collections import Counter
from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from secscan.config import ScannerConfig
from secscan.errors import ScanError
from secscan.report import FORMATS, default_report_name, render, write_report
from secscan.rules.builtin import builtin_rules
from secscan.rules.loader import load_rules
from secscan.rules.models import RuleDatabase, Severity
from secscan.scanner.engine import ScanEngine
from secscan.scanner.models import ScanResult

console = Console(stderr=True)

SEVERITY_COLORS = {
    Severity.CRITICAL.value: "magenta",
    Severity.HIGH.value: "red",
    Severity.MEDIUM.value: "yellow",
    Severity.LOW.value: "green",
}


def resolve_database(ctx: click.Context, config: ScannerConfig) -> RuleDatabase:
    """Load the rule file chosen by --rules/env/discovery, or the built-ins."""
    rules_path = config.resolve_rules_path(ctx.obj.get("rules_path"))
    if rules_path is None:
        console.print("Using built-in patterns")
        return builtin_rules()
    console.print(f"Using patterns: [cyan]{rules_path}[/cyan]")
    return load_rules(rules_path)


@click.command()
@click.argument("directory", type=click.Path())
@click.option(
    "--language",
    "-l",
    "languages",
    multiple=True,
    default=("all",),
    show_default=True,
    help="Languages to scan (e.g. csharp, java, php, python, javascript, all).",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(FORMATS),
    default="text",
    show_default=True,
    help="Report format.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Report file path (default: stdout for text).",
)
@click.option(
    "--output-formats",
    multiple=True,
    type=click.Choice(FORMATS + ("all",)),
    help="Generate several report files at once.",
)
@click.option("--exclude", "-e", multiple=True, help="Directory or file names to skip.")
@click.option("--progress", is_flag=True, help="Show scan progress.")
@click.option("--workers", "-w", type=int, default=None, help="Worker threads.")
@click.option(
    "--strict-extensions",
    is_flag=True,
    help="Only run rules on the file extensions their rule file declares.",
)
@click.option(
    "--fail-on",
    type=click.Choice([s.value for s in Severity], case_sensitive=False),
    default=None,
    help="Exit 1 if any finding is at or above this severity.",
)
@click.pass_context
def scan(
    ctx: click.Context,
    directory: str,
    languages: tuple[str, ...],
    fmt: str,
    output: str | None,
    output_formats: tuple[str, ...],
    exclude: tuple[str, ...],
    progress: bool,
    workers: int | None,
    strict_extensions: bool,
    fail_on: str | None,
) -> None:
    """Scan source code for security vulnerabilities."""
    verbose = ctx.obj.get("verbose", False)
    if progress and not verbose:
        logging.getLogger().setLevel(logging.INFO)

    config = ScannerConfig.load()
    console.print("[bold]secscan[/bold] security vulnerability scanner")
    console.print(f"Scanning: [cyan]{directory}[/cyan]")
    console.print(f"Languages: [cyan]{', '.join(languages)}[/cyan]")

    try:
        database = resolve_database(ctx, config)
        engine = ScanEngine(
            database=database,
            languages=languages,
            workers=workers or config.workers,
            restrict_extensions=strict_extensions,
            exclude_patterns=list(exclude),
        )
        result = _run(engine, directory, progress)
    except ScanError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    for report_fmt, target in _report_targets(result, fmt, output, output_formats):
        if target is None:
            click.echo(render(result, report_fmt), nl=False)
        else:
            write_report(result, report_fmt, target)
            console.print(f"Report saved to: [cyan]{target}[/cyan]")

    _print_summary(result, verbose)

    if fail_on and result.count_at_or_above(Severity.parse(fail_on)) > 0:
        sys.exit(1)


def _run(engine: ScanEngine, directory: str, show_progress: bool) -> ScanResult:
    """Run the scan, stopping cleanly on Ctrl+C."""

    def _signal_handler(signum: int, frame: object) -> None:
        console.print("\n[dim]Stopping scan...[/dim]")
        engine.stop()

    previous = signal.signal(signal.SIGINT, _signal_handler)
    try:
        if not show_progress:
            return engine.scan(directory)

        files = engine.targets(directory)
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as bar:
            task = bar.add_task("Scanning", total=len(files))

            def _on_file(path: Path) -> None:
                bar.update(task, advance=1, description=path.name)

            engine.on_file = _on_file
            return engine.scan(directory)
    finally:
        signal.signal(signal.SIGINT, previous)


def _report_targets(
    result: ScanResult,
    fmt: str,
    output: str | None,
    output_formats: tuple[str, ...],
) -> list[tuple[str, str | None]]:
    """(format, path) pairs to generate; a ``None`` path means stdout."""
    formats = list(FORMATS) if "all" in output_formats else list(output_formats or (fmt,))
    if len(formats) > 1:
        return [(f, default_report_name(result.project_path, f)) for f in formats]
    single = formats[0]
    if output:
        return [(single, output)]
    if single != "text":
        return [(single, default_report_name(result.project_path, single))]
    return [(single, None)]


def _print_summary(result: ScanResult, verbose: bool) -> None:
    console.print("\n[bold]Scan Summary:[/bold]")
    console.print(f"  Files scanned: {result.total_files_scanned}")
    if result.files_failed:
        console.print(f"  Files with errors: {result.files_failed}")
    console.print(f"  Total vulnerabilities: {result.total_vulnerabilities}")
    console.print(f"  Scan duration: {result.duration:.2f} seconds")

    if result.total_vulnerabilities > 0:
        console.print("  Severity breakdown:")
        for severity, count in result.vulnerabilities_by_severity.items():
            if count > 0:
                color = SEVERITY_COLORS.get(severity, "white")
                console.print(f"    [{color}]{severity}: {count}[/{color}]")

        console.print("  Top vulnerability categories:")
        top = sorted(
            result.vulnerabilities_by_category.items(), key=lambda kv: (-kv[1], kv[0])
        )[:5]
        for category, count in top:
            console.print(f"    {category}: {count}")

    if verbose and result.total_vulnerabilities > 0:
        console.print("\n[bold]File breakdown:[/bold]")
        per_file = Counter(f.file_path for f in result.findings)
        for path, count in per_file.most_common(10):
            console.print(f"  {path}: {count} vulnerabilities")

    if result.interrupted:
        console.print("\n[yellow]Scan interrupted, results are partial.[/yellow]")
    if result.total_vulnerabilities > 0:
        console.print(
            "\n[yellow]Security vulnerabilities found! "
            "Please review the detailed report.[/yellow]"
        )
    else:
        console.print("\n[green]No security vulnerabilities detected.[/green]")
