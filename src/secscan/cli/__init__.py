"""Command line for secscan: ``secscan scan`` and ``secscan rules``."""

from __future__ import annotations

import logging

import click

from secscan import __version__

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@click.group()
@click.version_option(version=__version__, prog_name="secscan")
@click.option(
    "--rules",
    "-r",
    type=click.Path(),
    help=(
        "JSON or YAML rule file. Defaults to $SECSCAN_RULES, then "
        "./patterns.json, then the built-in rules."
    ),
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output and per-file totals.")
@click.pass_context
def main(ctx: click.Context, rules: str | None, verbose: bool) -> None:
    """secscan: regex-based vulnerability scanner for source trees.

    Run ``secscan scan DIR`` to report findings, or ``secscan rules list``
    to see which rule set is active.
    """
    ctx.ensure_object(dict)
    ctx.obj["rules_path"] = rules
    ctx.obj["verbose"] = verbose

    # scan --progress lowers this to INFO
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    # Deferred so the subcommand modules can import from this package
    from secscan.cli.rules import rules
    from secscan.cli.scan import scan

    for command in (scan, rules):
        main.add_command(command)


_register_commands()
