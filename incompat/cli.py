"""incompat CLI — query known incompatibilities from the command line."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from incompat import __version__
from incompat.config import load_settings
from incompat.known import builtin_records
from incompat.matching import InvalidVersionError, parse_version
from incompat.models.records import IncompatRecord
from incompat.registry import IncompatRegistry
from incompat.registry.loader import RecordLoadError, load_registry

console = Console()
logger = logging.getLogger(__name__)

EXIT_CONFLICTS = 1
EXIT_LOAD_ERROR = 2

records_option = click.option(
    "--records",
    "-r",
    "records_file",
    default=None,
    type=click.Path(dir_okay=False),
    help="YAML definitions file (default: $INCOMPAT_RECORDS_FILE or the built-in set)",
)


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context):
    """incompat — known incompatibilities between package versions.

    Look up documented conflicts between versions of a crate and other
    crates or the Rust toolchain.
    """
    settings = load_settings()
    logging.basicConfig(level=settings.log_level_number)
    ctx.obj = settings


def _open_registry(ctx: click.Context, records_file: str | None) -> IncompatRegistry:
    path = records_file or ctx.obj.records_file
    if not path:
        logger.debug("Using built-in incompatibility records")
        return IncompatRegistry(builtin_records())

    try:
        return load_registry(path)
    except (RecordLoadError, OSError) as e:
        console.print(f"[red]Failed to load records from {escape(str(path))}:[/]")
        for issue in getattr(e, "issues", None) or [str(e)]:
            console.print(f"  [red]x[/] {escape(issue)}")
        ctx.exit(EXIT_LOAD_ERROR)


def _echo_records(records: list[IncompatRecord]):
    for record in records:
        click.echo(record.render())


def _parse_version_arg(ctx: click.Context, label: str, value: str):
    try:
        return parse_version(value)
    except InvalidVersionError as e:
        raise click.BadParameter(str(e), ctx=ctx, param_hint=label) from e


# ── Check ────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.argument("version")
@click.option("--rust", "rust_version", default=None, help="Toolchain version to check against")
@records_option
@click.pass_context
def check(ctx: click.Context, name: str, version: str, rust_version: str | None, records_file: str | None):
    """Report known conflicts for NAME at VERSION.

    Exits with status 1 when at least one conflict applies.
    """
    crate_version = _parse_version_arg(ctx, "VERSION", version)
    toolchain = _parse_version_arg(ctx, "--rust", rust_version) if rust_version else None

    registry = _open_registry(ctx, records_file)
    found = registry.conflicts_for(name, crate_version, toolchain)

    if not found:
        console.print(f"[green]No known conflicts for {escape(name)} {escape(version)}.[/]")
        return

    console.print(f"[yellow]{len(found)} known conflict(s) for {escape(name)} {escape(version)}:[/]\n")
    _echo_records(found)
    ctx.exit(EXIT_CONFLICTS)


# ── List ─────────────────────────────────────────────────────────────


@main.command(name="list")
@records_option
@click.pass_context
def list_records(ctx: click.Context, records_file: str | None):
    """List all known incompatibilities."""
    registry = _open_registry(ctx, records_file)

    if not len(registry):
        console.print("[yellow]No incompatibility records.[/]")
        return

    table = Table(title=f"Incompatibilities ({len(registry)} records)")
    table.add_column("Target", style="cyan")
    table.add_column("Conflicts with", style="magenta")
    table.add_column("Refs", justify="right")
    table.add_column("Reason")

    for record in registry:
        table.add_row(
            escape(str(record.target)),
            escape(str(record.conflicts)),
            str(len(record.references or ())),
            escape(record.reason or ""),
        )

    console.print(table)


# ── Show ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@records_option
@click.pass_context
def show(ctx: click.Context, name: str, records_file: str | None):
    """Show every record whose target is the crate NAME, at any version."""
    registry = _open_registry(ctx, records_file)
    found = registry.affecting_crate(name)

    if not found:
        console.print(f"[yellow]No records for {escape(name)}.[/]")
        return

    _echo_records(found)


# ── Validate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("definitions", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx: click.Context, definitions: str):
    """Validate a YAML definitions file."""
    console.print(f"\n[bold blue]incompat[/] — Validating: {escape(definitions)}\n")

    registry = _open_registry(ctx, definitions)
    console.print(f"  [green]v[/] {len(registry)} record(s) loaded")


if __name__ == "__main__":
    main()
