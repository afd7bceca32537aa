"""
subgen — CLI entrypoint.

Usage:
    subgen --help
    subgen generate
    subgen scan --json
    subgen config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from subgen import __version__
from subgen.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="subgen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to substitutions.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """subgen — generate Espresso substitutor classes from annotated Java sources."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("SUBGEN_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("SUBGEN_LOG_FILE"),
        log_file_level=os.environ.get("SUBGEN_LOG_FILE_LEVEL"),
    )


_source_option = click.option(
    "--source",
    "-s",
    "sources",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Source root to scan (repeatable; overrides the config).",
)


@cli.command()
@_source_option
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output root for generated sources (overrides the config).",
)
@click.option("--dry-run", is_flag=True, help="Render and report, but write nothing.")
@click.option("--strict", is_flag=True, help="Exit non-zero if anything was skipped or failed.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(
    ctx: click.Context,
    sources: tuple[Path, ...],
    output_dir: Path | None,
    dry_run: bool,
    strict: bool,
    as_json: bool,
) -> None:
    """Generate one substitutor per @Substitution method.

    Examples:

        subgen generate

        subgen generate -s src/main/java -o build/generated

        subgen generate --dry-run --json
    """
    from subgen.core.use_cases.generate import run_generate

    result = run_generate(
        config_path=ctx.obj.get("config_path"),
        source_roots=list(sources) or None,
        output_dir=output_dir,
        dry_run=dry_run,
    )
    failed = bool(result.error) or (strict and bool(result.warnings))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if failed:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    assert report is not None  # guaranteed after error check above
    quiet = ctx.obj.get("quiet", False)

    mode_label = "[dry-run] " if dry_run else ""
    if not quiet:
        click.secho(f"\n⚙️  {mode_label}Substitutors → {result.output_dir}", fg="cyan", bold=True)
        click.echo(f"   Files scanned: {result.files_scanned}")
        click.echo()

    for unit in report.generated:
        if not quiet:
            click.secho("   ✓ ", fg="green", nl=False)
            click.echo(f"{unit.class_name}  ← {unit.owner}.{unit.method_name}")

    for skipped in report.skipped:
        click.secho(f"   ⊘ {skipped.owner}.{skipped.method_name} ", fg="yellow", nl=False)
        click.echo(f"({skipped.reason})")

    for failure in report.failed:
        click.secho(f"   ✗ {failure.qualified_name} ", fg="red", nl=False)
        click.echo(f"({failure.error})")

    for path in result.unreadable:
        click.secho(f"   ⚠️  unreadable: {path}", fg="yellow")

    if result.stale and not quiet:
        click.echo()
        click.secho("   Stale generated files (no longer produced):", fg="yellow")
        for path in result.stale:
            click.echo(f"     • {path}")

    click.echo()
    status_color = "red" if report.failed else "yellow" if report.skipped else "green"
    click.secho(
        f"   Result: {len(report.generated)} generated, {result.written} written, "
        f"{len(report.skipped)} skipped, {len(report.failed)} failed",
        fg=status_color,
        bold=True,
    )
    click.echo()

    if failed:
        sys.exit(1)


@cli.command()
@_source_option
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def scan(ctx: click.Context, sources: tuple[Path, ...], as_json: bool) -> None:
    """List discovered substitutions without generating anything."""
    from subgen.core.use_cases.generate import run_scan

    result = run_scan(
        config_path=ctx.obj.get("config_path"),
        source_roots=list(sources) or None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"\n🔍 Substitutions: {len(result.requests)}", fg="cyan", bold=True)
    click.echo(f"   Files scanned: {result.files_scanned}")
    click.echo()

    for request in result.requests:
        receiver = "receiver, " if request.has_receiver else ""
        returns = "void" if request.is_void else "value"
        params = ", ".join(request.parameter_types)
        click.echo(f"   • {request.class_name}  {request.method_name}({params}) [{receiver}{returns}]")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    click.echo()


@cli.group()
def config() -> None:
    """Generator configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate substitutions.yml configuration."""
    from subgen.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)
        return

    if result.valid:
        assert result.config is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Package: {result.config.substitution_package}")
        click.echo(f"   Source roots: {', '.join(result.config.source_roots) or '(none)'}")
        click.echo(f"   Output: {result.config.output_dir}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


if __name__ == "__main__":
    cli()
