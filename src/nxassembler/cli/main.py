"""
Main CLI entry point for nxdata-assembler using Click.

Usage:
    nxdata-assembler build SCAN [--json]
    nxdata-assembler validate SCAN [--json]
    nxdata-assembler write SCAN --output PATH [--format nexus|json|parquet] [--dry-run]
    nxdata-assembler check FILE [--group PATH] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

import click

from nxassembler.errors import LayoutError
from nxassembler.models import NxDataLayout
from nxassembler.parsers import NexusParser
from nxassembler.validation import LayoutValidator, ValidationResult
from nxassembler.workflow import AssemblyResult, assemble_from_file
from nxassembler.writers import DEFAULT_DATA_GROUP, layout_to_document, write_layout
from nxassembler.writers.json_writer import JSONEncoder


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class Config:
    """Shared configuration for CLI commands."""

    def __init__(self) -> None:
        self.verbose = False
        self.debug = False


pass_config = click.make_pass_decorator(Config, ensure=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.version_option(version="0.1.0", prog_name="nxdata-assembler")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """Assemble NeXus NXdata axis layouts from scan descriptions."""
    ctx.ensure_object(Config)
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug
    setup_logging(verbose=verbose, debug=debug)


def _assemble_or_fail(scan: str) -> tuple[AssemblyResult, NxDataLayout]:
    """Assemble a scan description, exiting with the assembly errors on failure."""
    result = assemble_from_file(scan)
    if result.has_errors or result.layout is None:
        click.echo(click.style("Assembly errors:", fg="red"), err=True)
        for error in result.errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(1)
    return result, result.layout


@cli.command()
@click.argument("scan", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_config
def build(config: Config, scan: str, as_json: bool) -> None:
    """Assemble a scan description and print the layout.

    Example:
        nxdata-assembler build scan_0001.json
    """
    result, layout = _assemble_or_fail(scan)

    if as_json:
        document = layout_to_document(layout, title=result.title)
        click.echo(json.dumps(document, indent=2, cls=JSONEncoder))
        return

    click.echo(result.summary())


@cli.command()
@click.argument("scan", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_config
def validate(config: Config, scan: str, as_json: bool) -> None:
    """Assemble a scan description and validate the layout without writing.

    Exits with status 1 when assembly fails or validation finds errors.

    Example:
        nxdata-assembler validate scan_0001.json
    """
    logger = logging.getLogger("validate")

    result = assemble_from_file(scan)
    validation: Optional[ValidationResult] = None
    if result.layout is not None:
        logger.info("Validating...")
        validation = LayoutValidator().validate(result.layout)

    is_valid = not result.has_errors and validation is not None and validation.is_valid

    if as_json:
        output = {
            "is_valid": is_valid,
            "assembly": {
                "is_complete": result.is_complete,
                "assembly_errors": result.errors,
                "assembly_warnings": result.warnings,
            },
        }
        if validation is not None:
            output.update(_issues_json(validation))
        click.echo(json.dumps(output, indent=2, cls=JSONEncoder))
    else:
        status = click.style("PASSED", fg="green") if is_valid else click.style("FAILED", fg="red")
        click.echo(f"Validation: {status}")
        click.echo()
        if result.has_errors:
            click.echo(click.style("Assembly errors:", fg="red"))
            for error in result.errors:
                click.echo(f"  ✗ {error}")
        if validation is not None:
            _print_issues(validation)
            click.echo()
            click.echo(result.summary())

    if not is_valid:
        sys.exit(1)


@cli.command()
@click.argument("scan", type=click.Path(exists=True))
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(),
    help="NeXus file for --format nexus, output directory otherwise",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["nexus", "json", "parquet"]),
    default="nexus",
    show_default=True,
    help="Output format",
)
@click.option(
    "--group",
    "-g",
    default=DEFAULT_DATA_GROUP,
    show_default=True,
    help="NXdata group path for --format nexus",
)
@click.option("--skip-validation", is_flag=True, help="Skip validation step")
@click.option("--dry-run", is_flag=True, help="Assemble and validate but don't write output")
@pass_config
def write(
    config: Config,
    scan: str,
    output: str,
    fmt: str,
    group: str,
    skip_validation: bool,
    dry_run: bool,
) -> None:
    """Assemble a scan description and write the layout.

    Example:
        nxdata-assembler write scan_0001.json --output scan_0001.nxs
        nxdata-assembler write scan_0001.json -f parquet -o ./catalog/
    """
    logger = logging.getLogger("write")

    result, layout = _assemble_or_fail(scan)

    if not skip_validation:
        logger.info("Validating layout...")
        validation = LayoutValidator().validate(layout)
        if not validation.is_valid:
            click.echo(click.style("Validation failed:", fg="red"), err=True)
            for issue in validation.errors:
                click.echo(f"  [{issue.severity}] {issue.field}: {issue.message}", err=True)
            sys.exit(1)
        for issue in validation.warnings:
            click.echo(
                click.style(f"Warning: {issue.field}: {issue.message}", fg="yellow"),
                err=True,
            )

    click.echo(result.summary())

    if dry_run:
        logger.info("Dry run - skipping output")
        click.echo(click.style("\nDry run - no files written", fg="cyan"))
        return

    logger.info(f"Writing {fmt} output to: {output}")
    try:
        paths = write_layout(layout, output, fmt=fmt, title=result.title, group_path=group)
    except (LayoutError, OSError) as e:
        raise click.ClickException(f"Error writing output: {e}")

    click.echo(click.style("\nOutput files:", fg="green"))
    for kind, path in paths.items():
        click.echo(f"  {kind}: {path}")


@cli.command()
@click.argument("file", type=click.Path(exists=True))
@click.option(
    "--group",
    "-g",
    default=DEFAULT_DATA_GROUP,
    show_default=True,
    help="NXdata group path",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_config
def check(config: Config, file: str, group: str, as_json: bool) -> None:
    """Read an NXdata group from a NeXus file and validate its attributes.

    Example:
        nxdata-assembler check scan_0001.nxs --group /entry/data
    """
    try:
        layout = NexusParser().parse(file, group_path=group)
    except LayoutError as e:
        raise click.ClickException(str(e))

    validation = LayoutValidator().validate(layout)

    if as_json:
        output = {"is_valid": validation.is_valid, **_issues_json(validation)}
        output["layout"] = layout_to_document(layout)
        click.echo(json.dumps(output, indent=2, cls=JSONEncoder))
    else:
        status = (
            click.style("PASSED", fg="green")
            if validation.is_valid
            else click.style("FAILED", fg="red")
        )
        click.echo(f"Check: {status}")
        click.echo()
        _print_issues(validation)
        click.echo()
        click.echo(layout.summary())

    if not validation.is_valid:
        sys.exit(1)


def _issues_json(validation: ValidationResult) -> dict:
    return {
        "errors": [
            {"field": i.field, "message": i.message, "severity": i.severity}
            for i in validation.errors
        ],
        "warnings": [
            {"field": i.field, "message": i.message, "severity": i.severity}
            for i in validation.warnings
        ],
    }


def _print_issues(validation: ValidationResult) -> None:
    """Print validation errors and warnings."""
    if validation.errors:
        click.echo(click.style("Errors:", fg="red"))
        for issue in validation.errors:
            click.echo(f"  ✗ {issue.field}: {issue.message}")

    if validation.warnings:
        click.echo(click.style("Warnings:", fg="yellow"))
        for issue in validation.warnings:
            click.echo(f"  ⚠ {issue.field}: {issue.message}")


def app(args: Optional[list[str]] = None) -> int:
    """
    Main application entry point (for testing).

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success)
    """
    try:
        cli(args, standalone_mode=False)
        return 0
    except click.ClickException as e:
        e.show()
        return 1
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
