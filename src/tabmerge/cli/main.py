"""Command-line interface for tabmerge.

Provides commands to inspect table files and merge them.
"""

import importlib.metadata
import sys
import traceback
from pathlib import Path

import click

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("tabmerge")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.3.0"  # Fallback for development


@click.group()
@click.version_option(version=__version__, prog_name="tabmerge")
def cli() -> None:
    """Merge spreadsheet-like tables by matching rows on a key column.

    Use 'tabmerge COMMAND --help' for command-specific help.
    """


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def columns(files: tuple[str, ...]) -> None:
    """List the columns found in FILES.

    Any of the listed columns can be passed as --key to the merge command.

    Examples
    --------
        tabmerge columns vendor_a.csv vendor_b.csv
    """
    from tabmerge import available_key_columns

    try:
        names = available_key_columns(list(files))
    except Exception as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    for name in names:
        click.echo(name)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--key",
    "-k",
    "key_column",
    type=str,
    default=None,
    help="Column used to match rows across files",
)
@click.option(
    "--threshold",
    "-t",
    type=float,
    default=None,
    help="Similarity threshold between 0.5 and 1.0 (default: 0.85)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file (.csv, .tsv, .json or .jsonl)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON configuration file; command-line options take precedence",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for the audit trail (events.jsonl and run.json)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def merge(
    files: tuple[str, ...],
    key_column: str | None,
    threshold: float | None,
    output: str | None,
    config_file: str | None,
    log_dir: str | None,
    verbose: bool,
) -> None:
    """Merge two to five table FILES on a key column.

    Rows from different files are grouped when their key values match
    exactly, numerically, or (for values of 5+ characters) by edit-distance
    similarity. Each file contributes at most one row per merged row.

    Examples
    --------
        tabmerge merge a.csv b.csv --key sku -o merged.csv
        tabmerge merge a.csv b.json c.jsonl -k code -t 0.9 -o out.jsonl
        tabmerge merge a.csv b.csv --config merge.json --log-dir runs/
    """
    from tabmerge.audit import RunContext
    from tabmerge.engine import PipelineConfig, run_pipeline
    from tabmerge.merge import DEFAULT_SIMILARITY_THRESHOLD

    if config_file is None and key_column is None:
        click.secho("✗ Missing option '--key' (or provide --config).", fg="red", err=True)
        sys.exit(1)

    try:
        if config_file:
            config = PipelineConfig.from_file(
                config_file,
                key_column=key_column,
                similarity_threshold=threshold,
                output_path=output,
            )
        else:
            config = PipelineConfig(
                key_column=key_column,
                similarity_threshold=(
                    threshold if threshold is not None else DEFAULT_SIMILARITY_THRESHOLD
                ),
                output_path=Path(output) if output else None,
            )
    except ValueError as e:
        click.secho(f"✗ Invalid configuration: {e}", fg="red", err=True)
        sys.exit(1)

    if verbose:
        click.echo("Starting merge...", err=True)
        for index, name in enumerate(files, start=1):
            click.echo(f"  Source {index}: {name}", err=True)
        click.echo(f"  Key column: {config.key_column}", err=True)
        click.echo(f"  Threshold: {config.similarity_threshold}", err=True)
        click.echo(f"  Output: {config.output_path or '(none)'}", err=True)

    run = None
    if log_dir:
        run = RunContext.start(output_dir=Path(log_dir), parameters=config.to_dict())

    try:
        result = run_pipeline(list(files), config, run=run)
    except Exception as e:
        if run:
            run.record_error(e, include_traceback=True)
            run.finish(status="failed")
        click.secho(f"✗ Error: {e}", fg="red", err=True)
        if verbose:
            click.echo(traceback.format_exc(), err=True)
        sys.exit(1)

    if run:
        if not result.success:
            status = "failed"
        elif result.export_error:
            status = "partial"
        else:
            status = "success"
        run.finish(status=status, rows_processed=result.total_rows)

    if not result.success:
        click.secho(f"✗ Merge failed: {result.error_message}", fg="red", err=True)
        sys.exit(1)

    for source in result.sources:
        click.echo(f"  [{source['index']}] {source['name']}: {source['rows']} rows")

    click.secho(
        f"✓ Merged {result.total_rows} rows into {result.total_entities} rows "
        f"({result.entities_multi_source} matched across files)",
        fg="green",
    )

    if result.export_error:
        click.secho(
            f"✗ Export failed: {result.export_error}. The merge succeeded; "
            "fix the output path and run again.",
            fg="red",
            err=True,
        )
        sys.exit(1)

    if result.output_path:
        click.echo(f"Wrote {result.output_path}")

    if run and verbose:
        click.echo(f"Audit trail: {run.output_dir}", err=True)


if __name__ == "__main__":
    cli()
