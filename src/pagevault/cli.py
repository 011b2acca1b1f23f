"""Command line interface for pagevault."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pagevault.config import AppConfig
from pagevault.core.capture import CaptureOptions, take_snapshot
from pagevault.core.errors import CaptureError, InvalidInputError
from pagevault.core.index_builder import build_index
from pagevault.core.logger import create_error_tracker, initialize_logging, shutdown_logging
from pagevault.utils.validators import require_capture_url


console = Console()
err_console = Console(stderr=True)
app = typer.Typer(help="pagevault - rendered page snapshots and a latest-view index")


def _setup_logging(log_dir: Path, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    initialize_logging(str(log_dir), level)


def _display_path(path: Path) -> str:
    """Path relative to the working directory when it lies below it."""
    try:
        return os.path.relpath(path, Path.cwd())
    except ValueError:
        return str(path)


def append_ci_outputs(output_path: Path, values: dict) -> None:
    """Append ``key=value`` lines to the CI-provided output file."""
    with open(output_path, 'a', encoding='utf-8') as f:
        for key, value in values.items():
            f.write(f"{key}={value}\n")


@app.command()
def snapshot(
    url: str = typer.Argument(..., help="Absolute http(s) URL to capture"),
    archive: Path = typer.Option(None, "--archive", help="Archive directory"),
    timestamp: Optional[str] = typer.Option(None, "--timestamp", help="Identifier base override"),
    network_idle_timeout: int = typer.Option(
        CaptureOptions.network_idle_timeout_ms, help="Network idle wait in ms (0 disables)"
    ),
    settle: int = typer.Option(CaptureOptions.additional_wait_ms, help="Extra settle delay in ms"),
    navigation_timeout: int = typer.Option(
        CaptureOptions.navigation_timeout_ms, help="Navigation timeout in ms"
    ),
    wait_until: str = typer.Option(CaptureOptions.wait_until, help="Navigation wait-until state"),
    log_dir: Path = typer.Option(None, "--log-dir", help="Log file directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Capture one snapshot of URL into the archive."""
    try:
        require_capture_url(url)
    except InvalidInputError as exc:
        err_console.print(f"Snapshot error: {exc}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(code=1)

    config = AppConfig.from_env(archive_root=archive, log_dir=log_dir)
    _setup_logging(config.log_dir, verbose)
    tracker = create_error_tracker("cli")

    options = CaptureOptions(
        archive_root=config.resolve(config.archive_root, Path.cwd()),
        timestamp=timestamp,
        network_idle_timeout_ms=network_idle_timeout,
        additional_wait_ms=settle,
        navigation_timeout_ms=navigation_timeout,
        wait_until=wait_until,
        run_id=config.run_id,
    )

    try:
        result = take_snapshot(url, options)
    except (InvalidInputError, CaptureError) as exc:
        tracker.log_error(exc, context="snapshot", url=url)
        err_console.print(f"Snapshot error: {exc}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(code=1)
    finally:
        shutdown_logging()

    typer.echo("Snapshot saved to:")
    typer.echo(f"- {_display_path(result.html_path)}")
    typer.echo(f"- {_display_path(result.text_path)}")
    for warning in result.warnings:
        err_console.print(f"Warning: {warning}", markup=False, highlight=False, soft_wrap=True)

    if config.ci_output_path is not None:
        append_ci_outputs(
            config.ci_output_path,
            {"snapshot_timestamp": result.timestamp, "snapshot_url": result.url},
        )


@app.command("build-index")
def build_index_command(
    archive: Path = typer.Option(None, "--archive", help="Archive directory"),
    docs: Path = typer.Option(None, "--docs", help="Output directory for the latest view"),
    log_dir: Path = typer.Option(None, "--log-dir", help="Log file directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rebuild docs/latest and docs/index.html from the archive."""
    config = AppConfig.from_env(archive_root=archive, docs_root=docs, log_dir=log_dir)
    _setup_logging(config.log_dir, verbose)
    tracker = create_error_tracker("build_index")

    try:
        result = build_index(
            config.resolve(config.archive_root, Path.cwd()),
            config.resolve(config.docs_root, Path.cwd()),
            tracker=tracker,
        )
    except OSError as exc:
        tracker.log_error(exc, context="build-index")
        err_console.print(f"Failed to build docs index: {exc}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(code=1)
    finally:
        shutdown_logging()

    if not result.entries:
        console.print("[yellow]No snapshots yet.[/yellow]")
    else:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("URL")
        table.add_column("Timestamp")
        table.add_column("Slug")
        for entry in result.entries:
            table.add_row(Text(entry.url), Text(entry.timestamp), Text(entry.slug))
        console.print(table)

    summary = tracker.get_error_summary()
    console.print(
        f"Entries: {len(result.entries)}, skipped: {summary['total_warnings']}",
        highlight=False,
    )
    typer.echo(f"Wrote {_display_path(result.manifest_path)}")
    typer.echo(f"Wrote {_display_path(result.listing_path)}")
