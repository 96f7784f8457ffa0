"""Typer CLI entrypoint for fcstd_preview."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
import yaml

from fcstd_preview.batch.models import BatchRunOptions, BatchRunResult, BatchTally, CandidateResult
from fcstd_preview.batch.pipeline import run_batch, run_single_file
from fcstd_preview.config import AppSettings, load_settings
from fcstd_preview.errors import DiscoveryError
from fcstd_preview.ingest.discover import discover_fcstd_files, is_fcstd_file
from fcstd_preview.ingest.ignore import filter_ignored, load_ignore_patterns
from fcstd_preview.logging_utils import configure_logging
from fcstd_preview.utils.paths import relative_posix

app = typer.Typer(
    add_completion=False,
    help="Extract embedded preview images from FreeCAD .FCStd archives.",
    no_args_is_help=True,
)


def _load_and_optionally_configure_logger(
    config_file: Path | None,
    configure: bool,
) -> tuple[AppSettings, logging.Logger]:
    settings = load_settings(config_file=config_file)
    if configure:
        logger = configure_logging(settings.logging.log_file, settings.logging.level)
    else:
        logger = logging.getLogger("fcstd_preview")
    return settings, logger


def _resolve_ignore_patterns(
    settings: AppSettings,
    ignore_config: Path | None,
    no_ignore: bool,
    logger: logging.Logger,
) -> tuple[tuple[str, ...], Path | None]:
    if no_ignore or not settings.ignore.enabled:
        return (), None
    source = ignore_config or settings.ignore.file
    if source is None:
        return (), None
    return tuple(load_ignore_patterns(source, logger=logger)), source


def _echo_progress(result: CandidateResult, tally: BatchTally, total: int) -> None:
    if result.succeeded:
        typer.echo(f"[{tally.processed}/{total}] extracted {result.source_file} -> {result.preview_path}")
    elif result.outcome == "NOT_FOUND":
        typer.echo(f"[{tally.processed}/{total}] no thumbnail in {result.source_file}")
    else:
        typer.echo(f"[{tally.processed}/{total}] failed {result.source_file}: {result.error_message}")
    typer.echo(f"  progress: {tally.processed}/{total} succeeded={tally.succeeded} failed={tally.failed}")


def _echo_batch_summary(run_result: BatchRunResult) -> None:
    if run_result.reason == "no_candidates":
        typer.echo("No .FCStd files found")
        return
    if run_result.ignored_total > 0:
        typer.echo(f"Ignored {run_result.ignored_total} files based on {run_result.ignore_source}")
    if run_result.reason == "all_ignored":
        typer.echo("All files were filtered out by ignore patterns")
        return

    if run_result.success:
        typer.echo(f"All {run_result.selected_total} files processed successfully")
    else:
        typer.echo(f"{run_result.tally.failed} failed out of {run_result.selected_total}")
        for result in run_result.failed_results:
            typer.echo(f"  - {result.source_file}: {result.error_message}")

    typer.echo(f"run_id: {run_result.run_id}")
    typer.echo(f"files_discovered_total: {run_result.discovered_total}")
    typer.echo(f"files_ignored_total: {run_result.ignored_total}")
    typer.echo(f"files_processed_success: {run_result.tally.succeeded}")
    typer.echo(f"files_processed_failed: {run_result.tally.failed}")
    if run_result.summary_path is not None:
        typer.echo(f"summary_path: {run_result.summary_path}")
        typer.echo(f"results_path: {run_result.results_path}")


def _run_single(
    archive_path: Path,
    settings: AppSettings,
    *,
    fit: bool,
    output: Path | None,
    logger: logging.Logger,
) -> None:
    try:
        result = run_single_file(archive_path, settings, use_fit=fit, output_path=output, logger=logger)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if not result.succeeded:
        typer.echo(f"Error: {result.error_message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Extracted thumbnail to: {result.preview_path}")


@app.command("extract")
def extract(
    target: Path | None = typer.Argument(
        None,
        help="A .FCStd file, or a directory to scan recursively (default: current directory).",
    ),
    fit: bool = typer.Option(
        False,
        "--fit",
        help="Run FreeCAD's isometric fit macro on a temporary copy before extracting.",
    ),
    ignore_config: Path | None = typer.Option(
        None,
        "--ignore-config",
        help="Ignore file with one glob pattern per line (batch mode only).",
        dir_okay=False,
    ),
    no_ignore: bool = typer.Option(
        False,
        "--no-ignore",
        help="Disable ignore patterns, including any configured ignore file.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Custom preview path (single-file mode only).",
        dir_okay=False,
    ),
    progress_every: int = typer.Option(
        1,
        "--progress-every",
        min=1,
        help="Log progress every N processed files.",
    ),
    report_dir: Path | None = typer.Option(
        None,
        "--report-dir",
        help="Write run summary JSON and results parquet to this directory.",
        file_okay=False,
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Extract thumbnails from one archive or every archive under a directory."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=True)
    resolved_target = target or Path.cwd()

    single_file = resolved_target.is_file() or (
        not resolved_target.exists() and is_fcstd_file(resolved_target, settings.discovery.extension)
    )
    if single_file:
        _run_single(resolved_target, settings, fit=fit, output=output, logger=logger)
        return
    if output is not None:
        raise typer.BadParameter("--output is only valid when TARGET is a single .FCStd file.")

    patterns, ignore_source = _resolve_ignore_patterns(settings, ignore_config, no_ignore, logger)
    reports_root = report_dir
    if reports_root is None and settings.reports.enabled:
        reports_root = settings.reports.root

    try:
        run_result = run_batch(
            resolved_target,
            settings,
            options=BatchRunOptions(
                use_fit=fit,
                ignore_patterns=patterns,
                ignore_enabled=not no_ignore,
                ignore_source=ignore_source,
                progress_every=progress_every,
                reports_root=reports_root,
            ),
            logger=logger,
            on_progress=_echo_progress,
        )
    except DiscoveryError as exc:
        logger.error("batch_run.discovery_failed root=%s error=%s", resolved_target, exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    _echo_batch_summary(run_result)
    if not run_result.success:
        raise typer.Exit(code=1)


@app.command("discover")
def discover(
    root: Path | None = typer.Argument(
        None,
        help="Directory to scan recursively (default: current directory).",
    ),
    ignore_config: Path | None = typer.Option(
        None,
        "--ignore-config",
        help="Ignore file with one glob pattern per line.",
        dir_okay=False,
    ),
    no_ignore: bool = typer.Option(
        False,
        "--no-ignore",
        help="Disable ignore patterns, including any configured ignore file.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """List the archives a batch run would process, without extracting."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=False)
    root_dir = root or Path.cwd()
    try:
        discovered = discover_fcstd_files(root_dir, settings.discovery.extension, logger=logger)
    except DiscoveryError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    patterns, ignore_source = _resolve_ignore_patterns(settings, ignore_config, no_ignore, logger)
    selected = filter_ignored(discovered, root_dir, patterns, enabled=not no_ignore, logger=logger)
    for path in selected:
        typer.echo(relative_posix(path, root_dir))

    typer.echo(f"files_discovered_total: {len(discovered)}")
    typer.echo(f"files_ignored_total: {len(discovered) - len(selected)}")
    typer.echo(f"ignore_source: {ignore_source}")
    if not selected:
        raise typer.Exit(code=1)


@app.command("show-config")
def show_config(
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the effective configuration after env overrides."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    rendered = yaml.safe_dump(settings.as_dict(), sort_keys=False)
    typer.echo(rendered)


def main() -> None:
    """CLI script entrypoint."""

    app()


if __name__ == "__main__":
    main()
