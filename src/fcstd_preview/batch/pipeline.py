"""Batch preview extraction orchestration."""

from __future__ import annotations

import logging
import shutil
import tempfile
import time
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Callable, Iterator
from uuid import uuid4

from fcstd_preview.batch.models import (
    BatchRunOptions,
    BatchRunResult,
    BatchTally,
    CandidateResult,
    RunFailureReason,
)
from fcstd_preview.batch.reports import write_run_reports
from fcstd_preview.config import AppSettings
from fcstd_preview.errors import PreviewError
from fcstd_preview.extract.thumbnail import THUMBNAIL_ENTRY, ExtractionOutcome, extract_thumbnail
from fcstd_preview.fit.augmenter import run_isofit
from fcstd_preview.ingest.discover import discover_fcstd_files, is_fcstd_file, preview_path_for
from fcstd_preview.ingest.ignore import filter_ignored
from fcstd_preview.utils.time_utils import now_utc

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[CandidateResult, BatchTally, int], None]


@contextmanager
def temporary_archive_copy(archive_path: Path, logger: logging.Logger | None = None) -> Iterator[Path]:
    """Yield a disposable copy of ``archive_path`` in a private temp directory.

    The copy keeps the original file name. The directory is removed on exit;
    a removal failure is logged and otherwise ignored.
    """

    effective_logger = logger or LOGGER
    temp_dir = Path(tempfile.mkdtemp(prefix="fcstd_preview_fit_"))
    try:
        copy_path = temp_dir / archive_path.name
        shutil.copy2(archive_path, copy_path)
        yield copy_path
    finally:
        try:
            shutil.rmtree(temp_dir)
        except OSError as exc:
            effective_logger.warning("fit.temp_cleanup_failed temp_dir=%s error=%s", temp_dir, exc)


def process_candidate(
    archive_path: Path,
    settings: AppSettings,
    *,
    use_fit: bool = False,
    output_path: Path | None = None,
    logger: logging.Logger | None = None,
) -> CandidateResult:
    """Optionally fit, then extract the preview of one archive.

    Never raises for per-archive problems; they are returned as a failed
    ``CandidateResult``. The preview is always written next to the original
    archive (or to ``output_path``), even when a fitted temp copy is the
    extraction source.
    """

    effective_logger = logger or LOGGER
    preview_path = output_path or preview_path_for(archive_path, settings.discovery.preview_suffix)
    started_mono = time.monotonic()

    def _result(
        outcome: ExtractionOutcome,
        error_kind: str | None = None,
        error_message: str | None = None,
    ) -> CandidateResult:
        return CandidateResult(
            source_file=archive_path,
            preview_path=preview_path,
            outcome=outcome,
            used_fit=use_fit,
            error_kind=error_kind,
            error_message=error_message,
            duration_sec=round(time.monotonic() - started_mono, 3),
        )

    try:
        if use_fit:
            with temporary_archive_copy(archive_path, logger=effective_logger) as working_copy:
                run_isofit(working_copy, settings.fit, logger=effective_logger)
                outcome = extract_thumbnail(working_copy, preview_path, logger=effective_logger)
        else:
            outcome = extract_thumbnail(archive_path, preview_path, logger=effective_logger)
    except PreviewError as exc:
        effective_logger.error("candidate.failed source_file=%s kind=%s error=%s", archive_path, exc.kind, exc)
        return _result("FAILED", exc.kind, str(exc))
    except Exception as exc:
        effective_logger.exception("candidate.failed source_file=%s kind=unexpected", archive_path)
        return _result("FAILED", "unexpected", str(exc))

    if outcome == "NOT_FOUND":
        return _result("NOT_FOUND", "thumbnail_missing", f"No {THUMBNAIL_ENTRY} entry in {archive_path}")
    return _result(outcome)


def _failure_reason(discovered_total: int, selected_total: int, tally: BatchTally) -> RunFailureReason | None:
    if discovered_total == 0:
        return "no_candidates"
    if selected_total == 0:
        return "all_ignored"
    if tally.failed > 0:
        return "failures"
    return None


def run_batch(
    root_dir: Path,
    settings: AppSettings,
    *,
    options: BatchRunOptions | None = None,
    logger: logging.Logger | None = None,
    on_progress: ProgressCallback | None = None,
) -> BatchRunResult:
    """Discover, filter, and process every archive under ``root_dir``.

    Every selected archive is attempted regardless of earlier failures. The
    run succeeds only when at least one archive was selected and none failed.
    """

    effective_logger = logger or LOGGER
    run_options = options or BatchRunOptions()
    progress_every = max(1, run_options.progress_every)

    run_id = f"extract-run-{uuid4().hex[:12]}"
    started_ts = now_utc()
    started_mono = time.monotonic()

    discovered = discover_fcstd_files(root_dir, settings.discovery.extension, logger=effective_logger)
    selected = filter_ignored(
        discovered,
        root_dir,
        run_options.ignore_patterns,
        enabled=run_options.ignore_enabled,
        logger=effective_logger,
    )
    discovered_total = len(discovered)
    selected_total = len(selected)
    ignored_total = discovered_total - selected_total

    effective_logger.info(
        "batch_run.start run_id=%s root=%s discovered=%s ignored=%s selected=%s fit=%s ignore_source=%s",
        run_id,
        root_dir,
        discovered_total,
        ignored_total,
        selected_total,
        run_options.use_fit,
        run_options.ignore_source,
    )

    tally = BatchTally()
    results: list[CandidateResult] = []
    for processed_idx, archive_path in enumerate(selected, start=1):
        result = process_candidate(
            archive_path,
            settings,
            use_fit=run_options.use_fit,
            logger=effective_logger,
        )
        tally = tally.record(result)
        results.append(result)

        if processed_idx % progress_every == 0 or processed_idx == selected_total:
            effective_logger.info(
                "batch_run.progress processed=%s/%s success=%s failure=%s elapsed_sec=%.2f",
                processed_idx,
                selected_total,
                tally.succeeded,
                tally.failed,
                time.monotonic() - started_mono,
            )
        if on_progress is not None:
            on_progress(result, tally, selected_total)

    reason = _failure_reason(discovered_total, selected_total, tally)
    run_result = BatchRunResult(
        run_id=run_id,
        root_dir=root_dir,
        discovered_total=discovered_total,
        ignored_total=ignored_total,
        selected_total=selected_total,
        tally=tally,
        results=tuple(results),
        success=reason is None,
        reason=reason,
        use_fit=run_options.use_fit,
        ignore_source=run_options.ignore_source,
        started_ts=started_ts,
        finished_ts=now_utc(),
        duration_sec=round(time.monotonic() - started_mono, 3),
    )

    if run_options.reports_root is not None:
        try:
            summary_path, results_path = write_run_reports(
                run_result,
                run_options.reports_root,
                compression=settings.reports.compression,
            )
        except OSError as exc:
            # Previews are already written; a report failure leaves the tally intact.
            effective_logger.error(
                "batch_run.report_failed run_id=%s reports_root=%s error=%s",
                run_id,
                run_options.reports_root,
                exc,
            )
        else:
            run_result = replace(run_result, summary_path=summary_path, results_path=results_path)

    effective_logger.info(
        "batch_run.complete run_id=%s success=%s failed=%s selected=%s discovered=%s reason=%s",
        run_id,
        tally.succeeded,
        tally.failed,
        selected_total,
        discovered_total,
        reason,
    )
    return run_result


def run_single_file(
    archive_path: Path,
    settings: AppSettings,
    *,
    use_fit: bool = False,
    output_path: Path | None = None,
    logger: logging.Logger | None = None,
) -> CandidateResult:
    """Process one explicitly named archive without discovery or ignore rules."""

    if not archive_path.exists():
        raise FileNotFoundError(f"File not found: {archive_path}")
    if not archive_path.is_file() or not is_fcstd_file(archive_path, settings.discovery.extension):
        raise ValueError(f"Not a .FCStd file: {archive_path}")
    return process_candidate(
        archive_path,
        settings,
        use_fit=use_fit,
        output_path=output_path,
        logger=logger,
    )
