"""Run summary artifacts with atomic file replacement."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Sequence

import polars as pl

from fcstd_preview.batch.models import BatchRunResult, CandidateResult
from fcstd_preview.extract.thumbnail import EXTRACTION_OUTCOME_VALUES
from fcstd_preview.utils.paths import atomic_temp_path

MAX_FAILED_FILES_IN_SUMMARY = 200


def _candidate_results_schema() -> dict[str, pl.DataType]:
    """Stable schema for per-candidate results."""

    return {
        "source_file": pl.String,
        "preview_path": pl.String,
        "outcome": pl.Enum(list(EXTRACTION_OUTCOME_VALUES)),
        "used_fit": pl.Boolean,
        "error_kind": pl.String,
        "error_message": pl.String,
        "duration_sec": pl.Float64,
    }


def candidate_results_frame(results: Sequence[CandidateResult]) -> pl.DataFrame:
    """Return one row per processed candidate, in processing order."""

    if not results:
        return pl.DataFrame(schema=_candidate_results_schema())
    rows = [
        {
            "source_file": str(result.source_file),
            "preview_path": str(result.preview_path),
            "outcome": result.outcome,
            "used_fit": result.used_fit,
            "error_kind": result.error_kind,
            "error_message": result.error_message,
            "duration_sec": result.duration_sec,
        }
        for result in results
    ]
    return pl.DataFrame(rows, schema_overrides=_candidate_results_schema())


def build_run_summary(run_result: BatchRunResult) -> dict[str, Any]:
    """Build the JSON-serializable summary payload for a batch run."""

    not_found = sum(1 for result in run_result.results if result.outcome == "NOT_FOUND")
    failed_files = [
        {
            "source_file": str(result.source_file),
            "outcome": result.outcome,
            "error_kind": result.error_kind,
            "error": result.error_message,
        }
        for result in run_result.failed_results
    ]
    return {
        "run_id": run_result.run_id,
        "started_ts": run_result.started_ts.isoformat(),
        "finished_ts": run_result.finished_ts.isoformat(),
        "duration_sec": run_result.duration_sec,
        "root_dir": str(run_result.root_dir),
        "use_fit": run_result.use_fit,
        "ignore_source": str(run_result.ignore_source) if run_result.ignore_source else None,
        "files_discovered_total": run_result.discovered_total,
        "files_ignored_total": run_result.ignored_total,
        "files_selected_total": run_result.selected_total,
        "files_processed": run_result.tally.processed,
        "files_succeeded": run_result.tally.succeeded,
        "files_failed": run_result.tally.failed,
        "files_thumbnail_missing": not_found,
        "success": run_result.success,
        "reason": run_result.reason,
        "failed_files": failed_files[:MAX_FAILED_FILES_IN_SUMMARY],
    }


def _write_json_atomically(payload: dict[str, Any], output_path: Path) -> Path:
    """Write JSON atomically via temporary file then os.replace."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = atomic_temp_path(output_path)
    try:
        temp_path.write_text(json.dumps(payload, indent=2, sort_keys=True, default=str) + "\n", encoding="utf-8")
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return output_path


def _write_parquet_atomically(df: pl.DataFrame, output_path: Path, *, compression: str) -> Path:
    """Write parquet atomically via temporary file then os.replace."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = atomic_temp_path(output_path)
    try:
        df.write_parquet(temp_path, compression=compression)
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return output_path


def write_run_reports(
    run_result: BatchRunResult,
    reports_root: Path,
    *,
    compression: str = "zstd",
) -> tuple[Path, Path]:
    """Persist the run summary JSON and candidate results parquet."""

    summary_path = reports_root / f"{run_result.run_id}_extract_run_summary.json"
    results_path = reports_root / f"{run_result.run_id}_candidate_results.parquet"
    _write_json_atomically(build_run_summary(run_result), summary_path)
    _write_parquet_atomically(candidate_results_frame(run_result.results), results_path, compression=compression)
    return summary_path, results_path
