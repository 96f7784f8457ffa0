"""Batch orchestration and run reports."""

from fcstd_preview.batch.models import (
    BatchRunOptions,
    BatchRunResult,
    BatchTally,
    CandidateResult,
    RunFailureReason,
)
from fcstd_preview.batch.pipeline import (
    process_candidate,
    run_batch,
    run_single_file,
    temporary_archive_copy,
)
from fcstd_preview.batch.reports import build_run_summary, candidate_results_frame, write_run_reports

__all__ = [
    "BatchRunOptions",
    "BatchRunResult",
    "BatchTally",
    "CandidateResult",
    "RunFailureReason",
    "process_candidate",
    "run_batch",
    "run_single_file",
    "temporary_archive_copy",
    "build_run_summary",
    "candidate_results_frame",
    "write_run_reports",
]
