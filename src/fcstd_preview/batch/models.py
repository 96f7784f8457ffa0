"""Typed models for batch preview extraction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal

from fcstd_preview.extract.thumbnail import ExtractionOutcome

RunFailureReason = Literal["no_candidates", "all_ignored", "failures"]


@dataclass(frozen=True, slots=True)
class BatchRunOptions:
    """Runtime options for one batch run."""

    use_fit: bool = False
    ignore_patterns: tuple[str, ...] = ()
    ignore_enabled: bool = True
    ignore_source: Path | None = None
    progress_every: int = 1
    reports_root: Path | None = None


@dataclass(frozen=True, slots=True)
class CandidateResult:
    """Outcome of processing one archive."""

    source_file: Path
    preview_path: Path
    outcome: ExtractionOutcome
    used_fit: bool = False
    error_kind: str | None = None
    error_message: str | None = None
    duration_sec: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.outcome == "EXTRACTED"


@dataclass(frozen=True, slots=True)
class BatchTally:
    """Running processed/succeeded/failed counters."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0

    def record(self, result: CandidateResult) -> "BatchTally":
        """Return a new tally that includes ``result``."""

        return BatchTally(
            processed=self.processed + 1,
            succeeded=self.succeeded + (1 if result.succeeded else 0),
            failed=self.failed + (0 if result.succeeded else 1),
        )


@dataclass(frozen=True, slots=True)
class BatchRunResult:
    """Return object for batch run outcomes."""

    run_id: str
    root_dir: Path
    discovered_total: int
    ignored_total: int
    selected_total: int
    tally: BatchTally
    results: tuple[CandidateResult, ...]
    success: bool
    reason: RunFailureReason | None
    use_fit: bool
    ignore_source: Path | None
    started_ts: datetime
    finished_ts: datetime
    duration_sec: float
    summary_path: Path | None = None
    results_path: Path | None = None

    @property
    def failed_results(self) -> tuple[CandidateResult, ...]:
        return tuple(result for result in self.results if not result.succeeded)
