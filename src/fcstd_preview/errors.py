"""Error taxonomy for discovery, filtering, fit, and extraction failures."""

from __future__ import annotations

from pathlib import Path


class PreviewError(Exception):
    """Base class for all fcstd_preview errors."""

    kind: str = "preview_error"


class DiscoveryError(PreviewError):
    """The scan root could not be enumerated at all."""

    kind = "discovery_failed"


class ArchiveUnreadableError(PreviewError):
    """The archive could not be opened as a ZIP container."""

    kind = "archive_unreadable"

    def __init__(self, archive_path: Path, reason: str) -> None:
        super().__init__(f"Cannot open archive {archive_path}: {reason}")
        self.archive_path = archive_path


class StreamFailureError(PreviewError):
    """Reading the thumbnail entry or writing the preview failed mid-copy."""

    kind = "stream_failure"

    def __init__(self, archive_path: Path, output_path: Path, reason: str) -> None:
        super().__init__(f"Failed to copy thumbnail from {archive_path} to {output_path}: {reason}")
        self.archive_path = archive_path
        self.output_path = output_path


class IgnorePatternError(PreviewError):
    """An ignore pattern could not be compiled."""

    kind = "malformed_pattern"

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Malformed ignore pattern {pattern!r}: {reason}")
        self.pattern = pattern


class AugmenterFailure(PreviewError):
    """The external fit tool did not complete successfully."""

    kind = "augmenter_failure"

    def __init__(self, message: str, *, tool: str) -> None:
        super().__init__(message)
        self.tool = tool


class AugmenterUnavailableError(AugmenterFailure):
    """The fit tool executable is not on PATH or could not be started."""

    kind = "augmenter_unavailable"

    def __init__(self, tool: str, reason: str | None = None) -> None:
        message = f"Failed to start {tool}"
        if reason:
            message = f"{message}: {reason}"
        message = f"{message}. Make sure {tool} is installed and available in PATH."
        super().__init__(message, tool=tool)


class AugmenterNonZeroExitError(AugmenterFailure):
    """The fit tool ran but exited with a non-zero status."""

    kind = "augmenter_nonzero_exit"

    def __init__(self, tool: str, returncode: int, stderr_tail: str = "") -> None:
        message = f"{tool} exited with code {returncode}"
        if stderr_tail:
            message = f"{message}: {stderr_tail}"
        super().__init__(message, tool=tool)
        self.returncode = returncode
        self.stderr_tail = stderr_tail


class AugmenterTimeoutError(AugmenterFailure):
    """The fit tool exceeded its time budget and was stopped."""

    kind = "augmenter_timeout"

    def __init__(self, tool: str, timeout_sec: float) -> None:
        super().__init__(f"{tool} did not finish within {timeout_sec:g}s and was killed", tool=tool)
        self.timeout_sec = timeout_sec
