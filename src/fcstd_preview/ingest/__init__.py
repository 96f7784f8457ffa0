"""Candidate discovery and ignore-pattern filtering."""

from fcstd_preview.ingest.discover import (
    FCSTD_EXTENSION,
    PREVIEW_SUFFIX,
    discover_fcstd_files,
    is_fcstd_file,
    preview_path_for,
)
from fcstd_preview.ingest.ignore import (
    compile_ignore_pattern,
    filter_ignored,
    is_ignored,
    load_ignore_patterns,
)

__all__ = [
    "FCSTD_EXTENSION",
    "PREVIEW_SUFFIX",
    "discover_fcstd_files",
    "is_fcstd_file",
    "preview_path_for",
    "compile_ignore_pattern",
    "filter_ignored",
    "is_ignored",
    "load_ignore_patterns",
]
