"""Thumbnail extraction from FreeCAD archives."""

from fcstd_preview.extract.thumbnail import (
    EXTRACTION_OUTCOME_VALUES,
    THUMBNAIL_ENTRY,
    ExtractionOutcome,
    extract_thumbnail,
    find_thumbnail_entry,
    iter_entries,
)

__all__ = [
    "EXTRACTION_OUTCOME_VALUES",
    "THUMBNAIL_ENTRY",
    "ExtractionOutcome",
    "extract_thumbnail",
    "find_thumbnail_entry",
    "iter_entries",
]
