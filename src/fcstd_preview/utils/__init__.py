"""Shared utility helpers."""

from fcstd_preview.utils.paths import atomic_temp_path, relative_posix
from fcstd_preview.utils.time_utils import now_utc

__all__ = [
    "atomic_temp_path",
    "relative_posix",
    "now_utc",
]
