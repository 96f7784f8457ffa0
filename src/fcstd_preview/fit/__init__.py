"""External FreeCAD fit step."""

from fcstd_preview.fit.augmenter import (
    BUNDLED_MACRO_PATH,
    resolve_executable,
    resolve_macro_path,
    run_isofit,
)

__all__ = [
    "BUNDLED_MACRO_PATH",
    "resolve_executable",
    "resolve_macro_path",
    "run_isofit",
]
