"""Discover FreeCAD archives beneath a scan root."""

from __future__ import annotations

import logging
from pathlib import Path

from fcstd_preview.errors import DiscoveryError

LOGGER = logging.getLogger(__name__)

FCSTD_EXTENSION = ".fcstd"
PREVIEW_SUFFIX = "-preview.png"


def is_fcstd_file(path: Path, extension: str = FCSTD_EXTENSION) -> bool:
    """Return True when the file suffix matches ``extension`` case-insensitively."""

    return path.suffix.lower() == extension.lower()


def preview_path_for(archive_path: Path, preview_suffix: str = PREVIEW_SUFFIX) -> Path:
    """Return the preview PNG path written beside ``archive_path``.

    Only the final extension is stripped, so ``model.v2.FCStd`` becomes
    ``model.v2-preview.png``.
    """

    return archive_path.with_name(f"{archive_path.stem}{preview_suffix}")


def discover_fcstd_files(
    root_dir: Path,
    extension: str = FCSTD_EXTENSION,
    logger: logging.Logger | None = None,
) -> list[Path]:
    """Recursively discover FreeCAD archives in lexical path order."""

    effective_logger = logger or LOGGER
    if not root_dir.exists():
        raise DiscoveryError(f"Scan root does not exist: {root_dir}")
    if not root_dir.is_dir():
        raise DiscoveryError(f"Scan root is not a directory: {root_dir}")

    try:
        entries = sorted(root_dir.rglob("*"))
    except OSError as exc:
        raise DiscoveryError(f"Cannot enumerate {root_dir}: {exc}") from exc

    files: list[Path] = []
    for file_path in entries:
        if not is_fcstd_file(file_path, extension) or not file_path.is_file():
            continue
        files.append(file_path)

    effective_logger.debug("discover.complete root=%s found=%s", root_dir, len(files))
    return files
