"""Extract the embedded thumbnail entry from a FreeCAD archive."""

from __future__ import annotations

import logging
import os
import shutil
import zipfile
import zlib
from pathlib import Path
from typing import Iterator, Literal

from fcstd_preview.errors import ArchiveUnreadableError, StreamFailureError
from fcstd_preview.utils.paths import atomic_temp_path

LOGGER = logging.getLogger(__name__)

ExtractionOutcome = Literal["EXTRACTED", "NOT_FOUND", "FAILED"]
EXTRACTION_OUTCOME_VALUES: tuple[ExtractionOutcome, ...] = ("EXTRACTED", "NOT_FOUND", "FAILED")

THUMBNAIL_ENTRY = "thumbnails/Thumbnail.png"
COPY_CHUNK_SIZE = 64 * 1024

_STREAM_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, OSError, RuntimeError, NotImplementedError)


def iter_entries(archive: zipfile.ZipFile) -> Iterator[zipfile.ZipInfo]:
    """Yield entries in central-directory order, duplicates included."""

    yield from archive.infolist()


def find_thumbnail_entry(archive: zipfile.ZipFile, entry_name: str = THUMBNAIL_ENTRY) -> zipfile.ZipInfo | None:
    """Return the first entry named exactly ``entry_name``, or None.

    ``ZipFile.getinfo`` resolves duplicate names to the last occurrence, so
    the entries are walked instead.
    """

    return next((entry for entry in iter_entries(archive) if entry.filename == entry_name), None)


def _copy_entry(archive: zipfile.ZipFile, entry: zipfile.ZipInfo, archive_path: Path, output_path: Path) -> None:
    """Stream ``entry`` to ``output_path`` via a temp sibling and atomic replace."""

    temp_path: Path | None = None
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = atomic_temp_path(output_path)
        with archive.open(entry) as source, temp_path.open("wb") as destination:
            shutil.copyfileobj(source, destination, COPY_CHUNK_SIZE)
        os.replace(temp_path, output_path)
    except _STREAM_ERRORS as exc:
        raise StreamFailureError(archive_path, output_path, str(exc)) from exc
    finally:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()


def extract_thumbnail(
    archive_path: Path,
    output_path: Path,
    logger: logging.Logger | None = None,
) -> ExtractionOutcome:
    """Write the archive's ``thumbnails/Thumbnail.png`` to ``output_path``.

    Returns ``"EXTRACTED"`` once the preview is fully written, or
    ``"NOT_FOUND"`` when the archive has no thumbnail entry (nothing is
    written). Raises ``ArchiveUnreadableError`` when the archive cannot be
    opened and ``StreamFailureError`` when the copy fails; in both cases no
    new file is left at ``output_path``.
    """

    effective_logger = logger or LOGGER
    try:
        archive = zipfile.ZipFile(archive_path)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ArchiveUnreadableError(archive_path, str(exc)) from exc

    with archive:
        entry = find_thumbnail_entry(archive)
        if entry is None:
            effective_logger.warning("extract.not_found archive=%s entry=%s", archive_path, THUMBNAIL_ENTRY)
            return "NOT_FOUND"
        _copy_entry(archive, entry, archive_path, output_path)

    effective_logger.info("extract.complete archive=%s output=%s bytes=%s", archive_path, output_path, entry.file_size)
    return "EXTRACTED"
