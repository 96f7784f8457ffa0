"""Pytest configuration and fixtures."""

import logging
import stat
import sys
import warnings
import zipfile
from pathlib import Path

import pytest

from fcstd_preview.config import SETTINGS_FILE_ENV, AppSettings, FitConfig

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(256)) * 4
FITTED_PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"fitted-isometric-view" * 16
DOCUMENT_XML = b'<?xml version="1.0" encoding="utf-8"?><Document SchemaVersion="4"/>'


def write_fcstd(path, entries):
    """Write a ZIP archive with ``entries`` given as (name, bytes) pairs, in order."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with warnings.catch_warnings():
        # Duplicate entry names are deliberate in some tests.
        warnings.simplefilter("ignore", UserWarning)
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, data in entries:
                archive.writestr(name, data)
    return path


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handler changes made by configure_logging during CLI tests."""
    root_logger = logging.getLogger()
    package_logger = logging.getLogger("fcstd_preview")
    handlers = list(root_logger.handlers)
    level = root_logger.level
    package_level = package_logger.level
    yield
    package_logger.setLevel(package_level)
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)


@pytest.fixture(autouse=True)
def isolated_settings_file(tmp_path, monkeypatch):
    """Point settings loading at a file that does not exist, so defaults apply."""
    monkeypatch.setenv(SETTINGS_FILE_ENV, str(tmp_path / "no-settings" / "settings.yaml"))


@pytest.fixture
def make_fcstd():
    """Factory for FreeCAD-like archives."""

    def _make(path, thumbnail=PNG_BYTES, extra_entries=()):
        entries = [("Document.xml", DOCUMENT_XML), ("GuiDocument.xml", b"<GuiDocument/>")]
        entries.extend(extra_entries)
        if thumbnail is not None:
            entries.append(("thumbnails/Thumbnail.png", thumbnail))
        return write_fcstd(path, entries)

    return _make


@pytest.fixture
def settings():
    """Default application settings."""
    return AppSettings()


@pytest.fixture
def fake_freecad(tmp_path):
    """Factory for fake fit executables.

    The generated script records its arguments to ``calls.log`` next to it,
    then runs ``body`` (Python source) with ``archive`` and ``macro`` defined.
    """
    if sys.platform == "win32":
        pytest.skip("fake executables rely on POSIX shebang scripts")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(body="", name="freecad"):
        script = bin_dir / name
        calls_log = bin_dir / "calls.log"
        script.write_text(
            "\n".join(
                [
                    f"#!{sys.executable}",
                    "import sys, time, zipfile",
                    "archive, macro = sys.argv[1], sys.argv[2]",
                    f"with open({str(calls_log)!r}, 'a') as log:",
                    "    log.write(archive + '|' + macro + '\\n')",
                    body,
                    "",
                ]
            ),
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


REWRITE_THUMBNAIL_BODY = "\n".join(
    [
        "with zipfile.ZipFile(archive, 'w') as out:",
        "    out.writestr('Document.xml', b'<Document/>')",
        f"    out.writestr('thumbnails/Thumbnail.png', {FITTED_PNG_BYTES!r})",
    ]
)


@pytest.fixture
def fit_settings_for():
    """Build settings whose fit step uses the given executable."""

    def _build(executable, timeout_sec=30.0, terminate_grace_sec=1.0):
        return AppSettings(
            fit=FitConfig(
                executable=str(executable),
                timeout_sec=timeout_sec,
                terminate_grace_sec=terminate_grace_sec,
            )
        )

    return _build


def calls_for(script: Path) -> list[tuple[str, str]]:
    """Return the (archive, macro) pairs a fake executable was invoked with."""
    log_path = script.parent / "calls.log"
    if not log_path.exists():
        return []
    return [tuple(line.split("|", 1)) for line in log_path.read_text(encoding="utf-8").splitlines()]
