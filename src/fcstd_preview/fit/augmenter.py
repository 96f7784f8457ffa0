"""Run FreeCAD with the isometric fit macro to regenerate an archive thumbnail."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from fcstd_preview.config import FitConfig
from fcstd_preview.errors import (
    AugmenterNonZeroExitError,
    AugmenterTimeoutError,
    AugmenterUnavailableError,
)

LOGGER = logging.getLogger(__name__)

BUNDLED_MACRO_PATH = Path(__file__).with_name("isofit.FCMacro")
STDERR_TAIL_CHARS = 500


def resolve_macro_path(fit_settings: FitConfig) -> Path:
    """Return the configured macro path, falling back to the bundled macro."""

    return fit_settings.macro_path or BUNDLED_MACRO_PATH


def resolve_executable(executable: str) -> str:
    """Resolve ``executable`` on PATH; raise if it cannot be found."""

    resolved = shutil.which(executable)
    if resolved is None:
        raise AugmenterUnavailableError(executable, "executable not found on PATH")
    return resolved


def _tail(text: str | bytes | None) -> str:
    if not text:
        return ""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return text.strip()[-STDERR_TAIL_CHARS:]


def _stop_process(process: subprocess.Popen[bytes], grace_sec: float) -> None:
    """Terminate, then kill after ``grace_sec``; always reap the child."""

    process.terminate()
    try:
        process.communicate(timeout=grace_sec)
    except subprocess.TimeoutExpired:
        process.kill()
        process.communicate()


def run_isofit(
    archive_path: Path,
    fit_settings: FitConfig | None = None,
    logger: logging.Logger | None = None,
) -> None:
    """Invoke the fit tool on ``archive_path``, modifying that file in place.

    Callers must pass a disposable copy. Raises ``AugmenterUnavailableError``
    when the tool cannot be started, ``AugmenterNonZeroExitError`` on a
    non-zero exit, and ``AugmenterTimeoutError`` when it exceeds
    ``timeout_sec``.
    """

    effective_logger = logger or LOGGER
    settings = fit_settings or FitConfig()
    tool = settings.executable
    executable = resolve_executable(tool)
    macro_path = resolve_macro_path(settings)
    command = [executable, str(archive_path), str(macro_path)]

    effective_logger.info("fit.start tool=%s archive=%s macro=%s", tool, archive_path, macro_path)
    try:
        process = subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise AugmenterUnavailableError(tool, str(exc)) from exc

    try:
        stdout, stderr = process.communicate(timeout=settings.timeout_sec)
    except subprocess.TimeoutExpired as exc:
        effective_logger.error(
            "fit.timeout tool=%s archive=%s timeout_sec=%s", tool, archive_path, settings.timeout_sec
        )
        _stop_process(process, settings.terminate_grace_sec)
        raise AugmenterTimeoutError(tool, settings.timeout_sec or 0.0) from exc

    effective_logger.debug("fit.output tool=%s stdout=%r stderr=%r", tool, _tail(stdout), _tail(stderr))
    if process.returncode != 0:
        raise AugmenterNonZeroExitError(tool, process.returncode, _tail(stderr))
    effective_logger.info("fit.complete tool=%s archive=%s", tool, archive_path)
