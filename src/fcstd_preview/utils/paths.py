"""Path and filesystem helper functions."""

from __future__ import annotations

import os
from pathlib import Path
from uuid import uuid4


def atomic_temp_path(target_path: Path) -> Path:
    """Create a unique temp path next to the target for atomic replacement."""

    return target_path.parent / f".{target_path.name}.{uuid4().hex}.tmp"


def relative_posix(path: Path, root_dir: Path) -> str:
    """Return ``path`` relative to ``root_dir`` with forward slashes."""

    try:
        relative = os.path.relpath(path, root_dir)
    except ValueError:
        # Different drives on Windows; there is no relative form.
        relative = str(path)
    return Path(relative).as_posix()
