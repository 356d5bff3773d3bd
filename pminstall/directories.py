"""Directory helpers."""

from __future__ import annotations

import os
from pathlib import Path


def create_directories(path: str | os.PathLike[str]) -> bool:
    """Create ``path`` and any missing parents.

    Returns True when a directory was created and False when ``path``
    already existed.  Other failures raise ``OSError``.
    """
    target = Path(path)
    if target.is_dir():
        return False
    try:
        target.mkdir(parents=True)
    except FileExistsError:
        return False
    return True