"""Extracting zip archives."""

from __future__ import annotations

import contextlib
import os
import shutil
import zipfile
import zlib
from pathlib import Path

from pminstall.directories import create_directories

_BUFFER_SIZE = 4096


def _target(dest: Path, name: str) -> Path | None:
    target = dest.joinpath(*[part for part in name.split("/") if part])
    if not target.resolve().is_relative_to(dest.resolve()):
        return None
    return target


def _extract(archive: zipfile.ZipFile, entry: zipfile.ZipInfo, dest: Path) -> bool:
    target = _target(dest, entry.filename)
    if target is None:
        return False

    if entry.filename.endswith("/"):
        with contextlib.suppress(OSError):
            create_directories(target)
        return True

    if not target.parent.exists():
        create_directories(target.parent)
    try:
        output = open(target, "wb")
    except OSError:
        return False
    with output, archive.open(entry) as source:
        shutil.copyfileobj(source, output, _BUFFER_SIZE)
    return True


def unzip(zip_file: str | os.PathLike[str], dest_dir: str | os.PathLike[str]) -> bool:
    """Extract every entry of ``zip_file`` below ``dest_dir``.

    Returns False if the archive cannot be read, holds no entries, has an
    entry that would land outside ``dest_dir``, or an output file cannot be
    written; True once everything is extracted.
    """
    dest = Path(dest_dir)
    try:
        with zipfile.ZipFile(zip_file) as archive:
            entries = archive.infolist()
            if not entries:
                return False
            return all(_extract(archive, entry, dest) for entry in entries)
    except (OSError, zipfile.BadZipFile, zlib.error, RuntimeError):
        return False