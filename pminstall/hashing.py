"""MD5 digests of files."""

from __future__ import annotations

import hashlib
import os
from functools import partial

HASH_LENGTH = 16
_CHUNK_SIZE = 4096


def md5_file(filename: str | os.PathLike[str]) -> str:
    """Return the MD5 digest of a file's contents as lowercase hex."""
    digest = hashlib.md5(usedforsecurity=False)
    with open(filename, "rb") as stream:
        for chunk in iter(partial(stream.read, _CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()