"""Checking a file's integrity against a remote list of known hashes."""

from __future__ import annotations

import enum
import os

from pminstall.download import DownloadManager
from pminstall.hashing import md5_file
from pminstall.steps import CancelToken


class ValidateStatus(enum.Enum):
    """Verdict of the validation service on a file; values are its replies."""

    OK = "ok"
    UNKNOWN = "unknown"
    BANNED = "banned"


def validate(
    validate_base_url: str,
    file: str | os.PathLike[str],
    cancel_token: CancelToken,
) -> ValidateStatus:
    """Ask the service at ``validate_base_url`` about ``file``.

    The file's MD5 hex digest is appended to the base URL.  Any reply other
    than exactly one of the known verdicts, and any failure to hash the file
    or reach the service, counts as UNKNOWN.
    """
    try:
        digest = md5_file(file)
    except OSError:
        return ValidateStatus.UNKNOWN

    manager = DownloadManager(cancel_token)
    manager.disable_cache()
    reply = manager.get_url(validate_base_url + digest)
    if reply is None:
        return ValidateStatus.UNKNOWN
    try:
        return ValidateStatus(reply.decode("ascii"))
    except (UnicodeDecodeError, ValueError):
        return ValidateStatus.UNKNOWN