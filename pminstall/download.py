"""Fetching URLs into memory or onto disk, with progress and cancellation."""

from __future__ import annotations

import enum
import os
import urllib.request
from collections.abc import Callable
from http.client import HTTPException
from typing import ClassVar
from urllib.error import HTTPError

from pminstall.steps import CancelToken

ProgressFunction = Callable[[int], None]

_CHUNK_SIZE = 16384
_TIMEOUT_SECONDS = 120
# Share of the total progress reported once the headers have arrived.
_HEADERS_PERCENT = 5


class DownloadStatus(enum.Enum):
    """Outcome of a single transfer."""

    SUCCESS = enum.auto()
    FAIL = enum.auto()
    CANCELLED = enum.auto()


def _content_length(value: str | None) -> int:
    try:
        return int(value) if value else 0
    except ValueError:
        return 0


class InternetDownload:
    """A single request for one URL.

    The body of the response is read whatever the HTTP status code is, so an
    error page is delivered like any other content.
    """

    def __init__(
        self,
        user_agent: str,
        url: str,
        cancel_token: CancelToken,
        progress: ProgressFunction | None = None,
    ) -> None:
        self._user_agent = user_agent
        self._url = url
        self._cancel_token = cancel_token
        self._progress = progress
        self._no_cache = False
        self.content_type = ""

    def disable_cache(self) -> None:
        """Ask caches along the way not to answer from stored copies."""
        self._no_cache = True

    def save_to_file(self, filename: str | os.PathLike[str]) -> bool:
        """Write the response body to ``filename``; return True on success."""
        try:
            stream = open(filename, "wb")
        except OSError:
            return False
        with stream:
            status = self._transfer(stream.write)
        return status is DownloadStatus.SUCCESS

    def get_content(self) -> bytes:
        """Return the response body, or empty bytes if the transfer failed."""
        chunks: list[bytes] = []
        status = self._transfer(chunks.append)
        if status is DownloadStatus.SUCCESS:
            return b"".join(chunks)
        return b""

    def _request(self) -> urllib.request.Request:
        headers = {"User-Agent": self._user_agent}
        if self._no_cache:
            headers["Cache-Control"] = "no-cache"
            headers["Pragma"] = "no-cache"
        return urllib.request.Request(self._url, headers=headers)

    def _open(self):
        try:
            return urllib.request.urlopen(self._request(), timeout=_TIMEOUT_SECONDS)
        except HTTPError as error:
            if error.fp is None:
                raise
            return error

    def _report(self, percent: int) -> None:
        if self._progress is not None:
            self._progress(percent)

    def _transfer(self, write: Callable[[bytes], object]) -> DownloadStatus:
        if self._cancel_token.is_signalled():
            return DownloadStatus.FAIL
        try:
            response = self._open()
        except (OSError, ValueError, HTTPException):
            return DownloadStatus.FAIL

        with response:
            self.content_type = response.headers.get("Content-Type", "") or ""
            length = _content_length(response.headers.get("Content-Length"))
            self._report(_HEADERS_PERCENT)

            written = 0
            while True:
                try:
                    chunk = response.read(_CHUNK_SIZE)
                except (OSError, HTTPException):
                    return DownloadStatus.FAIL
                if self._cancel_token.is_signalled():
                    return DownloadStatus.CANCELLED
                write(chunk)
                written += len(chunk)
                if length:
                    share = 100 - _HEADERS_PERCENT
                    self._report(int(written / length * share + _HEADERS_PERCENT))
                if not chunk:
                    break
        return DownloadStatus.SUCCESS


class DownloadManager:
    """Issues downloads sharing a user agent, cancel token and settings."""

    _user_agent: ClassVar[str] = "Plugin-Manager"

    def __init__(self, cancel_token: CancelToken) -> None:
        self._cancel_token = cancel_token
        self._progress: ProgressFunction | None = None
        self._no_cache = False

    @classmethod
    def set_user_agent(cls, user_agent: str) -> None:
        """Set the user agent sent by every download."""
        cls._user_agent = user_agent

    def set_progress_function(self, progress: ProgressFunction | None) -> None:
        """Receive percentage progress of later downloads."""
        self._progress = progress

    def disable_cache(self) -> None:
        """Bypass caches for later downloads."""
        self._no_cache = True

    def _download(self, url: str) -> InternetDownload:
        download = InternetDownload(
            type(self)._user_agent, url, self._cancel_token, self._progress
        )
        if self._no_cache:
            download.disable_cache()
        return download

    def get_url_to_file(self, url: str, filename: str | os.PathLike[str]) -> str | None:
        """Save ``url`` to ``filename``.

        Returns the response's content type (possibly empty) on success and
        None on failure.
        """
        download = self._download(url)
        if download.save_to_file(filename):
            return download.content_type
        return None

    def get_url(self, url: str) -> bytes | None:
        """Return the body of ``url``, or None if nothing was received."""
        return self._download(url).get_content() or None

    def cancel_download(self) -> None:
        """Cancel downloads sharing this manager's token."""
        self._cancel_token.trigger_cancel()