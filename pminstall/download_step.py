"""Install step that downloads a plugin archive or file."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from xml.etree.ElementTree import Element

from pminstall.decompress import unzip
from pminstall.download import DownloadManager
from pminstall.linksearch import DirectLinkSearch
from pminstall.steps import (
    CancelToken,
    Host,
    InstallStep,
    ProgressCallback,
    StatusCallback,
    StepStatus,
)

_HTML = "text/html"


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _filename_in_url(url: str) -> str:
    """Return the part of ``url`` after the last slash and before a query."""
    start = url.rfind("/") + 1
    end = url.rfind("?")
    if end < start:
        return url[start:]
    return url[start:end]


class DownloadStep(InstallStep):
    """Downloads ``url`` below the base path and unpacks it.

    If the server answers with an HTML page, the page is searched for a
    direct link to the wanted file and that link is downloaded instead.
    The download is extracted as a zip archive; when that fails the step
    still succeeds if a file name was given, leaving the file as it is.
    """

    def __init__(self, url: str, filename: str | None = None) -> None:
        self.url = url
        self.filename = filename or ""

    def _target(self, base_path: Path) -> Path:
        if self.filename:
            return base_path / self.filename
        fd, name = tempfile.mkstemp(prefix="download", dir=base_path)
        os.close(fd)
        return Path(name)

    def perform(
        self,
        base_path: str | os.PathLike[str],
        for_gpup: Element,
        set_status: StatusCallback,
        step_progress: ProgressCallback,
        host: Host,
        cancel_token: CancelToken,
    ) -> StepStatus:
        """Download, follow an HTML page's direct link, and unpack."""
        base = Path(base_path)
        while True:
            manager = DownloadManager(cancel_token)
            target = self._target(base)

            set_status(f"Downloading {self.url}")
            manager.set_progress_function(step_progress)

            content_type = manager.get_url_to_file(self.url, target)
            if content_type is None:
                return StepStatus.FAIL

            if _media_type(content_type) != _HTML:
                if unzip(target, base) or self.filename:
                    return StepStatus.SUCCESS
                return StepStatus.FAIL

            wanted = self.filename or _filename_in_url(self.url)
            link = DirectLinkSearch(target).search(wanted)
            if link is None:
                return StepStatus.FAIL
            self.url = link