"""Install step that copies files into place."""

from __future__ import annotations

import contextlib
import enum
import os
import re
import shutil
import subprocess
from collections.abc import Iterator
from pathlib import Path
from xml.etree.ElementTree import Element, SubElement

from pminstall import validate as validation
from pminstall.directories import create_directories
from pminstall.steps import (
    CancelToken,
    Host,
    InstallStep,
    ProgressCallback,
    StatusCallback,
    StepStatus,
)
from pminstall.variables import VariableHandler

MAX_BACKUPS = 500
_GPUP_NAME = "gpup.exe"
_SEPARATORS = ("\\", "/")
_SEVERITY = {StepStatus.SUCCESS: 0, StepStatus.NEEDGPUP: 1, StepStatus.FAIL: 2}


class _Destination(enum.Enum):
    DIRECTORY = enum.auto()
    FILE = enum.auto()


def _native(path: str) -> str:
    return path.replace("\\", "/")


def _worst(first: StepStatus, second: StepStatus) -> StepStatus:
    return first if _SEVERITY[first] >= _SEVERITY[second] else second


def _pattern(pattern: str) -> re.Pattern[str]:
    translated = "".join(
        ".*" if ch == "*" else "." if ch == "?" else re.escape(ch) for ch in pattern
    )
    flags = re.IGNORECASE if os.name == "nt" else 0
    return re.compile(translated, flags | re.DOTALL)


def _matching_entries(directory: Path, pattern: str) -> Iterator[Path]:
    """Yield the entries of ``directory`` whose names match ``pattern``."""
    matcher = _pattern(pattern)
    try:
        names = sorted(os.listdir(directory))
    except OSError:
        return
    for name in names:
        if matcher.fullmatch(name):
            yield directory / name


def _backup_path(dest: Path) -> Path:
    base = f"{dest}.backup"
    candidate = base
    counter = 1
    while os.path.exists(candidate) and counter < MAX_BACKUPS:
        counter += 1
        candidate = f"{base}{counter}"
    if counter >= MAX_BACKUPS:
        candidate = f"{base}_too_many_backups"
    return Path(candidate)


class CopyStep(InstallStep):
    """Copies files matching a pattern below the base path to a destination.

    The destination is either a directory (``to``) or a file name
    (``to_file``); when both are given the file name wins.  Files that
    cannot be copied now are handed to the updater through ``copy``
    elements in the updater document.
    """

    def __init__(
        self,
        source: str,
        to: str | None,
        to_file: str | None,
        attempt_replace: bool = False,
        validate: bool = False,
        is_gpup: bool = False,
        backup: bool = False,
        recursive: bool = False,
        validate_base_url: str = "",
    ) -> None:
        self.source = source
        self.to = to or ""
        self.to_file = to_file or ""
        self.fail_if_exists = not attempt_replace
        self.validate = validate
        self.is_gpup = is_gpup
        self.backup = backup
        self.recursive = recursive
        self.validate_base_url = validate_base_url

        self._destination: _Destination | None = None
        if to is not None:
            self._destination = _Destination.DIRECTORY
        if to_file is not None:
            self._destination = _Destination.FILE

    def replace_variables(self, variables: VariableHandler) -> None:
        """Expand variables in the source and the destination."""
        if variables is None:
            return
        self.source = variables.replace_variables(self.source)
        if self._destination is _Destination.DIRECTORY:
            self.to = variables.replace_variables(self.to)
        elif self._destination is _Destination.FILE:
            self.to_file = variables.replace_variables(self.to_file)

    def perform(
        self,
        base_path: str | os.PathLike[str],
        for_gpup: Element,
        set_status: StatusCallback,
        step_progress: ProgressCallback,
        host: Host,
        cancel_token: CancelToken,
    ) -> StepStatus:
        """Copy the matching files; see the class docstring."""
        from_path = Path(base_path) / _native(self.source)
        set_status("Copying files...")

        if self._destination is _Destination.DIRECTORY:
            if not self.to:
                return StepStatus.FAIL
            to_path = Path(_native(self.to))
            if not to_path.exists():
                create_directories(to_path)
            to_is_directory = True
        else:
            if not self.to_file:
                return StepStatus.FAIL
            to_path = Path(_native(self.to_file))
            to_is_directory = self.to_file.endswith(_SEPARATORS)

        if self.is_gpup:
            set_status("Copying GPUP.EXE")
            if self._destination is _Destination.DIRECTORY:
                to_path = to_path / _GPUP_NAME
            self._copy_gpup(Path(base_path), to_path)
            return StepStatus.SUCCESS

        return self._copy_matching(
            from_path.parent,
            from_path.name,
            to_path,
            to_is_directory,
            for_gpup,
            set_status,
            host,
            cancel_token,
        )

    def _copy_gpup(self, base_path: Path, to_path: Path) -> None:
        """Let the new updater copy itself over the old one."""
        if os.path.basename(_native(self.source)).lower() != _GPUP_NAME:
            return
        gpup = base_path / _native(self.source)
        with contextlib.suppress(OSError):
            subprocess.run([str(gpup), "-c", str(gpup), "-t", str(to_path)], check=False)

    def _copy_matching(
        self,
        directory: Path,
        pattern: str,
        target: Path,
        target_is_directory: bool,
        for_gpup: Element,
        set_status: StatusCallback,
        host: Host,
        cancel_token: CancelToken,
    ) -> StepStatus:
        status = StepStatus.SUCCESS
        for entry in _matching_entries(directory, pattern):
            if cancel_token.is_signalled():
                return StepStatus.FAIL

            if target_is_directory or target.is_dir():
                dest = target / entry.name
            else:
                dest = target

            if entry.is_dir():
                if self.recursive:
                    if not dest.exists():
                        create_directories(dest)
                    result = self._copy_matching(
                        entry, "*", dest, True, for_gpup, set_status, host, cancel_token
                    )
                    status = _worst(status, result)
                    if status is StepStatus.FAIL:
                        break
                continue

            set_status(f"Copying {entry.name}")
            if not self._approved(entry, host, cancel_token):
                return StepStatus.FAIL
            if not self._copy_file(entry, dest):
                status = _worst(status, StepStatus.NEEDGPUP)
                self._defer_copy(for_gpup, entry, dest)
        return status

    def _approved(self, src: Path, host: Host, cancel_token: CancelToken) -> bool:
        if not self.validate:
            return True
        verdict = validation.validate(self.validate_base_url, src, cancel_token)
        if verdict is validation.ValidateStatus.OK:
            return True
        if verdict is validation.ValidateStatus.BANNED:
            message = (
                f"'{src.name}' has been identified as unstable, incorrect or "
                "dangerous.  It is NOT recommended you install this file.  "
                "Do you want to install this file anyway?"
            )
        else:
            message = (
                "It has not been possible to validate the integrity of "
                f"'{src.name}' needed to install or update a plugin.  Do you "
                "want to copy this file anyway (not recommended)?"
            )
        return host.confirm(message)

    def _copy_file(self, src: Path, dest: Path) -> bool:
        if self.backup and dest.exists():
            with contextlib.suppress(OSError):
                shutil.copyfile(dest, _backup_path(dest))

        if not dest.parent.is_dir():
            with contextlib.suppress(OSError):
                create_directories(dest.parent)

        if self.fail_if_exists and dest.exists():
            return False
        try:
            shutil.copyfile(src, dest)
        except OSError:
            return False
        with contextlib.suppress(OSError):
            shutil.copystat(src, dest)
        return True

    def _defer_copy(self, for_gpup: Element, src: Path, dest: Path) -> None:
        attributes = {"from": str(src), "toFile": str(dest), "replace": "true"}
        if self.backup:
            attributes["backup"] = "true"
        if self.validate:
            attributes["validate"] = "true"
        SubElement(for_gpup, "copy", attributes)