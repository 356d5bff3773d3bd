"""Install step that deletes a file or a directory tree."""

from __future__ import annotations

import os
import shutil
from xml.etree.ElementTree import Element, SubElement

from pminstall.steps import (
    CancelToken,
    Host,
    InstallStep,
    ProgressCallback,
    StatusCallback,
    StepStatus,
)
from pminstall.variables import VariableHandler


class DeleteStep(InstallStep):
    """Deletes a file, or a directory with everything below it.

    A file that cannot be deleted now is handed over to the updater: a
    ``delete`` element is added to the updater document and the step
    reports NEEDGPUP.  Directory removal is best effort and always counts
    as done.
    """

    def __init__(self, file: str, is_directory: bool = False) -> None:
        self.file = file
        self.is_directory = is_directory

    def perform(
        self,
        base_path: str | os.PathLike[str],
        for_gpup: Element,
        set_status: StatusCallback,
        step_progress: ProgressCallback,
        host: Host,
        cancel_token: CancelToken,
    ) -> StepStatus:
        """Delete the target, deferring it to the updater if that fails."""
        set_status(f"Deleting {self.file}")

        if self.is_directory:
            shutil.rmtree(self.file, ignore_errors=True)
            return StepStatus.SUCCESS

        try:
            os.remove(self.file)
        except OSError:
            SubElement(
                for_gpup,
                "delete",
                {"file": self.file, "isDirectory": "false"},
            )
            return StepStatus.NEEDGPUP
        return StepStatus.SUCCESS

    def replace_variables(self, variables: VariableHandler) -> None:
        """Expand variables in the path to delete."""
        if variables is not None:
            self.file = variables.replace_variables(self.file)