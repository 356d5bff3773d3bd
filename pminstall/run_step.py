"""Install step that runs a program shipped with a plugin."""

from __future__ import annotations

import os
import shlex
import subprocess
from pathlib import Path
from xml.etree.ElementTree import Element, SubElement

from pminstall import validate as validation
from pminstall.steps import (
    CancelToken,
    Host,
    InstallStep,
    ProgressCallback,
    StatusCallback,
    StepStatus,
)
from pminstall.variables import VariableHandler

SANDBOX_MESSAGE = (
    "The executable path may not be within the sandbox area - this is "
    "dangerous and hence not permitted.  If you are seeing this message, "
    "please report it on the Notepad++ forums."
)
COMPLETED_MESSAGE = "Press OK when the installation program has completed."


def _native(path: str) -> str:
    return path.replace("\\", "/")


def _execute(executable: Path, arguments: str) -> bool:
    """Start ``executable`` and wait for it; True if it could be started."""
    if os.name == "nt":
        command: str | list[str] = f'"{executable}" {arguments}'.rstrip()
    else:
        command = [str(executable), *shlex.split(arguments)]
    try:
        subprocess.run(command, check=False)
    except OSError:
        return False
    return True


class RunStep(InstallStep):
    """Runs a program found below the base path.

    With ``outside_host`` the program is not run now but handed to the
    updater through a ``run`` element.  Otherwise the program is checked
    with the validation service first; if it is not known to be good the
    user is asked before it is run.
    """

    def __init__(
        self,
        file: str,
        arguments: str | None = None,
        outside_host: bool = False,
        validate_base_url: str = "",
    ) -> None:
        self.file = file
        self.arguments = arguments or ""
        self.outside_host = outside_host
        self.validate_base_url = validate_base_url

    def perform(
        self,
        base_path: str | os.PathLike[str],
        for_gpup: Element,
        set_status: StatusCallback,
        step_progress: ProgressCallback,
        host: Host,
        cancel_token: CancelToken,
    ) -> StepStatus:
        """Run the program, or defer it to the updater."""
        executable = Path(base_path) / _native(self.file)

        if self.outside_host:
            SubElement(
                for_gpup,
                "run",
                {"file": str(executable), "arguments": self.arguments},
            )
            return StepStatus.NEEDGPUP

        set_status(f"Running {self.file}")

        if ".." in self.file:
            host.inform(SANDBOX_MESSAGE)
            return StepStatus.FAIL

        if not self._approved(executable, host, cancel_token):
            return StepStatus.FAIL

        if not _execute(executable, self.arguments):
            return StepStatus.FAIL

        host.inform(COMPLETED_MESSAGE)
        return StepStatus.SUCCESS

    def _approved(self, executable: Path, host: Host, cancel_token: CancelToken) -> bool:
        verdict = validation.validate(self.validate_base_url, executable, cancel_token)
        if verdict is validation.ValidateStatus.OK:
            return True
        if verdict is validation.ValidateStatus.BANNED:
            message = (
                f"'{self.file}' has been identified as unstable, incorrect or "
                "dangerous.  It is NOT recommended you EXECUTE this file.  "
                "Do you want to EXECUTE this file anyway?"
            )
        else:
            message = (
                "It has not been possible to validate the integrity of "
                f"'{self.file}' needed to install or update a plugin.  Do you "
                "want to EXECUTE this file anyway (highly not recommended)?"
            )
        return host.confirm(message)

    def replace_variables(self, variables: VariableHandler) -> None:
        """Expand variables in the program path and its arguments."""
        if variables is None:
            return
        self.file = variables.replace_variables(self.file)
        self.arguments = variables.replace_variables(self.arguments)