"""Building install steps from their XML descriptions."""

from __future__ import annotations

from xml.etree.ElementTree import Element

from pminstall.copy_step import CopyStep
from pminstall.delete_step import DeleteStep
from pminstall.download_step import DownloadStep
from pminstall.run_step import RunStep
from pminstall.steps import InstallStep
from pminstall.variables import VariableHandler

VALIDATE_BASE_URL_VAR = "VALIDATEBASEURL"


def _flag(element: Element, name: str, *, ignore_case: bool = False) -> bool:
    value = element.get(name)
    if value is None:
        return False
    if ignore_case:
        return value.lower() == "true"
    return value == "true"


class InstallStepFactory:
    """Creates steps from ``download``, ``copy``, ``delete`` and ``run`` elements.

    A ``setVariable`` element sets a variable instead of creating a step.
    """

    def __init__(self, variables: VariableHandler | None) -> None:
        self.variables = variables

    def _validate_url(self) -> str:
        if self.variables is None:
            return ""
        return self.variables.get_variable(VALIDATE_BASE_URL_VAR)

    def create(self, element: Element) -> InstallStep | None:
        """Return the step ``element`` describes, or None if there is none.

        Raises ValueError when an element lacks an attribute it needs.
        """
        tag = element.tag

        if tag == "download":
            url = (element.text or "").strip()
            if not url:
                return None
            return DownloadStep(url, element.get("filename"))

        if tag == "copy":
            source = element.get("from")
            if source is None:
                raise ValueError("copy step needs a 'from' attribute")
            return CopyStep(
                source,
                element.get("to"),
                element.get("toFile"),
                attempt_replace=_flag(element, "replace"),
                validate=_flag(element, "validate"),
                is_gpup=_flag(element, "isGpup"),
                backup=_flag(element, "backup"),
                recursive=_flag(element, "recursive"),
                validate_base_url=self._validate_url(),
            )

        if tag == "delete":
            file = element.get("file")
            if file is None:
                return None
            return DeleteStep(file, _flag(element, "isDirectory", ignore_case=True))

        if tag == "run":
            file = element.get("file")
            if file is None:
                raise ValueError("run step needs a 'file' attribute")
            return RunStep(
                file,
                element.get("arguments"),
                _flag(element, "outsideNpp", ignore_case=True),
                self._validate_url(),
            )

        if tag == "setVariable":
            name = element.get("name")
            value = element.get("value")
            if name is None or value is None:
                raise ValueError("setVariable needs 'name' and 'value' attributes")
            if self.variables is None:
                raise ValueError("setVariable needs a variable handler")
            self.variables.set_variable(name, value)
            return None

        return None