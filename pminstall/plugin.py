"""A plugin as listed by the plugin manager, and running its install steps."""

from __future__ import annotations

import enum
import os
from collections.abc import Callable, Hashable, Iterable
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

_GOOD_STABILITY = "Good"


class InstallStatus(enum.Enum):
    """Outcome of installing or removing a plugin."""

    SUCCESS = enum.auto()
    NEEDRESTART = enum.auto()
    FAIL = enum.auto()


def _expand_newlines(text: str) -> str:
    """Turn literal ``\\n`` sequences into CR LF line breaks."""
    return text.replace("\\n", "\r\n")


class Plugin:
    """Metadata, known versions and install/remove steps of one plugin.

    Versions may be any hashable value.  Descriptions and latest-update
    notes have literal ``\\n`` sequences turned into line breaks.
    """

    def __init__(
        self,
        name: str = "",
        *,
        version: Hashable | None = None,
        description: str = "",
        filename: str = "",
        author: str = "",
        category: str = "",
        homepage: str = "",
        source_url: str = "",
        latest_update: str = "",
        stability: str = "",
        installed_for_all_users: bool = False,
        is_library: bool = False,
    ) -> None:
        self.name = name
        self.version = version
        self.description = description
        self.filename = filename
        self.author = author
        self.category = category
        self.homepage = homepage
        self.source_url = source_url
        self.latest_update = latest_update
        self.stability = stability
        self.installed_for_all_users = installed_for_all_users
        self.is_library = is_library

        self.installed_version: Hashable | None = None
        self.installed_version_is_bad = False
        self.is_installed = False
        self.dependencies: list[str] = []

        self._versions: dict[str, Hashable] = {}
        self._bad_versions: dict[Hashable, str] = {}
        self._install_steps: list[InstallStep] = []
        self._remove_steps: list[InstallStep] = []

    @property
    def description(self) -> str:
        """The plain description."""
        return self._description

    @description.setter
    def description(self, value: str) -> None:
        self._description = _expand_newlines(value)

    @property
    def latest_update(self) -> str:
        """Notes on the latest update."""
        return self._latest_update

    @latest_update.setter
    def latest_update(self, value: str) -> None:
        self._latest_update = _expand_newlines(value)

    # Versions

    def add_version(self, hash_value: str, version: Hashable) -> None:
        """Record that a plugin file with ``hash_value`` is ``version``."""
        self._versions[hash_value] = version

    def add_bad_version(self, version: Hashable, report: str) -> None:
        """Mark ``version`` as unstable, with an explanation."""
        self._bad_versions[version] = report

    def set_installed_version(self, version: Hashable) -> None:
        """Mark the plugin installed at ``version``."""
        self.installed_version = version
        self.installed_version_is_bad = version in self._bad_versions
        self.is_installed = True

    def set_installed_version_from_hash(self, hash_value: str) -> None:
        """Mark the plugin installed, at the version known for ``hash_value``.

        An unknown hash leaves the installed version as it was.
        """
        if hash_value in self._versions:
            self.installed_version = self._versions[hash_value]
            self.installed_version_is_bad = self.installed_version in self._bad_versions
        self.is_installed = True

    # Descriptions

    def full_description(self) -> str:
        """The description followed by stability, author, links and updates."""
        parts = [self.description]
        if self.stability != _GOOD_STABILITY:
            parts.append(f"\r\nStability: {self.stability}")
        if self.author:
            parts.append(f"\r\nAuthor: {self.author}")
        if self.source_url:
            parts.append(f"\r\nSource: {self.source_url}")
        if self.homepage:
            parts.append(f"\r\nHomepage: {self.homepage}")
        if self.latest_update:
            parts.append(f"\r\nLatest update: {self.latest_update}")
        return "".join(parts)

    def update_description(self) -> str:
        """What to show when offering an update; falls back to the description."""
        parts: list[str] = []
        if self.is_installed and self.installed_version_is_bad:
            parts.append(
                "The version of this plugin that is installed has been marked "
                "as unstable.  "
            )
            parts.append(self._bad_versions.get(self.installed_version, ""))
            parts.append("\r\n")
        if self.latest_update:
            parts.append(f"Latest update: {self.latest_update}\r\n")
        if self.stability != _GOOD_STABILITY:
            parts.append(f"Stability: {self.stability}\r\n")
        text = "".join(parts)
        return text or self.description

    # Steps

    def add_install_step(self, step: InstallStep) -> None:
        """Append a step to the install sequence."""
        self._install_steps.append(step)

    def add_remove_step(self, step: InstallStep) -> None:
        """Append a step to the removal sequence."""
        self._remove_steps.append(step)

    def install_step_count(self) -> int:
        """Number of install steps."""
        return len(self._install_steps)

    def remove_step_count(self) -> int:
        """Number of removal steps, counting the removal of the plugin file."""
        return len(self._remove_steps) + 1

    def install(
        self,
        base_path: str | os.PathLike[str],
        for_gpup: Element,
        set_status: StatusCallback,
        step_progress: ProgressCallback,
        step_complete: Callable[[], None],
        host: Host,
        variables: VariableHandler | None,
        cancel_token: CancelToken,
    ) -> InstallStatus:
        """Run the install steps in order."""
        return self._run_steps(
            self._install_steps,
            base_path,
            for_gpup,
            set_status,
            step_progress,
            step_complete,
            host,
            variables,
            cancel_token,
        )

    def remove(
        self,
        base_path: str | os.PathLike[str],
        for_gpup: Element,
        set_status: StatusCallback,
        step_progress: ProgressCallback,
        step_complete: Callable[[], None],
        host: Host,
        variables: VariableHandler,
        cancel_token: CancelToken,
    ) -> InstallStatus:
        """Schedule deletion of the plugin file and run the removal steps.

        While the steps run, ``PLUGINDIR`` points at the directory the plugin
        is installed in; it is restored afterwards.  Removal always needs a
        restart.
        """
        original_dir = variables.get_variable("PLUGINDIR")
        source = "ALLUSERSPLUGINDIR" if self.installed_for_all_users else "USERPLUGINDIR"
        plugin_dir = variables.get_variable(source)
        variables.set_variable("PLUGINDIR", plugin_dir)
        try:
            SubElement(
                for_gpup, "delete", {"file": os.path.join(plugin_dir, self.filename)}
            )
            self._run_steps(
                self._remove_steps,
                base_path,
                for_gpup,
                set_status,
                step_progress,
                step_complete,
                host,
                variables,
                cancel_token,
            )
        finally:
            variables.set_variable("PLUGINDIR", original_dir)
        return InstallStatus.NEEDRESTART

    def _run_steps(
        self,
        steps: Iterable[InstallStep],
        base_path: str | os.PathLike[str],
        for_gpup: Element,
        set_status: StatusCallback,
        step_progress: ProgressCallback,
        step_complete: Callable[[], None],
        host: Host,
        variables: VariableHandler | None,
        cancel_token: CancelToken,
    ) -> InstallStatus:
        status = InstallStatus.SUCCESS
        if variables is not None:
            variables.set_variable("PLUGINFILENAME", self.filename)
        for step in list(steps):
            if variables is not None:
                step.replace_variables(variables)
            result = step.perform(
                base_path, for_gpup, set_status, step_progress, host, cancel_token
            )
            if result is StepStatus.FAIL:
                return InstallStatus.FAIL
            if result is StepStatus.NEEDGPUP:
                status = InstallStatus.NEEDRESTART
            step_complete()
        return status

    # Dependencies

    def add_dependency(self, name: str) -> None:
        """Record that this plugin needs the plugin called ``name``."""
        self.dependencies.append(name)

    def has_dependencies(self) -> bool:
        """True when the plugin depends on other plugins."""
        return bool(self.dependencies)