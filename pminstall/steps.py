"""Base pieces shared by all install steps."""

from __future__ import annotations

import enum
import os
import sys
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element

if TYPE_CHECKING:
    from pminstall.variables import VariableHandler


class StepStatus(enum.Enum):
    """Outcome of performing a single step."""

    SUCCESS = enum.auto()
    NEEDGPUP = enum.auto()
    FAIL = enum.auto()


class CancelToken:
    """A shared flag that signals that work in progress should stop."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def trigger_cancel(self) -> None:
        """Signal cancellation to everyone holding this token."""
        self._event.set()

    def is_signalled(self) -> bool:
        """Return True once cancellation has been triggered."""
        return self._event.is_set()


@dataclass
class Host:
    """The application the steps run inside, used to ask and tell the user.

    ``ask`` answers yes/no questions; without it every question is answered
    no.  ``notify`` shows a message; without it messages go to stderr.
    """

    ask: Callable[[str], bool] | None = None
    notify: Callable[[str], None] | None = None
    title: str = "Plugin Manager"

    def confirm(self, message: str) -> bool:
        """Ask the user a yes/no question."""
        if self.ask is None:
            return False
        return bool(self.ask(message))

    def inform(self, message: str) -> None:
        """Show the user a message."""
        if self.notify is not None:
            self.notify(message)
        else:
            print(f"{self.title}: {message}", file=sys.stderr)


StatusCallback = Callable[[str], None]
ProgressCallback = Callable[[int], None]


class InstallStep:
    """A single action in installing or removing a plugin."""

    def perform(
        self,
        base_path: str | os.PathLike[str],
        for_gpup: Element,
        set_status: StatusCallback,
        step_progress: ProgressCallback,
        host: Host,
        cancel_token: CancelToken,
    ) -> StepStatus:
        """Carry out the step; the base step does nothing and succeeds."""
        return StepStatus.SUCCESS

    def replace_variables(self, variables: VariableHandler) -> None:
        """Expand variables in the step's settings; the base step has none."""