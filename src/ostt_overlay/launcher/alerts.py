"""User-visible alert surface."""

from __future__ import annotations

import logging as py_logging
import platform
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol

logger = py_logging.getLogger(__name__)

ALERT_TITLE = "ostt-overlay"

SubprocessRunner = Callable[..., subprocess.CompletedProcess]


class Alerter(Protocol):
    def show(self, message: str) -> None: ...


class LogAlerter:
    def show(self, message: str) -> None:
        logger.warning("alert %s", message.replace("\n", " "))


def _applescript_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


class _CommandAlerter(ABC):
    def __init__(self, *, runner: SubprocessRunner = subprocess.run) -> None:
        self._runner = runner

    @abstractmethod
    def build_command(self, message: str) -> list[str]: ...

    def show(self, message: str) -> None:
        command = self.build_command(message)
        try:
            completed = self._runner(command, capture_output=True, text=True, check=False)
        except OSError:
            logger.warning("alert delivery-failed message=%s", message, exc_info=True)
            return
        if completed.returncode != 0:
            logger.warning(
                "alert delivery-failed returncode=%s message=%s",
                completed.returncode,
                message,
            )


class MacOSAlerter(_CommandAlerter):
    def build_command(self, message: str) -> list[str]:
        script = (
            f"display notification {_applescript_string(message)} "
            f"with title {_applescript_string(ALERT_TITLE)}"
        )
        return ["osascript", "-e", script]


class NotifySendAlerter(_CommandAlerter):
    def build_command(self, message: str) -> list[str]:
        return ["notify-send", ALERT_TITLE, message]


def default_alerter(
    *,
    system_name: str | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> Alerter:
    system = system_name or platform.system()
    if system == "Darwin":
        return MacOSAlerter()
    if system == "Linux" and which("notify-send"):
        return NotifySendAlerter()
    return LogAlerter()
