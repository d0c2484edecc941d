"""Foreground application capture and re-activation."""

from __future__ import annotations

import logging as py_logging
import os
import platform
import shutil
import subprocess
from collections.abc import Callable
from typing import Protocol

from ostt_overlay.errors import ExitCode, OsttOverlayError
from ostt_overlay.launcher.models import FocusSnapshot

logger = py_logging.getLogger(__name__)

SubprocessRunner = Callable[..., subprocess.CompletedProcess]


class FocusProvider(Protocol):
    def capture(self) -> FocusSnapshot: ...

    def activate(self, snapshot: FocusSnapshot) -> bool: ...


class NullFocusProvider:
    """Used where no focus API is reachable; restoration is skipped."""

    def capture(self) -> FocusSnapshot:
        return FocusSnapshot()

    def activate(self, snapshot: FocusSnapshot) -> bool:
        del snapshot
        return False


class MacOSFocusProvider:
    def __init__(self, workspace: object | None = None) -> None:
        self._workspace = workspace

    def _shared_workspace(self) -> object:
        if self._workspace is not None:
            return self._workspace
        try:
            from AppKit import NSWorkspace
        except ImportError as exc:
            raise OsttOverlayError(
                "pyobjc AppKit bindings are not installed.",
                code=ExitCode.RUNTIME_ERROR,
                hint="Install pyobjc-framework-Cocoa to enable focus restoration.",
            ) from exc
        self._workspace = NSWorkspace.sharedWorkspace()
        return self._workspace

    def capture(self) -> FocusSnapshot:
        app = self._shared_workspace().frontmostApplication()
        if app is None:
            return FocusSnapshot()
        label = str(app.localizedName() or app.processIdentifier())
        return FocusSnapshot(handle=app, label=label)

    def activate(self, snapshot: FocusSnapshot) -> bool:
        app = snapshot.handle
        if app is None:
            return False
        if app.isTerminated():
            return False
        return bool(app.activateWithOptions_(0))


class XdotoolFocusProvider:
    def __init__(
        self,
        *,
        executable: str = "xdotool",
        runner: SubprocessRunner = subprocess.run,
        timeout_seconds: float = 5.0,
    ) -> None:
        self.executable = executable
        self._runner = runner
        self.timeout_seconds = timeout_seconds

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        return self._runner(
            [self.executable, *args],
            capture_output=True,
            text=True,
            timeout=self.timeout_seconds,
            check=False,
        )

    def capture(self) -> FocusSnapshot:
        try:
            completed = self._run(["getactivewindow"])
        except (OSError, subprocess.TimeoutExpired):
            logger.debug("focus xdotool-capture-failed", exc_info=True)
            return FocusSnapshot()
        window_id = (completed.stdout or "").strip()
        if completed.returncode != 0 or not window_id:
            return FocusSnapshot()
        return FocusSnapshot(handle=window_id, label=f"window:{window_id}")

    def activate(self, snapshot: FocusSnapshot) -> bool:
        if snapshot.handle is None:
            return False
        try:
            completed = self._run(["windowactivate", "--sync", str(snapshot.handle)])
        except (OSError, subprocess.TimeoutExpired):
            logger.debug("focus xdotool-activate-failed", exc_info=True)
            return False
        return completed.returncode == 0


def default_focus_provider(
    *,
    system_name: str | None = None,
    environ: dict[str, str] | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> FocusProvider:
    system = system_name or platform.system()
    if system == "Darwin":
        return MacOSFocusProvider()
    env = os.environ if environ is None else environ
    if system == "Linux" and env.get("DISPLAY"):
        executable = which("xdotool")
        if executable:
            return XdotoolFocusProvider(executable=executable)
    logger.info("focus provider=null system=%s", system)
    return NullFocusProvider()
