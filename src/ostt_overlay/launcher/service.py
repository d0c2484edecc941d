"""Overlay launcher: one transient popup per trigger with focus restoration."""

from __future__ import annotations

import itertools
import logging as py_logging
import threading
from concurrent.futures import Future

from ostt_overlay.config import AppConfig
from ostt_overlay.errors import ExitCode, OsttOverlayError
from ostt_overlay.launcher.alerts import Alerter, default_alerter
from ostt_overlay.launcher.command import build_terminal_command
from ostt_overlay.launcher.focus import FocusProvider, default_focus_provider
from ostt_overlay.launcher.models import ChildExit, FocusSnapshot, LauncherState, LaunchRequest
from ostt_overlay.launcher.process import ChildProcessHandle, ProcessSpawner
from ostt_overlay.launcher.validation import missing_binary_message, validate_binary
from ostt_overlay.logging import command_for_log

logger = py_logging.getLogger(__name__)

_launch_ids = itertools.count(1)


class LaunchContext:
    """State owned by a single launch cycle.

    The focus snapshot lives here, never on the launcher, so overlapping
    launches cannot restore each other's application.
    """

    def __init__(self, request: LaunchRequest) -> None:
        self.launch_id = next(_launch_ids)
        self.request = request
        self.state = LauncherState.IDLE
        self.snapshot: FocusSnapshot | None = None
        self.child: ChildProcessHandle | None = None
        self.exit: ChildExit | None = None
        self.restore_attempted = False
        self.restored = False
        self._completed = False
        self._lock = threading.Lock()
        self._done = threading.Event()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)

    def claim_completion(self) -> bool:
        with self._lock:
            if self._completed:
                return False
            self._completed = True
            return True

    def mark_finished(self, state: LauncherState) -> None:
        self.state = state
        self.snapshot = None
        self._done.set()


class SingleFlightGuard:
    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self._lock = threading.Lock()

    def acquire(self) -> bool:
        if not self.enabled:
            return True
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        if self.enabled and self._lock.locked():
            self._lock.release()

    @property
    def busy(self) -> bool:
        return self.enabled and self._lock.locked()


class OverlayLauncher:
    def __init__(
        self,
        request: LaunchRequest,
        *,
        focus: FocusProvider | None = None,
        alerter: Alerter | None = None,
        spawner: ProcessSpawner | None = None,
        single_flight: bool = False,
    ) -> None:
        self.request = request
        self._focus = focus or default_focus_provider()
        self._alerter = alerter or default_alerter()
        self._spawner = spawner or ProcessSpawner()
        self._guard = SingleFlightGuard(single_flight)

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: object) -> OverlayLauncher:
        return cls(
            LaunchRequest.from_config(config),
            single_flight=config.single_flight,
            **kwargs,
        )

    @property
    def busy(self) -> bool:
        return self._guard.busy

    def validate(self) -> bool:
        return validate_binary(self.request.tool_binary)

    def launch(self) -> LaunchContext:
        """Run validate, capture and spawn, then return without waiting.

        Raises ``OsttOverlayError`` for validation, spawn and single-flight
        failures. Focus is restored by the exit continuation.
        """
        if not self._guard.acquire():
            logger.info("launcher trigger-ignored reason=busy")
            raise OsttOverlayError(
                "A popup is already open.",
                code=ExitCode.LAUNCHER_BUSY,
                hint="Close the current popup first.",
            )

        context = LaunchContext(self.request)
        try:
            context.state = LauncherState.VALIDATING
            if not validate_binary(self.request.tool_binary):
                logger.warning(
                    "launcher validation-failed id=%s binary=%s",
                    context.launch_id,
                    self.request.tool_binary,
                )
                context.mark_finished(LauncherState.FAILED)
                raise OsttOverlayError(
                    f"Tool binary not found or not executable: {self.request.tool_binary}",
                    code=ExitCode.BINARY_NOT_FOUND,
                    hint="Install ostt or point tool_binary at the executable.",
                )

            context.state = LauncherState.CAPTURING_FOCUS
            context.snapshot = self._capture_focus(context)

            context.state = LauncherState.SPAWNING
            argv = build_terminal_command(self.request)
            logger.info(
                "launcher launch-start id=%s focus=%s command=%s",
                context.launch_id,
                context.snapshot.label or "-",
                command_for_log(argv),
            )
            try:
                context.child = self._spawner.spawn(argv)
            except OsttOverlayError:
                logger.error("launcher spawn-failed id=%s snapshot=discarded", context.launch_id)
                context.mark_finished(LauncherState.FAILED)
                raise
        except BaseException:
            self._guard.release()
            raise

        context.state = LauncherState.RUNNING
        context.child.add_exit_callback(lambda future: self._complete(context, future))
        return context

    def trigger(self) -> LaunchContext | None:
        """Hotkey entry point; contains every failure to this launch cycle."""
        try:
            return self.launch()
        except OsttOverlayError as exc:
            if exc.code == ExitCode.BINARY_NOT_FOUND:
                self._alert(missing_binary_message(self.request.tool_binary))
            elif exc.code != ExitCode.LAUNCHER_BUSY:
                logger.error("launcher trigger-failed code=%s message=%s", int(exc.code), exc.message)
        except Exception:
            logger.exception("launcher trigger-crashed")
        return None

    def shutdown(self) -> None:
        self._spawner.shutdown(wait=False)

    def _capture_focus(self, context: LaunchContext) -> FocusSnapshot:
        try:
            snapshot = self._focus.capture()
        except Exception:
            logger.warning("launcher focus-capture-failed id=%s", context.launch_id, exc_info=True)
            return FocusSnapshot()
        return snapshot if snapshot is not None else FocusSnapshot()

    def _alert(self, message: str) -> None:
        try:
            self._alerter.show(message)
        except Exception:
            logger.warning("launcher alert-failed", exc_info=True)

    def _complete(self, context: LaunchContext, future: Future[ChildExit]) -> None:
        if not context.claim_completion():
            return
        try:
            context.state = LauncherState.COMPLETING
            try:
                context.exit = future.result()
            except Exception:
                logger.warning("launcher child-wait-failed id=%s", context.launch_id, exc_info=True)
            else:
                logger.info(
                    "launcher child-exit id=%s returncode=%s",
                    context.launch_id,
                    context.exit.returncode,
                )
            self._restore_focus(context)
        finally:
            self._guard.release()
            context.mark_finished(LauncherState.IDLE)

    def _restore_focus(self, context: LaunchContext) -> None:
        snapshot = context.snapshot
        if snapshot is None or snapshot.is_empty:
            logger.debug("launcher restore-skipped id=%s reason=no-snapshot", context.launch_id)
            return
        context.restore_attempted = True
        try:
            context.restored = bool(self._focus.activate(snapshot))
        except Exception:
            logger.warning(
                "launcher restore-failed id=%s target=%s",
                context.launch_id,
                snapshot.label or "-",
                exc_info=True,
            )
            return
        if not context.restored:
            logger.warning(
                "launcher restore-failed id=%s target=%s", context.launch_id, snapshot.label or "-"
            )
