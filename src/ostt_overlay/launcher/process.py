"""Asynchronous child process ownership."""

from __future__ import annotations

import logging as py_logging
import subprocess
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import suppress

from ostt_overlay.errors import ExitCode, OsttOverlayError
from ostt_overlay.launcher.models import ChildExit
from ostt_overlay.logging import command_for_log

logger = py_logging.getLogger(__name__)

PopenFactory = Callable[..., subprocess.Popen]


class ChildProcessHandle:
    """A running child plus the future that resolves when it exits."""

    def __init__(self, process: subprocess.Popen, future: Future[ChildExit]) -> None:
        self.process = process
        self.future = future

    @property
    def pid(self) -> int:
        return int(self.process.pid)

    def add_exit_callback(self, callback: Callable[[Future[ChildExit]], None]) -> None:
        self.future.add_done_callback(callback)

    def wait(self, timeout: float | None = None) -> ChildExit:
        return self.future.result(timeout=timeout)


def _wait_for_exit(process: subprocess.Popen) -> ChildExit:
    stdout, stderr = process.communicate()
    return ChildExit(returncode=process.returncode, stdout=stdout or "", stderr=stderr or "")


class ProcessSpawner:
    def __init__(
        self,
        *,
        popen: PopenFactory = subprocess.Popen,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._popen = popen
        self._executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="ostt-overlay-child"
        )

    def spawn(self, argv: list[str], *, env: dict[str, str] | None = None) -> ChildProcessHandle:
        if not argv:
            raise OsttOverlayError(
                "Spawn command cannot be empty.",
                code=ExitCode.SPAWN_FAILURE,
            )
        try:
            process = self._popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                env=env,
            )
        except (OSError, ValueError) as exc:
            logger.error("spawn failed command=%s error=%s", command_for_log(argv), exc)
            raise OsttOverlayError(
                f"Failed to start terminal: {argv[0]}",
                code=ExitCode.SPAWN_FAILURE,
                hint=str(exc) or "Check terminal_binary in the config file.",
            ) from exc
        logger.debug("spawn started pid=%s command=%s", process.pid, command_for_log(argv))
        try:
            future = self._executor.submit(_wait_for_exit, process)
        except RuntimeError as exc:
            logger.error("spawn wait-unavailable pid=%s error=%s", process.pid, exc)
            with suppress(OSError):
                process.kill()
            raise OsttOverlayError(
                f"Failed to watch terminal: {argv[0]}",
                code=ExitCode.SPAWN_FAILURE,
                hint="The launcher is shutting down; trigger the popup again.",
            ) from exc
        return ChildProcessHandle(process, future)

    def shutdown(self, *, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)
