from __future__ import annotations

import sys
from pathlib import Path

import pytest

from ostt_overlay.launcher import (
    FocusSnapshot,
    LauncherState,
    LaunchRequest,
    OverlayLauncher,
    ProcessSpawner,
)

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell scripts")


class _RecordingFocus:
    def __init__(self) -> None:
        self.activations: list[object] = []

    def capture(self) -> FocusSnapshot:
        return FocusSnapshot(handle="editor-window", label="Editor")

    def activate(self, snapshot: FocusSnapshot) -> bool:
        self.activations.append(snapshot.handle)
        return True


class _Alerter:
    def show(self, message: str) -> None:
        raise AssertionError(message)


def _script(path: Path, body: str) -> Path:
    path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    path.chmod(0o755)
    return path


def test_real_child_exit_restores_focus_once(tmp_path: Path) -> None:
    tool = _script(tmp_path / "ostt", "exit 0")
    args_file = tmp_path / "args.txt"
    terminal = _script(tmp_path / "terminal", f'printf "%s\\n" "$@" > "{args_file}"\nexit 4')
    focus = _RecordingFocus()
    spawner = ProcessSpawner()
    launcher = OverlayLauncher(
        LaunchRequest(tool_binary=tool, terminal_binary=terminal),
        focus=focus,
        alerter=_Alerter(),
        spawner=spawner,
    )

    try:
        context = launcher.trigger()
        assert context is not None
        assert context.wait(timeout=10)
    finally:
        launcher.shutdown()

    assert context.exit is not None
    assert context.exit.returncode == 4
    assert context.state == LauncherState.IDLE
    assert focus.activations == ["editor-window"]
    recorded = args_file.read_text(encoding="utf-8").splitlines()
    assert recorded[-2:] == ["-e", str(tool)]
    assert "--window-decoration=none" in recorded


def test_missing_terminal_fails_without_restoring(tmp_path: Path) -> None:
    tool = _script(tmp_path / "ostt", "exit 0")
    focus = _RecordingFocus()
    launcher = OverlayLauncher(
        LaunchRequest(tool_binary=tool, terminal_binary=tmp_path / "no-terminal"),
        focus=focus,
        alerter=_Alerter(),
        spawner=ProcessSpawner(),
    )

    try:
        assert launcher.trigger() is None
    finally:
        launcher.shutdown()

    assert focus.activations == []


def test_killed_child_restores_focus_once(tmp_path: Path) -> None:
    tool = _script(tmp_path / "ostt", "exit 0")
    terminal = _script(tmp_path / "terminal", "kill -9 $$")
    focus = _RecordingFocus()
    launcher = OverlayLauncher(
        LaunchRequest(tool_binary=tool, terminal_binary=terminal),
        focus=focus,
        alerter=_Alerter(),
        spawner=ProcessSpawner(),
    )

    try:
        context = launcher.trigger()
        assert context is not None
        assert context.wait(timeout=10)
    finally:
        launcher.shutdown()

    assert context.exit is not None
    assert context.exit.returncode == -9
    assert context.state == LauncherState.IDLE
    assert focus.activations == ["editor-window"]
