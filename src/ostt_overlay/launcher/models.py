"""Overlay launcher domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ostt_overlay.config import AppConfig, WindowConfig


class LauncherState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    CAPTURING_FOCUS = "capturing-focus"
    SPAWNING = "spawning"
    RUNNING = "running"
    COMPLETING = "completing"
    FAILED = "failed"


@dataclass(frozen=True)
class WindowGeometry:
    x: int = 630
    y: int = 790
    width: int = 50
    height: int = 10
    font_size: int = 8
    background: str = "#000000"
    decoration: bool = False
    shadow: bool = False

    @classmethod
    def from_config(cls, window: WindowConfig) -> WindowGeometry:
        return cls(
            x=window.x,
            y=window.y,
            width=window.width,
            height=window.height,
            font_size=window.font_size,
            background=window.background,
            decoration=window.decoration,
            shadow=window.shadow,
        )


@dataclass(frozen=True)
class LaunchRequest:
    tool_binary: Path
    terminal_binary: Path
    geometry: WindowGeometry = WindowGeometry()

    @classmethod
    def from_config(cls, config: AppConfig) -> LaunchRequest:
        return cls(
            tool_binary=Path(config.tool_binary).expanduser(),
            terminal_binary=Path(config.terminal_binary).expanduser(),
            geometry=WindowGeometry.from_config(config.window),
        )


@dataclass(frozen=True)
class FocusSnapshot:
    """Foreground application captured right before a popup opens."""

    handle: object | None = None
    label: str = ""

    @property
    def is_empty(self) -> bool:
        return self.handle is None


@dataclass(frozen=True)
class ChildExit:
    returncode: int
    stdout: str = ""
    stderr: str = ""
