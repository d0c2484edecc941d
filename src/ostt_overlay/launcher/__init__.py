"""Transient popup launcher for the ostt terminal tool."""

from .alerts import Alerter, LogAlerter, MacOSAlerter, NotifySendAlerter, default_alerter
from .command import build_terminal_command
from .focus import (
    FocusProvider,
    MacOSFocusProvider,
    NullFocusProvider,
    XdotoolFocusProvider,
    default_focus_provider,
)
from .hotkey import HotkeyBinding, normalize_chord, parse_chord
from .models import ChildExit, FocusSnapshot, LauncherState, LaunchRequest, WindowGeometry
from .process import ChildProcessHandle, ProcessSpawner
from .service import LaunchContext, OverlayLauncher, SingleFlightGuard
from .validation import missing_binary_message, validate_binary

__all__ = [
    "Alerter",
    "build_terminal_command",
    "ChildExit",
    "ChildProcessHandle",
    "default_alerter",
    "default_focus_provider",
    "FocusProvider",
    "FocusSnapshot",
    "HotkeyBinding",
    "LaunchContext",
    "LauncherState",
    "LaunchRequest",
    "LogAlerter",
    "MacOSAlerter",
    "MacOSFocusProvider",
    "missing_binary_message",
    "normalize_chord",
    "NotifySendAlerter",
    "NullFocusProvider",
    "OverlayLauncher",
    "parse_chord",
    "ProcessSpawner",
    "SingleFlightGuard",
    "validate_binary",
    "WindowGeometry",
    "XdotoolFocusProvider",
]
