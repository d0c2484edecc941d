from __future__ import annotations

from pathlib import Path

from ostt_overlay.config import AppConfig, WindowConfig
from ostt_overlay.launcher import LaunchRequest, WindowGeometry, build_terminal_command


def test_default_request_matches_popup_argument_contract() -> None:
    request = LaunchRequest.from_config(AppConfig())

    assert build_terminal_command(request) == [
        "/Applications/Ghostty.app/Contents/MacOS/ghostty",
        "--window-position-x=630",
        "--window-position-y=790",
        "--window-width=50",
        "--window-height=10",
        "--font-size=8",
        "--background=#000000",
        "--window-decoration=none",
        "--macos-window-shadow=false",
        "-e",
        "/opt/homebrew/bin/ostt",
    ]


def test_geometry_and_style_flags_follow_configuration() -> None:
    request = LaunchRequest(
        tool_binary=Path("/usr/local/bin/ostt"),
        terminal_binary=Path("/usr/bin/ghostty"),
        geometry=WindowGeometry(
            x=0, y=12, width=120, height=30, font_size=14, background="#ff00aa", decoration=True, shadow=True
        ),
    )

    command = build_terminal_command(request)

    assert command[1:9] == [
        "--window-position-x=0",
        "--window-position-y=12",
        "--window-width=120",
        "--window-height=30",
        "--font-size=14",
        "--background=#ff00aa",
        "--window-decoration=auto",
        "--macos-window-shadow=true",
    ]
    assert command[-2:] == ["-e", "/usr/local/bin/ostt"]


def test_window_geometry_is_copied_from_config() -> None:
    window = WindowConfig(x=1, y=2, width=3, height=4, font_size=5, background="#ABCDEF")

    geometry = WindowGeometry.from_config(window)

    assert geometry == WindowGeometry(x=1, y=2, width=3, height=4, font_size=5, background="#abcdef")
