"""Terminal emulator argument contract for the popup window."""

from __future__ import annotations

from ostt_overlay.launcher.models import LaunchRequest, WindowGeometry


def geometry_flags(geometry: WindowGeometry) -> list[str]:
    return [
        f"--window-position-x={geometry.x}",
        f"--window-position-y={geometry.y}",
        f"--window-width={geometry.width}",
        f"--window-height={geometry.height}",
        f"--font-size={geometry.font_size}",
        f"--background={geometry.background}",
        f"--window-decoration={'auto' if geometry.decoration else 'none'}",
        f"--macos-window-shadow={'true' if geometry.shadow else 'false'}",
    ]


def build_terminal_command(request: LaunchRequest) -> list[str]:
    return [
        str(request.terminal_binary),
        *geometry_flags(request.geometry),
        "-e",
        str(request.tool_binary),
    ]
