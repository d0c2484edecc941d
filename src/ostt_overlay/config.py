"""XDG config loading/saving."""

from __future__ import annotations

import os
import re
import sys
from contextlib import suppress
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

DEFAULT_CONFIG_PATH = Path("~/.config/ostt-overlay/config.toml").expanduser()
DEFAULT_TOOL_BINARY = "/opt/homebrew/bin/ostt"
DEFAULT_TERMINAL_BINARY = "/Applications/Ghostty.app/Contents/MacOS/ghostty"
DEFAULT_HOTKEY = "<cmd>+<ctrl>+<alt>+<shift>+r"
TOOL_BINARY_ENV = "OSTT_OVERLAY_TOOL"
TERMINAL_BINARY_ENV = "OSTT_OVERLAY_TERMINAL"

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
_WINDOW_INT_FIELDS = ("x", "y", "width", "height", "font_size")


class WindowConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    x: int = Field(default=630, ge=0)
    y: int = Field(default=790, ge=0)
    width: int = Field(default=50, ge=1)
    height: int = Field(default=10, ge=1)
    font_size: int = Field(default=8, ge=1)
    background: str = "#000000"
    decoration: bool = False
    shadow: bool = False

    @field_validator("background")
    @classmethod
    def _validate_background(cls, value: str) -> str:
        if not _HEX_COLOR.match(value):
            raise ValueError(f"Invalid background color: {value}")
        return value.lower()


class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    tool_binary: str = DEFAULT_TOOL_BINARY
    terminal_binary: str = DEFAULT_TERMINAL_BINARY
    hotkey: str = DEFAULT_HOTKEY
    single_flight: bool = False
    window: WindowConfig = Field(default_factory=WindowConfig)

    @field_validator("tool_binary", "terminal_binary", "hotkey")
    @classmethod
    def _validate_non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Value cannot be empty")
        return value.strip()


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return f'"{_escape(value)}"'
    raise TypeError(f"Unsupported TOML scalar type: {type(value)!r}")


def _is_plain_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _sanitize_window(raw: object) -> WindowConfig:
    window = WindowConfig()
    if not isinstance(raw, dict):
        return window

    for name in _WINDOW_INT_FIELDS:
        value = raw.get(name)
        if not _is_plain_int(value):
            continue
        with suppress(ValueError):
            setattr(window, name, value)

    background = raw.get("background")
    if isinstance(background, str):
        with suppress(ValueError):
            window.background = background

    for name in ("decoration", "shadow"):
        value = raw.get(name)
        if isinstance(value, bool):
            setattr(window, name, value)
    return window


def _sanitize(raw: dict[str, object]) -> AppConfig:
    cfg = AppConfig()

    for name in ("tool_binary", "terminal_binary", "hotkey"):
        value = raw.get(name)
        if isinstance(value, str):
            with suppress(ValueError):
                setattr(cfg, name, value)

    single_flight = raw.get("single_flight", cfg.single_flight)
    if isinstance(single_flight, bool):
        cfg.single_flight = single_flight

    cfg.window = _sanitize_window(raw.get("window"))
    return cfg


def _apply_env_overrides(cfg: AppConfig) -> AppConfig:
    tool = os.getenv(TOOL_BINARY_ENV, "").strip()
    if tool:
        cfg.tool_binary = tool
    terminal = os.getenv(TERMINAL_BINARY_ENV, "").strip()
    if terminal:
        cfg.terminal_binary = terminal
    return cfg


def load_config(path: str | Path | None = None) -> AppConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return _apply_env_overrides(AppConfig())
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return _apply_env_overrides(AppConfig())
    if not isinstance(raw, dict):
        return _apply_env_overrides(AppConfig())
    return _apply_env_overrides(_sanitize(raw))


def save_config(config: AppConfig, path: str | Path | None = None) -> Path:
    resolved = get_config_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    window = config.window

    lines = [
        f"tool_binary = {_toml_scalar(config.tool_binary)}",
        f"terminal_binary = {_toml_scalar(config.terminal_binary)}",
        f"hotkey = {_toml_scalar(config.hotkey)}",
        f"single_flight = {_toml_scalar(config.single_flight)}",
        "",
        "[window]",
        f"x = {_toml_scalar(window.x)}",
        f"y = {_toml_scalar(window.y)}",
        f"width = {_toml_scalar(window.width)}",
        f"height = {_toml_scalar(window.height)}",
        f"font_size = {_toml_scalar(window.font_size)}",
        f"background = {_toml_scalar(window.background)}",
        f"decoration = {_toml_scalar(window.decoration)}",
        f"shadow = {_toml_scalar(window.shadow)}",
    ]

    resolved.write_text("\n".join(lines) + "\n", encoding="utf-8")
    with suppress(OSError):
        resolved.chmod(0o600)
    return resolved
