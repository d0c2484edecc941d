"""Distribution domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

TOOL_NAME = "ostt"


class OperatingSystem(str, Enum):
    MACOS = "macos"
    LINUX = "linux"


class Architecture(str, Enum):
    ARM64 = "arm64"
    X86_64 = "x86_64"


@dataclass(frozen=True)
class PlatformTarget:
    os: OperatingSystem
    arch: Architecture
    triple: str
    url: str
    dependencies: tuple[str, ...]

    @property
    def archive_dir(self) -> str:
        return f"{TOOL_NAME}-{self.triple}"

    @property
    def archive_name(self) -> str:
        return f"{self.archive_dir}.tar.gz"


@dataclass(frozen=True)
class InstallStep:
    source: str
    destination: Path
    mode: int
