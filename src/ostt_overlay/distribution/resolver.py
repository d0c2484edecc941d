"""Platform target resolver for prebuilt ostt distributions."""

from __future__ import annotations

import logging as py_logging
import platform
from collections.abc import Callable

from ostt_overlay.distribution.models import (
    TOOL_NAME,
    Architecture,
    OperatingSystem,
    PlatformTarget,
)
from ostt_overlay.errors import ExitCode, OsttOverlayError

logger = py_logging.getLogger(__name__)

DEFAULT_VERSION = "0.0.1"
RELEASE_URL_TEMPLATE = (
    "https://github.com/kristoferlund/ostt/releases/download/v{version}/{tool}-{triple}.tar.gz"
)

TARGET_TRIPLES: dict[tuple[OperatingSystem, Architecture], str] = {
    (OperatingSystem.MACOS, Architecture.ARM64): "aarch64-apple-darwin",
    (OperatingSystem.MACOS, Architecture.X86_64): "x86_64-apple-darwin",
    (OperatingSystem.LINUX, Architecture.ARM64): "aarch64-unknown-linux-gnu",
    (OperatingSystem.LINUX, Architecture.X86_64): "x86_64-unknown-linux-gnu",
}

BASE_DEPENDENCIES: tuple[str, ...] = ("openssl", "ffmpeg")
OS_DEPENDENCIES: dict[OperatingSystem, tuple[str, ...]] = {
    OperatingSystem.LINUX: ("alsa-lib",),
}

_OS_ALIASES = {
    "darwin": OperatingSystem.MACOS,
    "macos": OperatingSystem.MACOS,
    "macosx": OperatingSystem.MACOS,
    "linux": OperatingSystem.LINUX,
}
_ARCH_ALIASES = {
    "arm64": Architecture.ARM64,
    "aarch64": Architecture.ARM64,
    "x86_64": Architecture.X86_64,
    "amd64": Architecture.X86_64,
}


def normalize_os(value: OperatingSystem | str) -> OperatingSystem:
    if isinstance(value, OperatingSystem):
        return value
    resolved = _OS_ALIASES.get(str(value).strip().lower())
    if resolved is None:
        raise OsttOverlayError(
            f"Unsupported operating system: {value or '-'}",
            code=ExitCode.UNSUPPORTED_PLATFORM,
            hint="Prebuilt ostt archives exist for macOS and Linux only.",
        )
    return resolved


def normalize_arch(value: Architecture | str) -> Architecture:
    if isinstance(value, Architecture):
        return value
    resolved = _ARCH_ALIASES.get(str(value).strip().lower())
    if resolved is None:
        raise OsttOverlayError(
            f"Unsupported CPU architecture: {value or '-'}",
            code=ExitCode.UNSUPPORTED_PLATFORM,
            hint="Prebuilt ostt archives exist for arm64 and x86_64 only.",
        )
    return resolved


def dependencies_for(os_name: OperatingSystem) -> tuple[str, ...]:
    return BASE_DEPENDENCIES + OS_DEPENDENCIES.get(os_name, ())


def release_url(triple: str, *, version: str = DEFAULT_VERSION) -> str:
    return RELEASE_URL_TEMPLATE.format(version=version, tool=TOOL_NAME, triple=triple)


def resolve(
    os_name: OperatingSystem | str,
    arch: Architecture | str,
    *,
    version: str = DEFAULT_VERSION,
) -> PlatformTarget:
    """Map an (OS, architecture) pair to its distribution target.

    There is no fallback: any pair outside ``TARGET_TRIPLES`` raises
    ``OsttOverlayError`` with ``ExitCode.UNSUPPORTED_PLATFORM``.
    """
    resolved_os = normalize_os(os_name)
    resolved_arch = normalize_arch(arch)
    triple = TARGET_TRIPLES.get((resolved_os, resolved_arch))
    if triple is None:
        raise OsttOverlayError(
            f"No distribution for {resolved_os.value}/{resolved_arch.value}",
            code=ExitCode.UNSUPPORTED_PLATFORM,
        )
    target = PlatformTarget(
        os=resolved_os,
        arch=resolved_arch,
        triple=triple,
        url=release_url(triple, version=version),
        dependencies=dependencies_for(resolved_os),
    )
    logger.debug(
        "resolver target os=%s arch=%s triple=%s",
        resolved_os.value,
        resolved_arch.value,
        triple,
    )
    return target


def detect_host(
    *,
    system: Callable[[], str] = platform.system,
    machine: Callable[[], str] = platform.machine,
) -> tuple[OperatingSystem, Architecture]:
    return normalize_os(system()), normalize_arch(machine())


def resolve_host(
    *,
    version: str = DEFAULT_VERSION,
    system: Callable[[], str] = platform.system,
    machine: Callable[[], str] = platform.machine,
) -> PlatformTarget:
    os_name, arch = detect_host(system=system, machine=machine)
    return resolve(os_name, arch, version=version)
