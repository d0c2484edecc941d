"""Install-time file operations for a resolved distribution."""

from __future__ import annotations

import logging as py_logging
import os
import shutil
import subprocess
import tarfile
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from ostt_overlay.distribution.models import TOOL_NAME, InstallStep, OperatingSystem, PlatformTarget
from ostt_overlay.errors import ExitCode, OsttOverlayError

logger = py_logging.getLogger(__name__)

DOC_FILE = "README.md"
EXECUTABLE_MODE = 0o755
DOC_MODE = 0o644

SubprocessRunner = Callable[..., subprocess.CompletedProcess]


def install_plan(target: PlatformTarget, prefix: str | Path) -> list[InstallStep]:
    root = Path(prefix).expanduser()
    return [
        InstallStep(
            source=f"{target.archive_dir}/{TOOL_NAME}",
            destination=root / "bin" / TOOL_NAME,
            mode=EXECUTABLE_MODE,
        ),
        InstallStep(
            source=f"{target.archive_dir}/{DOC_FILE}",
            destination=root / "share" / "doc" / TOOL_NAME / DOC_FILE,
            mode=DOC_MODE,
        ),
    ]


def _write_step(step: InstallStep, payload: BinaryIO) -> None:
    step.destination.parent.mkdir(parents=True, exist_ok=True)
    with step.destination.open("wb") as handle:
        shutil.copyfileobj(payload, handle)
    os.chmod(step.destination, step.mode)


def install_from_directory(
    source_root: str | Path,
    target: PlatformTarget,
    prefix: str | Path,
) -> list[Path]:
    """Install from an already extracted archive root."""
    root = Path(source_root)
    steps = install_plan(target, prefix)
    missing = [step.source for step in steps if not (root / step.source).is_file()]
    if missing:
        raise OsttOverlayError(
            f"Distribution is missing files: {', '.join(missing)}",
            code=ExitCode.INSTALL_ERROR,
            hint=f"Expected a top-level '{target.archive_dir}' directory.",
        )
    installed: list[Path] = []
    for step in steps:
        with (root / step.source).open("rb") as payload:
            _write_step(step, payload)
        logger.info("install step source=%s destination=%s", step.source, step.destination)
        installed.append(step.destination)
    return installed


def install_from_archive(
    archive: str | Path,
    target: PlatformTarget,
    prefix: str | Path,
) -> list[Path]:
    """Install the executable and documentation file straight from the tarball.

    Only the two planned members are read, so nothing else in the archive ever
    touches the filesystem.
    """
    archive_path = Path(archive).expanduser()
    if archive_path.name != target.archive_name:
        logger.warning(
            "install archive-name-mismatch expected=%s actual=%s",
            target.archive_name,
            archive_path.name,
        )
    steps = install_plan(target, prefix)
    try:
        with tarfile.open(archive_path, "r:*") as bundle:
            members: dict[str, tarfile.TarInfo] = {}
            for step in steps:
                try:
                    member = bundle.getmember(step.source)
                except KeyError:
                    member = None
                if member is None or not member.isfile():
                    raise OsttOverlayError(
                        f"Archive is missing {step.source}",
                        code=ExitCode.INSTALL_ERROR,
                        hint=f"Expected a top-level '{target.archive_dir}' directory.",
                    )
                members[step.source] = member

            installed: list[Path] = []
            for step in steps:
                payload = bundle.extractfile(members[step.source])
                if payload is None:
                    raise OsttOverlayError(
                        f"Archive member is not readable: {step.source}",
                        code=ExitCode.INSTALL_ERROR,
                    )
                with payload:
                    _write_step(step, payload)
                logger.info("install step source=%s destination=%s", step.source, step.destination)
                installed.append(step.destination)
    except (OSError, tarfile.TarError) as exc:
        raise OsttOverlayError(
            f"Cannot read archive: {archive_path}",
            code=ExitCode.INSTALL_ERROR,
            hint=str(exc) or "Download the archive again.",
        ) from exc
    return installed


def smoke_test_command(prefix: str | Path) -> list[str]:
    return [str(Path(prefix).expanduser() / "bin" / TOOL_NAME), "help"]


def run_smoke_test(
    prefix: str | Path,
    *,
    runner: SubprocessRunner = subprocess.run,
    timeout_seconds: float = 30.0,
) -> bool:
    command = smoke_test_command(prefix)
    try:
        completed = runner(
            command,
            capture_output=True,
            text=True,
            timeout=timeout_seconds,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired):
        logger.warning("install smoke-test-failed command=%s", command, exc_info=True)
        return False
    if completed.returncode != 0:
        logger.warning(
            "install smoke-test-failed returncode=%s command=%s",
            completed.returncode,
            command,
        )
        return False
    return True


def post_install_message(os_name: OperatingSystem) -> str:
    lines = [
        "",
        "ostt has been successfully installed!",
        "",
        "Getting started:",
        "  1. Configure API credentials:",
        "     ostt auth",
        "",
        "  2. Start recording and transcribing:",
        "     ostt",
        "",
        "  3. View command history:",
        "     ostt history",
        "",
        "Configuration:",
        "  - Config: ~/.config/ostt/",
        "  - Data: ~/.local/share/ostt/",
        "  - Logs: ~/.local/state/ostt/",
        "",
        "Note: On first run, ostt will automatically set up configuration",
        "      files. Hyprland users will get WM integration files created",
        "      automatically in ~/.config/ostt/ and ~/.local/bin/",
        "",
    ]
    if os_name == OperatingSystem.LINUX:
        lines.extend(["Linux users: Install clipboard support (wl-clipboard or xclip)", ""])
    return "\n".join(lines)
