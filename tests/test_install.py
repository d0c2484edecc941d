from __future__ import annotations

import io
import os
import subprocess
import tarfile
from pathlib import Path

import pytest

from ostt_overlay.distribution import (
    OperatingSystem,
    install_from_archive,
    install_from_directory,
    install_plan,
    post_install_message,
    resolve,
    run_smoke_test,
    smoke_test_command,
)
from ostt_overlay.errors import ExitCode, OsttOverlayError


def _cp(returncode: int) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout="", stderr="")


def _add_file(bundle: tarfile.TarFile, name: str, payload: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(payload)
    bundle.addfile(info, io.BytesIO(payload))


def _build_archive(path: Path, members: dict[str, bytes]) -> Path:
    with tarfile.open(path, "w:gz") as bundle:
        for name, payload in members.items():
            _add_file(bundle, name, payload)
    return path


def test_install_plan_targets_bin_and_doc(tmp_path: Path) -> None:
    target = resolve("linux", "x86_64")

    steps = install_plan(target, tmp_path)

    assert [step.source for step in steps] == [
        "ostt-x86_64-unknown-linux-gnu/ostt",
        "ostt-x86_64-unknown-linux-gnu/README.md",
    ]
    assert steps[0].destination == tmp_path / "bin" / "ostt"
    assert steps[0].mode == 0o755
    assert steps[1].destination == tmp_path / "share" / "doc" / "ostt" / "README.md"


def test_install_from_archive_installs_only_binary_and_doc(tmp_path: Path) -> None:
    target = resolve("macos", "arm64")
    archive = _build_archive(
        tmp_path / target.archive_name,
        {
            "ostt-aarch64-apple-darwin/ostt": b"#!/bin/sh\necho ostt\n",
            "ostt-aarch64-apple-darwin/README.md": b"# ostt\n",
            "ostt-aarch64-apple-darwin/LICENSE": b"MIT\n",
            "../escape.txt": b"nope\n",
        },
    )
    prefix = tmp_path / "prefix"

    installed = install_from_archive(archive, target, prefix)

    assert installed == [prefix / "bin" / "ostt", prefix / "share" / "doc" / "ostt" / "README.md"]
    assert (prefix / "bin" / "ostt").read_bytes() == b"#!/bin/sh\necho ostt\n"
    assert os.access(prefix / "bin" / "ostt", os.X_OK)
    installed_files = sorted(p.relative_to(prefix).as_posix() for p in prefix.rglob("*") if p.is_file())
    assert installed_files == ["bin/ostt", "share/doc/ostt/README.md"]
    assert not (tmp_path / "escape.txt").exists()


def test_install_from_archive_rejects_wrong_top_level_directory(tmp_path: Path) -> None:
    target = resolve("linux", "arm64")
    archive = _build_archive(
        tmp_path / target.archive_name,
        {
            "ostt-x86_64-unknown-linux-gnu/ostt": b"bin",
            "ostt-x86_64-unknown-linux-gnu/README.md": b"doc",
        },
    )

    with pytest.raises(OsttOverlayError) as excinfo:
        install_from_archive(archive, target, tmp_path / "prefix")

    assert excinfo.value.code == ExitCode.INSTALL_ERROR
    assert not (tmp_path / "prefix" / "bin" / "ostt").exists()


def test_install_from_archive_reports_unreadable_archive(tmp_path: Path) -> None:
    target = resolve("linux", "arm64")
    broken = tmp_path / target.archive_name
    broken.write_bytes(b"not a tarball")

    with pytest.raises(OsttOverlayError) as excinfo:
        install_from_archive(broken, target, tmp_path / "prefix")

    assert excinfo.value.code == ExitCode.INSTALL_ERROR


def test_install_from_directory_copies_planned_files(tmp_path: Path) -> None:
    target = resolve("linux", "x86_64")
    source = tmp_path / "extract" / target.archive_dir
    source.mkdir(parents=True)
    (source / "ostt").write_bytes(b"bin")
    (source / "README.md").write_text("doc", encoding="utf-8")

    installed = install_from_directory(tmp_path / "extract", target, tmp_path / "prefix")

    assert [path.read_bytes() for path in installed] == [b"bin", b"doc"]


def test_install_from_directory_requires_documentation(tmp_path: Path) -> None:
    target = resolve("linux", "x86_64")
    source = tmp_path / "extract" / target.archive_dir
    source.mkdir(parents=True)
    (source / "ostt").write_bytes(b"bin")

    with pytest.raises(OsttOverlayError) as excinfo:
        install_from_directory(tmp_path / "extract", target, tmp_path / "prefix")

    assert "README.md" in excinfo.value.message


def test_smoke_test_runs_help_command(tmp_path: Path) -> None:
    calls: list[list[str]] = []

    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        calls.append(cmd)
        return _cp(0)

    assert run_smoke_test(tmp_path, runner=runner) is True
    assert calls == [smoke_test_command(tmp_path)]
    assert calls[0] == [str(tmp_path / "bin" / "ostt"), "help"]


def test_smoke_test_reports_failures() -> None:
    def missing(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        raise FileNotFoundError(cmd[0])

    assert run_smoke_test("/nowhere", runner=lambda cmd, **_: _cp(2)) is False
    assert run_smoke_test("/nowhere", runner=missing) is False


def test_post_install_message_adds_clipboard_note_on_linux_only() -> None:
    linux = post_install_message(OperatingSystem.LINUX)
    macos = post_install_message(OperatingSystem.MACOS)

    assert "ostt auth" in macos
    assert "~/.config/ostt/" in macos
    assert "wl-clipboard" in linux
    assert "wl-clipboard" not in macos


def test_post_install_message_includes_first_run_note_before_clipboard_note() -> None:
    linux = post_install_message(OperatingSystem.LINUX).split("\n")
    macos = post_install_message(OperatingSystem.MACOS).split("\n")

    note = [
        "Note: On first run, ostt will automatically set up configuration",
        "      files. Hyprland users will get WM integration files created",
        "      automatically in ~/.config/ostt/ and ~/.local/bin/",
        "",
    ]
    logs = macos.index("  - Logs: ~/.local/state/ostt/")
    assert macos[logs + 2 : logs + 6] == note
    assert macos[-4:] == note
    assert linux[: len(macos)] == macos
    assert linux[len(macos)] == "Linux users: Install clipboard support (wl-clipboard or xclip)"
