from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from ostt_overlay.distribution.resolver import TARGET_TRIPLES, resolve
from ostt_overlay.errors import ExitCode, OsttOverlayError

_KNOWN_OS = {"darwin", "macos", "macosx", "linux"}
_KNOWN_ARCH = {"arm64", "aarch64", "x86_64", "amd64"}

_os_names = st.sampled_from(sorted(_KNOWN_OS)).map(
    lambda name: name.upper() if len(name) % 2 else name
)
_arch_names = st.sampled_from(sorted(_KNOWN_ARCH))
_versions = st.from_regex(r"\A[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\Z")


@given(_os_names, _arch_names, _versions)
def test_resolve_is_total_over_supported_aliases(os_name: str, arch: str, version: str) -> None:
    target = resolve(os_name, arch, version=version)

    assert TARGET_TRIPLES[(target.os, target.arch)] == target.triple
    assert target.url.endswith(f"/v{version}/{target.archive_name}")
    assert target.dependencies[:2] == ("openssl", "ffmpeg")


@given(st.text(max_size=12), _arch_names)
def test_unknown_operating_systems_are_rejected(os_name: str, arch: str) -> None:
    if os_name.strip().lower() in _KNOWN_OS:
        return
    with pytest.raises(OsttOverlayError) as excinfo:
        resolve(os_name, arch)
    assert excinfo.value.code == ExitCode.UNSUPPORTED_PLATFORM


@given(_os_names, st.text(max_size=12))
def test_unknown_architectures_are_rejected(os_name: str, arch: str) -> None:
    if arch.strip().lower() in _KNOWN_ARCH:
        return
    with pytest.raises(OsttOverlayError) as excinfo:
        resolve(os_name, arch)
    assert excinfo.value.code == ExitCode.UNSUPPORTED_PLATFORM
