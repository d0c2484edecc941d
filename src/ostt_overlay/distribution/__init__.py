"""Install-time artifact resolution for prebuilt ostt archives."""

from .install import (
    install_from_archive,
    install_from_directory,
    install_plan,
    post_install_message,
    run_smoke_test,
    smoke_test_command,
)
from .models import Architecture, InstallStep, OperatingSystem, PlatformTarget
from .resolver import DEFAULT_VERSION, detect_host, resolve, resolve_host

__all__ = [
    "Architecture",
    "DEFAULT_VERSION",
    "detect_host",
    "install_from_archive",
    "install_from_directory",
    "install_plan",
    "InstallStep",
    "OperatingSystem",
    "PlatformTarget",
    "post_install_message",
    "resolve",
    "resolve_host",
    "run_smoke_test",
    "smoke_test_command",
]
