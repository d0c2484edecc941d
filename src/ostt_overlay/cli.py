"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

from .config import AppConfig, load_config
from .distribution import (
    DEFAULT_VERSION,
    PlatformTarget,
    detect_host,
    install_from_archive,
    post_install_message,
    resolve,
    run_smoke_test,
)
from .distribution.formula import render_formula
from .errors import ExitCode, OsttOverlayError, user_facing_error
from .launcher import HotkeyBinding, OverlayLauncher, missing_binary_message, validate_binary
from .logging import configure_logging, default_log_path

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")
_VALID_OS = ("macos", "linux", "darwin")
_VALID_ARCH = ("arm64", "aarch64", "x86_64", "amd64")

LauncherFactory = Callable[[AppConfig], OverlayLauncher]
HotkeyFactory = Callable[[str, Callable[[], object]], HotkeyBinding]


def _log_level_type(value: str) -> str:
    normalized = value.upper()
    if normalized == "WARNING":
        normalized = "WARN"
    if normalized not in _VALID_LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def _add_platform_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--os", dest="os_name", type=str.lower, choices=_VALID_OS, default=None)
    parser.add_argument("--arch", type=str.lower, choices=_VALID_ARCH, default=None)
    parser.add_argument("--version", dest="tool_version", default=DEFAULT_VERSION)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ostt-overlay")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--log-level", type=_log_level_type, default="INFO")
    parser.add_argument("--log-file", type=Path, default=None)

    commands = parser.add_subparsers(dest="command", required=True)

    resolve_parser = commands.add_parser("resolve", help="Print the distribution for a platform")
    _add_platform_flags(resolve_parser)

    install_parser = commands.add_parser("install", help="Install ostt from a release archive")
    install_parser.add_argument("archive", type=Path)
    install_parser.add_argument("--prefix", type=Path, required=True)
    install_parser.add_argument(
        "--skip-smoke-test",
        action="store_true",
        help="Do not run `ostt help` after installing",
    )
    _add_platform_flags(install_parser)

    formula_parser = commands.add_parser("formula", help="Render the Homebrew formula")
    formula_parser.add_argument("--version", dest="tool_version", default=DEFAULT_VERSION)

    commands.add_parser("check", help="Validate the configured ostt binary")

    launch_parser = commands.add_parser("launch", help="Open the popup once")
    launch_parser.add_argument(
        "--wait",
        action="store_true",
        help="Wait for the popup to close and exit with its return code",
    )

    commands.add_parser("run", help="Bind the global hotkey and serve popups")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def resolve_target(namespace: argparse.Namespace) -> PlatformTarget:
    host_os = namespace.os_name
    host_arch = namespace.arch
    if host_os is None or host_arch is None:
        detected_os, detected_arch = detect_host()
        host_os = host_os or detected_os
        host_arch = host_arch or detected_arch
    return resolve(host_os, host_arch, version=namespace.tool_version)


def _print_target(target: PlatformTarget) -> None:
    print(f"os: {target.os.value}")
    print(f"arch: {target.arch.value}")
    print(f"triple: {target.triple}")
    print(f"archive: {target.archive_name}")
    print(f"url: {target.url}")
    print(f"dependencies: {', '.join(target.dependencies)}")


def run_resolve(namespace: argparse.Namespace) -> int:
    _print_target(resolve_target(namespace))
    return int(ExitCode.SUCCESS)


def run_install(namespace: argparse.Namespace) -> int:
    target = resolve_target(namespace)
    installed = install_from_archive(namespace.archive, target, namespace.prefix)
    for path in installed:
        print(f"installed: {path}")
    if not namespace.skip_smoke_test and not run_smoke_test(namespace.prefix):
        raise OsttOverlayError(
            "Installed ostt binary failed its smoke test.",
            code=ExitCode.INSTALL_ERROR,
            hint="Check that the archive matches this platform.",
        )
    print(post_install_message(target.os))
    return int(ExitCode.SUCCESS)


def run_formula(namespace: argparse.Namespace) -> int:
    sys.stdout.write(render_formula(namespace.tool_version))
    return int(ExitCode.SUCCESS)


def run_check(config: AppConfig) -> int:
    if validate_binary(Path(config.tool_binary).expanduser()):
        print(f"ok: {config.tool_binary}")
        return int(ExitCode.SUCCESS)
    print(missing_binary_message(config.tool_binary), file=sys.stderr)
    return int(ExitCode.BINARY_NOT_FOUND)


def _exit_status(returncode: int) -> int:
    # A child killed by signal N reports -N; shells report 128 + N.
    if returncode < 0:
        return 128 - returncode
    return returncode


def run_launch(namespace: argparse.Namespace, launcher: OverlayLauncher) -> int:
    try:
        context = launcher.launch()
        if namespace.wait:
            context.wait()
            if context.exit is not None:
                return _exit_status(context.exit.returncode)
    finally:
        launcher.shutdown()
    return int(ExitCode.SUCCESS)


def run_hotkey_loop(
    config: AppConfig,
    launcher: OverlayLauncher,
    *,
    hotkey_factory: HotkeyFactory = HotkeyBinding,
    stop_event: threading.Event | None = None,
) -> int:
    logger = py_logging.getLogger(__name__)
    binding = hotkey_factory(config.hotkey, launcher.trigger)
    stopper = stop_event or threading.Event()
    binding.start()
    logger.info("serve started chord=%s binary=%s", binding.chord, config.tool_binary)
    try:
        while not stopper.wait(timeout=0.5):
            pass
    except KeyboardInterrupt:
        logger.info("serve interrupted")
    finally:
        binding.stop()
        launcher.shutdown()
    return int(ExitCode.SUCCESS)


def main(
    argv: Sequence[str] | None = None,
    *,
    launcher_factory: LauncherFactory | None = None,
    hotkey_factory: HotkeyFactory | None = None,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()
    logger = configure_logging(level=namespace.log_level, log_file=log_path)

    try:
        logger.debug("Starting command=%s", namespace.command)
        if namespace.command == "resolve":
            return run_resolve(namespace)
        if namespace.command == "install":
            return run_install(namespace)
        if namespace.command == "formula":
            return run_formula(namespace)

        config = load_config(namespace.config)
        if namespace.command == "check":
            return run_check(config)

        factory = launcher_factory or OverlayLauncher.from_config
        launcher = factory(config)
        if namespace.command == "launch":
            return run_launch(namespace, launcher)
        return run_hotkey_loop(config, launcher, hotkey_factory=hotkey_factory or HotkeyBinding)
    except OsttOverlayError as exc:
        logger.error(
            "Handled OsttOverlayError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        try:
            hint = f"Inspect logs: {log_path}"
            print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        except Exception:
            pass
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
