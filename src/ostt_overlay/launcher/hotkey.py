"""Global hotkey binding for the overlay launcher."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable

from ostt_overlay.errors import ExitCode, OsttOverlayError

logger = py_logging.getLogger(__name__)

MODIFIER_KEYS = frozenset(
    {
        "cmd",
        "ctrl",
        "alt",
        "shift",
        "cmd_l",
        "cmd_r",
        "ctrl_l",
        "ctrl_r",
        "alt_l",
        "alt_r",
        "shift_l",
        "shift_r",
    }
)

ListenerFactory = Callable[[dict[str, Callable[[], None]]], object]


def parse_chord(chord: str) -> tuple[frozenset[str], str]:
    """Split a pynput-style chord into its modifiers and trigger key.

    ``"<cmd>+<shift>+r"`` becomes ``({"cmd", "shift"}, "r")``.
    """
    parts = [part.strip() for part in chord.lower().split("+")]
    if len(parts) < 2 or any(not part for part in parts):
        raise _invalid_chord(chord)

    modifiers: set[str] = set()
    for part in parts[:-1]:
        name = part[1:-1] if part.startswith("<") and part.endswith(">") else ""
        if name not in MODIFIER_KEYS or name in modifiers:
            raise _invalid_chord(chord)
        modifiers.add(name)

    key = parts[-1]
    if key.startswith("<") and key.endswith(">"):
        if key[1:-1] in MODIFIER_KEYS or len(key) < 3:
            raise _invalid_chord(chord)
    elif len(key) != 1:
        raise _invalid_chord(chord)
    return frozenset(modifiers), key


def normalize_chord(chord: str) -> str:
    modifiers, key = parse_chord(chord)
    order = ("cmd", "ctrl", "alt", "shift")
    ranked = sorted(modifiers, key=lambda name: (order.index(name.split("_")[0]), name))
    return "+".join([*(f"<{name}>" for name in ranked), key])


def _invalid_chord(chord: str) -> OsttOverlayError:
    return OsttOverlayError(
        f"Invalid hotkey: {chord or '-'}",
        code=ExitCode.CONFIG_ERROR,
        hint="Use modifiers like <cmd>+<shift> followed by one key, e.g. <cmd>+<shift>+r.",
    )


def _pynput_listener(hotkeys: dict[str, Callable[[], None]]) -> object:
    try:
        from pynput.keyboard import GlobalHotKeys
    except ImportError as exc:
        raise OsttOverlayError(
            "pynput could not load a keyboard backend.",
            code=ExitCode.RUNTIME_ERROR,
            hint="Run inside a desktop session and grant input monitoring permission.",
        ) from exc
    return GlobalHotKeys(hotkeys)


class HotkeyBinding:
    """Binds one chord to one callback; the callback runs on the listener thread."""

    def __init__(
        self,
        chord: str,
        callback: Callable[[], object],
        *,
        listener_factory: ListenerFactory | None = None,
    ) -> None:
        self.chord = normalize_chord(chord)
        self._callback = callback
        self._listener_factory = listener_factory or _pynput_listener
        self._listener: object | None = None

    @property
    def is_running(self) -> bool:
        return self._listener is not None

    def _handle(self) -> None:
        logger.debug("hotkey pressed chord=%s", self.chord)
        try:
            self._callback()
        except Exception:
            logger.exception("hotkey callback-failed chord=%s", self.chord)

    def start(self) -> None:
        if self._listener is not None:
            return
        listener = self._listener_factory({self.chord: self._handle})
        listener.start()
        self._listener = listener
        logger.info("hotkey bound chord=%s", self.chord)

    def stop(self) -> None:
        listener = self._listener
        if listener is None:
            return
        self._listener = None
        listener.stop()
        logger.info("hotkey released chord=%s", self.chord)

    def join(self, timeout: float | None = None) -> None:
        if self._listener is not None:
            self._listener.join(timeout)

    def __enter__(self) -> HotkeyBinding:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()
