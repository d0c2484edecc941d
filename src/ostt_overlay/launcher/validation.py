"""Pre-flight checks for the tool binary."""

from __future__ import annotations

import os
import stat
from pathlib import Path


def validate_binary(path: str | Path) -> bool:
    """Return True when ``path`` names an executable regular file.

    Symlinks are followed, so a link to a missing target fails. The check only
    reads filesystem metadata and can be repeated freely.
    """
    try:
        info = os.stat(path)
    except (OSError, ValueError):
        return False
    if not stat.S_ISREG(info.st_mode):
        return False
    return os.access(path, os.X_OK)


def missing_binary_message(path: str | Path) -> str:
    return f"OSTT not found or not executable:\n{path}"
