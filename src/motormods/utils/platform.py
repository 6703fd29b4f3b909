"""Platform detection and per-OS application directory lookup."""

import os
import sys
from pathlib import Path
from typing import Optional


def get_platform() -> str:
    """Return a normalized platform identifier."""
    if sys.platform == "win32":
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("linux"):
        return "linux"
    return "unknown"


def get_config_base_dir() -> Optional[Path]:
    """Return the per-user configuration root for this platform.

    - Windows: ``%APPDATA%`` (roaming app data)
    - macOS: ``~/Library/Application Support``
    - Linux and other Unixes: ``$XDG_CONFIG_HOME`` or ``~/.config``

    Returns ``None`` when the relevant environment variables are missing,
    so callers can decide how to report the failure.
    """
    platform = get_platform()
    if platform == "windows":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else None

    home = os.environ.get("HOME")
    if platform == "macos":
        if not home:
            return None
        return Path(home) / "Library" / "Application Support"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    # Relative XDG_CONFIG_HOME values are invalid and must be ignored
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    if not home:
        return None
    return Path(home) / ".config"
