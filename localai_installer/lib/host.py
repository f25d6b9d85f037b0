from __future__ import annotations

import ctypes
import logging
import os
import re
import subprocess
import sys
from pathlib import Path
from typing import Optional, Tuple

from .command import run_cmd

logger = logging.getLogger(__name__)


def python_version() -> Tuple[int, int]:
    return (sys.version_info.major, sys.version_info.minor)


def is_admin() -> bool:
    if os.name == "nt":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
        except (AttributeError, OSError):
            return False
    geteuid = getattr(os, "geteuid", None)
    return bool(geteuid and geteuid() == 0)


def parse_version(text: str) -> Optional[Tuple[int, ...]]:
    m = re.search(r"(\d+)\.(\d+)(?:\.(\d+))?", text or "")
    if not m:
        return None
    return tuple(int(g) for g in m.groups() if g is not None)


def powershell_version(*, dry_run: bool = False) -> Optional[Tuple[int, ...]]:
    """Version of Windows PowerShell, or None when it is not available."""

    if dry_run:
        return None
    try:
        r = run_cmd(
            ["powershell", "-NoProfile", "-Command", "$PSVersionTable.PSVersion.ToString()"],
            check=False,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if r.returncode != 0:
        return None
    return parse_version(r.stdout)


def default_desktop_dir() -> Path:
    home = Path(os.environ.get("USERPROFILE") or Path.home())
    return home / "Desktop"


def default_downloads_dir() -> Path:
    base = os.environ.get("LOCALAPPDATA")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "localai-installer" / "downloads"


def default_data_dir() -> Path:
    home = Path(os.environ.get("USERPROFILE") or Path.home())
    return home / ".open-webui"


def local_app_data() -> Path:
    base = os.environ.get("LOCALAPPDATA")
    return Path(base) if base else Path.home() / "AppData" / "Local"
