from __future__ import annotations

import logging
import os
import subprocess
from typing import Optional

from .command import run_cmd

logger = logging.getLogger(__name__)


def ping_argv(host: str) -> list[str]:
    if os.name == "nt":
        return ["ping", "-n", "1", "-w", "2000", host]
    return ["ping", "-c", "1", "-W", "2", host]


def probe_connectivity(host: str, *, dry_run: bool = False) -> Optional[bool]:
    """Best-effort online check.

    Returns True/False when the probe ran, None when it could not be performed.
    """

    try:
        r = run_cmd(ping_argv(host), check=False, timeout=15, dry_run=dry_run)
    except subprocess.TimeoutExpired:
        return False
    except OSError as e:
        logger.debug("Connectivity probe unavailable: %s", e)
        return None
    return r.returncode == 0
