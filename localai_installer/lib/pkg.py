from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .command import run_cmd

if TYPE_CHECKING:  # pragma: no cover
    from .env import EnvSnapshot

logger = logging.getLogger(__name__)


def winget_argv(package_id: str) -> list[str]:
    return [
        "winget",
        "install",
        "--id",
        package_id,
        "-e",
        "--silent",
        "--accept-package-agreements",
        "--accept-source-agreements",
    ]


def winget_install(package_id: str, *, env: "EnvSnapshot | None" = None, dry_run: bool = False) -> bool:
    """Install a package through winget. Returns True on success.

    A missing winget is a failed install, not an error.
    """

    try:
        r = run_cmd(winget_argv(package_id), check=False, env=env, timeout=1800, dry_run=dry_run)
    except OSError as e:
        logger.warning("winget unavailable: %s", e)
        return False
    if r.returncode != 0:
        logger.warning("winget install %s exited with %d", package_id, r.returncode)
        return False
    return True
