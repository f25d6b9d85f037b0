from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from ..errors import CommandError

if TYPE_CHECKING:  # pragma: no cover
    from .env import EnvSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def _fmt_argv(argv: Sequence[str]) -> str:
    return subprocess.list2cmdline(argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: "EnvSnapshot | None" = None,
    cwd: str | None = None,
    timeout: float | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - argv[0] is resolved against the snapshot's search path when one is
      given, since the child would otherwise be looked up on our own PATH.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    child_env = None
    if env is not None:
        resolved = env.probe(argv_list[0])
        if resolved is not None:
            argv_list[0] = str(resolved)
        child_env = dict(os.environ, **env.as_environ())

    p = subprocess.run(
        argv_list,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=cwd,
        env=child_env,
        timeout=timeout,
    )

    if p.stdout:
        logger.debug("STDOUT %s", p.stdout.strip())
    if p.stderr:
        logger.debug("STDERR %s", p.stderr.strip())

    if check and p.returncode != 0:
        raise CommandError(argv_list, p.returncode, p.stderr or "")

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout or "", stderr=p.stderr or "")
