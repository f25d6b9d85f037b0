from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from .command import run_cmd

if TYPE_CHECKING:  # pragma: no cover
    from .env import EnvSnapshot

logger = logging.getLogger(__name__)


def container_exists(name: str, *, env: "EnvSnapshot | None" = None, dry_run: bool = False) -> bool:
    if dry_run:
        return False
    r = run_cmd(
        ["docker", "ps", "-a", "--filter", f"name=^{name}$", "--format", "{{.Names}}"],
        env=env,
        timeout=60,
    )
    return name in r.stdout.split()


def pull_image(image: str, *, env: "EnvSnapshot | None" = None, dry_run: bool = False) -> None:
    run_cmd(["docker", "pull", image], env=env, dry_run=dry_run)


def start_container(name: str, *, env: "EnvSnapshot | None" = None, dry_run: bool = False) -> None:
    run_cmd(["docker", "start", name], env=env, timeout=120, dry_run=dry_run)


def run_container(
    *,
    name: str,
    image: str,
    ports: Sequence[str] = (),
    volumes: Sequence[str] = (),
    extra_args: Sequence[str] = (),
    env: "EnvSnapshot | None" = None,
    dry_run: bool = False,
) -> None:
    argv = ["docker", "run", "-d", "--name", name, "--restart", "always"]
    for p in ports:
        argv += ["-p", p]
    for v in volumes:
        argv += ["-v", v]
    argv += list(extra_args)
    argv.append(image)
    run_cmd(argv, env=env, timeout=300, dry_run=dry_run)
