"""Deployment strategies for the web front end.

native:    uv is installed and Open WebUI runs through `uvx` on port 8080.
container: Open WebUI runs from its container image on port 3000.

Both drive the same pipeline; only web stack preparation, the web UI install
and the launcher differ.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Protocol

from .components import (
    WEBUI_CONTAINER,
    WEBUI_IMAGE,
    WEBUI_SERVE_COMMAND,
    uv_spec,
    uvx_webui_argv,
)
from .config import RunConfig
from .errors import ComponentInstallError, RetryError
from .lib import docker
from .lib.command import run_cmd
from .state import RunState
from .steps.common import ensure_component

logger = logging.getLogger(__name__)


class DeploymentStrategy(Protocol):
    name: str
    web_port: int
    package_manager: str

    @property
    def web_url(self) -> str:
        ...

    def prepare(self, state: RunState) -> RunState:
        ...

    def install_web_ui(self, state: RunState) -> RunState:
        ...

    def launcher_lines(self, config: RunConfig) -> List[str]:
        ...


class NativeStrategy:
    name = "native"
    web_port = 8080
    package_manager = "uv"

    @property
    def web_url(self) -> str:
        return f"http://localhost:{self.web_port}"

    def prepare(self, state: RunState) -> RunState:
        return ensure_component(state, uv_spec())

    def install_web_ui(self, state: RunState) -> RunState:
        cfg = state.config
        data_dir = cfg.data_path
        if cfg.dry_run:
            logger.info("Would create data directory %s", data_dir)
        else:
            data_dir.mkdir(parents=True, exist_ok=True)
        state.decisions["webui_data_dir"] = str(data_dir)

        # First uvx run resolves and caches open-webui; --help keeps it from serving.
        argv = uvx_webui_argv("--help")
        try:
            state.retry(
                "Verify Open WebUI",
                lambda: run_cmd(argv, env=state.env, timeout=1800, dry_run=cfg.dry_run),
            )
        except RetryError as e:
            raise ComponentInstallError("open-webui", str(e)) from e

        logger.info("Open WebUI is available through uvx")
        return state

    def launcher_lines(self, config: RunConfig) -> List[str]:
        return [
            f'set "DATA_DIR={config.data_path}"',
            f'start "Open WebUI" /MIN {WEBUI_SERVE_COMMAND} --port {self.web_port}',
        ]


class ContainerStrategy:
    name = "container"
    web_port = 3000
    package_manager = "docker"

    @property
    def web_url(self) -> str:
        return f"http://localhost:{self.web_port}"

    def prepare(self, state: RunState) -> RunState:
        found = state.env.probe("docker")
        if found is None:
            if state.config.dry_run:
                state.warn("docker not found (dry run, continuing)")
                return state
            raise ComponentInstallError("docker", "docker is not on PATH; install Docker Desktop and re-run")
        logger.info("docker found at %s", found)
        state.tools["docker"] = found
        return state

    def install_web_ui(self, state: RunState) -> RunState:
        cfg = state.config
        env = state.env
        try:
            state.retry(
                f"Pull {WEBUI_IMAGE}",
                lambda: docker.pull_image(WEBUI_IMAGE, env=env, dry_run=cfg.dry_run),
            )
            if docker.container_exists(WEBUI_CONTAINER, env=env, dry_run=cfg.dry_run):
                logger.info("Container %s exists; starting it", WEBUI_CONTAINER)
                state.retry(
                    f"Start {WEBUI_CONTAINER}",
                    lambda: docker.start_container(WEBUI_CONTAINER, env=env, dry_run=cfg.dry_run),
                )
            else:
                state.retry(
                    f"Run {WEBUI_CONTAINER}",
                    lambda: docker.run_container(
                        name=WEBUI_CONTAINER,
                        image=WEBUI_IMAGE,
                        ports=[f"{self.web_port}:8080"],
                        volumes=["open-webui:/app/backend/data"],
                        extra_args=["--add-host=host.docker.internal:host-gateway"],
                        env=env,
                        dry_run=cfg.dry_run,
                    ),
                )
        except RetryError as e:
            raise ComponentInstallError("open-webui", str(e)) from e

        state.decisions["webui_container"] = WEBUI_CONTAINER
        return state

    def launcher_lines(self, config: RunConfig) -> List[str]:
        return [f"docker start {WEBUI_CONTAINER} >nul"]


STRATEGIES: Dict[str, type] = {
    NativeStrategy.name: NativeStrategy,
    ContainerStrategy.name: ContainerStrategy,
}


def get_strategy(mode: str) -> DeploymentStrategy:
    try:
        return STRATEGIES[mode]()
    except KeyError:
        raise ValueError(f"Unknown deployment mode: {mode}") from None
