from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..lib.shortcuts import provision_shortcuts, render_launcher
from ..state import RunState

if TYPE_CHECKING:  # pragma: no cover
    from ..strategies import DeploymentStrategy

logger = logging.getLogger(__name__)


class CreateShortcutsStep:
    step_id = "60_create_shortcuts"

    def __init__(self, strategy: "DeploymentStrategy") -> None:
        self.strategy = strategy

    def run(self, state: RunState) -> RunState:
        cfg = state.config
        body = render_launcher(
            web_url=self.strategy.web_url,
            web_port=self.strategy.web_port,
            start_web_ui=self.strategy.launcher_lines(cfg),
        )
        artifacts = provision_shortcuts(
            cfg.desktop_path,
            web_url=self.strategy.web_url,
            launcher_body=body,
            dry_run=cfg.dry_run,
        )
        state.decisions["shortcuts"] = {
            "url": str(artifacts.url_shortcut),
            "launcher": str(artifacts.launcher),
            "launcher_link": str(artifacts.launcher_link),
        }
        return state
