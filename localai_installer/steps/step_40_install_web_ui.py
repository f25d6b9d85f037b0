from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state import RunState

if TYPE_CHECKING:  # pragma: no cover
    from ..strategies import DeploymentStrategy

logger = logging.getLogger(__name__)


class InstallWebUIStep:
    step_id = "40_install_web_ui"

    def __init__(self, strategy: "DeploymentStrategy") -> None:
        self.strategy = strategy

    def run(self, state: RunState) -> RunState:
        state = self.strategy.install_web_ui(state)
        state.decisions["web_url"] = self.strategy.web_url
        return state
