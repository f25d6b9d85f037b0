from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state import RunState

if TYPE_CHECKING:  # pragma: no cover
    from ..strategies import DeploymentStrategy

logger = logging.getLogger(__name__)


class PrepareWebStackStep:
    """Package manager (native) or container runtime (container)."""

    step_id = "30_prepare_web_stack"

    def __init__(self, strategy: "DeploymentStrategy") -> None:
        self.strategy = strategy

    def run(self, state: RunState) -> RunState:
        logger.info("Preparing web stack (%s mode)", self.strategy.name)
        return self.strategy.prepare(state)
