from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import PrerequisiteError
from ..prerequisites import check_prerequisites
from ..state import RunState

if TYPE_CHECKING:  # pragma: no cover
    from ..strategies import DeploymentStrategy

logger = logging.getLogger(__name__)


class CheckPrerequisitesStep:
    step_id = "10_check_prerequisites"

    def __init__(self, strategy: "DeploymentStrategy") -> None:
        self.strategy = strategy

    def run(self, state: RunState) -> RunState:
        cfg = state.config
        report = check_prerequisites(
            env=state.env,
            min_powershell=cfg.min_powershell,
            min_python=cfg.min_python,
            package_manager=self.strategy.package_manager,
            connectivity_host=cfg.connectivity_host,
            dry_run=cfg.dry_run,
        )
        state.decisions["prerequisites"] = report.facts
        state.warnings.extend(report.warnings)

        if not report.ok:
            raise PrerequisiteError(report)

        logger.info("Prerequisites OK (%d warning(s))", len(report.warnings))
        return state
