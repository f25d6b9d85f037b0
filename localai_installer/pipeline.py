from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Protocol, Sequence

from .state import RunState

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single idempotent step."""

    step_id: str

    def run(self, state: RunState) -> RunState:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: RunState
    ran_steps: List[str]


def run_pipeline(*, state: RunState, steps: Sequence[Step]) -> PipelineResult:
    """Run steps strictly in order. The first exception aborts the run."""

    ran: List[str] = []
    for step in steps:
        logger.info("Running step %s", step.step_id)
        state.decisions["current_step"] = step.step_id
        state = step.run(state)
        ran.append(step.step_id)

    state.decisions["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran)
