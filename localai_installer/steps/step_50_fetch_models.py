from __future__ import annotations

import logging

from ..lib.command import run_cmd
from ..state import RunState

logger = logging.getLogger(__name__)


class FetchModelsStep:
    step_id = "50_fetch_models"

    def run(self, state: RunState) -> RunState:
        cfg = state.config
        if not cfg.models:
            state.warn("No models configured; skipping model download")
            return state

        ollama = state.tool("ollama")
        fetched: list[str] = []
        # One at a time; a model that exhausts its retries aborts the run.
        for i, model in enumerate(cfg.models, start=1):
            logger.info("Fetching model %s (%d/%d)", model, i, len(cfg.models))
            state.retry(
                f"Pull model {model}",
                lambda model=model: run_cmd(
                    [ollama, "pull", model], env=state.env, dry_run=cfg.dry_run
                ),
            )
            fetched.append(model)

        state.decisions["models"] = fetched
        logger.info("Models ready: %s", ", ".join(fetched))
        return state
