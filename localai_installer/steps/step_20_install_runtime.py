from __future__ import annotations

import logging

from ..components import ollama_spec
from ..state import RunState
from .common import ensure_component

logger = logging.getLogger(__name__)


class InstallRuntimeStep:
    step_id = "20_install_runtime"

    def run(self, state: RunState) -> RunState:
        return ensure_component(state, ollama_spec(state.config.installer_url))
