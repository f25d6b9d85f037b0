from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .config import RunConfig
from .lib.env import EnvSnapshot
from .lib.installer import InstallResult
from .lib.retry import retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RunState:
    """Everything a run accumulates. Lives for one process only."""

    config: RunConfig
    env: EnvSnapshot
    tools: Dict[str, Path] = field(default_factory=dict)
    installs: Dict[str, InstallResult] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    decisions: Dict[str, Any] = field(default_factory=dict)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def record_install(self, result: InstallResult) -> None:
        self.installs[result.component] = result
        self.env = result.env
        if result.path is not None:
            self.tools[result.component] = result.path

    def retry(self, action: str, fn: Callable[[], T]) -> T:
        """Run fn through the retry executor with this run's limits."""
        return retry(action, fn, attempts=self.config.retry_count, delay=self.config.retry_delay)

    def tool(self, name: str) -> str:
        """Resolved path of an installed tool, or its bare command name."""
        path: Optional[Path] = self.tools.get(name)
        return str(path) if path else name
