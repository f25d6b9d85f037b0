from __future__ import annotations

import logging

from ..errors import ComponentInstallError
from ..lib.installer import ComponentInstaller, ComponentSpec
from ..state import RunState

logger = logging.getLogger(__name__)


def ensure_component(state: RunState, spec: ComponentSpec) -> RunState:
    """Run the component installer for `spec`; a Failed outcome is fatal."""

    cfg = state.config
    installer = ComponentInstaller(
        spec,
        env=state.env,
        downloads_dir=cfg.downloads_path,
        force=cfg.force_reinstall,
        retry_count=cfg.retry_count,
        retry_delay=cfg.retry_delay,
        dry_run=cfg.dry_run,
    )
    result = installer.ensure_installed()
    state.decisions[f"{spec.name}_install"] = result.state.value

    if not result.ok:
        raise ComponentInstallError(spec.name, result.error or result.state.value)

    state.record_install(result)
    return state
