from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .lib import host
from .lib.env import EnvSnapshot
from .lib.net import probe_connectivity

logger = logging.getLogger(__name__)


@dataclass
class PrerequisiteReport:
    fatal: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    facts: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.fatal

    def fail(self, message: str) -> None:
        logger.error(message)
        self.fatal.append(message)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def _fmt(v: Tuple[int, ...]) -> str:
    return ".".join(str(p) for p in v)


def check_prerequisites(
    *,
    env: EnvSnapshot,
    min_powershell: Tuple[int, int],
    min_python: Tuple[int, int],
    package_manager: str,
    connectivity_host: str,
    dry_run: bool = False,
    powershell_version: Callable[..., Optional[Tuple[int, ...]]] = host.powershell_version,
    is_admin: Callable[[], bool] = host.is_admin,
    python_version: Callable[[], Tuple[int, int]] = host.python_version,
    probe_network: Callable[..., Optional[bool]] = probe_connectivity,
) -> PrerequisiteReport:
    """Inspect the host in order; only the shell version and network are fatal.

    PowerShell runs the uv self-installer, the PATH refresh and the .lnk
    shortcut, so a missing or outdated one stops the run before anything is
    installed.
    """

    report = PrerequisiteReport()

    ps = powershell_version(dry_run=dry_run)
    report.facts["powershell"] = _fmt(ps) if ps else None
    if ps is None and dry_run:
        report.warn("Dry run: PowerShell version not checked")
    elif ps is None:
        report.fail(f"PowerShell {_fmt(min_powershell)}+ required, but it was not found")
        return report
    elif tuple(ps[:2]) < tuple(min_powershell):
        report.fail(f"PowerShell {_fmt(min_powershell)}+ required, found {_fmt(ps)}")
        return report
    else:
        logger.info("PowerShell %s OK", _fmt(ps))

    admin = is_admin()
    report.facts["admin"] = admin
    if not admin:
        report.warn("Not running elevated; installers may prompt or fail to write system locations")

    py = python_version()
    report.facts["python"] = _fmt(py)
    if tuple(py) < tuple(min_python):
        report.warn(
            f"Python {_fmt(py)} is older than {_fmt(min_python)}; "
            "uvx will provision its own interpreter for Open WebUI"
        )
    else:
        logger.info("Python %s", _fmt(py))

    pm = env.probe(package_manager)
    report.facts["package_manager"] = str(pm) if pm else None
    if pm is None:
        logger.info("%s not found yet; it will be set up during installation", package_manager)
    else:
        logger.info("%s found at %s", package_manager, pm)

    online = probe_network(connectivity_host, dry_run=dry_run)
    report.facts["online"] = online
    if online is None:
        report.warn(f"Could not test connectivity to {connectivity_host}; continuing")
    elif not online:
        report.fail(f"No network connectivity ({connectivity_host} unreachable)")
    else:
        logger.info("Network connectivity OK")

    return report
