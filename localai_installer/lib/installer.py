from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

from .command import run_cmd
from .download import download_file
from .env import EnvSnapshot
from .pkg import winget_install
from .retry import RetryOutcome, retry_outcome

logger = logging.getLogger(__name__)


class InstallState(str, Enum):
    UNCHECKED = "unchecked"
    ALREADY_PRESENT = "already_present"
    DOWNLOADING = "downloading"
    INSTALLING = "installing"
    VERIFYING = "verifying"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass(frozen=True)
class ComponentSpec:
    """How to find, fetch and install one external dependency."""

    name: str
    command: str
    installer_url: Optional[str] = None
    installer_filename: Optional[str] = None
    installer_args: Tuple[str, ...] = ()
    # Prefix for artifacts that are not directly executable (e.g. .ps1).
    interpreter: Tuple[str, ...] = ()
    winget_id: Optional[str] = None
    known_dirs: Tuple[str, ...] = ()

    @property
    def artifact_name(self) -> str:
        if self.installer_filename:
            return self.installer_filename
        name = Path(urlparse(self.installer_url or "").path).name
        return name or f"{self.command}-installer"

    def installer_argv(self, artifact: Path) -> List[str]:
        return [*self.interpreter, str(artifact), *self.installer_args]


@dataclass
class InstallResult:
    component: str
    state: InstallState
    env: EnvSnapshot
    path: Optional[Path] = None
    channel: Optional[str] = None
    transitions: List[InstallState] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state in (InstallState.ALREADY_PRESENT, InstallState.INSTALLED)


class ComponentInstaller:
    """Idempotent "ensure installed" for a single component.

    Unchecked -> AlreadyPresent, or
    Unchecked -> Downloading -> Installing -> Verifying -> Installed,
    with a single winget attempt when the download keeps failing. Any
    dead end is Failed; callers treat that as fatal.
    """

    def __init__(
        self,
        spec: ComponentSpec,
        *,
        env: EnvSnapshot,
        downloads_dir: Path,
        force: bool = False,
        retry_count: int = 3,
        retry_delay: float = 5,
        dry_run: bool = False,
        runner: Optional[Callable[..., object]] = None,
        fetch: Optional[Callable[..., object]] = None,
        fallback: Optional[Callable[..., bool]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.spec = spec
        self.env = env.with_entries(*spec.known_dirs)
        self.downloads_dir = Path(downloads_dir)
        self.force = force
        self.retry_count = retry_count
        self.retry_delay = retry_delay
        self.dry_run = dry_run
        self.runner = runner or run_cmd
        self.fetch = fetch or download_file
        self.fallback = fallback or winget_install
        self.sleep = sleep
        self.transitions: List[InstallState] = []

    def _to(self, state: InstallState) -> None:
        self.transitions.append(state)
        logger.debug("%s: %s", self.spec.name, state.value)

    def _result(self, state: InstallState, **kw) -> InstallResult:
        self._to(state)
        return InstallResult(
            component=self.spec.name,
            state=state,
            env=self.env,
            transitions=list(self.transitions),
            **kw,
        )

    def _fail(self, reason: str, channel: Optional[str] = None) -> InstallResult:
        logger.error("%s: %s", self.spec.name, reason)
        return self._result(InstallState.FAILED, error=reason, channel=channel)

    def _retry(self, action: str, fn: Callable[[], object]) -> RetryOutcome:
        outcome, _ = retry_outcome(
            action, fn, attempts=self.retry_count, delay=self.retry_delay, sleep=self.sleep
        )
        return outcome

    def ensure_installed(self) -> InstallResult:
        spec = self.spec
        self._to(InstallState.UNCHECKED)

        existing = self.env.probe(spec.command)
        if existing is not None and not self.force:
            logger.info("%s already installed at %s", spec.name, existing)
            return self._result(InstallState.ALREADY_PRESENT, path=existing, channel="existing")
        if existing is not None:
            logger.info("%s found at %s; reinstalling (force)", spec.name, existing)

        if not spec.installer_url:
            if spec.winget_id:
                return self._install_with_fallback("no installer source configured")
            return self._fail("no installer source configured")

        self._to(InstallState.DOWNLOADING)
        artifact = self.downloads_dir / spec.artifact_name
        if artifact.exists() and not self.force:
            logger.info("Using cached installer %s", artifact)
        else:
            outcome = self._retry(
                f"Download {spec.name} installer",
                lambda: self.fetch(spec.installer_url, artifact, dry_run=self.dry_run),
            )
            if not outcome.success:
                return self._install_with_fallback(f"download failed: {outcome.last_error}")

        self._to(InstallState.INSTALLING)
        argv = spec.installer_argv(artifact)
        outcome = self._retry(
            f"Install {spec.name}",
            lambda: self.runner(argv, env=self.env, timeout=1800, dry_run=self.dry_run),
        )
        if not outcome.success:
            return self._fail(f"installer failed: {outcome.last_error}", channel="installer")

        return self._verify(channel="installer")

    def _install_with_fallback(self, reason: str) -> InstallResult:
        spec = self.spec
        if not spec.winget_id:
            return self._fail(reason)

        logger.warning("%s: %s; trying winget (%s)", spec.name, reason, spec.winget_id)
        self._to(InstallState.INSTALLING)
        if not self.fallback(spec.winget_id, env=self.env, dry_run=self.dry_run):
            return self._fail(f"{reason}; winget fallback failed", channel="winget")
        return self._verify(channel="winget")

    def _verify(self, *, channel: str) -> InstallResult:
        spec = self.spec
        self._to(InstallState.VERIFYING)

        if self.dry_run:
            logger.info("%s: dry run, assuming %s is on PATH", spec.name, spec.command)
            return self._result(InstallState.INSTALLED, channel=channel)

        self.env = self.env.refresh().with_entries(*spec.known_dirs)
        found = self.env.probe(spec.command)
        if found is None:
            return self._fail(f"installed but {spec.command} is not on PATH", channel=channel)

        logger.info("%s installed at %s (via %s)", spec.name, found, channel)
        return self._result(InstallState.INSTALLED, path=found, channel=channel)
