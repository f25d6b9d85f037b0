from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, NoReturn, Optional

from .config import MODES, RunConfig, load_run_config
from .lib.env import EnvSnapshot
from .logging_utils import configure_logging
from .pipeline import PipelineResult, run_pipeline
from .state import RunState
from .steps import (
    CheckPrerequisitesStep,
    CreateShortcutsStep,
    FetchModelsStep,
    InstallRuntimeStep,
    InstallWebUIStep,
    PrepareWebStackStep,
)
from .strategies import DeploymentStrategy, get_strategy

logger = logging.getLogger(__name__)


def build_steps(strategy: DeploymentStrategy):
    return [
        CheckPrerequisitesStep(strategy),
        InstallRuntimeStep(),
        PrepareWebStackStep(strategy),
        InstallWebUIStep(strategy),
        FetchModelsStep(),
        CreateShortcutsStep(strategy),
    ]


def run(config: RunConfig, *, env: Optional[EnvSnapshot] = None) -> PipelineResult:
    """Run the whole installation. Any exception means the run failed."""

    strategy = get_strategy(config.mode)
    state = RunState(config=config, env=env or EnvSnapshot.capture())

    logger.info(
        "Installing Ollama + Open WebUI (%s mode, models: %s)",
        strategy.name,
        ", ".join(config.models) or "none",
    )
    if config.dry_run:
        logger.info("Dry run: no downloads, installs or file writes will happen")

    result = run_pipeline(state=state, steps=build_steps(strategy))

    for w in result.state.warnings:
        logger.warning("Warning during install: %s", w)
    logger.info("Installation complete. Open WebUI: %s", strategy.web_url)
    return result


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {n}")
    return n


def _non_negative_int(value: str) -> int:
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors are fatal failures like any other: exit code 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog="localai-installer",
        description="Install Ollama and Open WebUI, pull models and create desktop shortcuts.",
    )
    p.add_argument("--config", default=None, help="YAML file with run settings")
    p.add_argument("--installer-url", default=None, help="Ollama installer URL")
    p.add_argument("--models", nargs="+", default=None, metavar="MODEL", help="Models to pull, in order")
    p.add_argument("--force", action="store_true", default=None, help="Reinstall even if already present")
    p.add_argument("--retry-count", type=_positive_int, default=None, help="Attempts per operation (default 3)")
    p.add_argument(
        "--retry-delay",
        type=_non_negative_int,
        default=None,
        help="Seconds between attempts (default 5; 0 retries immediately)",
    )
    p.add_argument("--mode", choices=MODES, default=None, help="native (uvx) or container (docker)")
    p.add_argument("--downloads-dir", default=None, help="Where installers are cached")
    p.add_argument("--data-dir", default=None, help="Open WebUI data directory")
    p.add_argument("--desktop-dir", default=None, help="Where shortcuts are written")
    p.add_argument("--log-dir", default=None, help="Directory for the run log (default: temp dir)")
    p.add_argument("--dry-run", action="store_true", default=None, help="Log actions without executing")
    return p


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "installer_url": args.installer_url,
        "models": args.models,
        "force_reinstall": args.force,
        "retry_count": args.retry_count,
        "retry_delay": args.retry_delay,
        "mode": args.mode,
        "downloads_dir": args.downloads_dir,
        "data_dir": args.data_dir,
        "desktop_dir": args.desktop_dir,
        "dry_run": args.dry_run,
    }


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    log_path = configure_logging(log_dir=args.log_dir)

    try:
        config = load_run_config(args.config, _overrides(args))
        run(config)
    except Exception:
        logger.exception("Installation failed")
        logger.error("See the log for details: %s", log_path)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
