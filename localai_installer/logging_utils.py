from __future__ import annotations

import logging
import tempfile
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

LEVEL_STYLES = {
    logging.DEBUG: "dim",
    logging.INFO: "",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}


class ConsoleHandler(logging.Handler):
    """Mirror log records to the console, coloured by severity."""

    def __init__(self, console: Optional[Console] = None, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.console = console or Console(stderr=True)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = escape(self.format(record))
            style = LEVEL_STYLES.get(record.levelno, "")
            if style:
                text = f"[{style}]{text}[/{style}]"
            self.console.print(text, highlight=False, soft_wrap=True)
        except Exception:
            self.handleError(record)


def default_log_path(log_dir: Optional[str] = None) -> Path:
    base = Path(log_dir) if log_dir else Path(tempfile.gettempdir())
    return base / f"localai-install-{time.strftime('%Y%m%d-%H%M%S')}.log"


def configure_logging(
    log_dir: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = True,
    console: Optional[Console] = None,
) -> str:
    """Configure logging: one timestamped file per run plus the console.

    If the log directory cannot be written, fall back to a file in the
    current working directory.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_localai_configured", False):
        return getattr(logger, "_localai_log_path")

    log_path = default_log_path(log_dir)
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    handlers: list[logging.Handler] = []

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        log_path = Path.cwd() / log_path.name
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console_handler = ConsoleHandler(console)
        console_handler.setFormatter(fmt)
        handlers.append(console_handler)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_localai_configured", True)
    setattr(logger, "_localai_log_path", str(log_path))
    setattr(logger, "_localai_handlers", handlers)

    logging.getLogger(__name__).info("Logging to %s", log_path)
    return str(log_path)


def reset_logging() -> None:
    """Detach the handlers installed by configure_logging()."""

    logger = logging.getLogger()
    for h in getattr(logger, "_localai_handlers", []):
        logger.removeHandler(h)
        h.close()
    for attr in ("_localai_configured", "_localai_log_path", "_localai_handlers"):
        if hasattr(logger, attr):
            delattr(logger, attr)
