from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

URL_SHORTCUT_NAME = "Open WebUI.url"
LAUNCHER_NAME = "Start Local AI.bat"
LAUNCHER_LINK_NAME = "Start Local AI.lnk"


@dataclass(frozen=True)
class ShortcutArtifacts:
    url_shortcut: Path
    launcher: Path
    launcher_link: Path


def render_url_shortcut(url: str) -> str:
    return "[InternetShortcut]\r\n" f"URL={url}\r\n" "IconIndex=0\r\n"


def render_launcher(*, web_url: str, web_port: int, start_web_ui: Sequence[str]) -> str:
    """Batch script that starts whatever is not running, then opens the UI."""

    lines = [
        "@echo off",
        "setlocal",
        "",
        'tasklist /FI "IMAGENAME eq ollama.exe" 2>nul | find /I "ollama.exe" >nul',
        "if errorlevel 1 (",
        "    echo Starting Ollama...",
        '    start "Ollama" /MIN ollama serve',
        ")",
        "",
        f'netstat -ano | find ":{web_port} " | find "LISTENING" >nul',
        "if errorlevel 1 (",
        "    echo Starting Open WebUI...",
        *[f"    {line}" for line in start_web_ui],
        "    timeout /t 10 /nobreak >nul",
        ")",
        "",
        f'start "" {web_url}',
        "endlocal",
    ]
    return "\r\n".join(lines) + "\r\n"


def _ps_quote(value: object) -> str:
    return str(value).replace("'", "''")


def lnk_command(link: Path, target: Path) -> list[str]:
    script = (
        "$s = (New-Object -ComObject WScript.Shell).CreateShortcut('{link}'); "
        "$s.TargetPath = '{target}'; "
        "$s.WorkingDirectory = '{cwd}'; "
        "$s.Save()"
    ).format(link=_ps_quote(link), target=_ps_quote(target), cwd=_ps_quote(target.parent))
    return ["powershell", "-NoProfile", "-Command", script]


def provision_shortcuts(
    desktop: Path,
    *,
    web_url: str,
    launcher_body: str,
    dry_run: bool = False,
    runner: Optional[Callable[..., object]] = None,
) -> ShortcutArtifacts:
    """Write the .url shortcut, the launcher script and a .lnk to it.

    No retries: filesystem and command errors propagate.
    """

    url_path = desktop / URL_SHORTCUT_NAME
    launcher_path = desktop / LAUNCHER_NAME
    link_path = desktop / LAUNCHER_LINK_NAME

    if dry_run:
        logger.info("Would write %s -> %s", url_path, web_url)
        logger.info("Would write %s", launcher_path)
    else:
        desktop.mkdir(parents=True, exist_ok=True)
        for path, text in ((url_path, render_url_shortcut(web_url)), (launcher_path, launcher_body)):
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
        logger.info("Created %s and %s", url_path, launcher_path)

    runner = runner or run_cmd
    runner(lnk_command(link_path, launcher_path), timeout=60, dry_run=dry_run)

    return ShortcutArtifacts(url_shortcut=url_path, launcher=launcher_path, launcher_link=link_path)
