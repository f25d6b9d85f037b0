from __future__ import annotations

from pathlib import Path

from .lib import host
from .lib.installer import ComponentSpec

UV_INSTALLER_URL = "https://astral.sh/uv/install.ps1"
WEBUI_PACKAGE = "open-webui@latest"
WEBUI_PYTHON = "3.11"
WEBUI_IMAGE = "ghcr.io/open-webui/open-webui:main"
WEBUI_CONTAINER = "open-webui"


def ollama_spec(installer_url: str) -> ComponentSpec:
    return ComponentSpec(
        name="ollama",
        command="ollama",
        installer_url=installer_url,
        installer_filename="OllamaSetup.exe",
        installer_args=("/VERYSILENT", "/NORESTART", "/SUPPRESSMSGBOXES"),
        winget_id="Ollama.Ollama",
        known_dirs=(str(host.local_app_data() / "Programs" / "Ollama"),),
    )


def uv_spec() -> ComponentSpec:
    return ComponentSpec(
        name="uv",
        command="uv",
        installer_url=UV_INSTALLER_URL,
        installer_filename="uv-install.ps1",
        interpreter=("powershell", "-NoProfile", "-ExecutionPolicy", "Bypass", "-File"),
        winget_id="astral-sh.uv",
        known_dirs=(str(Path.home() / ".local" / "bin"),),
    )


def uvx_webui_argv(*args: str) -> list[str]:
    return ["uvx", "--python", WEBUI_PYTHON, WEBUI_PACKAGE, *args]


# The command the launcher uses to serve the UI.
WEBUI_SERVE_COMMAND = " ".join(uvx_webui_argv("serve"))
