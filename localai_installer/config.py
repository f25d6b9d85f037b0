from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError
from .lib import host

DEFAULT_INSTALLER_URL = "https://ollama.com/download/OllamaSetup.exe"
DEFAULT_MODELS: Tuple[str, ...] = ("llama3.2", "phi3")
MODES = ("native", "container")


@dataclass(frozen=True)
class RunConfig:
    installer_url: str = DEFAULT_INSTALLER_URL
    models: Tuple[str, ...] = DEFAULT_MODELS
    force_reinstall: bool = False
    retry_count: int = 3
    retry_delay: int = 5
    mode: str = "native"
    dry_run: bool = False
    min_powershell: Tuple[int, int] = (5, 1)
    min_python: Tuple[int, int] = (3, 11)
    connectivity_host: str = "8.8.8.8"
    downloads_dir: Optional[str] = None
    data_dir: Optional[str] = None
    desktop_dir: Optional[str] = None

    @property
    def downloads_path(self) -> Path:
        return Path(self.downloads_dir) if self.downloads_dir else host.default_downloads_dir()

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir) if self.data_dir else host.default_data_dir()

    @property
    def desktop_path(self) -> Path:
        return Path(self.desktop_dir) if self.desktop_dir else host.default_desktop_dir()

    def validate(self) -> "RunConfig":
        if self.retry_count < 1:
            raise ConfigError(f"retry_count must be >= 1, got {self.retry_count}")
        # 0 disables the wait between attempts.
        if self.retry_delay < 0:
            raise ConfigError(f"retry_delay must be >= 0, got {self.retry_delay}")
        if self.mode not in MODES:
            raise ConfigError(f"mode must be one of {', '.join(MODES)}, got {self.mode!r}")
        if not self.installer_url:
            raise ConfigError("installer_url must not be empty")
        for m in self.models:
            if not isinstance(m, str) or not m.strip():
                raise ConfigError(f"model identifiers must be non-empty strings, got {m!r}")
        return self


_FIELD_NAMES = {f.name for f in fields(RunConfig)}


def _coerce(raw: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(raw) - _FIELD_NAMES)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    out = dict(raw)
    try:
        if "models" in out:
            models = out["models"]
            if isinstance(models, str):
                models = [models]
            out["models"] = tuple(str(m).strip() for m in models)
        for key in ("min_powershell", "min_python"):
            if key in out:
                major, minor = out[key]
                out[key] = (_require_int(key, major), _require_int(key, minor))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}") from e

    for key in ("retry_count", "retry_delay"):
        if key in out:
            out[key] = _require_int(key, out[key])
    for key in ("force_reinstall", "dry_run"):
        if key in out and not isinstance(out[key], bool):
            raise ConfigError(f"{key} must be true or false, got {out[key]!r}")
    return out


def _require_int(key: str, value: Any) -> int:
    # bool is an int subclass; `true` must not become 1.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    return value


def load_config_file(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("config file must be YAML")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")
    return raw


def load_run_config(path: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None) -> RunConfig:
    """Defaults, then the YAML file (if any), then explicit overrides."""

    cfg = RunConfig()
    if path:
        cfg = replace(cfg, **_coerce(load_config_file(path)))
    if overrides:
        cfg = replace(cfg, **_coerce({k: v for k, v in overrides.items() if v is not None}))
    return cfg.validate()
