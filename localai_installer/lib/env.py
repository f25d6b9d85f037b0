from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from .command import run_cmd

logger = logging.getLogger(__name__)

_REFRESH_PS = (
    '[System.Environment]::GetEnvironmentVariable("Path","Machine") + ";" + '
    '[System.Environment]::GetEnvironmentVariable("Path","User")'
)


def _split(path_value: str) -> Tuple[str, ...]:
    return tuple(p for p in path_value.split(os.pathsep) if p.strip())


def _dedup(entries: Iterable[str]) -> Tuple[str, ...]:
    seen = set()
    out = []
    for e in entries:
        key = os.path.normcase(os.path.normpath(e))
        if key not in seen:
            seen.add(key)
            out.append(e)
    return tuple(out)


@dataclass(frozen=True)
class EnvSnapshot:
    """Search path used to discover and launch external tools.

    Installers mutate the persisted PATH of the machine, not ours. The run
    carries a snapshot and replaces it with refresh() after each install.
    """

    path_entries: Tuple[str, ...]

    @classmethod
    def capture(cls) -> "EnvSnapshot":
        return cls(path_entries=_dedup(_split(os.environ.get("PATH", ""))))

    @property
    def path_string(self) -> str:
        return os.pathsep.join(self.path_entries)

    def as_environ(self) -> Dict[str, str]:
        return {"PATH": self.path_string}

    def with_entries(self, *dirs: str) -> "EnvSnapshot":
        return EnvSnapshot(path_entries=_dedup([*self.path_entries, *dirs]))

    def probe(self, name: str) -> Optional[Path]:
        """Return the resolved location of `name`, or None."""
        found = shutil.which(name, path=self.path_string)
        logger.debug("which %s -> %s", name, found)
        return Path(found) if found else None

    def refresh(self) -> "EnvSnapshot":
        """Re-read the machine's persisted search path.

        Entries from the current snapshot that are not persisted are kept at
        the end so nothing discovered earlier in the run is lost.
        """
        persisted = _read_persisted_path()
        return EnvSnapshot(path_entries=_dedup([*persisted, *self.path_entries]))


def _read_persisted_path() -> Tuple[str, ...]:
    if os.name != "nt":
        return _split(os.environ.get("PATH", ""))

    # powershell itself must be found through the current process PATH.
    try:
        r = run_cmd(["powershell", "-NoProfile", "-Command", _REFRESH_PS], check=False, timeout=30)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("Could not refresh PATH: %s", e)
        return ()
    if r.returncode != 0 or not r.stdout.strip():
        logger.warning("Could not refresh PATH from the registry; keeping current entries")
        return ()
    return tuple(p for p in r.stdout.strip().split(";") if p.strip())
