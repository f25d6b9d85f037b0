import os
import stat
from pathlib import Path

import pytest

from localai_installer.config import RunConfig
from localai_installer.lib import env as env_mod
from localai_installer.lib.env import EnvSnapshot
from localai_installer.logging_utils import reset_logging
from localai_installer.state import RunState


@pytest.fixture(autouse=True)
def no_persisted_path(monkeypatch):
    """Never ask the host registry for PATH during tests."""
    monkeypatch.setattr(env_mod, "_read_persisted_path", lambda: ())


@pytest.fixture(autouse=True)
def clean_logging():
    yield
    reset_logging()


def make_exe(directory: Path, name: str) -> Path:
    """Create an executable that shutil.which() will find."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (f"{name}.exe" if os.name == "nt" else name)
    path.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def exe_factory():
    return make_exe


@pytest.fixture
def make_state(tmp_path):
    def _make(**overrides):
        values = dict(
            retry_count=3,
            retry_delay=0,
            downloads_dir=str(tmp_path / "downloads"),
            data_dir=str(tmp_path / "data"),
            desktop_dir=str(tmp_path / "Desktop"),
        )
        values.update(overrides)
        return RunState(config=RunConfig(**values).validate(), env=EnvSnapshot(path_entries=()))

    return _make
