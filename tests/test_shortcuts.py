"""Tests for desktop shortcut provisioning"""

import pytest

from localai_installer.components import WEBUI_SERVE_COMMAND
from localai_installer.config import RunConfig
from localai_installer.lib.shortcuts import (
    LAUNCHER_LINK_NAME,
    lnk_command,
    provision_shortcuts,
    render_launcher,
)
from localai_installer.steps import CreateShortcutsStep
from localai_installer.strategies import ContainerStrategy, NativeStrategy


class FakeRunner:
    def __init__(self):
        self.calls = []

    def __call__(self, argv, **kwargs):
        self.calls.append((list(argv), kwargs))


def launcher_for(strategy, config=None):
    return render_launcher(
        web_url=strategy.web_url,
        web_port=strategy.web_port,
        start_web_ui=strategy.launcher_lines(config or RunConfig()),
    )


class TestProvisionShortcuts:
    def test_writes_url_and_launcher(self, tmp_path):
        desktop = tmp_path / "Desktop"
        runner = FakeRunner()
        strategy = NativeStrategy()

        artifacts = provision_shortcuts(
            desktop, web_url=strategy.web_url, launcher_body=launcher_for(strategy), runner=runner
        )

        urls = list(desktop.glob("*.url"))
        scripts = list(desktop.glob("*.bat"))
        assert urls == [artifacts.url_shortcut]
        assert scripts == [artifacts.launcher]
        assert "URL=http://localhost:8080" in urls[0].read_text(encoding="utf-8").splitlines()
        body = scripts[0].read_text(encoding="utf-8")
        assert WEBUI_SERVE_COMMAND in body
        assert "uvx --python 3.11 open-webui@latest serve" in body
        assert "ollama serve" in body

    def test_creates_link_through_powershell(self, tmp_path):
        runner = FakeRunner()
        artifacts = provision_shortcuts(
            tmp_path, web_url="http://localhost:8080", launcher_body="@echo off\r\n", runner=runner
        )

        assert len(runner.calls) == 1
        argv, kwargs = runner.calls[0]
        assert argv[0] == "powershell"
        assert str(tmp_path / LAUNCHER_LINK_NAME) in argv[-1]
        assert str(artifacts.launcher) in argv[-1]
        assert kwargs["dry_run"] is False

    def test_dry_run_writes_nothing(self, tmp_path):
        desktop = tmp_path / "Desktop"
        runner = FakeRunner()
        provision_shortcuts(
            desktop, web_url="http://localhost:8080", launcher_body="x", dry_run=True, runner=runner
        )
        assert not desktop.exists()
        assert runner.calls[0][1]["dry_run"] is True

    def test_filesystem_error_propagates(self, tmp_path):
        desktop = tmp_path / "Desktop"
        desktop.write_text("not a directory", encoding="utf-8")
        with pytest.raises(OSError):
            provision_shortcuts(desktop, web_url="http://localhost:8080", launcher_body="x", runner=FakeRunner())

    def test_lnk_command_targets_launcher(self, tmp_path):
        argv = lnk_command(tmp_path / "a.lnk", tmp_path / "a.bat")
        assert "WScript.Shell" in argv[-1]
        assert f"TargetPath = '{tmp_path / 'a.bat'}'" in argv[-1]


class TestLauncher:
    def test_container_launcher(self):
        body = launcher_for(ContainerStrategy())
        assert "docker start open-webui" in body
        assert 'start "" http://localhost:3000' in body
        assert ":3000 " in body

    def test_native_launcher_sets_data_dir(self, tmp_path):
        body = launcher_for(NativeStrategy(), RunConfig(data_dir=str(tmp_path / "webui")))
        assert f'set "DATA_DIR={tmp_path / "webui"}"' in body
        assert "--port 8080" in body

    def test_uses_crlf(self):
        assert launcher_for(NativeStrategy()).count("\r\n") > 5


class TestCreateShortcutsStep:
    def test_step_uses_strategy_url(self, make_state, monkeypatch):
        import localai_installer.lib.shortcuts as shortcuts_mod

        monkeypatch.setattr(shortcuts_mod, "run_cmd", FakeRunner())
        state = make_state(mode="container")

        state = CreateShortcutsStep(ContainerStrategy()).run(state)

        desktop = state.config.desktop_path
        url_files = list(desktop.glob("*.url"))
        assert len(url_files) == 1
        assert "URL=http://localhost:3000" in url_files[0].read_text(encoding="utf-8")
        assert state.decisions["shortcuts"]["url"] == str(url_files[0])
        assert state.decisions["shortcuts"]["launcher_link"] == str(desktop / LAUNCHER_LINK_NAME)
