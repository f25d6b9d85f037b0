"""Tests for the component installer state machine"""

import pytest

from localai_installer.errors import CommandError
from localai_installer.lib.env import EnvSnapshot
from localai_installer.lib.installer import ComponentInstaller, ComponentSpec, InstallResult, InstallState

S = InstallState


class Recorder:
    """Fake runner/fetch/fallback that records calls and runs a side effect."""

    def __init__(self, effect=None, result=True):
        self.calls = []
        self.effect = effect
        self.result = result

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.effect is not None:
            self.effect(*args, **kwargs)
        return self.result


@pytest.fixture
def dirs(tmp_path):
    return {
        "bin": tmp_path / "bin",
        "tools": tmp_path / "tools",
        "downloads": tmp_path / "downloads",
    }


@pytest.fixture
def spec(dirs):
    return ComponentSpec(
        name="tool",
        command="tool",
        installer_url="https://example.invalid/ToolSetup.exe",
        installer_args=("/S",),
        winget_id="Vendor.Tool",
        known_dirs=(str(dirs["tools"]),),
    )


def make_installer(spec, dirs, *, runner, fetch, fallback, force=False, retry_count=3, dry_run=False):
    return ComponentInstaller(
        spec,
        env=EnvSnapshot(path_entries=(str(dirs["bin"]),)),
        downloads_dir=dirs["downloads"],
        force=force,
        retry_count=retry_count,
        retry_delay=0,
        dry_run=dry_run,
        runner=runner,
        fetch=fetch,
        fallback=fallback,
        sleep=lambda s: None,
    )


def write_artifact(url, dest, **kwargs):
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(b"MZ")


def always_fail(*args, **kwargs):
    raise ConnectionError("network down")


class TestAlreadyPresent:
    def test_no_download_or_install_when_present(self, spec, dirs, exe_factory):
        exe = exe_factory(dirs["bin"], "tool")
        runner, fetch, fallback = Recorder(), Recorder(), Recorder()

        result = make_installer(spec, dirs, runner=runner, fetch=fetch, fallback=fallback).ensure_installed()

        assert result.state == S.ALREADY_PRESENT
        assert result.ok
        assert result.path == exe
        assert result.transitions == [S.UNCHECKED, S.ALREADY_PRESENT]
        assert runner.calls == [] and fetch.calls == [] and fallback.calls == []

    def test_found_in_known_install_dir(self, spec, dirs, exe_factory):
        exe_factory(dirs["tools"], "tool")
        fetch = Recorder()
        result = make_installer(spec, dirs, runner=Recorder(), fetch=fetch, fallback=Recorder()).ensure_installed()
        assert result.state == S.ALREADY_PRESENT
        assert fetch.calls == []

    def test_force_reinstalls(self, spec, dirs, exe_factory):
        exe_factory(dirs["bin"], "tool")
        fetch = Recorder(effect=write_artifact)
        runner = Recorder()

        result = make_installer(
            spec, dirs, runner=runner, fetch=fetch, fallback=Recorder(), force=True
        ).ensure_installed()

        assert result.state == S.INSTALLED
        assert len(fetch.calls) == 1
        assert len(runner.calls) == 1


class TestInstall:
    def test_download_install_verify(self, spec, dirs, exe_factory):
        fetch = Recorder(effect=write_artifact)
        runner = Recorder(effect=lambda *a, **k: exe_factory(dirs["tools"], "tool"))
        fallback = Recorder()

        result = make_installer(spec, dirs, runner=runner, fetch=fetch, fallback=fallback).ensure_installed()

        assert result.state == S.INSTALLED
        assert result.channel == "installer"
        assert result.transitions == [S.UNCHECKED, S.DOWNLOADING, S.INSTALLING, S.VERIFYING, S.INSTALLED]
        artifact = dirs["downloads"] / "ToolSetup.exe"
        assert fetch.calls[0][0] == (spec.installer_url, artifact)
        assert runner.calls[0][0][0] == [str(artifact), "/S"]
        assert fallback.calls == []
        assert result.path is not None and result.path.parent == dirs["tools"]

    def test_cached_artifact_skips_download(self, spec, dirs, exe_factory):
        write_artifact(None, dirs["downloads"] / "ToolSetup.exe")
        fetch = Recorder()
        runner = Recorder(effect=lambda *a, **k: exe_factory(dirs["tools"], "tool"))

        result = make_installer(spec, dirs, runner=runner, fetch=fetch, fallback=Recorder()).ensure_installed()

        assert result.state == S.INSTALLED
        assert fetch.calls == []
        assert len(runner.calls) == 1

    def test_installer_failure_is_failed(self, spec, dirs):
        def fail(argv, **kwargs):
            raise CommandError(argv, 1603, "fatal error during installation")

        runner = Recorder(effect=fail)
        fallback = Recorder()

        result = make_installer(
            spec, dirs, runner=runner, fetch=Recorder(effect=write_artifact), fallback=fallback
        ).ensure_installed()

        assert result.state == S.FAILED
        assert not result.ok
        assert "installer failed" in result.error
        assert len(runner.calls) == 3
        assert fallback.calls == []

    def test_installed_but_not_on_path(self, spec, dirs):
        result = make_installer(
            spec, dirs, runner=Recorder(), fetch=Recorder(effect=write_artifact), fallback=Recorder()
        ).ensure_installed()

        assert result.state == S.FAILED
        assert "not on PATH" in result.error
        assert result.transitions[-2:] == [S.VERIFYING, S.FAILED]

    def test_dry_run_executes_nothing_real(self, spec, dirs):
        fetch, runner = Recorder(), Recorder()
        result = make_installer(
            spec, dirs, runner=runner, fetch=fetch, fallback=Recorder(), dry_run=True
        ).ensure_installed()

        assert result.state == S.INSTALLED
        assert fetch.calls[0][1]["dry_run"] is True
        assert runner.calls[0][1]["dry_run"] is True


class TestFallback:
    @pytest.mark.parametrize("retry_count", [1, 3])
    def test_fallback_tried_once_after_download_exhausted(self, spec, dirs, retry_count):
        fetch = Recorder(effect=always_fail)
        runner = Recorder()
        fallback = Recorder(result=False)

        result = make_installer(
            spec, dirs, runner=runner, fetch=fetch, fallback=fallback, retry_count=retry_count
        ).ensure_installed()

        assert len(fetch.calls) == retry_count
        assert len(fallback.calls) == 1
        assert fallback.calls[0][0] == ("Vendor.Tool",)
        assert runner.calls == []
        assert result.state == S.FAILED
        assert "winget fallback failed" in result.error

    def test_fallback_success_is_verified(self, spec, dirs, exe_factory):
        fallback = Recorder(effect=lambda *a, **k: exe_factory(dirs["tools"], "tool"))

        result = make_installer(
            spec, dirs, runner=Recorder(), fetch=Recorder(effect=always_fail), fallback=fallback
        ).ensure_installed()

        assert result.state == S.INSTALLED
        assert result.channel == "winget"
        assert len(fallback.calls) == 1

    def test_no_fallback_channel(self, dirs):
        spec = ComponentSpec(name="tool", command="tool", installer_url="https://example.invalid/t.exe")
        result = make_installer(
            spec, dirs, runner=Recorder(), fetch=Recorder(effect=always_fail), fallback=Recorder()
        ).ensure_installed()
        assert result.state == S.FAILED
        assert "download failed" in result.error


class TestComponentSpec:
    def test_artifact_name_from_url(self):
        spec = ComponentSpec(name="x", command="x", installer_url="https://host/path/Setup.exe?sig=1")
        assert spec.artifact_name == "Setup.exe"

    def test_interpreter_prefix(self, tmp_path):
        spec = ComponentSpec(name="uv", command="uv", interpreter=("powershell", "-File"))
        assert spec.installer_argv(tmp_path / "i.ps1") == ["powershell", "-File", str(tmp_path / "i.ps1")]


class TestEnsureComponent:
    def _patch(self, monkeypatch, result):
        import localai_installer.steps.common as common

        created = []

        class FakeInstaller:
            def __init__(self, spec, **kwargs):
                created.append((spec, kwargs))

            def ensure_installed(self):
                return result

        monkeypatch.setattr(common, "ComponentInstaller", FakeInstaller)
        return created

    def test_success_updates_state(self, make_state, monkeypatch, tmp_path):
        from localai_installer.steps import InstallRuntimeStep

        refreshed = EnvSnapshot(path_entries=(str(tmp_path),))
        result = InstallResult(
            component="ollama", state=S.INSTALLED, env=refreshed, path=tmp_path / "ollama.exe", channel="installer"
        )
        created = self._patch(monkeypatch, result)
        state = make_state(installer_url="https://mirror.invalid/OllamaSetup.exe", force_reinstall=True)

        state = InstallRuntimeStep().run(state)

        spec, kwargs = created[0]
        assert spec.installer_url == "https://mirror.invalid/OllamaSetup.exe"
        assert kwargs["force"] is True
        assert state.env is refreshed
        assert state.tool("ollama") == str(tmp_path / "ollama.exe")
        assert state.decisions["ollama_install"] == "installed"

    def test_failed_is_fatal(self, make_state, monkeypatch):
        from localai_installer.errors import ComponentInstallError
        from localai_installer.steps.common import ensure_component
        from localai_installer.components import uv_spec

        result = InstallResult(
            component="uv", state=S.FAILED, env=EnvSnapshot(path_entries=()), error="installed but uv is not on PATH"
        )
        self._patch(monkeypatch, result)

        with pytest.raises(ComponentInstallError) as exc:
            ensure_component(make_state(), uv_spec())
        assert exc.value.component == "uv"
        assert "not on PATH" in str(exc.value)
