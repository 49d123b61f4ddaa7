"""CLI dispatch and exit codes."""

import io

import pytest

from nvim_bootstrap import main as cli
from nvim_bootstrap.errors import SyncConflict, SyncError
from nvim_bootstrap.lib.command import CmdResult
from nvim_bootstrap.settings import Settings

from conftest import FakeHost

PINNED_URL = Settings().appimage_url("v0.9.5")


@pytest.fixture
def run(tmp_path):
    def _run(argv, *, ctx, host=None):
        out = io.StringIO()
        code = cli.main(
            ["--log", str(tmp_path / "test.log"), "--config", str(tmp_path / "missing.yaml"), *argv],
            host=host or FakeHost(),
            probe=lambda: ctx,
            out=out,
        )
        return code, out.getvalue()

    return _run


def test_no_args_prints_usage(run, focal):
    code, out = run([], ctx=focal)
    assert code == 0
    assert "Usage: nvim-bootstrap [command]" in out
    assert "fix-nvim" in out
    assert "Ubuntu: 20.04 (GLIBC 2.31)" in out


def test_no_args_macos_has_no_ubuntu_line(run, macos):
    code, out = run([], ctx=macos)
    assert code == 0
    assert "Ubuntu:" not in out


def test_fix_nvim_verified(run, focal):
    host = FakeHost(artifact_versions={PINNED_URL: "NVIM v0.9.5"})
    code, _ = run(["fix-nvim"], ctx=focal, host=host)
    assert code == 0
    assert host.files["/usr/local/bin/nvim"] == "NVIM v0.9.5"


def test_fix_nvim_unsupported(run, unknown):
    host = FakeHost()
    code, _ = run(["fix-nvim"], ctx=unknown, host=host)
    assert code == 1
    assert host.calls == []


def test_fix_nvim_verification_failure(run, macos):
    code, _ = run(["fix-nvim"], ctx=macos, host=FakeHost(brew_nvim_version=None))
    assert code == 1


@pytest.mark.parametrize("command", ["health", "check"])
def test_health_always_exits_zero(run, macos, monkeypatch, command):
    monkeypatch.setattr("nvim_bootstrap.health.run_cmd", lambda argv, check=False, timeout_s=None: CmdResult(list(argv), 127, "", ""))
    code, out = run([command], ctx=macos)
    assert code == 0
    assert "❌ Neovim: Not installed" in out
    assert "❌ Config not found" in out


def test_health_survives_unexpected_errors(run, macos, monkeypatch):
    def boom(*a, **k):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, "health_report", boom)
    code, _ = run(["health"], ctx=macos)
    assert code == 0


def test_push_nothing_to_commit_is_success(run, macos, monkeypatch):
    monkeypatch.setattr(cli, "push_config", lambda *a, **k: False)
    code, _ = run(["push"], ctx=macos)
    assert code == 0


def test_push_failure(run, macos, monkeypatch):
    def fail(*a, **k):
        raise SyncError("git push failed for all branches")

    monkeypatch.setattr(cli, "push_config", fail)
    code, _ = run(["push"], ctx=macos)
    assert code == 1


def test_pull_conflict(run, macos, monkeypatch):
    def conflict(*a, **k):
        raise SyncConflict("Merge conflict in init.lua")

    monkeypatch.setattr(cli, "pull_config", conflict)
    code, _ = run(["pull"], ctx=macos)
    assert code == 1


def test_install_unknown_os(run, unknown):
    code, _ = run(["install", "--dry-run"], ctx=unknown)
    assert code == 1


def test_install_dry_run_macos(run, macos):
    host = FakeHost()
    code, _ = run(["install", "--dry-run"], ctx=macos, host=host)
    assert code == 0
    assert "neovim" in host.packages["brew"]


def test_bad_settings_file(tmp_path, macos):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("[1, 2]\n", encoding="utf-8")
    code = cli.main(["--log", str(tmp_path / "t.log"), "fix-nvim", "--config", str(cfg)], host=FakeHost(), probe=lambda: macos)
    assert code == 1


def test_options_after_subcommand(tmp_path, focal):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("neovim:\n  pinned_release: v0.9.4\n", encoding="utf-8")
    host = FakeHost(artifact_versions={Settings().appimage_url("v0.9.4"): "NVIM v0.9.4"})
    code = cli.main(["fix-nvim", "--config", str(cfg), "--log", str(tmp_path / "t.log")], host=host, probe=lambda: focal)
    assert code == 0
    assert host.files["/usr/local/bin/nvim"] == "NVIM v0.9.4"


def test_troubleshoot_glibc(run, jammy):
    host = FakeHost(artifact_versions={PINNED_URL: "NVIM v0.9.5"})
    code, _ = run(["troubleshoot", "glibc"], ctx=jammy, host=host)
    assert code == 0
    # forced past the PPA that selection would have picked
    assert host.repos == []
    assert host.files["/usr/local/bin/nvim"] == "NVIM v0.9.5"


def test_troubleshoot_glibc_on_macos(run, macos):
    code, _ = run(["troubleshoot", "glibc"], ctx=macos)
    assert code == 1


def test_env_detect_writes_local_lua(run, macos, _isolated_home, monkeypatch):
    monkeypatch.setenv("KITTY_WINDOW_ID", "1")
    code, _ = run(["env-detect"], ctx=macos)
    assert code == 0
    local = _isolated_home / ".config" / "nvim" / "lua" / "config" / "local.lua"
    assert 'M.terminal = "kitty"' in local.read_text()


def test_unknown_command_is_usage_error(run, macos):
    with pytest.raises(SystemExit) as exc:
        run(["frobnicate"], ctx=macos)
    assert exc.value.code == 2
