from __future__ import annotations

import json
import stat
from pathlib import Path

import pytest
import yaml

from openclaw_vm.lib.keyfile import parse_keyfile

from .conftest import TEST_HOME

UNIT = "etc/systemd/system/openclaw-gateway.service"
AUTOLOGIN = "etc/lightdm/lightdm.conf.d/50-autologin.conf"
DESKTOP = TEST_HOME.lstrip("/") + "/Desktop"


def _generated(root: Path) -> dict:
    files = [root / UNIT, root / AUTOLOGIN, *sorted((root / DESKTOP).glob("*.desktop"))]
    return {str(p.relative_to(root)): p.read_bytes() for p in files}


def _state(tmp_path: Path) -> dict:
    return json.loads((tmp_path / "state.json").read_text(encoding="utf-8"))


def test_full_run_succeeds(provision, runner, target_root, tmp_path):
    assert provision() == 0

    assert runner.ran("apt-get", "update", "-qq")
    assert runner.ran("npm", "install", "-g", "openclaw@latest", "--force")
    assert runner.ran("systemctl", "enable", "openclaw-gateway.service")
    assert runner.ran("systemctl", "set-default", "graphical.target")
    # Enabled for boot, never started by the provisioner.
    assert not runner.ran("systemctl", "start", "openclaw-gateway.service")

    state = _state(tmp_path)
    assert state["execution"]["status"] == "ok"
    assert state["execution"]["ran_steps"][-1] == "90_final_cleanup"
    assert len(state["execution"]["ran_steps"]) == 14


def test_rerun_produces_identical_files(provision, target_root):
    assert provision() == 0
    first = _generated(target_root)
    assert provision() == 0
    second = _generated(target_root)

    assert len(first) == 7
    assert first == second


def test_unit_file_restart_policy_and_working_directory(provision, target_root):
    assert provision() == 0
    unit = parse_keyfile((target_root / UNIT).read_text(encoding="utf-8"))

    service = unit["Service"]
    assert service["Restart"] == ["always"]
    assert service["RestartSec"] == ["10"]
    assert service["WorkingDirectory"] == [TEST_HOME]
    assert service["ReadWritePaths"] == [TEST_HOME]
    assert service["Environment"] == [f"HOME={TEST_HOME}", "NODE_ENV=production"]
    assert service["ExecStart"] == ["/usr/bin/openclaw gateway"]
    assert unit["Install"]["WantedBy"] == ["multi-user.target"]


def test_autologin_fragment(provision, target_root, current_user):
    assert provision() == 0
    conf = parse_keyfile((target_root / AUTOLOGIN).read_text(encoding="utf-8"))
    assert conf["Seat:*"] == {
        "autologin-user": [current_user],
        "autologin-user-timeout": ["0"],
        "user-session": ["openbox"],
    }


def test_five_executable_shortcuts(provision, runner, target_root):
    assert provision() == 0
    desktop = target_root / DESKTOP

    shortcuts = sorted(desktop.glob("*.desktop"))
    assert [p.name for p in shortcuts] == [
        "openclaw-dashboard.desktop",
        "openclaw-gateway-control.desktop",
        "openclaw-setup.desktop",
        "openclaw-tui.desktop",
        "openclaw-update.desktop",
    ]
    for p in shortcuts:
        assert p.stat().st_mode & stat.S_IXUSR
    trusted = [c for c in runner.calls if c[3:5] == ["gio", "set"]]
    assert len(trusted) == 5

    readme = desktop / "README.txt"
    assert "http://127.0.0.1:18789/" in readme.read_text(encoding="utf-8")
    assert not readme.stat().st_mode & stat.S_IXUSR


def test_port_override_reaches_dashboard_shortcut(provision, target_root, monkeypatch):
    monkeypatch.setenv("OPENCLAW_PORT", "20000")
    assert provision() == 0
    entry = parse_keyfile((target_root / DESKTOP / "openclaw-dashboard.desktop").read_text(encoding="utf-8"))
    assert entry["Desktop Entry"]["Exec"] == ["google-chrome-stable --new-window http://127.0.0.1:20000/"]


def test_not_root_aborts_before_any_package_operation(provision, runner, monkeypatch, tmp_path):
    import os

    monkeypatch.setattr(os, "geteuid", lambda: 1000)
    assert provision() != 0
    assert runner.calls == []
    assert not (tmp_path / "state.json").exists()


def test_missing_user_aborts_before_any_package_operation(provision, runner, monkeypatch):
    monkeypatch.setenv("OPENCLAW_USER", "no-such-user-openclaw")
    assert provision() != 0
    assert runner.calls == []


def test_guest_additions_failure_is_best_effort(provision, runner, target_root, tmp_path):
    runner.fail_on("apt-get", "install", "-y", "virtualbox-guest-utils")

    assert provision() == 0
    assert (target_root / UNIT).exists()

    state = _state(tmp_path)
    assert state["execution"]["warnings"][0]["step"] == "25_install_guest_additions"
    assert "90_final_cleanup" in state["execution"]["ran_steps"]


def test_applications_failure_is_fatal(provision, runner, target_root, tmp_path):
    runner.fail_on("apt-get", "install", "-y", "git")

    assert provision() == 1
    assert not runner.ran("npm")
    assert not (target_root / UNIT).exists()

    state = _state(tmp_path)
    assert state["execution"]["status"] == "failed"
    assert state["execution"]["errors"][0]["step"] == "30_install_applications"
    assert state["history"][-1]["failed_step"] == "30_install_applications"


def test_browser_failure_is_best_effort(provision, runner, tmp_path):
    runner.fail_on("dpkg", "-i")
    runner.fail_on("apt-get", "install", "-f", "-y")

    assert provision() == 0
    state = _state(tmp_path)
    assert state["execution"]["decisions"]["browser"] == {"installed": False, "reason": "install_failed"}


def test_snapd_enable_failure_is_suppressed(provision, runner):
    runner.fail_on("systemctl", "enable", "snapd")
    runner.fail_on("systemctl", "start", "snapd")
    assert provision() == 0


def test_start_at_runs_only_the_tail(provision, runner, target_root):
    assert provision("--start-at", "55_configure_gateway_service", "--stop-after", "60_configure_autologin") == 0
    assert not runner.ran("apt-get", "update", "-qq")
    assert (target_root / UNIT).exists()
    assert (target_root / AUTOLOGIN).exists()
    assert not (target_root / DESKTOP).exists()


def test_dry_run_writes_nothing(provision, runner, target_root, monkeypatch):
    import os

    monkeypatch.setattr(os, "geteuid", lambda: 1000)
    assert provision("--dry-run") == 0
    assert runner.calls == []
    assert not (target_root / UNIT).exists()


def test_list_steps(capsys):
    from openclaw_vm.main import main

    assert main(["--list-steps"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 14
    assert out[0].startswith("10_clean_package_cache")


def test_unreadable_run_record_does_not_block_provisioning(provision, runner, tmp_path):
    (tmp_path / "state.json").write_text("{truncated", encoding="utf-8")

    assert provision() == 0
    assert runner.ran("apt-get", "update", "-qq")
    assert _state(tmp_path)["execution"]["status"] == "ok"


def test_unexpected_error_still_saves_run_record(provision, monkeypatch, tmp_path):
    from openclaw_vm.steps import step_20_install_desktop

    def broken_manifest(name):
        raise yaml.YAMLError("bad manifest")

    monkeypatch.setattr(step_20_install_desktop, "package_group", broken_manifest)
    with pytest.raises(yaml.YAMLError):
        provision()

    state = _state(tmp_path)
    assert state["execution"]["status"] == "failed"
    assert state["execution"]["errors"] == [{"step": "20_install_desktop", "error": "bad manifest"}]
    assert state["history"][-1]["failed_step"] == "20_install_desktop"
