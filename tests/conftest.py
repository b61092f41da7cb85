from __future__ import annotations

import os
import pwd
import subprocess
from pathlib import Path
from typing import Callable, List

import pytest

from openclaw_vm import main as main_mod
from openclaw_vm.config import ProvisionConfig
from openclaw_vm.lib import command
from openclaw_vm.lib.users import UserAccount
from openclaw_vm.pipeline import ProvisionCtx

TEST_HOME = "/home/tester"


class FakeRunner:
    """Stands in for subprocess.run: records argv, fails on chosen prefixes."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.failures: List[tuple] = []

    def fail_on(self, *prefix: str) -> None:
        self.failures.append(tuple(prefix))

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        failed = any(tuple(argv[: len(p)]) == p for p in self.failures)
        stdout = "v1.0.0\n" if argv[1:] == ["--version"] else ""
        return subprocess.CompletedProcess(argv, 100 if failed else 0, stdout, "E: failed" if failed else "")

    def ran(self, *prefix: str) -> bool:
        return any(tuple(c[: len(prefix)]) == prefix for c in self.calls)


@pytest.fixture()
def runner(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    fake = FakeRunner()
    monkeypatch.setattr(command.subprocess, "run", fake)
    return fake


@pytest.fixture()
def current_user() -> str:
    return pwd.getpwuid(os.getuid()).pw_name


@pytest.fixture()
def account(current_user: str) -> UserAccount:
    return UserAccount(name=current_user, uid=os.getuid(), gid=os.getgid(), home=TEST_HOME)


@pytest.fixture()
def ctx(tmp_path: Path, account: UserAccount) -> ProvisionCtx:
    cfg = ProvisionConfig(user=account.name, home=TEST_HOME, snapd_settle_seconds=0, target_root=str(tmp_path))
    return ProvisionCtx(cfg=cfg, account=account, root=tmp_path, state={})


@pytest.fixture()
def target_root(tmp_path: Path) -> Path:
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture()
def provision(
    tmp_path: Path,
    target_root: Path,
    current_user: str,
    runner: FakeRunner,
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., int]:
    """Run the CLI entry point as root against a temporary target root."""

    for var in ("OPENCLAW_USER", "OPENCLAW_PORT", "OPENCLAW_HOME", "OPENCLAW_NODE_VERSION", "OPENCLAW_BROWSER_SHA256"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("OPENCLAW_USER", current_user)
    monkeypatch.setenv("OPENCLAW_HOME", TEST_HOME)
    monkeypatch.setattr(os, "geteuid", lambda: 0)
    monkeypatch.setattr(main_mod, "configure_logging", lambda log_path: log_path)

    config_file = tmp_path / "provision.yaml"
    config_file.write_text("snapd_settle_seconds: 0\n", encoding="utf-8")

    def _run(*extra: str) -> int:
        return main_mod.main(
            [
                "--config",
                str(config_file),
                "--root",
                str(target_root),
                "--state",
                str(tmp_path / "state.json"),
                "--log",
                str(tmp_path / "provision.log"),
                *extra,
            ]
        )

    return _run
