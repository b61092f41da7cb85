from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from .command import CmdResult, run_cmd
from .keyfile import Section, render_keyfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceUnit:
    description: str
    exec_start: str
    user: str
    group: str
    working_directory: str
    documentation: str = ""
    environment: Tuple[Tuple[str, str], ...] = ()
    restart: str = "always"
    restart_sec: int = 10
    wanted_by: str = "multi-user.target"
    read_write_paths: Tuple[str, ...] = field(default_factory=tuple)

    def sections(self) -> List[Section]:
        unit = [("Description", self.description)]
        if self.documentation:
            unit.append(("Documentation", self.documentation))
        unit += [
            ("After", "network-online.target"),
            ("Wants", "network-online.target"),
        ]

        service = [
            ("Type", "simple"),
            ("User", self.user),
            ("Group", self.group),
            *[("Environment", f"{k}={v}") for k, v in self.environment],
            ("WorkingDirectory", self.working_directory),
            ("ExecStart", self.exec_start),
            ("Restart", self.restart),
            ("RestartSec", self.restart_sec),
            ("StandardOutput", "journal"),
            ("StandardError", "journal"),
            # Hardening: only the home directory stays writable.
            ("NoNewPrivileges", True),
            ("PrivateTmp", True),
            ("ProtectSystem", "strict"),
            ("ProtectHome", "read-only"),
        ]
        if self.read_write_paths:
            service.append(("ReadWritePaths", " ".join(self.read_write_paths)))

        return [
            Section.of("Unit", unit),
            Section.of("Service", service),
            Section.of("Install", [("WantedBy", self.wanted_by)]),
        ]


def render_unit(unit: ServiceUnit) -> str:
    return render_keyfile(unit.sections())


def systemctl(*args: str, check: bool = True, dry_run: bool = False) -> CmdResult:
    return run_cmd(["systemctl", *args], check=check, dry_run=dry_run)


def daemon_reload(*, dry_run: bool = False) -> None:
    systemctl("daemon-reload", dry_run=dry_run)


def enable(unit: str, *, check: bool = True, dry_run: bool = False) -> bool:
    return systemctl("enable", unit, check=check, dry_run=dry_run).ok


def start(unit: str, *, check: bool = True, dry_run: bool = False) -> bool:
    return systemctl("start", unit, check=check, dry_run=dry_run).ok


def set_default_target(target: str, *, dry_run: bool = False) -> None:
    systemctl("set-default", target, dry_run=dry_run)
