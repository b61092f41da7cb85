from __future__ import annotations

import logging
import shlex
from typing import List, Tuple

from ..config import ProvisionConfig
from ..lib.assets import render_asset, write_file
from ..lib.command import run_cmd
from ..lib.desktop import DesktopEntry, banner, echo, render_desktop_entry, shell_script, terminal_argv
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)

README_NAME = "README.txt"


def _pause(prompt: str = "Press Enter to close...") -> str:
    return f"read -p {shlex.quote(prompt)}"


def _control_script(cfg: ProvisionConfig) -> str:
    svc = shlex.quote(cfg.service_name)
    actions = [
        ("1", f"sudo systemctl start {svc} && {echo('Gateway started')}"),
        ("2", f"sudo systemctl stop {svc} && {echo('Gateway stopped')}"),
        ("3", f"sudo systemctl restart {svc} && {echo('Gateway restarted')}"),
        ("4", f"sudo systemctl status {svc}"),
        ("5", f"sudo journalctl -u {svc} -f"),
    ]
    cases = " ".join(f"{key}) {cmd};;" for key, cmd in actions)
    return shell_script(
        *banner("OpenClaw Gateway Control"),
        echo("1) Start gateway"),
        echo("2) Stop gateway"),
        echo("3) Restart gateway"),
        echo("4) Check status"),
        echo("5) View logs"),
        echo(),
        "read -p 'Choose option (1-5): ' opt",
        f'case "$opt" in {cases} *) {echo("Invalid option")};; esac',
        echo(),
        _pause(),
    )


def gateway_shortcuts(cfg: ProvisionConfig) -> List[Tuple[str, DesktopEntry]]:
    """The five desktop launchers, keyed by file stem."""

    agent = shlex.quote(cfg.agent_command)
    pkg = shlex.quote(f"{cfg.agent_package}@latest")

    setup = shell_script(
        *banner("OpenClaw Onboarding Wizard"),
        f"{agent} onboard --install-daemon",
        echo(),
        echo("Setup complete! Press Enter to close..."),
        "read",
    )
    update = shell_script(
        *banner("OpenClaw Update Tool", width=43),
        echo("Current version:"),
        f"{agent} --version",
        echo(),
        echo("Checking for updates..."),
        echo(),
        f"npm update -g {pkg}",
        echo(),
        echo("New version:"),
        f"{agent} --version",
        echo(),
        *banner("Update complete!", width=43),
        _pause(),
    )

    return [
        (
            "openclaw-setup",
            DesktopEntry(
                name="OpenClaw Setup",
                comment="Run OpenClaw onboarding wizard",
                exec_argv=terminal_argv("OpenClaw Setup", setup, maximize=True),
                icon="utilities-terminal",
                categories=("Development", "System"),
            ),
        ),
        (
            "openclaw-dashboard",
            DesktopEntry(
                name="OpenClaw Dashboard",
                comment="Open OpenClaw Gateway Dashboard in browser",
                exec_argv=("google-chrome-stable", "--new-window", cfg.dashboard_url),
                icon="web-browser",
                categories=("Network", "Development"),
            ),
        ),
        (
            "openclaw-tui",
            DesktopEntry(
                name="OpenClaw TUI",
                comment="Launch OpenClaw Terminal User Interface",
                exec_argv=terminal_argv("OpenClaw TUI", f"{agent} || bash", maximize=True),
                icon="utilities-terminal",
                categories=("Development", "System"),
            ),
        ),
        (
            "openclaw-gateway-control",
            DesktopEntry(
                name="Gateway Control",
                comment="Start/Stop/Restart OpenClaw Gateway service",
                exec_argv=terminal_argv("OpenClaw Gateway Control", _control_script(cfg)),
                icon="system-run",
                categories=("System",),
            ),
        ),
        (
            "openclaw-update",
            DesktopEntry(
                name="Update OpenClaw",
                comment="Check for and install OpenClaw updates",
                exec_argv=terminal_argv("OpenClaw Update", update),
                icon="system-software-update",
                categories=("System",),
            ),
        ),
    ]


class CreateDesktopShortcutsStep:
    step_id = "70_create_desktop_shortcuts"
    title = "Creating desktop shortcuts"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        cfg = ctx.cfg
        dry_run = ctx.dry_run
        desktop = ctx.desktop_dir

        written = []
        for stem, entry in gateway_shortcuts(cfg):
            path = desktop / f"{stem}.desktop"
            write_file(path, render_desktop_entry(entry), mode=0o755, dry_run=dry_run)
            written.append(path)

        readme = render_asset(
            "desktop-readme.txt",
            {
                "user": ctx.account.name,
                "port": cfg.port,
                "dashboard_url": cfg.dashboard_url,
                "service": cfg.service_name,
                "agent": cfg.agent_command,
                "package": cfg.agent_package,
                "node_major": cfg.node_major,
            },
        )
        write_file(desktop / README_NAME, readme, mode=0o644, dry_run=dry_run)

        run_cmd(["chown", "-R", ctx.account.owner, str(desktop)], dry_run=dry_run)

        # gio marks launchers trusted for PCManFM; unavailable without a session bus.
        untrusted = []
        for path in written:
            r = run_cmd(
                ["sudo", "-u", ctx.account.name, "gio", "set", str(path), "metadata::trusted", "true"],
                check=False,
                dry_run=dry_run,
            )
            if not r.ok:
                untrusted.append(path.name)
        if untrusted:
            logger.info("Could not mark as trusted (ignored): %s", ", ".join(untrusted))

        ctx.record("shortcuts", [p.name for p in written])
        return StepResult.ok(f"{len(written)} desktop shortcuts created")
