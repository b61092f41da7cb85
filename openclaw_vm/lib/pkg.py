from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def apt_clean(lists_dir: Path, *, dry_run: bool = False) -> None:
    """Drop downloaded archives and cached package lists so the next update is fresh."""
    run_cmd(["apt-get", "clean"], dry_run=dry_run)
    if not lists_dir.is_dir():
        return
    entries = sorted(str(p) for p in lists_dir.iterdir())
    if entries:
        run_cmd(["rm", "-rf", *entries], dry_run=dry_run)


def apt_update(*, dry_run: bool = False) -> None:
    run_cmd(["apt-get", "update", "-qq"], dry_run=dry_run)


def apt_upgrade(*, dry_run: bool = False) -> None:
    run_cmd(["apt-get", "upgrade", "-y"], dry_run=dry_run)


def apt_dist_upgrade(*, dry_run: bool = False) -> None:
    run_cmd(["apt-get", "dist-upgrade", "-y"], dry_run=dry_run)


def apt_autoremove(*, dry_run: bool = False) -> None:
    run_cmd(["apt-get", "autoremove", "-y"], dry_run=dry_run)
    run_cmd(["apt-get", "autoclean", "-y"], dry_run=dry_run)


def apt_install(packages: Sequence[str], *, check: bool = True, dry_run: bool = False) -> bool:
    """Install packages; returns False only when check=False and apt failed."""
    if not packages:
        return True
    r = run_cmd(["apt-get", "install", "-y", *packages], check=check, dry_run=dry_run)
    return r.ok


def apt_remove(packages: Sequence[str], *, check: bool = True, dry_run: bool = False) -> bool:
    r = run_cmd(["apt-get", "remove", "-y", *packages], check=check, dry_run=dry_run)
    return r.ok


def apt_fix_broken(*, check: bool = True, dry_run: bool = False) -> bool:
    r = run_cmd(["apt-get", "install", "-f", "-y"], check=check, dry_run=dry_run)
    return r.ok


def dpkg_installed(package: str, *, dry_run: bool = False) -> bool:
    if dry_run:
        return False
    r = run_cmd(["dpkg", "-s", package], check=False)
    return r.ok


def dpkg_install(deb_path: str, *, check: bool = True, dry_run: bool = False) -> bool:
    r = run_cmd(["dpkg", "-i", deb_path], check=check, dry_run=dry_run)
    return r.ok


def npm_install_global(spec: str, *, force: bool = False, dry_run: bool = False) -> None:
    argv = ["npm", "install", "-g", spec]
    if force:
        argv.append("--force")
    run_cmd(argv, dry_run=dry_run)


def tool_version(argv: Sequence[str], *, dry_run: bool = False) -> Optional[str]:
    """Best-effort version probe; None when the tool is missing or fails."""
    if dry_run:
        return None
    r = run_cmd(list(argv), check=False)
    if not r.ok:
        return None
    out = r.stdout.strip().splitlines()
    return out[0].strip() if out else None
