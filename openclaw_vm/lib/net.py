from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def download(url: str, dest: Path, *, check: bool = True, dry_run: bool = False) -> bool:
    """Fetch url to dest with wget; returns False on failure when check=False."""
    if not dry_run:
        dest.parent.mkdir(parents=True, exist_ok=True)
    r = run_cmd(["wget", "-q", "-O", str(dest), url], check=check, dry_run=dry_run)
    return r.ok


def fetch_script(url: str, dest: Path, *, dry_run: bool = False) -> None:
    if not dry_run:
        dest.parent.mkdir(parents=True, exist_ok=True)
    run_cmd(["curl", "-fsSL", "-o", str(dest), url], dry_run=dry_run)


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_sha256(path: Path, expected: str) -> bool:
    actual = sha256_file(path)
    if actual.lower() != expected.strip().lower():
        logger.warning("Checksum mismatch for %s: expected %s got %s", path, expected, actual)
        return False
    return True
