from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from string import Template
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).resolve().parents[1] / "assets"


def copy_tree(src: str, dst: str, *, dry_run: bool = False) -> None:
    s = Path(src)
    d = Path(dst)
    if not s.exists():
        raise FileNotFoundError(src)

    if dry_run:
        logger.info("Would copy tree %s -> %s", str(s), str(d))
        return

    d.mkdir(parents=True, exist_ok=True)
    for item in s.rglob("*"):
        rel = item.relative_to(s)
        out = d / rel
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
        else:
            out.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, out)


def write_file(path: Path, contents: str, *, mode: Optional[int] = None, dry_run: bool = False) -> None:
    """Write a whole file, replacing any previous content."""
    if dry_run:
        logger.info("Would write %s", str(path))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    if mode is not None:
        os.chmod(path, mode)
    logger.info("Wrote %s", str(path))


def render_asset(name: str, values: Mapping[str, object]) -> str:
    """Render a bundled text asset with $placeholders."""
    text = (ASSETS_DIR / name).read_text(encoding="utf-8")
    return Template(text).substitute({k: str(v) for k, v in values.items()})
