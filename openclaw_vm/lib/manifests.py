from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml

MANIFESTS_DIR = Path(__file__).resolve().parents[1] / "manifests"


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML file relative to the bundled manifests directory."""
    p = MANIFESTS_DIR / rel_path.lstrip("/")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


def load_packages_manifest() -> Dict[str, Any]:
    return load_yaml_rel("packages.yaml")


def package_group(name: str) -> List[str]:
    groups = load_packages_manifest().get("groups") or {}
    pkgs = groups.get(name)
    if not isinstance(pkgs, list) or not pkgs:
        raise ValueError(f"packages.yaml: group {name!r} must be a non-empty list")
    return [str(p).strip() for p in pkgs if str(p).strip()]


def load_pcmanfm_settings() -> Dict[str, Any]:
    return load_yaml_rel("pcmanfm.yaml")
