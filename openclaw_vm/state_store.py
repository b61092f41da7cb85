"""Run record persisted after each provisioning run.

The record is informational: steps never read it to decide whether to run.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

MAX_HISTORY = 20


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    if _detect_format(p) in {"yaml", "yml"}:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Start a fresh execution section, keeping history from earlier runs."""

    state.setdefault("version", 1)
    state.setdefault("history", [])
    state["config"] = {}
    state["execution"] = {
        "started_at": datetime.now(timezone.utc).isoformat(),
        "current_step": None,
        "ran_steps": [],
        "decisions": {},
        "warnings": [],
        "errors": [],
    }
    return state


def record_run(state: Dict[str, Any], *, status: str) -> None:
    exe = state.setdefault("execution", {})
    exe["finished_at"] = datetime.now(timezone.utc).isoformat()
    exe["status"] = status

    history = state.setdefault("history", [])
    history.append(
        {
            "started_at": exe.get("started_at"),
            "finished_at": exe["finished_at"],
            "status": status,
            "failed_step": exe.get("current_step") if status == "failed" else None,
        }
    )
    del history[:-MAX_HISTORY]
