"""INI-style ``[section]`` / ``key=value`` rendering.

systemd units, LightDM fragments, pcmanfm.conf and freedesktop desktop
entries all share this shape. Entries are ordered (key, value) pairs so a
key may repeat, which systemd relies on for ``Environment=``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple


@dataclass(frozen=True)
class Section:
    name: str
    entries: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, name: str, entries: Iterable[Tuple[str, Any]]) -> "Section":
        return cls(name=name, entries=tuple((str(k), format_value(v)) for k, v in entries))


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def render_keyfile(sections: Iterable[Section]) -> str:
    blocks: List[str] = []
    for section in sections:
        lines = [f"[{section.name}]"]
        for key, value in section.entries:
            if "\n" in key or "=" in key:
                raise ValueError(f"Invalid key in [{section.name}]: {key!r}")
            if "\n" in value:
                raise ValueError(f"Multi-line value for {section.name}.{key}")
            lines.append(f"{key}={value}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def sections_from_mapping(data: Mapping[str, Mapping[str, Any]]) -> List[Section]:
    """Build sections from a nested mapping (e.g. loaded from YAML), preserving order."""
    out: List[Section] = []
    for name, entries in data.items():
        if not isinstance(entries, Mapping):
            raise ValueError(f"Section {name!r} must be a mapping")
        out.append(Section.of(str(name), entries.items()))
    return out


def parse_keyfile(text: str) -> Dict[str, Dict[str, List[str]]]:
    """Minimal reader used for verification; repeated keys keep every value."""
    result: Dict[str, Dict[str, List[str]]] = {}
    current: Dict[str, List[str]] | None = None
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") and line.endswith("]"):
            current = result.setdefault(line[1:-1], {})
            continue
        if current is None or "=" not in line:
            raise ValueError(f"Unexpected line: {raw!r}")
        key, value = line.split("=", 1)
        current.setdefault(key, []).append(value)
    return result
