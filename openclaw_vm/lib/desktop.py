"""Freedesktop ``.desktop`` entries.

Exec lines are built from argv lists. Each argument goes through the Exec
quoting rules and the whole value through keyfile string escaping, so shell
scripts embedded in terminal launchers never need hand-written escapes.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Sequence, Tuple

from .keyfile import Section, render_keyfile

_EXEC_RESERVED = set(" \t\n\"'\\><~|&;$*?#()`")
_EXEC_ESCAPED_IN_QUOTES = set('"`$\\')


def exec_quote(arg: str) -> str:
    arg = arg.replace("%", "%%")
    if arg and not any(c in _EXEC_RESERVED for c in arg):
        return arg
    out = "".join("\\" + c if c in _EXEC_ESCAPED_IN_QUOTES else c for c in arg)
    return f'"{out}"'


def escape_string(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )


@dataclass(frozen=True)
class DesktopEntry:
    name: str
    comment: str
    exec_argv: Tuple[str, ...]
    icon: str
    categories: Tuple[str, ...]
    terminal: bool = False
    startup_notify: bool = True

    def exec_line(self) -> str:
        return " ".join(exec_quote(a) for a in self.exec_argv)

    def sections(self) -> list[Section]:
        return [
            Section.of(
                "Desktop Entry",
                [
                    ("Version", "1.0"),
                    ("Type", "Application"),
                    ("Name", escape_string(self.name)),
                    ("Comment", escape_string(self.comment)),
                    ("Exec", escape_string(self.exec_line())),
                    ("Icon", self.icon),
                    ("Terminal", self.terminal),
                    ("Categories", "".join(f"{c};" for c in self.categories)),
                    ("StartupNotify", self.startup_notify),
                ],
            )
        ]


def render_desktop_entry(entry: DesktopEntry) -> str:
    return render_keyfile(entry.sections())


def terminal_argv(title: str, script: str, *, maximize: bool = False) -> Tuple[str, ...]:
    argv = ["xfce4-terminal"]
    if maximize:
        argv.append("--maximize")
    argv.append(f"--title={title}")
    argv.append("--command=" + shlex.join(["bash", "-c", script]))
    return tuple(argv)


def shell_script(*lines: str) -> str:
    return "; ".join(lines)


def echo(text: str = "") -> str:
    return f"echo {shlex.quote(text)}"


def banner(title: str, width: int = 40) -> Sequence[str]:
    rule = "=" * width
    return [echo(rule), echo(f" {title}"), echo(rule), echo()]
