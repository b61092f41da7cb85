from __future__ import annotations

import re
import shlex

import pytest

from openclaw_vm.config import ProvisionConfig
from openclaw_vm.lib.desktop import DesktopEntry, escape_string, exec_quote, render_desktop_entry
from openclaw_vm.lib.keyfile import Section, parse_keyfile, render_keyfile, sections_from_mapping
from openclaw_vm.lib.systemd import ServiceUnit, render_unit
from openclaw_vm.steps.step_70_create_desktop_shortcuts import gateway_shortcuts


def _unescape_string(value: str) -> str:
    return re.sub(r"\\(.)", lambda m: {"n": "\n", "t": "\t", "r": "\r"}.get(m.group(1), m.group(1)), value)


def _split_exec(line: str) -> list:
    """Split an Exec value: double quotes group, backslash escapes inside quotes."""
    args, current, quoted, escaped, started = [], "", False, False, False
    for c in line:
        if escaped:
            current += c
            escaped = False
        elif quoted and c == "\\":
            escaped = True
        elif c == '"':
            quoted = not quoted
            started = True
        elif c == " " and not quoted:
            if started:
                args.append(current)
            current, started = "", False
        else:
            current += c
            started = True
    if started:
        args.append(current)
    return [a.replace("%%", "%") for a in args]


def test_render_keyfile_layout():
    text = render_keyfile(
        [
            Section.of("A", [("k", "v"), ("flag", True)]),
            Section.of("B", [("x", 1), ("x", 2)]),
        ]
    )
    assert text == "[A]\nk=v\nflag=true\n\n[B]\nx=1\nx=2\n"


def test_render_keyfile_rejects_multiline_values():
    with pytest.raises(ValueError):
        render_keyfile([Section.of("A", [("k", "one\ntwo")])])


def test_sections_from_mapping_keeps_order():
    sections = sections_from_mapping({"ui": {"b": 1, "a": 0}, "desktop": {"bg": "#000000"}})
    assert render_keyfile(sections) == "[ui]\nb=1\na=0\n\n[desktop]\nbg=#000000\n"


def test_service_unit_sections():
    unit = ServiceUnit(
        description="Demo",
        exec_start="/usr/bin/demo run",
        user="demo",
        group="demo",
        working_directory="/home/demo",
        environment=(("A", "1"), ("B", "2")),
    )
    parsed = parse_keyfile(render_unit(unit))
    assert parsed["Service"]["Environment"] == ["A=1", "B=2"]
    assert parsed["Service"]["NoNewPrivileges"] == ["true"]
    assert parsed["Service"]["ProtectSystem"] == ["strict"]
    assert "ReadWritePaths" not in parsed["Service"]
    assert "Documentation" not in parsed["Unit"]


@pytest.mark.parametrize(
    "arg,expected",
    [
        ("plain", "plain"),
        ("http://127.0.0.1:18789/", "http://127.0.0.1:18789/"),
        ("two words", '"two words"'),
        ('say "hi" $HOME', '"say \\"hi\\" \\$HOME"'),
        ("100%", "100%%"),
        ("", '""'),
    ],
)
def test_exec_quote(arg, expected):
    assert exec_quote(arg) == expected


def test_escape_string():
    assert escape_string("a\\b\tc") == "a\\\\b\\tc"


def test_desktop_entry_render():
    entry = DesktopEntry(
        name="Demo",
        comment="Demo launcher",
        exec_argv=("demo", "--flag"),
        icon="system-run",
        categories=("System", "Utility"),
    )
    parsed = parse_keyfile(render_desktop_entry(entry))["Desktop Entry"]
    assert parsed["Exec"] == ["demo --flag"]
    assert parsed["Categories"] == ["System;Utility;"]
    assert parsed["Terminal"] == ["false"]
    assert parsed["Type"] == ["Application"]


def test_shortcut_exec_lines_decode_to_their_argv():
    # Undo keyfile string escaping, then Exec argument quoting.
    for stem, entry in gateway_shortcuts(ProvisionConfig()):
        exec_value = parse_keyfile(render_desktop_entry(entry))["Desktop Entry"]["Exec"][0]
        argv = _split_exec(_unescape_string(exec_value))
        assert tuple(argv) == entry.exec_argv, stem


def test_gateway_control_script_uses_service_name():
    cfg = ProvisionConfig(service_name="my-gateway")
    entries = dict(gateway_shortcuts(cfg))
    command = entries["openclaw-gateway-control"].exec_argv[-1]
    assert command.startswith("--command=bash -c ")
    script = shlex.split(command[len("--command="):])[2]
    assert "sudo systemctl restart my-gateway" in script
    assert "sudo journalctl -u my-gateway -f" in script
