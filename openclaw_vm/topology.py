"""VM topology descriptor and its Vagrantfile rendering.

The descriptor is plain data (YAML); ``render_vagrantfile`` is the single
formatting function for the Ruby output.
"""

from __future__ import annotations

import argparse
import ipaddress
import json
import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import ConfigError
from .lib.manifests import MANIFESTS_DIR

logger = logging.getLogger(__name__)

DEFAULT_TOPOLOGY = str(MANIFESTS_DIR / "topology.yaml")


@dataclass(frozen=True)
class ProviderSettings:
    name: str = "openclaw-vm"
    gui: bool = True
    memory_mb: int = 4096
    cpus: int = 2
    vram_mb: int = 128
    graphics_controller: str = "vmsvga"
    clipboard: str = "bidirectional"
    drag_and_drop: str = "bidirectional"
    audio: bool = True


@dataclass(frozen=True)
class VMTopology:
    box: str = "ubuntu/jammy64"
    hostname: str = "openclaw-vm"
    private_ip: str = "192.168.56.10"
    synced_folder: str = "/vagrant"
    provider: ProviderSettings = field(default_factory=ProviderSettings)
    hosts_entry: str = ""
    provision_command: str = "cd /vagrant && python3 -m openclaw_vm"
    provision_env: Dict[str, str] = field(default_factory=dict)


_SHARE_MODES = {"disabled", "hosttoguest", "guesttohost", "bidirectional"}


def _validate(topo: VMTopology) -> VMTopology:
    try:
        ipaddress.IPv4Address(topo.private_ip)
    except ValueError as e:
        raise ConfigError(f"private_ip is not an IPv4 address: {topo.private_ip}") from e
    p = topo.provider
    for name in ("memory_mb", "cpus", "vram_mb"):
        if getattr(p, name) <= 0:
            raise ConfigError(f"provider.{name} must be positive")
    for name in ("clipboard", "drag_and_drop"):
        if getattr(p, name) not in _SHARE_MODES:
            raise ConfigError(f"provider.{name} must be one of {sorted(_SHARE_MODES)}")
    if not topo.box:
        raise ConfigError("box must not be empty")
    return topo


def topology_from_mapping(raw: Mapping[str, Any]) -> VMTopology:
    data = dict(raw)
    provider_raw = data.pop("provider", None) or {}
    if not isinstance(provider_raw, Mapping):
        raise ConfigError("provider must be a mapping")
    try:
        provider = ProviderSettings(**provider_raw)
        env = {str(k): str(v) for k, v in (data.pop("provision_env", None) or {}).items()}
        topo = VMTopology(provider=provider, provision_env=env, **data)
    except TypeError as e:
        raise ConfigError(f"Invalid topology: {e}") from e
    return _validate(topo)


def load_topology(path: str = DEFAULT_TOPOLOGY) -> VMTopology:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Topology file not found: {path}")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")
    return topology_from_mapping(raw)


def ruby_str(value: str) -> str:
    # JSON string escapes are valid Ruby; interpolation must be disabled.
    return json.dumps(value).replace("#{", "\\#{")


def _ruby_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    return ruby_str(str(value))


def _on_off(flag: bool) -> str:
    return "on" if flag else "off"


def hosts_append_command(entry: str) -> str:
    quoted = shlex.quote(entry)
    return f"grep -qxF {quoted} /etc/hosts || echo {quoted} >> /etc/hosts"


def render_vagrantfile(topo: VMTopology) -> str:
    p = topo.provider
    modifyvm = [
        ["--vram", str(p.vram_mb)],
        ["--graphicscontroller", p.graphics_controller],
        ["--clipboard-mode", p.clipboard],
        ["--drag-and-drop", p.drag_and_drop],
        ["--audio-enabled", _on_off(p.audio)],
        ["--audio-out", _on_off(p.audio)],
    ]

    lines: List[str] = [
        "# -*- mode: ruby -*-",
        "# vi: set ft=ruby :",
        "# Generated by openclaw-vm-vagrantfile; edit topology.yaml instead.",
        "",
        'Vagrant.configure("2") do |config|',
        f"  config.vm.box = {ruby_str(topo.box)}",
        f"  config.vm.hostname = {ruby_str(topo.hostname)}",
        f'  config.vm.network "private_network", ip: {ruby_str(topo.private_ip)}',
        f'  config.vm.synced_folder ".", {ruby_str(topo.synced_folder)}',
        "",
        '  config.vm.provider "virtualbox" do |vb|',
        f"    vb.name = {_ruby_value(p.name)}",
        f"    vb.gui = {_ruby_value(p.gui)}",
        f"    vb.memory = {_ruby_value(p.memory_mb)}",
        f"    vb.cpus = {_ruby_value(p.cpus)}",
    ]
    for flag, value in modifyvm:
        lines.append(f'    vb.customize ["modifyvm", :id, {ruby_str(flag)}, {ruby_str(value)}]')
    lines += ["  end", ""]

    if topo.hosts_entry:
        lines.append(f'  config.vm.provision "shell", inline: {ruby_str(hosts_append_command(topo.hosts_entry))}')

    provision = f'  config.vm.provision "shell", inline: {ruby_str(topo.provision_command)}'
    if topo.provision_env:
        env = ", ".join(f"{ruby_str(k)} => {ruby_str(v)}" for k, v in topo.provision_env.items())
        provision += f", env: {{ {env} }}"
    lines += [provision, "end"]

    return "\n".join(lines) + "\n"


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="openclaw-vm-vagrantfile")
    p.add_argument("--topology", default=DEFAULT_TOPOLOGY, help="Topology descriptor (YAML)")
    p.add_argument("--output", default="-", help="Where to write the Vagrantfile ('-' for stdout)")

    args = p.parse_args(argv)

    try:
        text = render_vagrantfile(load_topology(args.topology))
    except ConfigError as e:
        logging.getLogger(__name__).error("%s", e)
        return 2

    if args.output == "-":
        print(text, end="")
    else:
        Path(args.output).write_text(text, encoding="utf-8")
        logger.info("Wrote %s", args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
