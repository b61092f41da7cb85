from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigError

DEFAULT_BROWSER_URL = "https://dl.google.com/linux/direct/google-chrome-stable_current_amd64.deb"

# environment variable -> config field
ENV_OVERRIDES = {
    "OPENCLAW_USER": "user",
    "OPENCLAW_PORT": "port",
    "OPENCLAW_HOME": "home",
    "OPENCLAW_NODE_VERSION": "node_major",
    "OPENCLAW_BROWSER_SHA256": "browser_sha256",
}


@dataclass(frozen=True)
class ProvisionConfig:
    user: str = "vagrant"
    port: int = 18789
    # None: use the account's home directory from the passwd database.
    home: Optional[str] = None
    node_major: int = 22
    agent_package: str = "openclaw"
    agent_bin: str = "/usr/bin/openclaw"
    service_name: str = "openclaw-gateway"
    browser_url: str = DEFAULT_BROWSER_URL
    browser_sha256: Optional[str] = None
    snapd_settle_seconds: float = 5
    target_root: str = "/"

    @property
    def dashboard_url(self) -> str:
        return f"http://127.0.0.1:{self.port}/"

    @property
    def agent_command(self) -> str:
        return Path(self.agent_bin).name

    @property
    def unit_name(self) -> str:
        return f"{self.service_name}.service"

    @property
    def nodesource_url(self) -> str:
        return f"https://deb.nodesource.com/setup_{self.node_major}.x"

    def as_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


_FIELDS = {f.name: f for f in dataclasses.fields(ProvisionConfig)}
_INT_FIELDS = {"port", "node_major"}
_FLOAT_FIELDS = {"snapd_settle_seconds"}


def _coerce(raw: Mapping[str, Any], source: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in _FIELDS:
            raise ConfigError(f"{source}: unknown setting {key!r}")
        if key in _INT_FIELDS:
            try:
                value = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"{source}: {key} must be an integer, got {value!r}") from e
        elif key in _FLOAT_FIELDS:
            try:
                value = float(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"{source}: {key} must be a number, got {value!r}") from e
        elif value is not None:
            value = str(value).strip() or None
        out[key] = value
    return out


def _validate(cfg: ProvisionConfig) -> ProvisionConfig:
    if not cfg.user:
        raise ConfigError("user must not be empty")
    if not 1 <= cfg.port <= 65535:
        raise ConfigError(f"port out of range: {cfg.port}")
    if cfg.node_major <= 0:
        raise ConfigError(f"node_major must be positive: {cfg.node_major}")
    if cfg.home is not None and not cfg.home.startswith("/"):
        raise ConfigError(f"home must be an absolute path: {cfg.home}")
    if not cfg.agent_bin.startswith("/"):
        raise ConfigError(f"agent_bin must be an absolute path: {cfg.agent_bin}")
    if cfg.snapd_settle_seconds < 0:
        raise ConfigError("snapd_settle_seconds must not be negative")
    return cfg


def load_config_file(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")
    return raw


def load_config(
    path: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ProvisionConfig:
    """Defaults, then the YAML file, then environment variables, then explicit overrides."""

    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if path:
        values.update(_coerce(load_config_file(path), path))

    from_env = {field: env[var] for var, field in ENV_OVERRIDES.items() if env.get(var)}
    values.update(_coerce(from_env, "environment"))

    if overrides:
        values.update(_coerce(overrides, "overrides"))

    # Empty strings were normalised to None; only optional settings may be unset.
    for key, value in values.items():
        if value is None and _FIELDS[key].default is not None:
            raise ConfigError(f"{key} must not be empty")

    return _validate(ProvisionConfig(**values))
