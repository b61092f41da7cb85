"""OpenClaw VM provisioner.

Brings a bare Ubuntu guest to an Openbox desktop with the OpenClaw agent
installed and its gateway service enabled at boot.

Core design goals:
- Strictly ordered steps, each returning a tagged result
- Best-effort steps warn and continue, everything else is fatal
- Idempotent by overwrite: generated files are pure functions of the config
- Centralized logging and a JSON/YAML run record
"""

__all__ = []
__version__ = "0.1.0"
