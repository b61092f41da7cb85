from __future__ import annotations

import shlex
from typing import Sequence


class ProvisionError(RuntimeError):
    """Base class for provisioning failures."""


class ConfigError(ProvisionError):
    pass


class PreconditionError(ProvisionError):
    """Raised before any step runs (missing root, missing user)."""


class CommandError(ProvisionError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {shlex.join(self.argv)}\n{stderr}".rstrip())
