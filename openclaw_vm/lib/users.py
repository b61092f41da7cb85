from __future__ import annotations

import logging
import os
import pwd
from dataclasses import dataclass
from typing import Optional

from ..errors import PreconditionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserAccount:
    name: str
    uid: int
    gid: int
    home: str

    @property
    def owner(self) -> str:
        return f"{self.name}:{self.name}"


def require_root() -> None:
    if os.geteuid() != 0:
        raise PreconditionError("This provisioner must be run as root (use sudo)")


def lookup_user(name: str, *, home: Optional[str] = None) -> UserAccount:
    try:
        entry = pwd.getpwnam(name)
    except KeyError as e:
        raise PreconditionError(f"User '{name}' does not exist") from e
    account = UserAccount(name=name, uid=entry.pw_uid, gid=entry.pw_gid, home=home or entry.pw_dir)
    logger.info("Target user %s (uid=%s home=%s)", account.name, account.uid, account.home)
    return account
