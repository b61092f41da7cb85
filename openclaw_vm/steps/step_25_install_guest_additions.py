from __future__ import annotations

import logging

from ..lib.manifests import package_group
from ..lib.pkg import apt_install
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)


class InstallGuestAdditionsStep:
    """Best-effort: the packages only make sense under VirtualBox."""

    step_id = "25_install_guest_additions"
    title = "Installing VirtualBox Guest Additions"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        installed = apt_install(package_group("guest_additions"), check=False, dry_run=ctx.dry_run)
        ctx.record("guest_additions", installed)
        if not installed:
            return StepResult.warn("VirtualBox Guest Additions not available (not running in VirtualBox?)")
        return StepResult.ok("VirtualBox Guest Additions installed")
