from __future__ import annotations

import logging

from ..lib.manifests import package_group
from ..lib.pkg import apt_install
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)


class InstallDesktopStep:
    step_id = "20_install_desktop"
    title = "Installing Openbox desktop environment"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        packages = package_group("desktop")
        apt_install(packages, dry_run=ctx.dry_run)
        ctx.record("desktop_packages", packages)
        return StepResult.ok("Openbox desktop environment installed")
