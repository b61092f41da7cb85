from __future__ import annotations

import logging

from ..lib.manifests import package_group
from ..lib.pkg import apt_install
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)


class InstallApplicationsStep:
    step_id = "30_install_applications"
    title = "Installing common applications"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        apt_install(package_group("applications"), dry_run=ctx.dry_run)
        return StepResult.ok("Common applications installed")
