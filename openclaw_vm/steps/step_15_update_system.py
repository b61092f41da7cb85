from __future__ import annotations

import logging

from ..lib.pkg import apt_autoremove, apt_dist_upgrade, apt_update, apt_upgrade
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)


class UpdateSystemStep:
    step_id = "15_update_system"
    title = "Updating system packages to latest versions"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        dry_run = ctx.dry_run

        logger.info("Updating package lists...")
        apt_update(dry_run=dry_run)

        logger.info("Upgrading installed packages...")
        apt_upgrade(dry_run=dry_run)

        logger.info("Performing distribution upgrade...")
        apt_dist_upgrade(dry_run=dry_run)

        logger.info("Removing unnecessary packages...")
        apt_autoremove(dry_run=dry_run)

        return StepResult.ok("System packages updated to latest versions")
