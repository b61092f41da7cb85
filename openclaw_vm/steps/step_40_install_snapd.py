from __future__ import annotations

import logging
import time

from ..lib import systemd
from ..lib.manifests import package_group
from ..lib.pkg import apt_install
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)


class InstallSnapdStep:
    step_id = "40_install_snapd"
    title = "Installing snapd"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        apt_install(package_group("snapd"), dry_run=ctx.dry_run)

        # snapd may not start inside every guest; enabling it is not required.
        enabled = systemd.enable("snapd", check=False, dry_run=ctx.dry_run)
        started = systemd.start("snapd", check=False, dry_run=ctx.dry_run)
        ctx.record("snapd", {"enabled": enabled, "started": started})

        if not ctx.dry_run and ctx.cfg.snapd_settle_seconds:
            logger.info("Waiting for snapd to initialize...")
            time.sleep(ctx.cfg.snapd_settle_seconds)

        return StepResult.ok("Snapd installed")
