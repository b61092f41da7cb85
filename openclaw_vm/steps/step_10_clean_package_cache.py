from __future__ import annotations

import logging

from ..lib.pkg import apt_clean
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)

APT_LISTS_DIR = "/var/lib/apt/lists"


class CleanPackageCacheStep:
    step_id = "10_clean_package_cache"
    title = "Preparing system (cleaning package cache)"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        apt_clean(ctx.path(APT_LISTS_DIR), dry_run=ctx.dry_run)
        return StepResult.ok("Package cache cleaned")
