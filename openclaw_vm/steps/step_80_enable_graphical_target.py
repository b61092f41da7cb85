from __future__ import annotations

import logging

from ..lib import systemd
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)

DISPLAY_MANAGER = "lightdm"


class EnableGraphicalTargetStep:
    step_id = "80_enable_graphical_target"
    title = "Setting graphical boot target"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        systemd.set_default_target("graphical.target", dry_run=ctx.dry_run)
        systemd.enable(DISPLAY_MANAGER, dry_run=ctx.dry_run)
        return StepResult.ok("Desktop environment configured")
