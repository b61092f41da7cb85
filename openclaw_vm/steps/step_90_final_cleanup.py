from __future__ import annotations

import logging

from ..lib.pkg import apt_autoremove, apt_clean
from ..pipeline import ProvisionCtx, StepResult
from .step_10_clean_package_cache import APT_LISTS_DIR

logger = logging.getLogger(__name__)


class FinalCleanupStep:
    step_id = "90_final_cleanup"
    title = "Performing final cleanup"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        apt_autoremove(dry_run=ctx.dry_run)
        apt_clean(ctx.path(APT_LISTS_DIR), dry_run=ctx.dry_run)

        decisions = (ctx.state.get("execution") or {}).get("decisions") or {}
        versions = decisions.get("versions") or {}
        browser = decisions.get("browser") or {}

        logger.info("Installation summary:")
        logger.info("  Desktop:   Openbox with Tint2 panel")
        for name, version in versions.items():
            logger.info("  %-10s %s", name + ":", version or "unknown")
        logger.info("  Chrome:    %s", browser.get("version") or ("not installed" if browser else "unknown"))
        logger.info("Auto-login is configured for user: %s", ctx.account.name)
        logger.info("Dashboard: %s", ctx.cfg.dashboard_url)
        logger.info("Start the gateway with: sudo systemctl start %s", ctx.cfg.service_name)
        return StepResult.ok("The VM will start in graphical mode on next boot")
