from __future__ import annotations

import logging

from ..config import ProvisionConfig
from ..lib import systemd
from ..lib.assets import write_file
from ..lib.systemd import ServiceUnit, render_unit
from ..lib.users import UserAccount
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)

UNIT_DIR = "/etc/systemd/system"


def gateway_unit(cfg: ProvisionConfig, account: UserAccount) -> ServiceUnit:
    return ServiceUnit(
        description="OpenClaw Gateway Daemon",
        documentation="https://openclaw.ai",
        exec_start=f"{cfg.agent_bin} gateway",
        user=account.name,
        group=account.name,
        working_directory=account.home,
        environment=(("HOME", account.home), ("NODE_ENV", "production")),
        read_write_paths=(account.home,),
    )


class ConfigureGatewayServiceStep:
    """Enabled for boot only; operators start it from the desktop or systemctl."""

    step_id = "55_configure_gateway_service"
    title = "Creating OpenClaw gateway systemd service"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        unit_name = ctx.cfg.unit_name
        unit_path = ctx.path(UNIT_DIR) / unit_name

        write_file(unit_path, render_unit(gateway_unit(ctx.cfg, ctx.account)), mode=0o644, dry_run=ctx.dry_run)
        systemd.daemon_reload(dry_run=ctx.dry_run)
        systemd.enable(unit_name, dry_run=ctx.dry_run)

        ctx.record("gateway_unit", str(unit_path))
        return StepResult.ok("OpenClaw gateway service configured")
