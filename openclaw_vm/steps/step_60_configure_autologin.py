from __future__ import annotations

import logging

from ..lib.assets import write_file
from ..lib.keyfile import Section, render_keyfile
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)

AUTOLOGIN_CONF = "/etc/lightdm/lightdm.conf.d/50-autologin.conf"
SESSION = "openbox"


def autologin_sections(user: str, session: str = SESSION) -> list[Section]:
    return [
        Section.of(
            "Seat:*",
            [
                ("autologin-user", user),
                ("autologin-user-timeout", 0),
                ("user-session", session),
            ],
        )
    ]


class ConfigureAutologinStep:
    step_id = "60_configure_autologin"
    title = "Configuring LightDM autologin"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        path = ctx.path(AUTOLOGIN_CONF)
        write_file(path, render_keyfile(autologin_sections(ctx.account.name)), mode=0o644, dry_run=ctx.dry_run)
        ctx.record("autologin", {"user": ctx.account.name, "session": SESSION})
        return StepResult.ok(f"LightDM autologin configured for {ctx.account.name}")
