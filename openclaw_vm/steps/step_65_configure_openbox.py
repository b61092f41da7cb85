from __future__ import annotations

import logging

from ..lib.assets import copy_tree, render_asset, write_file
from ..lib.command import run_cmd
from ..lib.keyfile import render_keyfile, sections_from_mapping
from ..lib.manifests import load_pcmanfm_settings
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)

XDG_OPENBOX = "/etc/xdg/openbox"


class ConfigureOpenboxStep:
    step_id = "65_configure_openbox"
    title = "Setting up Openbox and PCManFM configuration"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        dry_run = ctx.dry_run
        owner = ctx.account.owner
        openbox_dir = ctx.home_dir / ".config/openbox"
        pcmanfm_dir = ctx.home_dir / ".config/pcmanfm/default"

        warning = None
        defaults = ctx.path(XDG_OPENBOX)
        if defaults.is_dir():
            try:
                copy_tree(str(defaults), str(openbox_dir), dry_run=dry_run)
            except OSError as e:
                warning = f"Could not copy default Openbox config: {e}"
        else:
            logger.info("%s not present; skipping default Openbox config", XDG_OPENBOX)

        write_file(openbox_dir / "autostart", render_asset("openbox-autostart.sh", {}), mode=0o755, dry_run=dry_run)
        run_cmd(["chown", "-R", owner, str(openbox_dir)], dry_run=dry_run)

        # bm_open_method=0 lets desktop launchers run on click.
        pcmanfm = render_keyfile(sections_from_mapping(load_pcmanfm_settings()))
        write_file(pcmanfm_dir / "pcmanfm.conf", pcmanfm, mode=0o644, dry_run=dry_run)
        run_cmd(["chown", "-R", owner, str(pcmanfm_dir.parent)], dry_run=dry_run)
        run_cmd(["chown", owner, str(ctx.home_dir / ".config")], dry_run=dry_run)

        if warning:
            return StepResult.warn(warning)
        return StepResult.ok(f"Openbox configured for {ctx.account.name}")
