from __future__ import annotations

import logging

from ..lib.command import run_cmd
from ..lib.manifests import load_packages_manifest, package_group
from ..lib.net import fetch_script
from ..lib.pkg import apt_install, npm_install_global, tool_version
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)

SETUP_SCRIPT = "/tmp/nodesource_setup.sh"


class InstallAgentStep:
    step_id = "50_install_agent"
    title = "Installing Node.js and OpenClaw"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        cfg = ctx.cfg
        dry_run = ctx.dry_run

        current = tool_version(["node", "--version"], dry_run=dry_run)
        if current:
            logger.info("Current Node.js version: %s", current)
            logger.info("Ensuring latest Node.js %s.x is installed...", cfg.node_major)

        logger.info("Adding NodeSource repository...")
        script = ctx.path(SETUP_SCRIPT)
        fetch_script(cfg.nodesource_url, script, dry_run=dry_run)
        try:
            run_cmd(["bash", str(script)], dry_run=dry_run)
        finally:
            if not dry_run:
                script.unlink(missing_ok=True)

        logger.info("Installing Node.js...")
        apt_install(package_group("runtime"), dry_run=dry_run)

        versions = {
            "node": tool_version(["node", "--version"], dry_run=dry_run),
            "npm": tool_version(["npm", "--version"], dry_run=dry_run),
        }

        for spec in load_packages_manifest().get("npm_globals") or []:
            logger.info("Installing/updating %s...", spec)
            npm_install_global(str(spec), dry_run=dry_run)
        versions["pnpm"] = tool_version(["pnpm", "--version"], dry_run=dry_run)

        # --force overwrites any previous global install of the agent.
        logger.info("Installing/updating %s (latest version)...", cfg.agent_package)
        npm_install_global(f"{cfg.agent_package}@latest", force=True, dry_run=dry_run)
        versions[cfg.agent_package] = tool_version([cfg.agent_command, "--version"], dry_run=dry_run)

        ctx.record("versions", versions)
        for name, version in versions.items():
            logger.info("%s: %s", name, version or "unknown")
        return StepResult.ok(f"{cfg.agent_package} installed")
