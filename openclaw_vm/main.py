from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .config import ProvisionConfig, load_config
from .errors import ConfigError, PreconditionError
from .lib.users import lookup_user, require_root
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, ProvisionCtx, run_pipeline
from .state_store import ensure_defaults, load_state, record_run, save_state
from .steps import (
    CleanPackageCacheStep,
    ConfigureAutologinStep,
    ConfigureGatewayServiceStep,
    ConfigureOpenboxStep,
    CreateDesktopShortcutsStep,
    EnableGraphicalTargetStep,
    FinalCleanupStep,
    InstallAgentStep,
    InstallApplicationsStep,
    InstallBrowserStep,
    InstallDesktopStep,
    InstallGuestAdditionsStep,
    InstallSnapdStep,
    UpdateSystemStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = "/var/lib/openclaw-vm/state.json"

EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_PRECONDITION = 2


def build_steps():
    return [
        CleanPackageCacheStep(),
        UpdateSystemStep(),
        InstallDesktopStep(),
        InstallGuestAdditionsStep(),
        InstallApplicationsStep(),
        InstallBrowserStep(),
        InstallSnapdStep(),
        InstallAgentStep(),
        ConfigureGatewayServiceStep(),
        ConfigureAutologinStep(),
        ConfigureOpenboxStep(),
        CreateDesktopShortcutsStep(),
        EnableGraphicalTargetStep(),
        FinalCleanupStep(),
    ]


def run(
    cfg: ProvisionConfig,
    *,
    state_path: str = DEFAULT_STATE_PATH,
    dry_run: bool = False,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Check preconditions, then run every step in order.

    Raises PreconditionError before any command runs when the process is not
    root or the target user does not exist.
    """

    if dry_run:
        logger.info("Dry run: commands are logged, not executed")
    else:
        require_root()
    account = lookup_user(cfg.user, home=cfg.home)

    state: Dict[str, Any] = ensure_defaults(_load_run_record(state_path))
    state["config"] = cfg.as_dict()
    ctx = ProvisionCtx(cfg=cfg, account=account, root=Path(cfg.target_root), dry_run=dry_run, state=state)

    exe = state.setdefault("execution", {})
    try:
        result = run_pipeline(ctx=ctx, steps=build_steps(), start_at=start_at, stop_after=stop_after)
    except Exception as e:
        logger.exception("Provisioning failed")
        exe.setdefault("errors", []).append({"step": exe.get("current_step"), "error": str(e)})
        record_run(state, status="failed")
        raise
    else:
        exe["ran_steps"] = result.ran_steps
        exe["warnings"] = result.warnings
        if result.failed_step:
            exe.setdefault("errors", []).append({"step": result.failed_step, "error": result.error})
        record_run(state, status="ok" if result.succeeded else "failed")
    finally:
        try:
            save_state(state_path, state)
        except OSError as e:
            logger.warning("Could not save run record to %s: %s", state_path, e)
    return result


def _load_run_record(state_path: str) -> Dict[str, Any]:
    # A record cut short by an interrupted save must not block the next run.
    try:
        return load_state(state_path)
    except (ValueError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable run record %s: %s", state_path, e)
        return {}


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="openclaw-vm-provision")
    p.add_argument("--config", default=None, help="Optional YAML config file")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to the run record (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to provisioning log")
    p.add_argument("--root", default=None, help="Target root for generated files (default /)")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 55_configure_gateway_service)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--dry-run", action="store_true", help="Log commands and files without changing anything")
    p.add_argument("--list-steps", action="store_true", help="Print step ids and exit")

    args = p.parse_args(argv)

    if args.list_steps:
        for step in build_steps():
            print(f"{step.step_id}\t{step.title}")
        return EXIT_OK

    configure_logging(log_path=args.log)

    overrides = {"target_root": args.root} if args.root else None
    try:
        cfg = load_config(args.config, overrides=overrides)
    except ConfigError as e:
        logger.error("%s", e)
        return EXIT_PRECONDITION

    logger.info("OpenClaw VM - Environment Setup (Openbox)")
    try:
        result = run(
            cfg,
            state_path=args.state,
            dry_run=args.dry_run,
            start_at=args.start_at,
            stop_after=args.stop_after,
        )
    except (PreconditionError, ValueError) as e:
        logger.error("%s", e)
        return EXIT_PRECONDITION

    if not result.succeeded:
        logger.error("Provisioning stopped at %s; fix the problem and re-run", result.failed_step)
        return EXIT_STEP_FAILED

    if result.warnings:
        logger.warning("Completed with %d warning(s)", len(result.warnings))
    logger.info("Setup complete! Auto-login is configured for user: %s", cfg.user)
    return EXIT_OK
