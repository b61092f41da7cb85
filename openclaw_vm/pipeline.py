from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .config import ProvisionConfig
from .errors import ProvisionError
from .lib.users import UserAccount
from .logging_utils import log_step

logger = logging.getLogger(__name__)


class StepStatus(enum.Enum):
    SUCCESS = "success"
    SOFT_FAILURE = "soft_failure"
    HARD_FAILURE = "hard_failure"


@dataclass(frozen=True)
class StepResult:
    status: StepStatus
    message: str = ""

    @classmethod
    def ok(cls, message: str = "") -> "StepResult":
        return cls(StepStatus.SUCCESS, message)

    @classmethod
    def warn(cls, message: str) -> "StepResult":
        return cls(StepStatus.SOFT_FAILURE, message)

    @classmethod
    def fail(cls, message: str) -> "StepResult":
        return cls(StepStatus.HARD_FAILURE, message)


@dataclass(frozen=True)
class ProvisionCtx:
    cfg: ProvisionConfig
    account: UserAccount
    root: Path = Path("/")
    dry_run: bool = False
    # Run record: decisions, versions and warnings gathered by steps.
    state: Dict[str, Any] = field(default_factory=dict)

    def path(self, abs_path: str) -> Path:
        """Map an absolute guest path into the target root."""
        return self.root / abs_path.lstrip("/")

    @property
    def home_dir(self) -> Path:
        return self.path(self.account.home)

    @property
    def desktop_dir(self) -> Path:
        return self.home_dir / "Desktop"

    def record(self, key: str, value: Any) -> None:
        self.state.setdefault("execution", {}).setdefault("decisions", {})[key] = value


class Step(Protocol):
    """A single provisioning step."""

    step_id: str
    title: str

    def run(self, ctx: ProvisionCtx) -> StepResult:
        ...


@dataclass
class PipelineResult:
    ran_steps: List[str] = field(default_factory=list)
    warnings: List[Dict[str, str]] = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None


def run_pipeline(
    *,
    ctx: ProvisionCtx,
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order; stop at the first hard failure.

    Soft failures are logged and recorded, then the next step runs.
    start_at/stop_after select a contiguous slice for operator re-runs;
    nothing is skipped because of earlier runs.
    """

    ids = [s.step_id for s in steps]
    for name, value in (("start_at", start_at), ("stop_after", stop_after)):
        if value is not None and value not in ids:
            raise ValueError(f"Unknown step for {name}: {value}")

    result = PipelineResult()
    started = start_at is None
    total = len(steps)

    for index, step in enumerate(steps, start=1):
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        ctx.state.setdefault("execution", {})["current_step"] = step.step_id
        log_step(logger, "[%d/%d] %s", index, total, step.title)

        try:
            outcome = step.run(ctx)
        except (ProvisionError, OSError, ValueError) as e:
            outcome = StepResult.fail(str(e))

        result.ran_steps.append(step.step_id)

        if outcome.status is StepStatus.SOFT_FAILURE:
            logger.warning("%s: %s (continuing)", step.step_id, outcome.message)
            result.warnings.append({"step": step.step_id, "warning": outcome.message})
        elif outcome.status is StepStatus.HARD_FAILURE:
            logger.error("%s failed: %s", step.step_id, outcome.message)
            result.failed_step = step.step_id
            result.error = outcome.message
            break
        elif outcome.message:
            logger.info("%s", outcome.message)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    if result.succeeded:
        ctx.state.setdefault("execution", {})["current_step"] = None
    return result
