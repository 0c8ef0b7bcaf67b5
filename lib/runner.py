"""Convergence runner: applies an ordered list of reconciliation steps.

Each step pairs an optional check predicate with an apply action. Steps run
strictly in order; a satisfied check records Skipped, a successful apply
records Applied, and the first failure records Failed and halts the run.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from logging import getLogger
from typing import Callable, Optional

from lib.config import DesiredState
from lib.errors import ConvergeError
from lib.host_state import HostState
from lib.progress import progress_bar
from lib.types import JSONDict


logger = getLogger("host_converge")

EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 64
EXIT_UNSUPPORTED_OS = 65
STEP_FAILURE_EXIT_BASE = 100

CheckFunc = Callable[[DesiredState, HostState], bool]
ApplyFunc = Callable[[DesiredState, HostState], None]


class StepOutcome(enum.Enum):
    SKIPPED = "Skipped"
    APPLIED = "Applied"
    FAILED = "Failed"


@dataclass(frozen=True)
class Step:
    """A named unit of convergence.

    A step without a check is always applied.
    """
    name: str
    description: str
    apply: ApplyFunc
    check: Optional[CheckFunc] = None


@dataclass
class RunResult:
    step_name: str
    step_index: int
    outcome: StepOutcome
    error_detail: Optional[str] = None
    duration: float = 0.0

    def to_dict(self) -> JSONDict:
        return {
            "step": self.step_name,
            "index": self.step_index,
            "outcome": self.outcome.value,
            "error": self.error_detail,
            "duration_seconds": round(self.duration, 2),
        }


def _execute(step: Step, desired: DesiredState, host: HostState) -> StepOutcome:
    if step.check is not None and step.check(desired, host):
        return StepOutcome.SKIPPED
    step.apply(desired, host)
    return StepOutcome.APPLIED


def run_steps(desired: DesiredState, steps: list[Step], host: Optional[HostState] = None) -> list[RunResult]:
    """Run steps in order, halting at the first failure.

    Returns one result per executed step; on failure the last entry is the
    Failed result and later steps are absent.
    """
    host = host if host is not None else HostState()
    results: list[RunResult] = []
    total = len(steps)

    for index, step in enumerate(steps, 1):
        logger.info(f"\n{progress_bar(index, total)} [{index}/{total}] {step.description}")
        start = time.monotonic()
        try:
            outcome = _execute(step, desired, host)
        except (ConvergeError, OSError) as e:
            detail = e.describe() if isinstance(e, ConvergeError) else f"{type(e).__name__}: {e}"
            results.append(RunResult(step.name, index, StepOutcome.FAILED, detail, time.monotonic() - start))
            logger.error(f"  ✗ {step.name} failed: {detail}")
            return results

        results.append(RunResult(step.name, index, outcome, None, time.monotonic() - start))
        if outcome is StepOutcome.SKIPPED:
            logger.info(f"  ○ {step.name} already converged")

    logger.info(f"\n{progress_bar(total, total)} All steps completed!")
    return results


def failed_result(results: list[RunResult]) -> Optional[RunResult]:
    if results and results[-1].outcome is StepOutcome.FAILED:
        return results[-1]
    return None


def exit_code_for(results: list[RunResult], catalog: Optional[list[str]] = None) -> int:
    """0 on success, otherwise STEP_FAILURE_EXIT_BASE plus the failed step index.

    With a catalog of step names the index is the step's catalog position,
    so a subset run reports the same code as a full run would.
    """
    failed = failed_result(results)
    if failed is None:
        return EXIT_SUCCESS
    if catalog and failed.step_name in catalog:
        return STEP_FAILURE_EXIT_BASE + catalog.index(failed.step_name) + 1
    return STEP_FAILURE_EXIT_BASE + failed.step_index
