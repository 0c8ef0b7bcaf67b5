"""host_converge - Idempotent convergence of a web application host."""

from __future__ import annotations

from .config import DesiredState
from .errors import ConvergeError, ConfigError, PreconditionError, ExternalToolError, ValidationError
from .host_state import HostState
from .host_utils import run, probe, set_dry_run, is_dry_run
from .runner import Step, StepOutcome, RunResult, run_steps

__all__ = [
    "DesiredState",
    "ConvergeError",
    "ConfigError",
    "PreconditionError",
    "ExternalToolError",
    "ValidationError",
    "HostState",
    "run",
    "probe",
    "set_dry_run",
    "is_dry_run",
    "Step",
    "StepOutcome",
    "RunResult",
    "run_steps",
]
