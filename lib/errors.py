"""Error taxonomy for host convergence.

Every error raised while checking or applying a step derives from
ConvergeError. The runner turns these into Failed results and halts.
"""

from __future__ import annotations

from typing import Optional


class ConvergeError(Exception):
    """Base class for all convergence failures."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def describe(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class ConfigError(ConvergeError):
    """Desired state input is missing or invalid."""

    def __init__(self, problems: list[str]):
        super().__init__("Invalid configuration", "; ".join(problems))
        self.problems = problems


class PreconditionError(ConvergeError):
    """Host is in a state the step refuses to resolve automatically."""


class UnsupportedOSError(PreconditionError):
    """Host operating system is not a supported RPM-based distribution."""


class ExternalToolError(ConvergeError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, output: str = ""):
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Command failed (exit code {returncode}): {command}",
            summarize_output(output),
        )


class ValidationError(ConvergeError):
    """Generated configuration was rejected by the tool's own syntax check."""


def summarize_output(output: str, max_lines: int = 3) -> Optional[str]:
    """Condense tool output to its last few non-empty lines."""
    lines = [line.strip() for line in (output or "").splitlines() if line.strip()]
    if not lines:
        return None
    tail = lines[-max_lines:]
    summary = " | ".join(tail)
    if len(lines) > max_lines:
        summary = "... | " + summary
    return summary
