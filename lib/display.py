#!/usr/bin/env python3

"""Display utilities for convergence runs."""

import json
from logging import getLogger

from lib.config import DesiredState
from lib.runner import RunResult, StepOutcome, failed_result


logger = getLogger("host_converge")

OUTCOME_MARKERS = {
    StepOutcome.SKIPPED: "○",
    StepOutcome.APPLIED: "✓",
    StepOutcome.FAILED: "✗",
}


def print_run_header(desired: DesiredState, os_name: str, dry_run: bool) -> None:
    """Print the desired state banner before the first step."""
    logger.info("=" * 60)
    logger.info(f"Starting production setup for {desired.app_name}")
    logger.info("=" * 60)
    logger.info(f"OS: {os_name}")
    logger.info(f"Domain: {desired.domain}")
    logger.info(f"Repository: {desired.repo_url}")
    logger.info(f"Runtime: Node.js v{desired.runtime_version}")
    logger.info(f"App Path: {desired.app_dir}")
    logger.info(f"Listen Port: {desired.listen_port}")
    logger.info(f"Process Policy: {desired.process_policy}")
    if dry_run:
        logger.info("Dry-run: Yes")


def format_run_report(results: list[RunResult], total_steps: int) -> list[str]:
    """Format one line per step, including steps never reached."""
    lines = []
    for result in results:
        marker = OUTCOME_MARKERS[result.outcome]
        line = f"  {marker} [{result.step_index}/{total_steps}] {result.step_name}: {result.outcome.value}"
        if result.error_detail:
            line += f" ({result.error_detail})"
        lines.append(line)

    not_reached = total_steps - len(results)
    if not_reached > 0:
        lines.append(f"  - {not_reached} step(s) not reached")
    return lines


def print_run_report(results: list[RunResult], total_steps: int) -> None:
    logger.info("")
    logger.info("=" * 60)
    failed = failed_result(results)
    if failed:
        logger.info(f"✗ Setup halted at step {failed.step_index}: {failed.step_name}")
    else:
        logger.info("✓ Setup completed successfully!")
    logger.info("=" * 60)
    for line in format_run_report(results, total_steps):
        logger.info(line)
    logger.info("=" * 60)


def results_to_json(results: list[RunResult]) -> str:
    return json.dumps([result.to_dict() for result in results], indent=2)
