"""Reconciliation steps for converging a web application host."""

from __future__ import annotations

from .step_catalog import CONVERGE_STEPS, STEP_NAMES, get_converge_steps

__all__ = [
    'CONVERGE_STEPS',
    'STEP_NAMES',
    'get_converge_steps',
]
