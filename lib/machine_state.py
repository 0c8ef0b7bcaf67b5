#!/usr/bin/env python3
"""Host-side persistence of the last converged desired state."""

from __future__ import annotations

import json
import os
from logging import getLogger
from typing import Optional, Any

from lib.config import DesiredState, REQUIRED_FIELDS


logger = getLogger("host_converge")

STATE_DIR = "/opt/host_converge/state"
STATE_FILE = os.path.join(STATE_DIR, "desired.json")


def save_desired_state(desired: DesiredState, state_file: str = STATE_FILE) -> None:
    """Save the desired state so a later run can recall it."""
    os.makedirs(os.path.dirname(state_file), exist_ok=True)

    with open(state_file, 'w') as f:
        json.dump(desired.to_dict(), f, indent=2, sort_keys=True)


def _validate_state(state: Any) -> Optional[str]:
    """Validate stored state structure.

    Returns None if valid, or an error message string if invalid.
    """
    if not isinstance(state, dict):
        return f"Expected dict, got {type(state).__name__}"

    missing = [k for k in REQUIRED_FIELDS if k not in state]
    if missing:
        return f"Missing required keys: {', '.join(missing)}"

    return None


def load_desired_state(state_file: str = STATE_FILE) -> Optional[dict[str, Any]]:
    """Load the stored desired state as a plain mapping, or None."""
    if not os.path.exists(state_file):
        return None

    try:
        with open(state_file, 'r') as f:
            state = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Warning: Failed to load stored state: {e}")
        return None

    error = _validate_state(state)
    if error:
        logger.warning(f"Warning: Invalid stored state ({error})")
        return None

    return state
