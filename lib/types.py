"""Common type aliases and constants shared across modules."""
from __future__ import annotations

from typing import Any, Literal

JSONDict = dict[str, Any]

BYTES_PER_KB = 1024
BYTES_PER_MB = 1024 * BYTES_PER_KB

# What to do with an application already registered with pm2
ProcessPolicy = Literal["skip", "reload"]

__all__ = [
    "JSONDict",
    "BYTES_PER_KB",
    "BYTES_PER_MB",
    "ProcessPolicy",
]
