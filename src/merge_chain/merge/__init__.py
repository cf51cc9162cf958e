"""Merge subpackage for chain merge operations.

Modules:
    state: Chain session persistence and resume
    executor: Sequential chain merge state machine
    remote: Sync and push helpers over a branch range
"""

from __future__ import annotations

__all__: list[str] = []
