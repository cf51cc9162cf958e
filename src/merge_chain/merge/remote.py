"""Sync and push helpers over a chapter range.

Both operations are best-effort across the whole range: a branch that cannot
be pushed, or that the remote lacks, is recorded and the loop moves on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from merge_chain.core.branches import ChapterRange
from merge_chain.core.config import DEFAULT_STATE_FILE
from merge_chain.core.vcs import ChainGateway, PushError
from merge_chain.errors import SessionConflictError
from merge_chain.merge.state import has_active_merge

__all__ = ["PushReport", "SyncReport", "push_branches", "sync_branches"]

logger = logging.getLogger(__name__)

# (branch, status, detail); status is one of created/exists/missing/pushed/failed
ProgressCallback = Callable[[str, str, str], None]


@dataclass
class SyncReport:
    """Per-branch outcome of a sync."""

    remote: str
    created: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


@dataclass
class PushReport:
    """Per-branch outcome of a push."""

    remote: str
    pushed: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures


def sync_branches(
    gateway: ChainGateway,
    chapter_range: ChapterRange,
    remote: str,
    on_progress: ProgressCallback | None = None,
) -> SyncReport:
    """Create local chapter branches that only exist on ``remote``.

    Raises:
        FetchError: If the remote cannot be fetched.
        BranchCreateError: If a local branch cannot be created.
    """
    report = SyncReport(remote=remote)
    gateway.fetch(remote)

    for name in chapter_range.branches():
        if gateway.branch_exists(name):
            report.existing.append(name)
            status, detail = "exists", "local branch already exists"
        elif gateway.remote_branch_exists(remote, name):
            gateway.create_tracking_branch(name, remote)
            report.created.append(name)
            status, detail = "created", f"from {remote}/{name}"
        else:
            logger.warning("Remote branch %s/%s does not exist", remote, name)
            report.missing.append(name)
            status, detail = "missing", f"{remote}/{name} does not exist"
        if on_progress:
            on_progress(name, status, detail)

    return report


def push_branches(
    gateway: ChainGateway,
    chapter_range: ChapterRange,
    remote: str,
    state_dir: Path,
    state_file: str = DEFAULT_STATE_FILE,
    on_progress: ProgressCallback | None = None,
) -> PushReport:
    """Push every chapter branch in the range, never stopping early.

    Raises:
        SessionConflictError: If an interrupted chain merge is persisted.
    """
    if has_active_merge(state_dir, state_file):
        raise SessionConflictError("There is an incomplete merge process")

    report = PushReport(remote=remote)
    for name in chapter_range.branches():
        if not gateway.branch_exists(name):
            report.failures.append(f"{name} (not found)")
            status, detail = "failed", "local branch does not exist"
        else:
            try:
                gateway.push(remote, name)
            except PushError as exc:
                logger.warning("Push of %s to %s failed: %s", name, remote, exc.stderr)
                report.failures.append(f"{name} (push failed)")
                status, detail = "failed", "push failed"
            else:
                report.pushed.append(name)
                status, detail = "pushed", f"to {remote}"
        if on_progress:
            on_progress(name, status, detail)

    return report
