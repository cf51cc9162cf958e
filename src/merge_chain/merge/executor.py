"""Core chain merge execution logic.

Drives the sequential merge ``ch{i-1} -> ch{i}`` for every branch of a chain,
persisting a resumable session whenever a step cannot complete.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from merge_chain.core.branches import ChapterRange, branch_name
from merge_chain.core.config import DEFAULT_STATE_FILE
from merge_chain.core.vcs import ChainGateway, CheckoutError, MergeConflictError
from merge_chain.errors import (
    BranchMissingError,
    MergeInProgressError,
    NoSessionError,
    SessionConflictError,
)
from merge_chain.merge.state import (
    ChainSession,
    clear_state,
    has_active_merge,
    load_state,
    save_state,
)

__all__ = [
    "ChainMerger",
    "ChainResult",
    "InterruptReason",
    "StatusReport",
    "format_merge_message",
]

logger = logging.getLogger(__name__)


class InterruptReason(str, Enum):
    """Why the merge loop stopped before reaching the end of the chain."""

    BRANCH_MISSING = "branch_missing"
    CHECKOUT_FAILED = "checkout_failed"
    MERGE_CONFLICT = "merge_conflict"


@dataclass
class ChainResult:
    """Outcome of one invocation of the merge loop."""

    session: ChainSession
    success: bool = False
    merged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed_branch: str | None = None
    reason: InterruptReason | None = None
    error: str | None = None
    detail: str = ""
    head: str | None = None


@dataclass
class StatusReport:
    """Read-only view of the chain merge state."""

    session: ChainSession | None
    current_branch: str | None = None

    @property
    def in_progress(self) -> bool:
        return self.session is not None

    def to_dict(self) -> dict[str, object]:
        if self.session is None:
            return {"in_progress": False, "current_branch": self.current_branch}
        session = self.session
        return {
            "in_progress": True,
            "start": branch_name(session.start),
            "end": branch_name(session.end),
            "origin_message": session.origin_message,
            "current_target": session.current_target,
            "completed": session.completed_branches,
            "pending": session.pending_branches,
            "remaining": session.remaining,
            "last_error": session.last_error,
        }


def format_merge_message(source: str, target: str, origin_message: str) -> str:
    """Build the merge commit message downstream tooling parses."""
    return f"Merge {source} to {target}: {origin_message}"


class ChainMerger:
    """State machine over a chapter chain.

    ``start`` validates and runs the loop, ``resume`` picks up an interrupted
    session, ``abort`` discards it and ``status`` reports it. Only an
    interrupted loop leaves a session file behind.
    """

    def __init__(
        self,
        gateway: ChainGateway,
        state_dir: Path,
        state_file: str = DEFAULT_STATE_FILE,
        console: Console | None = None,
    ):
        self.gateway = gateway
        self.state_dir = state_dir
        self.state_file = state_file
        self.console = console or Console()

    def start(self, start: int | str, end: int | str) -> ChainResult:
        """Begin a new chain merge from ``ch{start}`` to ``ch{end}``.

        Raises:
            ChainValidationError: If the ids are not numeric or start >= end.
            BranchMissingError: If any branch of the chain is absent locally.
            SessionConflictError: If an interrupted session already exists.
        """
        chapter_range = ChapterRange.for_merge(start, end)

        self.console.print("Checking required branches...")
        for name in chapter_range.branches():
            if not self.gateway.branch_exists(name):
                raise BranchMissingError(name, chapter_range.start, chapter_range.end)
            self.console.print(f"Local branch {name} exists")

        if has_active_merge(self.state_dir, self.state_file):
            raise SessionConflictError()

        first = branch_name(chapter_range.start)
        origin_message = self.gateway.last_commit_message(first)
        session = ChainSession.begin(chapter_range.start, chapter_range.end, origin_message)
        logger.info("Starting chain merge %s..%s", chapter_range.start, chapter_range.end)

        self.console.print(
            f"Starting chain merge: {first} -> {branch_name(chapter_range.end)}"
        )
        self.console.print(f"Original commit message: {escape(origin_message)}")
        return self._run(session)

    def resume(self) -> ChainResult:
        """Continue an interrupted session at the branch that failed.

        Raises:
            NoSessionError: If nothing is persisted.
            CorruptStateError: If the session file cannot be parsed.
            MergeInProgressError: If git still has an uncommitted merge.
        """
        session = load_state(self.state_dir, self.state_file)
        if session is None:
            raise NoSessionError()

        if self.gateway.merge_in_progress():
            raise MergeInProgressError(
                self.gateway.current_branch() or "the current branch",
                self.gateway.unmerged_paths(),
            )

        logger.info("Resuming chain merge at %s", session.next_index)
        self.console.print(
            f"Continuing interrupted merge from {branch_name(session.next_index)}..."
        )
        return self._run(session, persisted=True)

    def abort(self) -> bool:
        """Discard the persisted session. No git-level rollback is done."""
        removed = clear_state(self.state_dir, self.state_file)
        if removed:
            logger.info("Aborted chain merge session")
        return removed

    def status(self) -> StatusReport:
        session = load_state(self.state_dir, self.state_file)
        if session is not None:
            return StatusReport(session=session)
        return StatusReport(session=None, current_branch=self.gateway.current_branch())

    def _run(self, session: ChainSession, persisted: bool = False) -> ChainResult:
        result = ChainResult(session=session)
        gateway = self.gateway

        index = session.next_index
        try:
            while index <= session.end:
                cur, prev = branch_name(index), branch_name(index - 1)
                progress = f"[{index - session.start}/{session.total}]"
                self.console.print(f"\n=== {escape(progress)} Merging {prev} -> {cur} ===")

                missing = next((b for b in (prev, cur) if not gateway.branch_exists(b)), None)
                if missing is not None:
                    return self._interrupt(
                        result, index, InterruptReason.BRANCH_MISSING,
                        f"Branch {missing} does not exist",
                    )

                if gateway.is_ancestor(prev, cur):
                    logger.debug("%s already contains %s", cur, prev)
                    self.console.print(f"[dim]{cur} already contains {prev}, skipping[/dim]")
                    result.skipped.append(cur)
                else:
                    self.console.print(f"Switching to branch {cur}...")
                    try:
                        gateway.checkout(cur)
                    except CheckoutError as exc:
                        return self._interrupt(
                            result, index, InterruptReason.CHECKOUT_FAILED, str(exc), exc.stderr
                        )

                    self.console.print(f"Merging {prev}...")
                    message = format_merge_message(prev, cur, session.origin_message)
                    try:
                        gateway.merge(prev, message)
                    except MergeConflictError as exc:
                        return self._interrupt(
                            result, index, InterruptReason.MERGE_CONFLICT,
                            f"Conflict occurred in {cur}", exc.stderr,
                        )

                    self.console.print(f"[green]✓[/green] Successfully merged to {cur}")
                    result.merged.append(cur)

                index += 1
                if persisted:
                    session.advance_to(index)
                    save_state(session, self.state_dir, self.state_file)
        except KeyboardInterrupt:
            session.record_interruption(index, "interrupted by user")
            save_state(session, self.state_dir, self.state_file)
            raise

        session.advance_to(index)
        clear_state(self.state_dir, self.state_file)
        logger.info("Chain merge %s..%s completed", session.start, session.end)
        result.success = True
        result.head = self._finish_on(branch_name(session.end))
        return result

    def _finish_on(self, last: str) -> str | None:
        """Leave the work tree on the last branch of the chain.

        Skipped steps never check anything out, so HEAD may still be on an
        earlier branch. The chain is already merged at this point, so a
        failed checkout is only logged.
        """
        if self.gateway.current_branch() != last:
            try:
                self.gateway.checkout(last)
            except CheckoutError as exc:
                logger.warning("Chain merged but %s could not be checked out: %s", last, exc.stderr)
        return self.gateway.current_branch() or None

    def _interrupt(
        self,
        result: ChainResult,
        index: int,
        reason: InterruptReason,
        error: str,
        detail: str = "",
    ) -> ChainResult:
        session = result.session
        session.record_interruption(index, reason.value)
        save_state(session, self.state_dir, self.state_file)
        logger.warning("Chain merge interrupted at %s: %s", branch_name(index), error)

        result.failed_branch = branch_name(index)
        result.reason = reason
        result.error = error
        result.detail = detail
        return result
