"""Exception hierarchy for chain merge operations.

Every failure the CLI reports to the operator derives from ``ChainError``.
Errors carry an optional ``hint`` with the next command to run.
"""

from __future__ import annotations


class ChainError(Exception):
    """Base exception for merge-chain errors."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint


class ChainValidationError(ChainError):
    """Arguments failed validation (non-numeric ids, inverted range)."""


class BranchMissingError(ChainError):
    """A required local chapter branch does not exist."""

    def __init__(self, branch: str, start: int, end: int):
        self.branch = branch
        super().__init__(
            f"Local branch {branch} does not exist",
            hint=(
                "Run the following command to create local branches from the remote:\n"
                f"   merge-chain sync {start} {end}"
            ),
        )


class SessionConflictError(ChainError):
    """An interrupted chain merge is already persisted."""

    def __init__(self, message: str = "Incomplete merge process exists"):
        super().__init__(
            message,
            hint="Run 'merge-chain continue' or 'merge-chain abort' first.",
        )


class NoSessionError(ChainError):
    """No interrupted chain merge exists to act on."""

    def __init__(self):
        super().__init__("No interrupted state found, cannot continue.")


class MergeInProgressError(ChainError):
    """Git still has an unfinished merge in the working tree."""

    def __init__(self, branch: str, unmerged_paths: list[str]):
        self.branch = branch
        self.unmerged_paths = unmerged_paths
        detail = ""
        if unmerged_paths:
            detail = "\nUnresolved paths:\n" + "\n".join(f"  - {p}" for p in unmerged_paths)
        super().__init__(
            f"A merge into {branch} is still in progress{detail}",
            hint="Resolve the conflicts, run 'git add <file>' and 'git commit', then 'merge-chain continue'.",
        )


class CorruptStateError(ChainError):
    """The persisted session record could not be parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(
            f"State file {path} is unreadable: {reason}",
            hint="Inspect the file, or run 'merge-chain abort' to discard it.",
        )


class ConfigError(ChainError):
    """Configuration or repository location is invalid."""
