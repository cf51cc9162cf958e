"""
VCS Protocol Definition
=======================

The contract the chain merger consumes from the version-control system.
``GitGateway`` implements it by shelling out to git; tests substitute an
in-memory repository model.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ChainGateway(Protocol):
    """Operations the chain merger needs from the repository.

    Every call is synchronous. Mutating operations raise a ``VCSError``
    subclass; the boolean queries never raise.
    """

    def branch_exists(self, name: str) -> bool:
        """Return True iff a local branch called ``name`` exists."""
        ...

    def remote_branch_exists(self, remote: str, name: str) -> bool:
        """Return True iff ``remote/name`` is known locally."""
        ...

    def current_branch(self) -> str:
        """Return the checked-out branch name (empty when detached)."""
        ...

    def checkout(self, name: str) -> None:
        """Switch the working tree to ``name``. Raises CheckoutError."""
        ...

    def merge(self, source: str, message: str) -> None:
        """Merge ``source`` into the current branch. Raises MergeConflictError."""
        ...

    def last_commit_message(self, branch: str) -> str:
        """Return the full message of the tip commit of ``branch``."""
        ...

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Return True if ``ancestor`` is reachable from ``descendant``."""
        ...

    def merge_in_progress(self) -> bool:
        """Return True while a conflicted merge awaits its commit."""
        ...

    def unmerged_paths(self) -> list[str]:
        """Return paths that still carry conflict markers in the index."""
        ...

    def fetch(self, remote: str) -> None:
        """Fetch from ``remote``. Raises FetchError."""
        ...

    def push(self, remote: str, branch: str) -> None:
        """Push ``branch`` to ``remote``. Raises PushError."""
        ...

    def create_tracking_branch(self, name: str, remote: str) -> None:
        """Create local ``name`` tracking ``remote/name``. Raises BranchCreateError."""
        ...
