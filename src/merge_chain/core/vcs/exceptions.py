"""
VCS Exceptions
==============

Failures raised by the version-control gateway. Each exception keeps the
stderr of the git command that failed so the CLI can show it verbatim.
"""

from __future__ import annotations

from merge_chain.errors import ChainError


class VCSError(ChainError):
    """Base exception for gateway failures."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class CheckoutError(VCSError):
    """The working tree could not be switched to a branch."""


class MergeConflictError(VCSError):
    """A merge could not be resolved automatically."""


class FetchError(VCSError):
    """Fetching from a remote failed."""


class PushError(VCSError):
    """Pushing a branch to a remote failed."""


class BranchCreateError(VCSError):
    """A local branch could not be created from its remote counterpart."""
