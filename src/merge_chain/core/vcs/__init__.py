"""
VCS Gateway Package
===================

The boundary between the chain merger and the version-control system.

Usage:
    from merge_chain.core.vcs import ChainGateway, GitGateway

    gateway = GitGateway(repo_root)
    gateway.checkout("ch4")
"""

from __future__ import annotations

from .exceptions import (
    BranchCreateError,
    CheckoutError,
    FetchError,
    MergeConflictError,
    PushError,
    VCSError,
)
from .git import GitGateway
from .protocol import ChainGateway

__all__ = [
    # Protocol
    "ChainGateway",
    # Implementations
    "GitGateway",
    # Exceptions
    "VCSError",
    "CheckoutError",
    "MergeConflictError",
    "FetchError",
    "PushError",
    "BranchCreateError",
]
