"""
Git Gateway
===========

``ChainGateway`` implementation backed by the ``git`` executable. Every call
blocks until git exits; there is no timeout.
"""

from __future__ import annotations

import logging
from pathlib import Path

from merge_chain.core.git_ops import run_command

from .exceptions import (
    BranchCreateError,
    CheckoutError,
    FetchError,
    MergeConflictError,
    PushError,
    VCSError,
)

logger = logging.getLogger(__name__)


def _detail(stdout: str, stderr: str) -> str:
    # git merge reports CONFLICT lines on stdout
    return "\n".join(part for part in (stderr, stdout) if part)


class GitGateway:
    """Drive a git work tree through the operations the chain merger needs."""

    def __init__(self, repo_root: Path):
        self.repo_root = repo_root

    def _git(self, *args: str) -> tuple[int, str, str]:
        return run_command(["git", *args], cwd=self.repo_root, check_return=False)

    def _ref_exists(self, ref: str) -> bool:
        code, _, _ = self._git("show-ref", "--verify", "--quiet", ref)
        return code == 0

    def branch_exists(self, name: str) -> bool:
        return self._ref_exists(f"refs/heads/{name}")

    def remote_branch_exists(self, remote: str, name: str) -> bool:
        return self._ref_exists(f"refs/remotes/{remote}/{name}")

    def current_branch(self) -> str:
        _, stdout, _ = self._git("branch", "--show-current")
        return stdout

    def checkout(self, name: str) -> None:
        code, stdout, stderr = self._git("checkout", name)
        if code != 0:
            logger.warning("git checkout %s failed", name)
            raise CheckoutError(f"Cannot switch to branch {name}", _detail(stdout, stderr))

    def merge(self, source: str, message: str) -> None:
        code, stdout, stderr = self._git("merge", "--no-ff", source, "-m", message)
        if code != 0:
            logger.warning("git merge %s failed", source)
            raise MergeConflictError(f"Merging {source} failed", _detail(stdout, stderr))

    def last_commit_message(self, branch: str) -> str:
        code, stdout, stderr = self._git("log", "-1", "--pretty=%B", branch)
        if code != 0:
            raise VCSError(f"Cannot read the last commit of {branch}", stderr)
        return stdout

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        code, _, stderr = self._git("merge-base", "--is-ancestor", ancestor, descendant)
        if code not in (0, 1):
            logger.warning("merge-base %s %s exited %s: %s", ancestor, descendant, code, stderr)
        return code == 0

    def merge_in_progress(self) -> bool:
        code, _, _ = self._git("rev-parse", "-q", "--verify", "MERGE_HEAD")
        return code == 0

    def unmerged_paths(self) -> list[str]:
        _, stdout, _ = self._git("diff", "--name-only", "--diff-filter=U")
        return [line for line in stdout.splitlines() if line.strip()]

    def fetch(self, remote: str) -> None:
        code, stdout, stderr = self._git("fetch", remote, "--quiet")
        if code != 0:
            raise FetchError(f"Failed to fetch from remote '{remote}'", _detail(stdout, stderr))

    def push(self, remote: str, branch: str) -> None:
        code, stdout, stderr = self._git("push", remote, branch)
        if code != 0:
            raise PushError(f"Failed to push {branch} to {remote}", _detail(stdout, stderr))

    def create_tracking_branch(self, name: str, remote: str) -> None:
        code, stdout, stderr = self._git("branch", "--track", name, f"{remote}/{name}")
        if code != 0:
            raise BranchCreateError(
                f"Failed to create local branch {name}", _detail(stdout, stderr)
            )
