"""Repository checks run before chain commands touch any branch."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path

from merge_chain.core.git_ops import REPO_ROOT_ENV, is_remote_location, run_command
from merge_chain.core.vcs import ChainGateway, GitGateway

__all__ = [
    "GitPreflightIssue",
    "GitPreflightResult",
    "run_git_preflight",
]


@dataclass
class GitPreflightIssue:
    """One finding, with the command that fixes it when there is one."""

    code: str
    message: str
    remediation: str
    command: str | None = None


@dataclass
class GitPreflightResult:
    repo_root: Path
    errors: list[GitPreflightIssue] = field(default_factory=list)
    warnings: list[GitPreflightIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> GitPreflightIssue | None:
        return self.errors[0] if self.errors else None


def _repository_issue(root: Path, stderr: str) -> GitPreflightIssue:
    lowered = stderr.lower()
    if "dubious ownership" in lowered or "safe.directory" in lowered:
        return GitPreflightIssue(
            code="UNTRUSTED_REPOSITORY",
            message="Git refuses to operate on this repository (safe.directory).",
            remediation="Mark the repository as trusted for this machine.",
            command=f"git config --global --add safe.directory {shlex.quote(str(root))}",
        )
    detail = stderr.splitlines()[0] if stderr else "not a git work tree"
    return GitPreflightIssue(
        code="NOT_A_GIT_REPOSITORY",
        message=f"Git repository check failed: {detail}",
        remediation=f"Run the command from the chapter repository or set {REPO_ROOT_ENV}.",
        command=f"cd {shlex.quote(str(root))} && git status",
    )


def run_git_preflight(
    repo_root: Path,
    gateway: ChainGateway | None = None,
    *,
    remote: str | None = None,
    allow_location: bool = False,
) -> GitPreflightResult:
    """Check the repository is usable before touching any branch.

    When ``remote`` is given it must be a configured remote. With
    ``allow_location`` a URL or path is accepted as is, the way ``git push``
    accepts one.
    """
    root = repo_root.resolve()
    result = GitPreflightResult(repo_root=root)

    code, stdout, stderr = run_command(
        ["git", "rev-parse", "--is-inside-work-tree"], cwd=root, check_return=False
    )
    if code != 0 or stdout.lower() != "true":
        result.errors.append(_repository_issue(root, stderr))
        return result

    if remote is not None and not (allow_location and is_remote_location(remote)):
        code, _, _ = run_command(
            ["git", "remote", "get-url", remote], cwd=root, check_return=False
        )
        if code != 0:
            result.errors.append(
                GitPreflightIssue(
                    code="MISSING_REMOTE",
                    message=f"Remote '{remote}' is not configured.",
                    remediation="Add the remote or pass the name of an existing one.",
                    command=f"git -C {shlex.quote(str(root))} remote add {shlex.quote(remote)} <url>",
                )
            )

    gateway = gateway or GitGateway(root)
    if gateway.merge_in_progress():
        result.warnings.append(
            GitPreflightIssue(
                code="MERGE_IN_PROGRESS",
                message="A git merge is in progress in the working tree.",
                remediation="Finish it with 'git commit' or cancel it with 'git merge --abort'.",
                command="git status",
            )
        )

    return result
