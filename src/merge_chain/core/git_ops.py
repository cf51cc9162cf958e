"""Subprocess helpers for invoking git."""

from __future__ import annotations

import logging
import os
import re
import shlex
import subprocess
from pathlib import Path

from merge_chain.errors import ConfigError

logger = logging.getLogger(__name__)

REPO_ROOT_ENV = "MERGE_CHAIN_REPO_ROOT"


def run_command(
    cmd: list[str],
    *,
    cwd: Path | None = None,
    check_return: bool = True,
) -> tuple[int, str, str]:
    """Run a command and capture its output.

    Returns a ``(returncode, stdout, stderr)`` tuple with both streams
    stripped. When ``check_return`` is set a non-zero exit raises
    ``subprocess.CalledProcessError``.
    """
    logger.debug("Running: %s", shlex.join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except FileNotFoundError:
        if check_return:
            raise
        return 127, "", f"{cmd[0]} executable not found on PATH"

    stdout = (completed.stdout or "").strip()
    stderr = (completed.stderr or "").strip()
    if completed.returncode != 0:
        logger.debug("Exit %s from %s: %s", completed.returncode, cmd[0], stderr or stdout)
        if check_return:
            raise subprocess.CalledProcessError(
                completed.returncode, cmd, output=stdout, stderr=stderr
            )
    return completed.returncode, stdout, stderr


def find_repo_root(start: Path | None = None) -> Path:
    """Locate the repository root the tool operates on.

    ``MERGE_CHAIN_REPO_ROOT`` wins when set; otherwise git is asked for the
    top level of the work tree containing ``start`` (default: cwd).
    """
    override = os.environ.get(REPO_ROOT_ENV, "").strip()
    if override:
        root = Path(override).expanduser().resolve()
        if not root.is_dir():
            raise ConfigError(f"{REPO_ROOT_ENV} points to a missing directory: {root}")
        return root

    cwd = start or Path.cwd()
    code, stdout, stderr = run_command(
        ["git", "rev-parse", "--show-toplevel"], cwd=cwd, check_return=False
    )
    if code != 0 or not stdout:
        raise ConfigError(
            "Not inside a git repository",
            hint=f"Run from a chapter repository or set {REPO_ROOT_ENV}.",
        )
    return Path(stdout).resolve()


def find_git_dir(repo_root: Path) -> Path:
    """Return the git directory of the work tree at ``repo_root``.

    Linked worktrees resolve to their own directory under ``.git/worktrees``,
    so each worktree keeps a separate chain session.
    """
    code, stdout, stderr = run_command(
        ["git", "rev-parse", "--absolute-git-dir"], cwd=repo_root, check_return=False
    )
    if code != 0 or not stdout:
        raise ConfigError(
            f"Cannot locate the git directory of {repo_root}",
            hint=stderr or f"Run from a chapter repository or set {REPO_ROOT_ENV}.",
        )
    return Path(stdout).resolve()


_SCP_LIKE = re.compile(r"^[^/:]+@[^/:]+:")
_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def is_remote_location(value: str) -> bool:
    """Return True if ``value`` is a URL or path rather than a remote name.

    ``git push`` accepts either, so callers only require a configured remote
    when this returns False.
    """
    if _URL_SCHEME.match(value) or _SCP_LIKE.match(value):
        return True
    return value.startswith(("/", "./", "../", "~")) or value in (".", "..")
