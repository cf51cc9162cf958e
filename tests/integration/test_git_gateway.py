"""GitGateway against real repositories."""

from __future__ import annotations

from pathlib import Path

import pytest

from merge_chain.core.vcs import (
    BranchCreateError,
    ChainGateway,
    CheckoutError,
    FetchError,
    GitGateway,
    MergeConflictError,
    PushError,
)
from tests.utils import git


@pytest.fixture
def gateway(chapter_repo: Path) -> GitGateway:
    return GitGateway(chapter_repo)


def test_satisfies_protocol(gateway):
    assert isinstance(gateway, ChainGateway)


def test_branch_queries(gateway):
    assert gateway.branch_exists("ch1")
    assert gateway.branch_exists("ch5")
    assert not gateway.branch_exists("ch6")
    assert gateway.current_branch() == "ch3"


def test_last_commit_message(gateway):
    assert gateway.last_commit_message("ch3") == "Add syscall"
    assert gateway.last_commit_message("ch4") == "Chapter 4"


def test_checkout_and_merge_creates_merge_commit(gateway, chapter_repo):
    gateway.checkout("ch4")
    gateway.merge("ch3", "Merge ch3 to ch4: Add syscall")

    assert gateway.current_branch() == "ch4"
    assert git(chapter_repo, "log", "-1", "--pretty=%s") == "Merge ch3 to ch4: Add syscall"
    assert git(chapter_repo, "rev-list", "--parents", "-n", "1", "HEAD").count(" ") == 2
    assert gateway.is_ancestor("ch3", "ch4")


def test_merge_conflict_leaves_merge_in_progress(gateway, chapter_repo):
    gateway.checkout("ch5")
    with pytest.raises(MergeConflictError) as exc_info:
        gateway.merge("ch3", "Merge ch3 to ch5: Add syscall")

    assert "kernel.txt" in exc_info.value.stderr
    assert gateway.merge_in_progress()
    assert gateway.unmerged_paths() == ["kernel.txt"]


def test_checkout_missing_branch_fails(gateway):
    with pytest.raises(CheckoutError):
        gateway.checkout("ch9")


def test_checkout_blocked_by_local_changes(gateway, chapter_repo):
    (chapter_repo / "kernel.txt").write_text("uncommitted\n", encoding="utf-8")
    with pytest.raises(CheckoutError):
        gateway.checkout("ch5")
    assert gateway.current_branch() == "ch3"


def test_is_ancestor(gateway):
    assert gateway.is_ancestor("ch1", "ch2")
    assert not gateway.is_ancestor("ch3", "ch4")
    assert not gateway.is_ancestor("ch1", "missing-branch")


def test_fetch_unknown_remote_fails(gateway):
    with pytest.raises(FetchError):
        gateway.fetch("nowhere")


def test_push_fetch_and_track(gateway, chapter_repo, tmp_path):
    remote = tmp_path / "remote.git"
    git(tmp_path, "init", "-q", "--bare", str(remote))
    git(chapter_repo, "remote", "add", "origin", str(remote))

    gateway.push("origin", "ch2")
    gateway.fetch("origin")
    assert gateway.remote_branch_exists("origin", "ch2")
    assert not gateway.remote_branch_exists("origin", "ch3")

    git(chapter_repo, "branch", "-D", "ch1")
    with pytest.raises(BranchCreateError):
        gateway.create_tracking_branch("ch1", "origin")

    git(chapter_repo, "branch", "-D", "ch2")
    gateway.create_tracking_branch("ch2", "origin")
    assert gateway.branch_exists("ch2")
    assert git(chapter_repo, "rev-parse", "--abbrev-ref", "ch2@{upstream}") == "origin/ch2"
    assert gateway.current_branch() == "ch3"


def test_push_to_unknown_remote_fails(gateway):
    with pytest.raises(PushError):
        gateway.push("nowhere", "ch1")
