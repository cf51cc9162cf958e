from __future__ import annotations

from pathlib import Path

import pytest

from tests.fakes import FakeGateway
from tests.utils import git


@pytest.fixture(autouse=True)
def _git_identity(monkeypatch):
    """Ensure git commands can commit even if the user has no global config."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Merge Chain")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "chain@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Merge Chain")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "chain@example.com")
    monkeypatch.setenv("GIT_EDITOR", "true")
    monkeypatch.delenv("MERGE_CHAIN_REPO_ROOT", raising=False)


@pytest.fixture()
def fake_chain() -> FakeGateway:
    """ch1..ch5 with 'Add syscall' committed on top of ch3."""
    gateway = FakeGateway.with_chain(1, 5)
    gateway.commit("ch3", "Add syscall")
    return gateway


@pytest.fixture()
def chapter_repo(tmp_path: Path) -> Path:
    """Real git repository with branches ch1..ch5.

    ch5 rewrites kernel.txt and ch3 carries a new commit "Add syscall" that
    edits the same line, so merging ch4 into ch5 conflicts.
    """
    repo = tmp_path / "chapters"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "user.email", "chain@example.com")
    git(repo, "config", "user.name", "Merge Chain")
    git(repo, "config", "commit.gpgsign", "false")

    (repo / "kernel.txt").write_text("base\n", encoding="utf-8")
    git(repo, "add", ".")
    git(repo, "commit", "-q", "-m", "Initial commit")
    git(repo, "checkout", "-q", "-b", "ch1")

    for n in range(2, 6):
        git(repo, "checkout", "-q", "-b", f"ch{n}")
        (repo / f"chapter{n}.txt").write_text(f"chapter {n}\n", encoding="utf-8")
        if n == 5:
            (repo / "kernel.txt").write_text("chapter five kernel\n", encoding="utf-8")
        git(repo, "add", ".")
        git(repo, "commit", "-q", "-m", f"Chapter {n}")

    git(repo, "checkout", "-q", "ch3")
    (repo / "kernel.txt").write_text("syscall kernel\n", encoding="utf-8")
    git(repo, "add", ".")
    git(repo, "commit", "-q", "-m", "Add syscall")
    return repo
