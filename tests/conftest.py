"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator

import pytest
from git import Actor, Repo

from branchpick.git import Branch
from branchpick.github import PRState, PullRequest

# Commit times, oldest first
EPOCH_MAIN = 1_700_000_000
EPOCH_FEAT_B = 1_700_100_000
EPOCH_FEAT_A = 1_700_200_000


@pytest.fixture
def test_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a repository with main (checked out), feat-a and feat-b.

    feat-a has the most recent commit, feat-b an older one.
    """
    local_path = tmp_path / "local"
    local_path.mkdir()
    local_repo = Repo.init(local_path)

    author = Actor("Test User", "test@example.com")
    local_repo.config_writer().set_value("user", "name", author.name).release()
    local_repo.config_writer().set_value("user", "email", author.email).release()

    def commit(name: str, epoch: int) -> None:
        """Add a file and commit it at a fixed time."""
        test_file = local_path / f"{name}.txt"
        test_file.write_text(f"{name} content")
        local_repo.index.add([f"{name}.txt"])
        date = f"{epoch} +0000"
        local_repo.index.commit(
            f"Add {name}",
            author=author,
            committer=author,
            author_date=date,
            commit_date=date,
        )

    commit("README", EPOCH_MAIN)
    if local_repo.active_branch.name != "main":
        local_repo.active_branch.rename("main")
    main_branch = local_repo.heads.main

    for name, epoch in [("feat-b", EPOCH_FEAT_B), ("feat-a", EPOCH_FEAT_A)]:
        main_branch.checkout()
        local_repo.create_head(name).checkout()
        commit(name, epoch)

    main_branch.checkout()

    yield local_path


@pytest.fixture
def branches() -> list[Branch]:
    """Branches from the documented example, main being current."""
    return [
        Branch("main", 100, "3 days ago", is_current=True),
        Branch("feat-a", 200, "2 days ago"),
        Branch("feat-b", 50, "4 days ago"),
    ]


@pytest.fixture
def pull_requests() -> list[PullRequest]:
    return [PullRequest("feat-a", 5, PRState.OPEN, "alice")]


@pytest.fixture
def commit_epochs() -> dict[str, int]:
    """Commit time of each branch tip in ``test_repo``."""
    return {"main": EPOCH_MAIN, "feat-b": EPOCH_FEAT_B, "feat-a": EPOCH_FEAT_A}
