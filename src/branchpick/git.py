"""Git repository operations."""

from dataclasses import dataclass
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

# HEAD marker, name without refs/heads/, unix timestamp and relative age, tab separated
BRANCH_FORMAT = "%(HEAD)%09%(refname:lstrip=2)%09%(committerdate:unix)%09%(committerdate:relative)"


@dataclass(frozen=True)
class Branch:
    """A local branch and the age of its last commit."""

    name: str
    last_commit_epoch: int
    last_commit_relative: str
    is_current: bool = False


class GitError(Exception):
    """Git operation error."""


def parse_branch_line(line: str) -> Branch:
    """Parse one line of ``git for-each-ref`` output in ``BRANCH_FORMAT``."""
    try:
        marker, name, epoch, relative = line.split("\t", 3)
        return Branch(
            name=name,
            last_commit_epoch=int(epoch),
            last_commit_relative=relative,
            is_current=marker.strip() == "*",
        )
    except ValueError as err:
        raise GitError(f"Unexpected branch listing line: {line!r}") from err


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path) -> None:
        """Open the repository containing ``path``."""
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository: {err}") from err

    @property
    def working_dir(self) -> Path:
        """Root of the working tree."""
        return Path(self.repo.working_tree_dir)

    def list_branches(self) -> list[Branch]:
        """List local branches with their last commit time and current marker."""
        try:
            output = self.repo.git.for_each_ref(f"--format={BRANCH_FORMAT}", "refs/heads")
        except GitCommandError as err:
            raise GitError(f"Failed to list branches: {err}") from err
        return [parse_branch_line(line) for line in output.splitlines() if line.strip()]

    def checkout(self, branch_name: str) -> None:
        """Check out ``branch_name``."""
        try:
            self.repo.git.checkout(branch_name)
        except GitCommandError as err:
            raise GitError(f"Failed to check out {branch_name}: {err}") from err

    def get_current_branch_name(self) -> str:
        """Get current branch name, or an empty string on a detached HEAD."""
        try:
            return self.repo.active_branch.name
        except TypeError:
            return ""
