"""Pull request lookup through the GitHub CLI."""

import json
import logging
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

GH = "gh"
DEFAULT_CACHE_TTL = "5m"
PAGE_SIZE = 100

PULL_REQUESTS_QUERY = """
query($owner: String!, $repo: String!) {
  repository(owner: $owner, name: $repo) {
    pullRequests(first: %d, orderBy: {field: CREATED_AT, direction: DESC}) {
      nodes {
        number
        state
        headRefName
        author { login }
      }
    }
  }
}
""" % PAGE_SIZE


class PRState(Enum):
    """Pull request state."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    MERGED = "MERGED"

    @property
    def color(self) -> str:
        """Rich style used to display the state."""
        return {
            PRState.OPEN: "green",
            PRState.CLOSED: "red",
            PRState.MERGED: "magenta",
        }[self]


@dataclass(frozen=True)
class PullRequest:
    """A pull request and the branch it was opened from."""

    head_branch: str
    number: int
    state: PRState
    author: str


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a best-effort pull request lookup."""

    pull_requests: tuple[PullRequest, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Whether the lookup succeeded."""
        return self.error is None

    def or_empty(self) -> tuple[PullRequest, ...]:
        """Pull requests on success, nothing on failure."""
        return self.pull_requests if self.ok else ()


class GitHubError(Exception):
    """GitHub lookup error."""


def build_command(cache_ttl: str = DEFAULT_CACHE_TTL) -> list[str]:
    """Build the ``gh api graphql`` invocation for the current repository.

    ``gh`` fills in the ``{owner}`` and ``{repo}`` placeholders from the
    repository of the working directory and serves repeated calls from its
    response cache for ``cache_ttl``.
    """
    return [
        GH,
        "api",
        "graphql",
        "--cache",
        cache_ttl,
        "-F",
        "owner={owner}",
        "-F",
        "repo={repo}",
        "-f",
        f"query={PULL_REQUESTS_QUERY}",
    ]


def parse_pull_requests(payload: Any) -> tuple[PullRequest, ...]:
    """Decode a GraphQL response into pull requests, keeping API order."""
    if not isinstance(payload, dict):
        raise GitHubError("Unexpected response from GitHub")
    if payload.get("errors"):
        messages = "; ".join(
            str(error.get("message", error)) if isinstance(error, dict) else str(error) for error in payload["errors"]
        )
        raise GitHubError(f"GitHub API error: {messages}")

    try:
        nodes = payload["data"]["repository"]["pullRequests"]["nodes"]
        pull_requests = []
        for node in nodes:
            author = node.get("author") or {}
            pull_requests.append(
                PullRequest(
                    head_branch=node["headRefName"],
                    number=int(node["number"]),
                    state=PRState(node["state"]),
                    author=author.get("login") or "ghost",
                )
            )
    except (KeyError, TypeError, ValueError) as err:
        raise GitHubError(f"Unexpected response from GitHub: {err}") from err
    return tuple(pull_requests)


def _run_query(cwd: Path, cache_ttl: str) -> Any:
    try:
        result = subprocess.run(
            build_command(cache_ttl),
            cwd=cwd,
            capture_output=True,
            text=True,
        )
    except OSError as err:
        raise GitHubError(f"Failed to run {GH}: {err}") from err

    if result.returncode != 0:
        raise GitHubError(f"{GH} exited with {result.returncode}: {result.stderr.strip()}")
    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as err:
        raise GitHubError(f"{GH} returned invalid JSON: {err}") from err


def fetch_pull_requests(cwd: Path, cache_ttl: str = DEFAULT_CACHE_TTL) -> FetchResult:
    """Fetch the most recent pull requests of the repository at ``cwd``.

    Never raises: any failure is reported through ``FetchResult.error`` so the
    caller decides how to degrade.
    """
    try:
        pull_requests = parse_pull_requests(_run_query(cwd, cache_ttl))
    except GitHubError as err:
        logger.debug("Skipping pull request lookup: %s", err)
        return FetchResult(error=str(err))

    logger.debug("Fetched %d pull requests", len(pull_requests))
    return FetchResult(pull_requests=pull_requests)
