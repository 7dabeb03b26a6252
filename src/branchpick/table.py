"""Joining branches with pull requests and laying them out as a table."""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from rich.console import Console
from rich.text import Text

from branchpick.git import Branch
from branchpick.github import PullRequest

Cell = Union[str, Text]


@dataclass(frozen=True)
class JoinedRow:
    """A branch and the pull request opened from it, if any."""

    branch: Branch
    pr: Optional[PullRequest] = None


def join_branches(branches: Iterable[Branch], pull_requests: Iterable[PullRequest]) -> list[JoinedRow]:
    """Attach to each branch the first pull request opened from it."""
    by_branch: dict[str, PullRequest] = {}
    for pr in pull_requests:
        by_branch.setdefault(pr.head_branch, pr)
    return [JoinedRow(branch, by_branch.get(branch.name)) for branch in branches]


def build_rows(joined: Iterable[JoinedRow]) -> list[list[Text]]:
    """Build table fields, most recent first, without the current branch."""
    visible = sorted(
        (row for row in joined if not row.branch.is_current),
        key=lambda row: row.branch.last_commit_epoch,
        reverse=True,
    )

    rows = []
    for row in visible:
        fields = [Text(row.branch.name), Text(row.branch.last_commit_relative)]
        if row.pr is not None:
            fields.append(Text(f"#{row.pr.number}", style=row.pr.state.color))
            fields.append(Text(f"by {row.pr.author}"))
        rows.append(fields)
    return rows


def align_columns(rows: Sequence[Sequence[Cell]], gap: int = 2) -> list[Text]:
    """Pad cells so columns line up, like ``column -t``.

    Rows may have different numbers of fields; missing trailing fields are
    blank. Widths are measured in terminal cells, so styling does not count.
    """
    cells = [[cell if isinstance(cell, Text) else Text(cell) for cell in row] for row in rows]
    widths: list[int] = []
    for row in cells:
        for index, cell in enumerate(row):
            if index == len(widths):
                widths.append(0)
            widths[index] = max(widths[index], cell.cell_len)

    lines = []
    for row in cells:
        line = Text()
        for index, cell in enumerate(row):
            if index:
                line.append(" " * gap)
            line.append_text(cell)
            line.append(" " * (widths[index] - cell.cell_len))
        line.rstrip()
        lines.append(line)
    return lines


def render_table(joined: Iterable[JoinedRow]) -> list[Text]:
    """Render joined rows as aligned table lines."""
    return align_columns(build_rows(joined))


def to_ansi(lines: Iterable[Text], color: bool = True) -> str:
    """Serialize table lines, with ANSI color codes when ``color`` is set."""
    lines = list(lines)
    if not color:
        return "\n".join(line.plain for line in lines)

    console = Console(force_terminal=True, color_system="standard", highlight=False)
    with console.capture() as capture:
        for line in lines:
            console.print(line, soft_wrap=True)
    return capture.get().rstrip("\n")
