"""Interactive branch selection with fzf."""

import logging
import os
import shlex
import shutil
import subprocess
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

FZF = "fzf"
MARKDOWN_PAGER = ["glow", "-s", "dark", "-"]
DIFF_PAGER = ["delta"]
PREVIEW_SHELL = "sh"

# First "#<digits>" field that follows whitespace; branch names come first on the line
PR_NUMBER = "n=$(printf '%s\\n' {} | grep -oE '[[:space:]]#[0-9]+' | head -n 1 | tr -dc '0-9')"


class PreviewMode(Enum):
    """What the preview pane shows for the highlighted row."""

    PLAIN = "plain"
    VIEW = "view"
    DIFF = "diff"


class PickerError(Exception):
    """Interactive picker error."""


def require_picker() -> None:
    """Fail early when fzf is not installed."""
    if shutil.which(FZF) is None:
        raise PickerError(f"{FZF} is required for interactive mode (use --static to print the table)")


def _through(command: str, pager: list[str]) -> str:
    """Pipe ``command`` through ``pager`` if it is installed, else leave it raw."""
    if shutil.which(pager[0]) is None:
        return command
    return f"{command} | {shlex.join(pager)}"


def preview_command(mode: PreviewMode) -> Optional[str]:
    """Shell command fzf runs to preview the pull request of the highlighted row."""
    if mode is PreviewMode.VIEW:
        show = _through('gh pr view "$n"', MARKDOWN_PAGER)
    elif mode is PreviewMode.DIFF:
        show = _through('gh pr diff "$n" --color=always', DIFF_PAGER)
    else:
        return None
    return f'{PR_NUMBER}; [ -n "$n" ] && {show}'


def fzf_command(mode: PreviewMode) -> list[str]:
    """fzf arguments for a single selection, with a preview pane unless ``mode`` is plain."""
    command = [
        FZF,
        "--ansi",
        "--no-multi",
        "--layout=reverse",
        "--height=~60%",
        "--prompt=branch> ",
        "--bind=ctrl-/:toggle-preview",
    ]
    preview = preview_command(mode)
    if preview is not None:
        command += ["--preview", preview, "--preview-window=right:60%:wrap"]
    return command


def fzf_environment() -> dict[str, str]:
    """Environment for fzf; previews are POSIX shell whatever the user's login shell."""
    return {**os.environ, "SHELL": PREVIEW_SHELL}


def pick(text: str, mode: PreviewMode = PreviewMode.PLAIN, cwd: Optional[Path] = None) -> Optional[str]:
    """Let the user choose one line of ``text``.

    Previews run ``gh`` from ``cwd``, which should be the repository the table
    was built from. Returns None when there is nothing to choose from or the
    user cancelled.
    """
    if not text.strip():
        return None

    command = fzf_command(mode)
    logger.debug("Running %s in %s", shlex.join(command), cwd or ".")
    try:
        result = subprocess.run(
            command,
            input=text,
            stdout=subprocess.PIPE,
            text=True,
            cwd=cwd,
            env=fzf_environment(),
        )
    except OSError as err:
        raise PickerError(f"Failed to run {FZF}: {err}") from err

    selection = result.stdout.strip("\n")
    if result.returncode != 0 or not selection:
        return None
    return selection


def branch_from_selection(line: str) -> str:
    """The branch name is the first whitespace-delimited token of a row."""
    tokens = line.split()
    if not tokens:
        raise ValueError("Empty selection")
    return tokens[0]
