"""Command line interface for branchpick."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn

import click
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from typer.core import TyperCommand

from branchpick.git import GitError, GitRepo
from branchpick.github import DEFAULT_CACHE_TTL, fetch_pull_requests
from branchpick.picker import PickerError, PreviewMode, branch_from_selection, pick, require_picker
from branchpick.table import join_branches, render_table, to_ansi

app = typer.Typer(help="Pick a local branch to check out, alongside its pull request", add_completion=False)
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


class BranchPickCommand(TyperCommand):
    """Command that reports usage errors with exit code 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as err:
            err.exit_code = 1
            raise


def fail(err: Exception) -> NoReturn:
    """Report an error and exit with status 1."""
    err_console.print(f"[red]Error:[/red] {escape(str(err))}")
    raise typer.Exit(code=1) from err


def get_repo(path: Path) -> GitRepo:
    """Get git repository instance."""
    try:
        return GitRepo(path)
    except GitError as err:
        fail(err)


def configure_logging() -> None:
    """Send debug logs to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.command(cls=BranchPickCommand, context_settings={"help_option_names": ["-h", "--help"]})
def checkout(
    static: Annotated[bool, typer.Option("--static", help="Print the table and exit")] = False,
    diff: Annotated[bool, typer.Option("--diff", "-d", help="Preview the pull request diff")] = False,
    view: Annotated[bool, typer.Option("--view", "-v", help="Preview the pull request description")] = False,
    path: Annotated[Path, typer.Option(help="Path to git repository")] = Path("."),
    cache_ttl: Annotated[
        str,
        typer.Option(envvar="BRANCHPICK_CACHE_TTL", help="How long gh may reuse a cached pull request listing"),
    ] = DEFAULT_CACHE_TTL,
    debug: Annotated[bool, typer.Option("--debug", help="Log diagnostics to stderr")] = False,
) -> None:
    """Choose a local branch, most recently committed first, and check it out."""
    if diff and view:
        err_console.print("[red]Error:[/red] --diff and --view cannot be used together")
        raise typer.Exit(code=1)
    if debug:
        configure_logging()

    if diff:
        mode = PreviewMode.DIFF
    elif view:
        mode = PreviewMode.VIEW
    else:
        mode = PreviewMode.PLAIN

    if not static:
        try:
            require_picker()
        except PickerError as err:
            fail(err)

    repo = get_repo(path)
    try:
        branches = repo.list_branches()
    except GitError as err:
        fail(err)

    # Pull request details are optional; the table is still useful without them
    pull_requests = fetch_pull_requests(repo.working_dir, cache_ttl).or_empty()
    lines = render_table(join_branches(branches, pull_requests))

    if static:
        for line in lines:
            console.print(line, soft_wrap=True)
        return

    try:
        selection = pick(to_ansi(lines), mode, repo.working_dir)
    except PickerError as err:
        fail(err)
    if selection is None:
        err_console.print("[yellow]No branch selected[/yellow]")
        raise typer.Exit(code=1)

    branch_name = branch_from_selection(selection)
    try:
        repo.checkout(branch_name)
    except GitError as err:
        fail(err)
    console.print(f"Switched to branch [cyan]{escape(repo.get_current_branch_name())}[/cyan]")


if __name__ == "__main__":
    app()
