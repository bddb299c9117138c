"""
Rendering functions for pkgsnap output.

This module handles pretty-printing. Commands return data; this module
makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List

from .infra.git_client import GitCommit

console = Console()


def render_history_table(commits: List[GitCommit], title: str = "Package snapshots") -> None:
    """
    Render snapshot history as a table, newest first.

    Args:
        commits: Commits from SnapshotRepository.history()
        title: Table title
    """
    if not commits:
        console.print("[yellow]No snapshots yet.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Commit", style="cyan", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Message")

    for commit in commits:
        table.add_row(
            commit.hash[:8],
            commit.date.strftime("%Y-%m-%d %H:%M"),
            commit.message
        )

    console.print(table)
