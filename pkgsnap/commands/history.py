"""
Handles the 'history' command for listing package snapshots.

Default output is JSONL, one commit per line; --pretty renders a table.
"""

import click

from ..api import Snapshotter
from ..cli_utils import standard_command
from ..render import render_history_table


@click.command(name='history')
@click.option('-n', '--limit', type=int, default=20, show_default=True,
              help='Maximum number of snapshots to show')
@click.option('--pretty', is_flag=True, help='Display as a formatted table instead of JSONL')
@standard_command
def history_handler(limit, pretty, config):
    """Show recent package snapshots, newest first.

    Examples:

    \b
        pkgsnap history
        pkgsnap history -n 5 --pretty
    """
    snap = Snapshotter(config=config)
    commits = snap.history(limit=limit)

    if pretty:
        render_history_table(commits)
        return None

    return [commit.to_dict() for commit in commits]
