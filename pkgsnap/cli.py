#!/usr/bin/env python3

import click

from pkgsnap.commands.snapshot import (
    enable_handler,
    disable_handler,
    commit_handler,
    record_handler,
    status_handler,
)
from pkgsnap.commands.history import history_handler
from pkgsnap.commands.config import config_cmd


@click.group()
@click.version_option(package_name='pkgsnap')
def cli():
    """pkgsnap - Git snapshots of a package directory.

    Commits the package directory after every install, delete and
    upgrade, so any earlier set of packages can be restored with git.
    """
    pass


cli.add_command(enable_handler, name='enable')
cli.add_command(disable_handler, name='disable')
cli.add_command(commit_handler, name='commit')
cli.add_command(record_handler, name='record')
cli.add_command(status_handler, name='status')
cli.add_command(history_handler, name='history')

# Command groups
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
