"""
Snapshot commands for pkgsnap.

enable/disable flip the ``general.auto_commit`` toggle; commit and
record snapshot the package directory directly.
"""

import click

from ..api import Snapshotter
from ..cli_utils import standard_command
from ..config import save_config
from ..domain.mutation import Operation


@click.command('enable')
@click.option('--dir', 'directory', type=click.Path(file_okay=False),
              help='Package directory to track (default: from config)')
@standard_command
def enable_handler(directory, config):
    """Start snapshotting the package directory.

    Checks that git is installed before changing anything, then creates
    the directory if needed, initializes the repository and turns
    automatic commits on.

    Examples:

    \b
        pkgsnap enable
        pkgsnap enable --dir ~/.local/share/packages
    """
    snap = Snapshotter(directory=directory, config=config)
    snap.enable()

    config['general']['auto_commit'] = True
    if directory:
        config['general']['package_directory'] = str(snap.directory)
    save_config(config)

    return {
        'enabled': True,
        'directory': str(snap.directory),
        'git': snap.git.version(),
    }


@click.command('disable')
@standard_command
def disable_handler(config):
    """Stop committing on package changes. The repository is kept."""
    config['general']['auto_commit'] = False
    save_config(config)
    return {'enabled': False}


@click.command('commit')
@click.argument('message')
@standard_command
def commit_handler(message, config):
    """Commit pending changes in the package directory with MESSAGE.

    Nothing is committed if the directory is unchanged.

    Examples:

    \b
        pkgsnap commit "Before trying the new theme"
    """
    snap = Snapshotter(config=config)
    snap.check_tool()
    committed = snap.commit(message)
    return {'committed': committed, 'message': message}


@click.command('record')
@click.argument('operation', type=click.Choice(
    [op.name.lower().replace('_', '-') for op in Operation], case_sensitive=False))
@click.argument('names', nargs=-1, required=True)
@standard_command
def record_handler(operation, names, config):
    """Record that OPERATION changed the packages NAMES.

    For package managers that can run a command after each change but
    cannot load pkgsnap hooks. Ignored while snapshots are disabled.

    Examples:

    \b
        pkgsnap record install foo
        pkgsnap record delete foo bar
    """
    snap = Snapshotter(config=config)
    op = Operation.parse(operation)
    if not snap.auto_commit:
        return {'committed': False, 'operation': op.value, 'reason': 'disabled'}

    snap.check_tool()
    committed = snap.record(op, names)
    return {'committed': bool(committed), 'operation': op.value, 'packages': list(names)}


@click.command('status')
@standard_command
def status_handler(config):
    """Show whether snapshots are on and what is uncommitted."""
    snap = Snapshotter(config=config)
    result = {'enabled': snap.auto_commit}
    result.update(snap.status().to_dict())
    return result
