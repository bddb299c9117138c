"""
pkgsnap - Git snapshots of a package directory.

pkgsnap keeps the directory a package manager installs into under git,
committing after every install, delete and upgrade. Bulk operations are
coalesced into a single commit.

Quick Start:
    import pkgsnap

    class MyPackageManager(pkgsnap.PackageHost):

        @pkgsnap.tracked(pkgsnap.Operation.INSTALL)
        def install(self, name):
            ...

        @pkgsnap.batched(pkgsnap.UPGRADE_BATCH_LABEL)
        def upgrade_all(self):
            ...

    host = MyPackageManager()
    snap = pkgsnap.Snapshotter(directory="~/.local/share/packages")
    snap.enable(host)

    host.install("foo")            # commit "Install: foo"
    snap.commit("Before cleanup")  # manual snapshot

Domain Objects:
    Operation - Install, Delete, Upgrade, Menu execute
    MutationEvent - A completed mutation and its package names
    BatchSession - Mutations waiting for a single commit

Services:
    SnapshotRepository - Lazy git setup and commit-if-dirty
    ChangeRecorder - Immediate vs. batched commits
"""

__version__ = "0.3.0"

# High-level API
from .api import Snapshotter

# Host integration
from .hooks import PackageHost, HookRegistry, tracked, batched

# Domain objects
from .domain import Operation, MutationEvent, BatchSession

# Services (for advanced use)
from .services import (
    ChangeRecorder,
    SnapshotRepository,
    commit_message_for_batch,
    commit_message_for_event,
)
from .services.recorder import UPGRADE_BATCH_LABEL, MENU_BATCH_LABEL

# Errors
from .exit_codes import CommandError, ToolUnavailableError, GitCommandError

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # High-level API
    "Snapshotter",
    # Host integration
    "PackageHost",
    "HookRegistry",
    "tracked",
    "batched",
    # Domain objects
    "Operation",
    "MutationEvent",
    "BatchSession",
    # Services
    "ChangeRecorder",
    "SnapshotRepository",
    "commit_message_for_batch",
    "commit_message_for_event",
    "UPGRADE_BATCH_LABEL",
    "MENU_BATCH_LABEL",
    # Errors
    "CommandError",
    "ToolUnavailableError",
    "GitCommandError",
    # Configuration
    "load_config",
    "save_config",
]
