"""
Infrastructure layer for pkgsnap.

Contains abstractions for external systems:
- GitClient: git command execution

These provide clean interfaces that can be replaced by fakes in tests.
"""

from .git_client import GitClient, GitCommit, VersionControlClient

__all__ = [
    'GitClient',
    'GitCommit',
    'VersionControlClient',
]
