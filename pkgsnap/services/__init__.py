"""
Service layer for pkgsnap.

Contains the logic that coordinates domain objects and infrastructure:
- SnapshotRepository: Lazy repository setup and commit-if-dirty
- ChangeRecorder: Immediate vs. batched commits of package mutations
"""

from .repository import SnapshotRepository, RepositoryStatus
from .recorder import (
    ChangeRecorder,
    commit_message_for_batch,
    commit_message_for_event,
)

__all__ = [
    'SnapshotRepository',
    'RepositoryStatus',
    'ChangeRecorder',
    'commit_message_for_batch',
    'commit_message_for_event',
]
