"""
Domain layer for pkgsnap.

Contains pure domain objects with no I/O or side effects:
- Operation: The kinds of package mutation that get snapshotted
- MutationEvent: One completed mutation and the packages it touched
- BatchSession: A window in which mutations are coalesced into one commit
"""

from .mutation import Operation, MutationEvent, BatchSession, normalize_subjects

__all__ = [
    'Operation',
    'MutationEvent',
    'BatchSession',
    'normalize_subjects',
]
