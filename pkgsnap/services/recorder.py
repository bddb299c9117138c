"""
Change recorder for pkgsnap.

Decides whether a package mutation is committed right away or held
back until the surrounding bulk operation finishes, and builds the
commit messages for both cases.

State machine for a recorder's batch session:

    Idle --begin_batch--> Active --record_mutation (0..n)--> Active
    Active --end_batch--> Idle   (commits only if something was recorded)

Sessions do not nest. A second begin_batch while active replaces the
first session; hosts must not start a bulk operation inside another.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, Sequence, Union

from ..domain.mutation import BatchSession, MutationEvent, Operation
from .repository import SnapshotRepository

logger = logging.getLogger(__name__)

UPGRADE_BATCH_LABEL = "Package upgrade"
MENU_BATCH_LABEL = "Package menu execute"


def commit_message_for_event(event: MutationEvent) -> str:
    """Format ``"<operation>: <subjects>"`` for a single mutation."""
    return f"{event.operation.value}: {', '.join(event.subjects)}"


def commit_message_for_batch(label: str, events: Sequence[MutationEvent]) -> str:
    """
    Build the commit message for a finished batch.

    Upgrade batches list every package touched, each once, in the order
    first seen. Any other batch is summarized as
    ``"<label>: multiple operations"`` whatever its events contain.
    """
    if label == UPGRADE_BATCH_LABEL:
        names = []
        for event in events:
            for name in event.subjects:
                if name not in names:
                    names.append(name)
        return f"{label}: {', '.join(names)}"
    return f"{label}: multiple operations"


class ChangeRecorder:
    """
    Turns package mutations into snapshot commits.

    Example:
        recorder = ChangeRecorder(SnapshotRepository("~/.pkgsnap/packages"))
        recorder.record_mutation(Operation.INSTALL, ["foo"])   # commits now

        with recorder.batch("Package upgrade"):
            recorder.record_mutation(Operation.UPGRADE, ["a"])
            recorder.record_mutation(Operation.UPGRADE, ["b"])
        # one commit: "Package upgrade: a, b"
    """

    def __init__(self, repository: SnapshotRepository):
        self.repository = repository
        self.session = BatchSession()

    @property
    def batching(self) -> bool:
        return self.session.active

    def record_mutation(
        self,
        operation: Union[Operation, str],
        subjects: Union[str, Iterable[str]]
    ) -> Optional[bool]:
        """
        Record a mutation that has completed.

        Returns:
            Whether a commit was made, or None if the event was batched
        """
        event = MutationEvent(Operation.parse(operation), subjects)
        if self.session.active:
            logger.debug(f"Batched under '{self.session.label}': {event}")
            self.session.add(event)
            return None
        return self.repository.commit_if_dirty(commit_message_for_event(event))

    def begin_batch(self, label: str) -> None:
        """Start collecting mutations for a single commit."""
        if self.session.active:
            logger.debug(
                f"Batch '{label}' replaces active batch '{self.session.label}'"
            )
        self.session.start(label)

    def end_batch(self) -> bool:
        """
        Close the batch and commit what it collected.

        Returns:
            True if a commit was made
        """
        if not self.session.active:
            return False

        label, events = self.session.drain()
        if not events:
            logger.debug(f"Batch '{label}' recorded nothing")
            return False
        return self.repository.commit_if_dirty(commit_message_for_batch(label, events))

    @contextmanager
    def batch(self, label: str) -> Iterator["ChangeRecorder"]:
        """Batch all mutations recorded inside the ``with`` block."""
        self.begin_batch(label)
        try:
            yield self
        finally:
            self.end_batch()

    def commit(self, message: str) -> bool:
        """Commit pending changes with a caller-supplied message, bypassing batching."""
        return self.repository.commit_if_dirty(message)
