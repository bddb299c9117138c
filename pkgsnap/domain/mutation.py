"""
Mutation domain objects for pkgsnap.

A mutation is an install, delete or upgrade of one or more packages.
Each completed mutation becomes a MutationEvent; events recorded while a
bulk operation is running accumulate in a BatchSession.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple, Union


class Operation(Enum):
    """Kind of package mutation. The value is the commit message prefix."""
    INSTALL = "Install"
    DELETE = "Delete"
    UPGRADE = "Upgrade"
    MENU_EXECUTE = "Menu execute"

    @classmethod
    def parse(cls, value: Union[str, "Operation"]) -> "Operation":
        """
        Resolve an operation from its value or member name.

        Accepts "Install", "install", "INSTALL", "menu-execute", etc.

        Raises:
            ValueError: If the name matches no operation
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().replace('-', '_').replace(' ', '_').upper()
        for op in cls:
            if op.name == key:
                return op
        raise ValueError(f"Unknown operation: {value!r}")


def normalize_subjects(subjects: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    """Turn a package name or an iterable of names into a tuple of names."""
    if subjects is None:
        return ()
    if isinstance(subjects, str):
        return (subjects,)
    return tuple(str(s) for s in subjects)


@dataclass(frozen=True)
class MutationEvent:
    """
    A package mutation that has completed.

    Attributes:
        operation: What happened
        subjects: Names of the packages involved, in the order given
    """
    operation: Operation
    subjects: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'subjects', normalize_subjects(self.subjects))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'operation': self.operation.value,
            'subjects': list(self.subjects),
        }

    def __str__(self) -> str:
        return f"{self.operation.value}: {', '.join(self.subjects)}"


@dataclass
class BatchSession:
    """
    Mutations coalesced into a single commit.

    Idle sessions have ``active`` False and no events. ``start`` opens the
    session and ``drain`` closes it, handing back what was collected.
    """
    active: bool = False
    label: str = ""
    events: List[MutationEvent] = field(default_factory=list)

    def start(self, label: str) -> None:
        self.active = True
        self.label = label
        self.events = []

    def add(self, event: MutationEvent) -> None:
        self.events.append(event)

    def drain(self) -> Tuple[str, List[MutationEvent]]:
        """Reset to idle and return the label and events collected."""
        label, events = self.label, self.events
        self.active = False
        self.label = ""
        self.events = []
        return label, events
