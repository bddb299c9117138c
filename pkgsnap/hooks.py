"""
Host hooks for pkgsnap.

A package manager opts in to snapshots by deriving from PackageHost and
decorating its entry points:

    class MyPackageManager(PackageHost):

        @tracked(Operation.INSTALL)
        def install(self, name): ...

        @tracked(Operation.DELETE)
        def delete(self, name): ...

        @tracked(Operation.UPGRADE)
        def upgrade(self, name): ...

        @batched(UPGRADE_BATCH_LABEL)
        def upgrade_all(self):
            for name in self.outdated():
                self.upgrade(name)

        @batched(MENU_BATCH_LABEL)
        def menu_execute(self, marks): ...

The decorators only notify ``self.hooks``. Nothing happens until a
listener (normally a Snapshotter) subscribes to the registry.
"""

import logging
from functools import wraps
from typing import Any, Callable, Iterable, List, Optional, Protocol, Tuple, Union

from .domain.mutation import Operation, normalize_subjects

logger = logging.getLogger(__name__)

# Host methods pkgsnap intercepts; ``upgrade`` is optional.
INTERCEPTED_OPERATIONS = ('install', 'delete', 'upgrade_all', 'upgrade', 'menu_execute')

SubjectsSpec = Optional[Callable[[Tuple[Any, ...], dict, Any], Union[str, Iterable[str]]]]


class HookListener(Protocol):
    """Receives notifications from a host's HookRegistry."""

    def on_batch_start(self, label: str) -> None: ...

    def on_batch_end(self, label: str) -> None: ...

    def on_mutation(self, operation: Operation, subjects: Tuple[str, ...]) -> None: ...


class HookRegistry:
    """Fan-out of host notifications to subscribed listeners."""

    def __init__(self):
        self._listeners: List[HookListener] = []

    def subscribe(self, listener: HookListener) -> None:
        if listener not in self._listeners:
            logger.debug(f"Subscribed {type(listener).__name__}")
            self._listeners.append(listener)

    def unsubscribe(self, listener: HookListener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        if listener in self._listeners:
            logger.debug(f"Unsubscribed {type(listener).__name__}")
            self._listeners.remove(listener)

    def is_subscribed(self, listener: HookListener) -> bool:
        return listener in self._listeners

    @property
    def listeners(self) -> List[HookListener]:
        return list(self._listeners)

    def before_batch(self, label: str) -> None:
        for listener in self.listeners:
            listener.on_batch_start(label)

    def after_batch(self, label: str) -> None:
        for listener in self.listeners:
            listener.on_batch_end(label)

    def after_mutation(self, operation: Operation, subjects: Union[str, Iterable[str]]) -> None:
        names = normalize_subjects(subjects)
        for listener in self.listeners:
            listener.on_mutation(operation, names)


class PackageHost:
    """Base class for package managers whose changes get snapshotted."""

    def __init__(self):
        self.hooks = HookRegistry()

    def intercepted_operations(self) -> List[str]:
        """Names of the intercepted entry points this host actually defines."""
        return [
            name for name in INTERCEPTED_OPERATIONS
            if callable(getattr(self, name, None))
        ]


def _default_subjects(args: Tuple[Any, ...], kwargs: dict, result: Any):
    if args:
        return args[0]
    for key in ('name', 'names', 'package', 'packages'):
        if key in kwargs:
            return kwargs[key]
    return ()


def tracked(operation: Union[Operation, str], subjects: SubjectsSpec = None):
    """
    Decorator that reports a host method as a package mutation.

    The notification is sent after the method returns; a method that
    raises reports nothing.

    Args:
        operation: The mutation the method performs
        subjects: Callable ``(args, kwargs, result)`` returning the package
            name(s). Defaults to the first positional argument.
    """
    op = Operation.parse(operation)
    pick = subjects or _default_subjects

    def decorator(func):

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            result = func(self, *args, **kwargs)
            self.hooks.after_mutation(op, pick(args, kwargs, result))
            return result

        wrapper.pkgsnap_operation = op
        return wrapper
    return decorator


def batched(label: str):
    """
    Decorator for bulk host methods whose nested mutations share one commit.

    The batch is closed even if the method raises.
    """
    def decorator(func):

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            self.hooks.before_batch(label)
            try:
                return func(self, *args, **kwargs)
            finally:
                self.hooks.after_batch(label)

        wrapper.pkgsnap_batch = label
        return wrapper
    return decorator
