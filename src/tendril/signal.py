"""Signals: mutable state that tracks its readers.

When a Signal is read through a TrackingContext, the dependency is
registered on the context's owner. When the Signal changes, all dependents
are scheduled for re-evaluation.

All state lives in _anchor: instances are thin handles holding an _id.

Thread safety: call set_scheduler() once from the owner thread. After that,
any .write() from a background thread is auto-marshaled. Owner-thread
writes remain synchronous.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from tendril import _anchor
from tendril._tracking import Source, TrackingContext, marshal, notify, read_through

T = TypeVar("T")


class Signal(Source, Generic[T]):
    """A single reactive value with explicit dependency tracking."""

    __slots__ = ("_id",)

    def __init__(self, value: T) -> None:
        self._id = _anchor.new_id()
        _anchor.values[self._id] = value
        _anchor.observers[self._id] = set()

    def read(self, ctx: TrackingContext | None = None) -> T:
        """Read the value. With a context, registers the dependency."""
        return read_through(self, ctx)

    def get_untracked(self) -> T:
        """Read the value without registering anything."""
        return _anchor.values[self._id]

    def write(self, value: T) -> None:
        """Write a new value. Auto-marshals from background threads."""
        marshal(lambda v=value: self._write_direct(v))

    def update(self, fn: Callable[[T], T]) -> None:
        """Write fn(current value)."""
        self.write(fn(_anchor.values[self._id]))

    def _write_direct(self, value: T) -> None:
        """Set value and notify. Always runs on the scheduler thread."""
        old = _anchor.values[self._id]
        if old is not value and old != value:
            _anchor.values[self._id] = value
            notify(_anchor.observers[self._id])

    def __repr__(self) -> str:
        return f"Signal({_anchor.values[self._id]!r})"
