"""Bounded event log: the last N events, oldest first.

Stores events in a ring buffer (``deque`` with ``maxlen``). When the buffer
is full, appending evicts the oldest record in the same step, so the length
never exceeds the capacity. Eviction is strictly FIFO: no priorities, no
deduplication.

The log is a reactive source: read it through a TrackingContext and the
reader re-runs after every push.

Thread Safety:
    Mutations and snapshots are protected by a ``threading.Lock``. Observer
    notification is marshaled to the scheduler thread (see set_scheduler).

"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

from tendril import _anchor
from tendril._errors import ConfigurationError
from tendril._tracking import Source, TrackingContext, marshal, notify, read_through
from tendril.config import get_config

logger = logging.getLogger("tendril.eventlog")

T = TypeVar("T")


def _validate_capacity(capacity: object) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise ConfigurationError(f"capacity must be an int, got {type(capacity).__name__}")
    if capacity < 1:
        raise ConfigurationError(f"capacity must be at least 1, got {capacity}")
    return capacity


class BoundedEventLog(Source, Generic[T]):
    """Fixed-capacity, insertion-ordered buffer of events.

    Args:
        capacity: Maximum number of events to retain. Defaults to
            ``TendrilConfig.default_log_capacity``. Zero, negative and
            non-integer values raise ConfigurationError.

    """

    __slots__ = ("_id", "_lock", "_capacity")

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is None:
            capacity = get_config().default_log_capacity
        self._capacity = _validate_capacity(capacity)
        self._id = _anchor.new_id()
        self._lock = threading.Lock()
        _anchor.values[self._id] = deque(maxlen=self._capacity)
        _anchor.observers[self._id] = set()

    @property
    def _records(self) -> deque[T]:
        return _anchor.values[self._id]

    @property
    def capacity(self) -> int:
        return self._capacity

    # --- Write operations (notify) ---

    def push(self, event: T) -> None:
        """Append an event, evicting the oldest one when full."""
        with self._lock:
            records = self._records
            if len(records) == self._capacity:
                logger.debug("Evicting %r", records[0])
            records.append(event)
        marshal(self._notify)

    def clear(self) -> int:
        """Clear all events and return the count that was cleared."""
        with self._lock:
            count = len(self._records)
            self._records.clear()
        if count:
            marshal(self._notify)
        return count

    # --- Read operations ---

    def iter(self, ctx: TrackingContext | None = None) -> tuple[T, ...]:
        """Snapshot of the current events, oldest first.

        With a context, the reader is re-run after every push.
        """
        return read_through(self, ctx)

    def get_untracked(self) -> tuple[T, ...]:
        with self._lock:
            return tuple(self._records)

    def __iter__(self) -> Iterator[T]:
        return iter(self.get_untracked())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def dispose(self) -> None:
        """Drop all events and observers. Called when the owning view goes away."""
        with self._lock:
            self._records.clear()
        _anchor.observers[self._id].clear()

    # --- Graph plumbing ---

    def _notify(self) -> None:
        notify(_anchor.observers[self._id])

    def __repr__(self) -> str:
        return f"BoundedEventLog({len(self)}/{self._capacity})"
