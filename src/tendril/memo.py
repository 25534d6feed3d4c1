"""Memos: derived state with explicit dependency tracking.

A Memo wraps a function taking a TrackingContext. When evaluated, it records
which sources the function read through the context and caches the result.
When any dependency changes, the cached value is invalidated. On next read,
it re-evaluates.

Memos are lazy: they only recompute when read.

All state lives in _anchor: instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from tendril import _anchor
from tendril._tracking import Source, TrackingContext, notify, read_through

T = TypeVar("T")

_UNSET = object()


class Memo(Source, Generic[T]):
    """A derived value that tracks its dependencies and caches the result."""

    __slots__ = ("_id",)

    def __init__(self, fn: Callable[[TrackingContext], T]) -> None:
        self._id = _anchor.new_id()
        _anchor.derivation_fns[self._id] = fn
        _anchor.values[self._id] = _UNSET
        _anchor.dirty_flags[self._id] = True
        _anchor.dependencies[self._id] = set()
        _anchor.observers[self._id] = set()

    @property
    def _fn(self) -> Callable[[TrackingContext], T]:
        return _anchor.derivation_fns[self._id]

    def read(self, ctx: TrackingContext | None = None) -> T:
        """Read the memoized value. Recomputes if dirty."""
        return read_through(self, ctx)

    def get_untracked(self) -> T:
        if _anchor.dirty_flags[self._id]:
            self._recompute()
        return _anchor.values[self._id]

    def _recompute(self) -> None:
        """Re-evaluate the function, tracking dependencies."""
        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.dependencies[self._id].clear()

        with TrackingContext(self) as ctx:
            _anchor.values[self._id] = self._fn(ctx)

        _anchor.dirty_flags[self._id] = False

    def _run(self) -> None:
        """Called by the scheduler when a dependency changed.

        For Memo, we mark dirty and propagate to our own observers.
        We don't recompute eagerly: that happens on next read.
        """
        if not _anchor.dirty_flags[self._id]:
            _anchor.dirty_flags[self._id] = True
            notify(_anchor.observers[self._id])

    def dispose(self) -> None:
        """Disconnect from all dependencies. The memo becomes inert."""
        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.dependencies[self._id].clear()
        _anchor.observers[self._id].clear()
        _anchor.dirty_flags[self._id] = True
        _anchor.values[self._id] = _UNSET

    def __repr__(self) -> str:
        dirty = _anchor.dirty_flags[self._id]
        val = _anchor.values[self._id]
        state = "dirty" if dirty else f"cached={val!r}"
        return f"Memo({getattr(self._fn, '__name__', 'fn')}, {state})"


def memo(fn: Callable[[TrackingContext], T]) -> Memo[T]:
    """Decorator/factory to create a Memo from a function.

    Usage:
        counter = Signal(0)

        @memo
        def doubled(ctx):
            return ctx.read(counter) * 2

        doubled.read()  # 0
        counter.write(5)
        doubled.read()  # 10
    """
    return Memo(fn)
