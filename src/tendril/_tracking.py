"""Dependency tracking engine: the heart of tendril.

Reactive functions receive an explicit TrackingContext. Reads made through
``ctx.read(source)`` while the context is open register the source as a
dependency of the context's owner, building the graph automatically.

Batching: mutations inside an @action or `with transaction()` accumulate
invalidations and flush them once at the end, ensuring glitch-free updates.

Thread marshaling: call set_scheduler() once from the owner thread. After
that, notifications triggered from other threads are handed to the scheduler
instead of running in place.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Callable

from tendril import _anchor

if TYPE_CHECKING:
    from tendril.effect import Effect
    from tendril.memo import Memo
    from tendril.resource import Resource

    Derivation = Memo | Effect | Resource


class TrackingContext:
    """Explicit tracked scope handed to reactive functions.

    While open, ``read()`` subscribes the owner to every source it touches.
    Once closed, ``read()`` only returns values; a Resource closes its
    context at the first suspension point of its computation.
    """

    __slots__ = ("_owner", "_open")

    def __init__(self, owner: Derivation) -> None:
        self._owner = owner
        self._open = True

    @property
    def owner(self) -> Derivation:
        return self._owner

    @property
    def is_open(self) -> bool:
        return self._open

    def read(self, source) -> Any:
        """Read *source*, registering it as a dependency while the scope is open."""
        if self._open:
            source._add_observer(self._owner)
            _anchor.dependencies[self._owner._id].add(source)
        return source.get_untracked()

    def close(self) -> None:
        self._open = False

    def __enter__(self) -> TrackingContext:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"TrackingContext({self._owner!r}, {state})"


def read_through(source, ctx: TrackingContext | None) -> Any:
    """Tracked read when a context is given, untracked otherwise."""
    if ctx is None:
        return source.get_untracked()
    return ctx.read(source)


class Source:
    """Mixin for anything a TrackingContext can read.

    Subclasses set ``_id`` and register an observer set in _anchor, and
    implement ``get_untracked()``.
    """

    __slots__ = ()

    def _add_observer(self, observer) -> None:
        _anchor.observers[self._id].add(observer)

    def _remove_observer(self, observer) -> None:
        _anchor.observers[self._id].discard(observer)


# Batch depth counter. When > 0, invalidations are deferred.
_batch_depth: int = 0

# Derivations that were invalidated during a batch, awaiting flush.
_pending: set[Derivation] = set()


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush pending derivations."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def schedule(derivation: Derivation) -> None:
    """Schedule a derivation for re-evaluation.

    If inside a batch, defers. Otherwise, runs immediately.
    """
    if _batch_depth > 0:
        _pending.add(derivation)
    else:
        derivation._run()


def notify(observers: set) -> None:
    """Schedule every observer in a snapshot of *observers*."""
    for observer in list(observers):
        schedule(observer)


def _flush_pending() -> None:
    """Run all pending derivations. Handles derivations scheduled during flush."""
    while _pending:
        # Snapshot and clear: derivations may schedule new ones during run.
        batch = list(_pending)
        _pending.clear()
        for derivation in batch:
            derivation._run()


def get_pending_count() -> int:
    """Number of derivations waiting to run. Useful for testing."""
    return len(_pending)


# ─── Auto-marshal ────────────────────────────────────────────────────────────
_scheduler: Callable[[Callable[[], None]], Any] | None = None
_scheduler_thread: threading.Thread | None = None


def set_scheduler(scheduler: Callable[[Callable[[], None]], Any] | None) -> None:
    """Set the global thread scheduler for cross-thread mutations.

    Call once from the thread that owns the event loop:
        tendril.set_scheduler(loop.call_soon_threadsafe)

    After this, any Signal.write() or BoundedEventLog.push() notification
    from another thread is handed to the scheduler. Owner-thread mutations
    remain synchronous. Pass None to uninstall.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread() if scheduler is not None else None


def marshal(fn: Callable[[], None]) -> None:
    """Run fn on the scheduler thread, or in place when already there."""
    if _scheduler is not None and threading.current_thread() != _scheduler_thread:
        _scheduler(fn)
    else:
        fn()
