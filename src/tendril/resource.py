"""Resources: asynchronous computations that restart when their inputs change.

A Resource wraps ``compute(ctx) -> awaitable``. Each run is a *generation*.
The awaitable is started as an eager asyncio task, so the body executes
synchronously up to its first ``await``; sources read through ``ctx`` in
that prefix become the resource's dependencies. Reads after the first
suspension are plain reads.

When a dependency changes (or ``restart()`` is called) the generation is
bumped, the previous task is cancelled, and the state goes back to
``Pending()``. A task only commits its outcome if its generation is still
current, so a superseded run can never overwrite a newer one, even if it
ignores cancellation and finishes anyway.

All state lives in _anchor: instances are thin handles holding an _id.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from tendril import _anchor
from tendril._errors import ConfigurationError, ReactiveCycleError, ResourceDisposedError
from tendril._tracking import Source, TrackingContext, notify, read_through
from tendril.config import get_config

logger = logging.getLogger("tendril.resource")

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Pending:
    """No computation has committed for the current generation yet."""


@dataclass(frozen=True, slots=True)
class Ready(Generic[T]):
    """The current generation completed with ``value``."""

    value: T


@dataclass(frozen=True, slots=True)
class Failed:
    """The current generation raised ``error``. Not retried automatically."""

    error: BaseException


ResourceState = Pending | Ready | Failed

PENDING = Pending()


class Resource(Source, Generic[T]):
    """A cell holding the latest result of an async computation.

    Must be created while an asyncio event loop is running; the resource
    starts its first generation immediately.

    Args:
        compute: Callable taking a TrackingContext and returning an
            awaitable. Called again on every restart, possibly while older
            invocations are still running in the background.

    """

    __slots__ = ("_id", "_loop", "_starting", "_rerun")

    def __init__(self, compute: Callable[[TrackingContext], Awaitable[T]]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise ConfigurationError("Resource must be created inside a running event loop") from None

        self._id = _anchor.new_id()
        self._loop = loop
        self._starting = False
        self._rerun = False
        _anchor.derivation_fns[self._id] = compute
        _anchor.values[self._id] = PENDING
        _anchor.observers[self._id] = set()
        _anchor.dependencies[self._id] = set()
        _anchor.generations[self._id] = 0
        _anchor.tasks[self._id] = None
        _anchor.disposed[self._id] = False
        self._start()

    @property
    def _compute(self) -> Callable[[TrackingContext], Awaitable[T]]:
        return _anchor.derivation_fns[self._id]

    # --- Public surface ---

    @property
    def generation(self) -> int:
        """Number of times the computation has been started."""
        return _anchor.generations[self._id]

    @property
    def dependencies(self) -> frozenset:
        """Sources read during the last synchronous prefix."""
        return frozenset(_anchor.dependencies[self._id])

    @property
    def in_flight(self) -> asyncio.Future | None:
        """Task of the current generation, or None once it has committed."""
        return _anchor.tasks[self._id]

    @property
    def state(self) -> ResourceState:
        return _anchor.values[self._id]

    @property
    def value(self) -> T | None:
        """The Ready value, or None while pending or failed."""
        state = _anchor.values[self._id]
        return state.value if isinstance(state, Ready) else None

    @property
    def disposed(self) -> bool:
        return _anchor.disposed[self._id]

    def read(self, ctx: TrackingContext | None = None) -> ResourceState:
        """Latest committed state. Never blocks.

        With a context, the reader is re-run whenever the state changes.
        """
        return read_through(self, ctx)

    def get_untracked(self) -> ResourceState:
        return _anchor.values[self._id]

    def restart(self) -> None:
        """Start a new generation now, discarding the in-flight one."""
        if _anchor.disposed[self._id]:
            raise ResourceDisposedError(f"{self!r} has been disposed")
        self._request_start()

    async def settled(self) -> ResourceState:
        """Wait until the current generation commits and return its state.

        Follows restarts: if a newer generation starts while waiting, waits
        for that one instead.
        """
        while True:
            generation = _anchor.generations[self._id]
            task = _anchor.tasks[self._id]
            if task is not None:
                await asyncio.wait([task])
                # Commit runs as a done callback; give it a turn.
                await asyncio.sleep(0)
            state = _anchor.values[self._id]
            if _anchor.disposed[self._id] or task is None:
                return state
            if generation == _anchor.generations[self._id] and not isinstance(state, Pending):
                return state

    def dispose(self) -> None:
        """Cancel the in-flight run and disconnect from the graph.

        The last committed state stays readable.
        """
        _anchor.disposed[self._id] = True
        self._cancel_in_flight()
        self._drop_dependencies()
        _anchor.observers[self._id].clear()

    # --- Scheduling ---

    def _run(self) -> None:
        """Called by the scheduler when a dependency changed."""
        if _anchor.disposed[self._id]:
            return
        self._request_start()

    def _request_start(self) -> None:
        if self._loop.is_running() and not self._on_loop():
            # Written from another thread; start on the loop that owns the tasks.
            self._loop.call_soon_threadsafe(self._run)
            return
        if self._starting:
            # Restart asked for from inside our own tracked prefix; replay once it ends.
            self._rerun = True
            return
        self._start()

    def _on_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _start(self) -> None:
        if not self._loop.is_running():
            raise ConfigurationError(f"{self!r} cannot restart: its event loop is not running")

        replays = 0
        while True:
            self._begin_generation()
            if not self._rerun:
                return
            self._rerun = False
            replays += 1
            limit = get_config().max_restart_depth
            if replays >= limit:
                logger.warning(
                    "%r restarted itself %d times from its tracked prefix; giving up", self, replays
                )
                self._cancel_in_flight()
                self._set_state(
                    Failed(ReactiveCycleError(f"resource restarted itself {replays} times while starting"))
                )
                return

    def _begin_generation(self) -> None:
        generation = _anchor.generations[self._id] + 1
        _anchor.generations[self._id] = generation
        self._cancel_in_flight()
        self._drop_dependencies()
        logger.debug("Starting %r generation %d", self, generation)

        # Observers notified of Pending below may ask for a restart; those
        # requests are replayed by _start instead of nesting a generation.
        self._starting = True
        try:
            self._set_state(PENDING)
            try:
                with TrackingContext(self) as ctx:
                    task = self._spawn(self._compute(ctx))
            except Exception as exc:
                # compute() raised before handing back an awaitable.
                self._set_state(Failed(exc))
                return
        finally:
            self._starting = False

        _anchor.tasks[self._id] = task
        task.add_done_callback(functools.partial(self._on_done, generation))

    def _spawn(self, awaitable: Awaitable[T]) -> asyncio.Future:
        if inspect.iscoroutine(awaitable):
            # Eager start: the coroutine runs up to its first await right here,
            # while the tracking context is still open.
            return asyncio.Task(awaitable, loop=self._loop, eager_start=True)
        return asyncio.ensure_future(awaitable, loop=self._loop)

    def _on_done(self, generation: int, task: asyncio.Future) -> None:
        if (
            _anchor.disposed[self._id]
            or generation != _anchor.generations[self._id]
            or task is not _anchor.tasks[self._id]
        ):
            if not task.cancelled():
                task.exception()  # mark retrieved; the outcome is stale
            logger.debug("Discarded stale result of %r generation %d", self, generation)
            return

        _anchor.tasks[self._id] = None
        if task.cancelled():
            self._set_state(Failed(asyncio.CancelledError()))
            return
        error = task.exception()
        self._set_state(Ready(task.result()) if error is None else Failed(error))

    def _cancel_in_flight(self) -> None:
        task = _anchor.tasks[self._id]
        _anchor.tasks[self._id] = None
        if task is not None and not task.done():
            task.cancel()

    def _drop_dependencies(self) -> None:
        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.dependencies[self._id].clear()

    def _set_state(self, state: ResourceState) -> None:
        old = _anchor.values[self._id]
        if old is not state and old != state:
            _anchor.values[self._id] = state
            notify(_anchor.observers[self._id])

    def __repr__(self) -> str:
        name = getattr(self._compute, "__name__", "compute")
        return f"Resource({name}, generation={_anchor.generations[self._id]})"


def resource(compute: Callable[[TrackingContext], Awaitable[T]]) -> Resource[T]:
    """Decorator/factory to create a Resource from an async function.

    Usage:
        breed = Signal("shiba")

        @resource
        async def image(ctx):
            name = ctx.read(breed)          # tracked: before the first await
            return await fetch_image(name)  # restarts when breed changes

        match image.read():
            case Ready(value=url): ...
            case Failed(error=err): ...
            case Pending(): ...
    """
    return Resource(compute)
