"""Effects: side effects triggered by reactive state changes.

An Effect is eager: it re-runs as soon as a source it read changes, where a
Memo waits to be read. Presentation code renders from effects. Read a
Resource or a BoundedEventLog through the context and the effect renders
again whenever either one changes.

- effect(fn): run fn(ctx) now and after every change to what it read.
- reaction(data_fn, effect_fn): track data_fn(ctx) and hand its result to
  effect_fn, but only when the result differs from the previous one.

State lives in _anchor; instances only hold an _id.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from tendril import _anchor
from tendril._tracking import TrackingContext

T = TypeVar("T")

_UNSET = object()


class _Tracked:
    """Shared lifecycle of eager derivations: track, re-track, dispose."""

    __slots__ = ("_id",)

    def __init__(self, fn: Callable[[TrackingContext], object]) -> None:
        self._id = _anchor.new_id()
        _anchor.derivation_fns[self._id] = fn
        _anchor.dependencies[self._id] = set()
        _anchor.disposed[self._id] = False

    @property
    def dependencies(self) -> frozenset:
        """Sources read during the last run."""
        return frozenset(_anchor.dependencies[self._id])

    @property
    def disposed(self) -> bool:
        return _anchor.disposed[self._id]

    def _forget_dependencies(self) -> None:
        deps = _anchor.dependencies[self._id]
        for dep in deps:
            dep._remove_observer(self)
        deps.clear()

    def _track(self):
        self._forget_dependencies()
        with TrackingContext(self) as ctx:
            return _anchor.derivation_fns[self._id](ctx)

    def dispose(self) -> None:
        """Stop reacting. Disconnects from every source."""
        _anchor.disposed[self._id] = True
        self._forget_dependencies()

    def __repr__(self) -> str:
        fn = _anchor.derivation_fns[self._id]
        status = "disposed" if _anchor.disposed[self._id] else "active"
        return f"{type(self).__name__.lstrip('_')}({getattr(fn, '__name__', 'fn')}, {status})"


class Effect(_Tracked):
    """A side effect that re-runs whenever its dependencies change."""

    __slots__ = ()

    def __init__(self, fn: Callable[[TrackingContext], None]) -> None:
        super().__init__(fn)

    def _run(self) -> None:
        if not _anchor.disposed[self._id]:
            self._track()


class _Reaction(_Tracked, Generic[T]):
    """Implementation of reaction(): effect_fn sees only changed results."""

    __slots__ = ("_effect_fn", "_last")

    def __init__(self, data_fn: Callable[[TrackingContext], T], effect_fn: Callable[[T], None]) -> None:
        super().__init__(data_fn)
        self._effect_fn = effect_fn
        self._last = _UNSET

    def _run(self) -> None:
        if _anchor.disposed[self._id]:
            return
        value = self._track()
        if self._last is _UNSET or value != self._last:
            self._last = value
            self._effect_fn(value)


def effect(fn: Callable[[TrackingContext], None]) -> Effect:
    """Run fn(ctx) immediately, then re-run whenever any source it read changes.

    Returns the Effect (call .dispose() to stop).

    Usage:
        counter = Signal(0)
        log = []

        e = effect(lambda ctx: log.append(ctx.read(counter)))
        # log == [0]

        counter.write(1)
        # log == [0, 1]

        e.dispose()
        counter.write(2)
        # log == [0, 1]
    """
    e = Effect(fn)
    e._run()
    return e


def reaction(
    data_fn: Callable[[TrackingContext], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
) -> _Reaction[T]:
    """Track data_fn's sources; call effect_fn when the result changes.

    Without fire_immediately, data_fn still runs once up front to subscribe,
    and its first result becomes the baseline later results are compared to.

    Usage:
        breed = Signal("shiba")
        shown = []
        r = reaction(lambda ctx: ctx.read(breed).title(), shown.append)
        # shown == []

        breed.write("akita")
        # shown == ["Akita"]

        r.dispose()
    """
    r = _Reaction(data_fn, effect_fn)
    if fire_immediately:
        r._run()
    else:
        r._last = r._track()
    return r
