"""Actions and transactions: batched state mutations.

Wrapping writes in an @action or `with transaction()` defers every effect,
memo and resource invalidation until the outermost scope exits. A resource
that depends on two signals written in one transaction restarts once, not
twice, so no intermediate generation is ever started.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Iterator, ParamSpec, TypeVar

from tendril._tracking import begin_batch, end_batch

P = ParamSpec("P")
R = TypeVar("R")


@contextmanager
def transaction() -> Iterator[None]:
    """Batch writes made inside the block.

    Nested transactions join the outermost one; dependents run once it
    exits, even if the block raised.

    Usage:
        with transaction():
            breed.write("akita")
            sub_breed.write(None)
            # dependents run here, after both are written
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: run fn inside a transaction.

    Usage:
        breed = Signal("shiba")
        sub_breed = Signal(None)

        @action
        def pick(name, sub):
            breed.write(name)
            sub_breed.write(sub)
            # a resource reading both restarts once, with both values
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with transaction():
            return fn(*args, **kwargs)

    return wrapper
