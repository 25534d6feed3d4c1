"""Data anchor: plain Python structures that hold all reactive state.

This module stores the raw data for every Signal, Memo, Effect, Resource and
BoundedEventLog. Instances are thin handles holding an ``_id``; separating
data from behavior keeps the graph inspectable from one place.
"""

import itertools

# Source state (Signal, Memo, Resource, BoundedEventLog)
values: dict[int, object] = {}
observers: dict[int, set] = {}  # source_id -> set of derivations

# Derivation state (Memo, Effect, Resource)
dependencies: dict[int, set] = {}  # deriv_id -> set of sources
dirty_flags: dict[int, bool] = {}
derivation_fns: dict[int, object] = {}  # deriv_id -> callable
disposed: dict[int, bool] = {}

# Resource state
generations: dict[int, int] = {}
tasks: dict[int, object] = {}  # resource_id -> asyncio.Task | None

# ID generation: itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)
