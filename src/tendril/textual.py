"""Bridge effects into a Textual app. Opt-in: requires textual.

Both helpers wrap the user callback in the same guard:

- nothing runs while the app is not running or is inside pause(app);
- NoMatches raised by widget queries is ignored (the widget is gone or not
  mounted yet);
- runs triggered from another thread are handed to app.call_from_thread,
  which blocks until the callback has run on the app thread.

An effect that has never read a source (its first run was skipped, or it
hit NoMatches before reading anything) is not subscribed to anything yet.
Such effects are remembered per app and run again by catch_up(app), which
pause() calls on exit.

Only this module touches _paused_apps and _unarmed. An app id is in
_paused_apps exactly while a pause(app) block is active.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from tendril.effect import effect as _effect, reaction as _reaction

_paused_apps: set[int] = set()

# id(app) -> effects still waiting for a run that subscribes them
_unarmed: dict[int, set] = {}


@contextmanager
def pause(app):
    """Hold back guarded callbacks, e.g. while widgets are being replaced."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)
        catch_up(app)


def is_safe(app) -> bool:
    """True when the app's widget tree can be queried."""
    return app.is_running and id(app) not in _paused_apps


def catch_up(app) -> None:
    """Re-run effects of *app* that have not subscribed to anything yet.

    Call it once the app is running if effects were created before that.
    """
    if not is_safe(app):
        return
    for e in _unarmed.pop(id(app), ()):
        e._run()


def _on_app_thread(app, callback):
    """Wrap callback so it runs on the app thread with NoMatches ignored.

    The wrapper returns False when the callback hit NoMatches.
    """
    owner = threading.get_ident()

    def _call(*args):
        try:
            callback(*args)
        except NoMatches:
            return False
        return True

    def _dispatch(*args):
        if threading.get_ident() == owner:
            return _call(*args)
        return app.call_from_thread(_call, *args)

    return _dispatch


def effect(app, fn):
    """effect() whose runs are skipped while the app is unsafe.

    A skipped run re-reads the sources of the last real run, so the effect
    stays subscribed and renders on the next change.
    """
    dispatch = _on_app_thread(app, fn)
    last_sources = [frozenset()]

    def _guarded(ctx):
        if is_safe(app):
            rendered = dispatch(ctx)
            last_sources[0] = ctx.owner.dependencies
        else:
            rendered = False
            for source in last_sources[0]:
                ctx.read(source)
        if not rendered and not last_sources[0]:
            _unarmed.setdefault(id(app), set()).add(ctx.owner)

    return _effect(_guarded)


def reaction(app, data_fn, effect_fn, *, fire_immediately=False):
    """reaction() whose effect_fn is skipped while the app is unsafe.

    data_fn still runs, so the reaction keeps tracking its sources.
    """
    dispatch = _on_app_thread(app, effect_fn)

    def _guarded(value):
        if is_safe(app):
            dispatch(value)

    return _reaction(data_fn, _guarded, fire_immediately=fire_immediately)
