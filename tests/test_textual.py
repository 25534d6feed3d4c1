"""Tests for tendril.textual: guarded effects inside a Textual app."""

import threading

import pytest

pytest.importorskip("textual")

from textual.css.query import NoMatches

from tendril import BoundedEventLog, Signal, WheelEvent
from tendril import textual as ttx


class _MockApp:
    """Just enough of textual.App for the bridge: is_running and call_from_thread."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self.marshaled = []

    def call_from_thread(self, fn, *args):
        self.marshaled.append(fn)
        return fn(*args)


@pytest.fixture(autouse=True)
def _forget_unarmed():
    yield
    ttx._unarmed.clear()


def _write_from_thread(signal, value):
    t = threading.Thread(target=signal.write, args=(value,))
    t.start()
    t.join()


class TestIsSafe:
    def test_stopped_app_is_unsafe(self):
        assert not ttx.is_safe(_MockApp(is_running=False))

    def test_pause_is_scoped_to_one_app(self):
        paused, other = _MockApp(), _MockApp()
        with ttx.pause(paused):
            assert not ttx.is_safe(paused)
            assert ttx.is_safe(other)
        assert ttx.is_safe(paused)

    def test_pause_unwinds_on_error(self):
        app = _MockApp()
        with pytest.raises(KeyError):
            with ttx.pause(app):
                raise KeyError("widget")
        assert ttx.is_safe(app)

    def test_pause_leaves_app_attributes_alone(self):
        app = _MockApp()
        before = dict(vars(app))
        with ttx.pause(app):
            assert vars(app) == before


class TestEffect:
    def test_renders_on_setup_and_change(self):
        app = _MockApp()
        breed = Signal("shiba")
        shown = []
        ttx.effect(app, lambda ctx: shown.append(ctx.read(breed)))
        breed.write("akita")
        assert shown == ["shiba", "akita"]

    def test_nothing_runs_before_app_starts(self):
        app = _MockApp(is_running=False)
        breed = Signal("shiba")
        shown = []
        ttx.effect(app, lambda ctx: shown.append(ctx.read(breed)))
        assert shown == []

    def test_paused_change_is_skipped_but_still_subscribed(self):
        app = _MockApp()
        breed = Signal("shiba")
        shown = []
        ttx.effect(app, lambda ctx: shown.append(ctx.read(breed)))
        with ttx.pause(app):
            breed.write("akita")
        breed.write("boxer")
        assert shown == ["shiba", "boxer"]

    def test_missing_widget_is_ignored(self):
        app = _MockApp()
        breed = Signal("shiba")
        runs = []

        def render(ctx):
            runs.append(ctx.read(breed))
            if len(runs) > 1:
                raise NoMatches("#image")

        ttx.effect(app, render)
        breed.write("akita")
        breed.write("boxer")
        assert runs == ["shiba", "akita", "boxer"]

    def test_other_errors_propagate(self):
        app = _MockApp()
        breed = Signal("shiba")

        def render(ctx):
            if ctx.read(breed) == "akita":
                raise ValueError("bad breed")

        ttx.effect(app, render)
        with pytest.raises(ValueError, match="bad breed"):
            breed.write("akita")

    def test_background_write_is_marshaled(self):
        app = _MockApp()
        breed = Signal("shiba")
        shown = []
        ttx.effect(app, lambda ctx: shown.append(ctx.read(breed)))
        _write_from_thread(breed, "akita")
        assert shown == ["shiba", "akita"]
        assert len(app.marshaled) == 1

    def test_catch_up_subscribes_effect_created_before_start(self):
        app = _MockApp(is_running=False)
        breed = Signal("shiba")
        shown = []
        ttx.effect(app, lambda ctx: shown.append(ctx.read(breed)))
        breed.write("akita")
        assert shown == []

        app.is_running = True
        ttx.catch_up(app)
        breed.write("boxer")
        assert shown == ["akita", "boxer"]

    def test_effect_created_while_paused_runs_after_pause(self):
        app = _MockApp()
        breed = Signal("shiba")
        shown = []
        with ttx.pause(app):
            ttx.effect(app, lambda ctx: shown.append(ctx.read(breed)))
            assert shown == []
        assert shown == ["shiba"]
        breed.write("akita")
        assert shown == ["shiba", "akita"]

    def test_missing_widget_before_any_read_is_retried(self):
        app = _MockApp()
        breed = Signal("shiba")
        mounted = [False]
        shown = []

        def render(ctx):
            if not mounted[0]:
                raise NoMatches("#title")
            shown.append(ctx.read(breed))

        ttx.effect(app, render)
        mounted[0] = True
        ttx.catch_up(app)
        breed.write("akita")
        assert shown == ["shiba", "akita"]

    def test_disposed_effect_is_not_caught_up(self):
        app = _MockApp(is_running=False)
        breed = Signal("shiba")
        shown = []
        e = ttx.effect(app, lambda ctx: shown.append(ctx.read(breed)))
        e.dispose()
        app.is_running = True
        ttx.catch_up(app)
        assert shown == []

    def test_renders_event_log(self):
        app = _MockApp()
        log = BoundedEventLog(capacity=2)
        lines = []
        ttx.effect(app, lambda ctx: lines.append([e.describe() for e in log.iter(ctx)]))
        log.push(WheelEvent(0, -1, 2, 5))
        assert lines[-1] == ["wheel delta=(0, -1) at (2, 5) modifiers=none"]


class TestReaction:
    def test_fires_only_on_changed_result(self):
        app = _MockApp()
        count = Signal(1)
        seen = []
        ttx.reaction(app, lambda ctx: ctx.read(count) > 2, seen.append)
        count.write(2)
        count.write(3)
        assert seen == [True]

    def test_paused_change_is_skipped(self):
        app = _MockApp()
        breed = Signal("shiba")
        seen = []
        ttx.reaction(app, lambda ctx: ctx.read(breed), seen.append)
        with ttx.pause(app):
            breed.write("akita")
        breed.write("boxer")
        assert seen == ["boxer"]

    def test_missing_widget_is_ignored(self):
        app = _MockApp()
        breed = Signal("shiba")

        def show(value):
            raise NoMatches("#breed")

        r = ttx.reaction(app, lambda ctx: ctx.read(breed), show)
        breed.write("akita")
        r.dispose()

    def test_background_write_is_marshaled(self):
        app = _MockApp()
        breed = Signal("shiba")
        seen = []
        ttx.reaction(app, lambda ctx: ctx.read(breed), seen.append)
        _write_from_thread(breed, "akita")
        assert seen == ["akita"]
        assert app.marshaled
