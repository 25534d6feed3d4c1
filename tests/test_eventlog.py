"""Tests for BoundedEventLog: FIFO ring buffer feeding a log view."""

import logging
import threading

import pytest

from tendril import BoundedEventLog, ConfigurationError, PointerEvent, configure, effect, set_scheduler


def mouse_moves(n):
    return [PointerEvent("mousemove", x=i, y=i) for i in range(1, n + 1)]


class TestConstruction:
    def test_default_capacity(self):
        assert BoundedEventLog().capacity == 20

    def test_default_capacity_follows_config(self):
        configure(default_log_capacity=5)
        assert BoundedEventLog().capacity == 5

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_rejects_non_positive(self, capacity):
        with pytest.raises(ConfigurationError, match="at least 1"):
            BoundedEventLog(capacity)

    @pytest.mark.parametrize("capacity", [2.5, "20", True])
    def test_rejects_non_int(self, capacity):
        with pytest.raises(ConfigurationError, match="must be an int"):
            BoundedEventLog(capacity)

    def test_starts_empty(self):
        log = BoundedEventLog(3)
        assert len(log) == 0
        assert log.iter() == ()
        assert not log


class TestPush:
    def test_length_never_exceeds_capacity(self):
        log = BoundedEventLog(4)
        for i, event in enumerate(mouse_moves(10), start=1):
            log.push(event)
            assert len(log) == min(i, 4)

    def test_fifo_eviction(self):
        events = [f"e{i}" for i in range(1, 5)]
        log = BoundedEventLog(3)
        for event in events:
            log.push(event)
        assert log.iter() == ("e2", "e3", "e4")

    def test_twenty_five_mouse_moves(self):
        events = mouse_moves(25)
        log = BoundedEventLog(20)
        for event in events:
            log.push(event)
        assert len(log) == 20
        assert list(log) == events[5:]
        assert [e.x for e in log] == list(range(6, 26))

    def test_capacity_one(self):
        log = BoundedEventLog(1)
        log.push("a")
        log.push("b")
        assert log.iter() == ("b",)

    def test_no_dedup(self):
        log = BoundedEventLog(3)
        log.push("same")
        log.push("same")
        assert log.iter() == ("same", "same")

    def test_eviction_logged_at_debug(self, caplog):
        log = BoundedEventLog(1)
        log.push("old")
        with caplog.at_level(logging.DEBUG, logger="tendril.eventlog"):
            log.push("new")
        assert "Evicting 'old'" in caplog.text

    def test_concurrent_pushes_keep_bound(self):
        log = BoundedEventLog(50)

        def worker(offset):
            for i in range(500):
                log.push(offset + i)

        threads = [threading.Thread(target=worker, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(log) == 50


class TestSnapshot:
    def test_snapshot_not_mutated_by_later_pushes(self):
        log = BoundedEventLog(2)
        log.push("a")
        snapshot = log.iter()
        log.push("b")
        log.push("c")
        assert snapshot == ("a",)

    def test_clear(self):
        log = BoundedEventLog(5)
        for item in "abc":
            log.push(item)
        assert log.clear() == 3
        assert len(log) == 0


class TestReactive:
    def test_view_rerenders_on_push(self):
        log = BoundedEventLog(2)
        renders = []
        effect(lambda ctx: renders.append(log.iter(ctx)))
        log.push("a")
        log.push("b")
        log.push("c")
        assert renders == [(), ("a",), ("a", "b"), ("b", "c")]

    def test_untracked_iteration_does_not_subscribe(self):
        log = BoundedEventLog(2)
        renders = []
        effect(lambda ctx: renders.append(tuple(log)))
        log.push("a")
        assert renders == [()]

    def test_background_push_marshals_notification(self):
        calls = []
        set_scheduler(lambda f: (calls.append(f), f()))
        log = BoundedEventLog(2)
        renders = []
        effect(lambda ctx: renders.append(log.iter(ctx)))

        t = threading.Thread(target=log.push, args=("a",))
        t.start()
        t.join()

        assert len(calls) == 1
        assert renders == [(), ("a",)]

    def test_dispose_detaches_views(self):
        log = BoundedEventLog(2)
        renders = []
        effect(lambda ctx: renders.append(log.iter(ctx)))
        log.dispose()
        log.push("a")
        assert renders == [()]
        assert log.iter() == ("a",)
