"""Log every event a widget receives.

Mouse, click, wheel, key, focus and scroll events are converted into
tendril UI event records and pushed into a bounded log; an effect renders
the log whenever it changes. Only the latest 20 events are kept; ctrl+l
clears the log.
"""

from __future__ import annotations

import logging

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.widgets import Static

from tendril import textual as ttx
from tendril.eventlog import BoundedEventLog
from tendril.events import FocusEvent, KeyEvent, Modifiers, PointerEvent, ScrollEvent, UIEvent, WheelEvent

logger = logging.getLogger("tendril.demos.all_events")

RANDOM_TEXT = "This is some random repeating text. " * 1000

_MODIFIER_KEYS = {"shift": "shift", "ctrl": "ctrl", "alt": "alt", "meta": "meta", "super": "meta"}


def pointer_event(kind: str, mouse) -> PointerEvent:
    """Build a PointerEvent from anything shaped like a Textual mouse event."""
    return PointerEvent(
        kind,
        x=int(mouse.x),
        y=int(mouse.y),
        screen_x=int(mouse.screen_x),
        screen_y=int(mouse.screen_y),
        button=mouse.button,
        modifiers=Modifiers.from_flags(shift=mouse.shift, ctrl=mouse.ctrl, meta=mouse.meta),
    )


def wheel_event(delta_y: int, mouse) -> WheelEvent:
    return WheelEvent(
        delta_x=0,
        delta_y=delta_y,
        x=int(mouse.x),
        y=int(mouse.y),
        modifiers=Modifiers.from_flags(shift=mouse.shift, ctrl=mouse.ctrl, meta=mouse.meta),
    )


def key_event(key) -> KeyEvent:
    """Build a KeyEvent from a Textual key event; modifiers come from the key name."""
    *prefix, _ = key.key.split("+")
    flags = {_MODIFIER_KEYS[p]: True for p in prefix if p in _MODIFIER_KEYS}
    return KeyEvent(key=key.key, character=key.character, modifiers=Modifiers.from_flags(**flags))


class EventReceiver(Static):
    """Focusable area that forwards everything it receives to the log."""

    can_focus = True

    def __init__(self, event_log: BoundedEventLog[UIEvent], **kwargs) -> None:
        super().__init__("Hover, click, type or scroll to see the info down below", **kwargs)
        self.event_log = event_log

    def on_mouse_move(self, event: events.MouseMove) -> None:
        self.event_log.push(pointer_event("mousemove", event))

    def on_mouse_down(self, event: events.MouseDown) -> None:
        self.event_log.push(pointer_event("mousedown", event))

    def on_mouse_up(self, event: events.MouseUp) -> None:
        self.event_log.push(pointer_event("mouseup", event))

    def on_click(self, event: events.Click) -> None:
        kind = "dblclick" if getattr(event, "chain", 1) >= 2 else "click"
        self.event_log.push(pointer_event(kind, event))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self.event_log.push(wheel_event(1, event))

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self.event_log.push(wheel_event(-1, event))

    def on_key(self, event: events.Key) -> None:
        self.event_log.push(key_event(event))

    def on_focus(self, event: events.Focus) -> None:
        self.event_log.push(FocusEvent("focusin", target=self.id or ""))

    def on_blur(self, event: events.Blur) -> None:
        self.event_log.push(FocusEvent("focusout", target=self.id or ""))


class AllEventsApp(App):
    """Receiver on top, scrollable text in the middle, event log below."""

    TITLE = "All events"
    CSS = """
    #receiver { height: 5; border: round $accent; content-align: center middle; }
    #receiver:focus { border: round $success; }
    #scroller { height: 12; border: solid $panel; padding: 0 2; }
    #log { height: 1fr; padding: 0 1; }
    """
    BINDINGS = [Binding("ctrl+l", "clear_log", "Clear log", priority=True)]

    def __init__(self, capacity: int | None = None) -> None:
        super().__init__()
        self.event_log: BoundedEventLog[UIEvent] = BoundedEventLog(capacity)
        self._log_view = None

    def compose(self) -> ComposeResult:
        with Vertical(id="container"):
            yield EventReceiver(self.event_log, id="receiver")
            with VerticalScroll(id="scroller"):
                yield Static(RANDOM_TEXT, markup=False)
            yield Static(id="log", markup=False)

    def on_ready(self) -> None:
        self.watch(self.query_one("#scroller", VerticalScroll), "scroll_y", self._on_scroll, init=False)
        self._log_view = ttx.effect(self, self._render_log)
        self.query_one(EventReceiver).focus()
        logger.info("Logging the last %d events", self.event_log.capacity)

    def on_unmount(self) -> None:
        if self._log_view is not None:
            self._log_view.dispose()
        self.event_log.dispose()

    def action_clear_log(self) -> None:
        logger.info("Cleared %d events", self.event_log.clear())

    def _on_scroll(self, scroll_y: float) -> None:
        scroller = self.query_one("#scroller", VerticalScroll)
        self.event_log.push(
            ScrollEvent(
                scroll_x=scroller.scroll_x,
                scroll_y=scroll_y,
                max_scroll_x=scroller.max_scroll_x,
                max_scroll_y=scroller.max_scroll_y,
            )
        )

    def _render_log(self, ctx) -> None:
        lines = [event.describe() for event in self.event_log.iter(ctx)]
        self.query_one("#log", Static).update("\n".join(lines))


def main() -> None:
    AllEventsApp().run()


if __name__ == "__main__":
    main()
