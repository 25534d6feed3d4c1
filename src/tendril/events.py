"""UI event records.

A closed set of event shapes a log view can store and render generically.
Each variant is a frozen dataclass carrying its own fields plus:

- ``kind``: the callback that produced it (``"mousemove"``, ``"keydown"``...)
- ``timestamp_ns``: monotonic nanosecond timestamp
- ``describe()``: one-line display string

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Literal


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()


class Modifiers(enum.Flag):
    """Keyboard modifiers held while an event fired."""

    NONE = 0
    SHIFT = enum.auto()
    CTRL = enum.auto()
    ALT = enum.auto()
    META = enum.auto()

    @classmethod
    def from_flags(cls, *, shift=False, ctrl=False, alt=False, meta=False) -> Modifiers:
        mods = cls.NONE
        if shift:
            mods |= cls.SHIFT
        if ctrl:
            mods |= cls.CTRL
        if alt:
            mods |= cls.ALT
        if meta:
            mods |= cls.META
        return mods

    def label(self) -> str:
        names = [m.name.lower() for m in (Modifiers.SHIFT, Modifiers.CTRL, Modifiers.ALT, Modifiers.META) if m in self]
        return "+".join(names) or "none"


# ---------------------------------------------------------------------------
# Pointer events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PointerEvent:
    """A mouse moved, was pressed, released or clicked.

    Attributes:
        kind: Originating callback.
        x: Column relative to the receiving widget.
        y: Row relative to the receiving widget.
        screen_x: Column relative to the screen.
        screen_y: Row relative to the screen.
        button: Button number (0 when none is pressed).
        modifiers: Modifier keys held.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["mousemove", "click", "dblclick", "mousedown", "mouseup"]
    x: int
    y: int
    screen_x: int = 0
    screen_y: int = 0
    button: int = 0
    modifiers: Modifiers = Modifiers.NONE
    timestamp_ns: int = field(default_factory=now_ns)

    def describe(self) -> str:
        return (
            f"{self.kind} at ({self.x}, {self.y}) screen=({self.screen_x}, {self.screen_y}) "
            f"button={self.button} modifiers={self.modifiers.label()}"
        )


@dataclass(frozen=True, slots=True)
class WheelEvent:
    """The mouse wheel turned.

    Attributes:
        delta_x: Horizontal scroll amount (positive is right).
        delta_y: Vertical scroll amount (positive is down).
        x: Column relative to the receiving widget.
        y: Row relative to the receiving widget.
        modifiers: Modifier keys held.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    delta_x: int
    delta_y: int
    x: int = 0
    y: int = 0
    modifiers: Modifiers = Modifiers.NONE
    timestamp_ns: int = field(default_factory=now_ns)
    kind: Literal["wheel"] = "wheel"

    def describe(self) -> str:
        return f"wheel delta=({self.delta_x}, {self.delta_y}) at ({self.x}, {self.y}) modifiers={self.modifiers.label()}"


# ---------------------------------------------------------------------------
# Keyboard and focus events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """A key was pressed. Textual reports presses only, never releases.

    Attributes:
        key: Key name, e.g. ``"a"``, ``"enter"``, ``"ctrl+c"``.
        character: Printable character, if any.
        modifiers: Modifier keys held.
        repeat: True when generated by key auto-repeat.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    key: str
    character: str | None = None
    modifiers: Modifiers = Modifiers.NONE
    repeat: bool = False
    timestamp_ns: int = field(default_factory=now_ns)
    kind: Literal["keydown"] = "keydown"

    def describe(self) -> str:
        char = f" {self.character!r}" if self.character else ""
        repeat = " (repeat)" if self.repeat else ""
        return f"{self.kind} {self.key}{char} modifiers={self.modifiers.label()}{repeat}"


@dataclass(frozen=True, slots=True)
class FocusEvent:
    """A widget gained or lost focus."""

    kind: Literal["focusin", "focusout"]
    target: str = ""
    timestamp_ns: int = field(default_factory=now_ns)

    def describe(self) -> str:
        return f"{self.kind} {self.target}".rstrip()


@dataclass(frozen=True, slots=True)
class ScrollEvent:
    """A scrollable region changed its offset.

    Attributes:
        scroll_x: Horizontal offset.
        scroll_y: Vertical offset.
        max_scroll_x: Largest reachable horizontal offset.
        max_scroll_y: Largest reachable vertical offset.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    scroll_x: float
    scroll_y: float
    max_scroll_x: float = 0
    max_scroll_y: float = 0
    timestamp_ns: int = field(default_factory=now_ns)
    kind: Literal["scroll"] = "scroll"

    def describe(self) -> str:
        return (
            f"scroll offset=({self.scroll_x:g}, {self.scroll_y:g}) "
            f"max=({self.max_scroll_x:g}, {self.max_scroll_y:g})"
        )


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

UIEvent = PointerEvent | WheelEvent | KeyEvent | FocusEvent | ScrollEvent
