"""tendril: reactive async resources and bounded event logs for Python UIs."""

from importlib.metadata import version as _version

__version__ = _version("tendril")

from tendril._errors import ConfigurationError, ReactiveCycleError, ResourceDisposedError, TendrilError
from tendril._tracking import TrackingContext, get_pending_count, set_scheduler
from tendril.action import action, transaction
from tendril.config import TendrilConfig, configure, get_config, reset_config
from tendril.effect import Effect, effect, reaction
from tendril.eventlog import BoundedEventLog
from tendril.events import FocusEvent, KeyEvent, Modifiers, PointerEvent, ScrollEvent, UIEvent, WheelEvent
from tendril.memo import Memo, memo
from tendril.resource import Failed, Pending, Ready, Resource, ResourceState, resource
from tendril.signal import Signal
# textual bridge and demos NOT auto-imported: opt-in only

__all__ = [
    "Signal",
    "Memo",
    "memo",
    "Effect",
    "effect",
    "reaction",
    "Resource",
    "resource",
    "ResourceState",
    "Pending",
    "Ready",
    "Failed",
    "BoundedEventLog",
    "UIEvent",
    "PointerEvent",
    "WheelEvent",
    "KeyEvent",
    "FocusEvent",
    "ScrollEvent",
    "Modifiers",
    "TrackingContext",
    "action",
    "transaction",
    "get_pending_count",
    "set_scheduler",
    "TendrilConfig",
    "configure",
    "get_config",
    "reset_config",
    "TendrilError",
    "ConfigurationError",
    "ReactiveCycleError",
    "ResourceDisposedError",
]
