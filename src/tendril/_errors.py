"""Tendril error hierarchy.

All tendril-specific errors inherit from TendrilError for easy catching.
Errors raised by a resource's computation are not wrapped: they are carried
as data in ``Failed(error)``.
"""


class TendrilError(Exception):
    """Base error for all tendril operations."""


class ConfigurationError(TendrilError):
    """Invalid construction parameters or configuration values."""


class ReactiveCycleError(TendrilError):
    """A resource kept restarting itself from inside its own tracked prefix."""


class ResourceDisposedError(TendrilError):
    """A disposed resource was asked to restart."""
