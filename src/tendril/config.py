"""Tendril configuration.

TendrilConfig is a frozen value; ``configure()`` swaps in a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from tendril._errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class TendrilConfig:
    """Library-wide defaults.

    Attributes:
        default_log_capacity: Capacity used by ``BoundedEventLog()`` when no
            capacity is given.
        max_restart_depth: How many times a resource may re-request its own
            restart from inside its tracked prefix before it fails with
            ``ReactiveCycleError``.

    """

    default_log_capacity: int = 20
    max_restart_depth: int = 100

    def __post_init__(self) -> None:
        for name in ("default_log_capacity", "max_restart_depth"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")


_config = TendrilConfig()


def get_config() -> TendrilConfig:
    return _config


def configure(**overrides) -> TendrilConfig:
    """Replace the active configuration. Unknown keys raise ConfigurationError."""
    global _config
    unknown = set(overrides) - set(TendrilConfig.__dataclass_fields__)
    if unknown:
        raise ConfigurationError(f"Unknown config keys: {', '.join(sorted(unknown))}")
    _config = replace(_config, **overrides)
    return _config


def reset_config() -> None:
    """Restore the defaults. Useful for testing."""
    global _config
    _config = TendrilConfig()
