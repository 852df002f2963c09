"""Exception types raised by gpio_beacon."""

from __future__ import annotations


class BeaconError(RuntimeError):
    """Base class for fatal gpio_beacon errors."""


class ConfigError(BeaconError):
    """Raised when the pin set or daemon settings are invalid."""


class PinConfigError(BeaconError):
    """Raised when a pin cannot be configured as an input."""


class PinOpenError(BeaconError):
    """Raised when a pin's value file cannot be opened."""


class BroadcastError(BeaconError):
    """Raised when the broadcast socket cannot be created."""
