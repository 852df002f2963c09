"""gpio_beacon package: sysfs GPIO poller + UDP broadcast beacon."""

__all__ = [
    "broadcast",
    "config",
    "daemon",
    "errors",
    "packet",
    "runtime",
    "state",
    "sysfs",
]
