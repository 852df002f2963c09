"""Daemon settings and the optional YAML configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from .broadcast import BROADCAST_ADDRESS, DEFAULT_PORT
from .errors import ConfigError
from .packet import active_mask, check_pin
from .runtime import DEFAULT_HEARTBEAT, DEFAULT_INTERVAL
from .sysfs import DEFAULT_SYSFS_ROOT


@dataclass
class BeaconConfig:
    """Everything the daemon needs to start polling.

    ``pins`` are assumed to be configured as inputs already; ``inputs`` are
    configured by the daemon before polling starts.
    """

    pins: List[int] = field(default_factory=list)
    inputs: List[int] = field(default_factory=list)
    port: int = DEFAULT_PORT
    heartbeat: int = DEFAULT_HEARTBEAT
    interval: float = DEFAULT_INTERVAL
    sysfs_root: str = DEFAULT_SYSFS_ROOT
    broadcast_address: str = BROADCAST_ADDRESS
    verbosity: int = 1

    @property
    def pin_set(self) -> Tuple[int, ...]:
        """Ordered pin set to poll.

        Explicit ``pins`` replace the configured ``inputs`` entirely.
        """
        return tuple(self.pins) if self.pins else tuple(self.inputs)

    @property
    def active_mask(self) -> int:
        return active_mask(self.pin_set)

    def validate(self) -> "BeaconConfig":
        for name in ("pins", "inputs"):
            values = getattr(self, name)
            for pin in values:
                try:
                    check_pin(pin)
                except ValueError as exc:
                    raise ConfigError(str(exc)) from exc
            if len(set(values)) != len(values):
                raise ConfigError(f"Duplicate GPIO in {name}: {values}")
        if not self.pin_set:
            raise ConfigError("At least one GPIO needs to be specified!")
        if not 1 <= int(self.port) <= 0xFFFF:
            raise ConfigError(f"Invalid port: {self.port}")
        if int(self.heartbeat) < 1:
            raise ConfigError(f"Heartbeat must be at least 1 tick, got {self.heartbeat}")
        if float(self.interval) < 0:
            raise ConfigError(f"Interval must not be negative, got {self.interval}")
        return self


def load_config(path: str | Path) -> BeaconConfig:
    """Load a BeaconConfig from a YAML mapping."""
    return BeaconConfig(**load_config_mapping(path))


def load_config_mapping(path: str | Path) -> Dict[str, Any]:
    """Load and type-check the YAML file, returning BeaconConfig keyword args."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping in {path}")

    known = {f.name for f in fields(BeaconConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown key(s) {', '.join(unknown)}")

    out: Dict[str, Any] = {}
    for key, value in data.items():
        try:
            if key in ("pins", "inputs"):
                out[key] = _int_list(value)
            elif key in ("port", "heartbeat", "verbosity"):
                out[key] = int(value)
            elif key == "interval":
                out[key] = float(value)
            else:
                out[key] = str(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{path}: invalid value for {key}: {value!r}") from exc
    return out


def _int_list(value: Any) -> List[int]:
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    out = []
    for item in value:
        if isinstance(item, bool):
            raise ValueError(f"not an integer: {item!r}")
        out.append(int(item))
    return out
