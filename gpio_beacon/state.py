"""Aggregate per-pin reads into the 64-bit value mask."""

from __future__ import annotations

from typing import Iterable, Tuple
import logging

from .packet import active_mask
from .sysfs import PinReader

LOGGER = logging.getLogger(__name__)


class StateAggregator:
    """Track the value mask of an ordered, fixed pin set."""

    def __init__(self, pins: Iterable[int]) -> None:
        self.pins = tuple(pins)
        self.mask = active_mask(self.pins)
        self.values = 0

    def refresh(self, reader: PinReader) -> Tuple[int, bool]:
        """Read every pin once and return ``(values, changed)``.

        A pin whose read fails keeps its previous bit.
        """
        old = self.values
        values = old
        for pin in self.pins:
            high = reader.read(pin)
            if high is None:
                continue
            bit = 1 << pin
            if high:
                values |= bit
            else:
                values &= ~bit
            LOGGER.debug("GPIO %s is %s", pin, "high" if high else "low")
        self.values = values
        return values, values != old
