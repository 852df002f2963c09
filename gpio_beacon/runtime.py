"""Poll loop that samples the pins and broadcasts their state."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional
import logging
import time

from .broadcast import BroadcastTransmitter
from .state import StateAggregator
from .sysfs import PinReader

LOGGER = logging.getLogger(__name__)

DEFAULT_HEARTBEAT = 30
DEFAULT_INTERVAL = 1.0


class RuntimeState(Enum):
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class BeaconRuntime:
    """Own the pin reader and transmitter for the lifetime of the daemon.

    Every tick refreshes the value mask and transmits when it changed or when
    the tick counter wraps to zero (startup and once per heartbeat period).
    ``request_stop`` only flips a flag, so it is safe to call from a signal
    handler; the loop notices it before the next tick.
    """

    def __init__(
        self,
        aggregator: StateAggregator,
        reader: PinReader,
        transmitter: BroadcastTransmitter,
        heartbeat: int = DEFAULT_HEARTBEAT,
        interval: float = DEFAULT_INTERVAL,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        if heartbeat < 1:
            raise ValueError("heartbeat must be at least one tick")
        self.aggregator = aggregator
        self.reader = reader
        self.transmitter = transmitter
        self.heartbeat = int(heartbeat)
        self.interval = float(interval)
        self._sleep = sleep or time.sleep
        self._running = True
        self._closed = False
        self.tick_count = 0
        self.sent = 0

    @property
    def state(self) -> RuntimeState:
        if self._closed:
            return RuntimeState.STOPPED
        return RuntimeState.RUNNING if self._running else RuntimeState.STOPPING

    @property
    def running(self) -> bool:
        return self._running

    def request_stop(self, _signum=None, _frame=None) -> None:
        self._running = False

    def tick(self) -> bool:
        """Run one poll iteration; returns True if a packet was sent."""
        values, changed = self.aggregator.refresh(self.reader)
        transmit = changed or self.tick_count == 0
        if transmit:
            LOGGER.info("Transmitting %s with mask %s", values, self.aggregator.mask)
            if self.transmitter.send(values, self.aggregator.mask):
                self.sent += 1
        self.tick_count += 1
        if self.tick_count >= self.heartbeat:
            self.tick_count = 0
        return transmit

    def run(self) -> None:
        """Tick until stopped, then release the pin handles and socket."""
        LOGGER.info(
            "Broadcasting GPIOs %s to %s:%s every %ss (heartbeat %s ticks)",
            list(self.aggregator.pins),
            self.transmitter.address,
            self.transmitter.port,
            self.interval,
            self.heartbeat,
        )
        try:
            while self._running:
                self.tick()
                if not self._running:
                    break
                self._sleep(self.interval)
        finally:
            self._running = False
            self.close()
        LOGGER.info("Stopped after %s transmission(s)", self.sent)

    def close(self) -> None:
        if self._closed:
            return
        self.reader.close()
        self.transmitter.close()
        self._closed = True
