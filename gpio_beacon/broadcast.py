"""UDP broadcast transmitter for beacon packets."""

from __future__ import annotations

from typing import Optional, Tuple
import logging
import socket

from .errors import BroadcastError
from .packet import encode

LOGGER = logging.getLogger(__name__)

DEFAULT_PORT = 12121
BROADCAST_ADDRESS = "255.255.255.255"


class BroadcastTransmitter:
    """Send beacon packets from one lazily created broadcast socket."""

    def __init__(self, port: int = DEFAULT_PORT, address: str = BROADCAST_ADDRESS) -> None:
        self.port = int(port)
        self.address = address
        self._sock: Optional[socket.socket] = None
        self._fileno = -1

    @property
    def destination(self) -> Tuple[str, int]:
        return (self.address, self.port)

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def ensure_socket(self) -> socket.socket:
        """Return the broadcast socket, creating it on first use."""
        if self._sock is not None:
            return self._sock
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as exc:
            raise BroadcastError(f"Cannot create UDP socket: {exc.strerror or exc}") from exc
        for name, option in (("SO_REUSEADDR", socket.SO_REUSEADDR), ("SO_BROADCAST", socket.SO_BROADCAST)):
            try:
                sock.setsockopt(socket.SOL_SOCKET, option, 1)
            except OSError as exc:
                LOGGER.warning("Cannot set %s: %s", name, exc.strerror or exc)
        self._sock = sock
        self._fileno = sock.fileno()
        LOGGER.debug("Broadcast socket %s ready for %s:%s", self._fileno, self.address, self.port)
        return sock

    def send(self, values: int, mask: int) -> bool:
        """Broadcast one packet; returns False if the send failed."""
        sock = self.ensure_socket()
        payload = encode(values, mask)
        try:
            sock.sendto(payload, self.destination)
        except OSError as exc:
            LOGGER.error("Cannot send to socket %s on port %s: %s", self._fileno, self.port, exc.strerror or exc)
            return False
        return True

    def close(self) -> None:
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        try:
            sock.close()
        except OSError:
            pass
