"""Wire format for gpio_beacon datagrams.

Each datagram is exactly 16 bytes: the value mask followed by the active
mask, both unsigned 64-bit big-endian integers. Bit N of either field refers
to GPIO N.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List
import struct

PACKET_FORMAT = ">QQ"
PACKET_SIZE = struct.calcsize(PACKET_FORMAT)
MAX_PINS = 64
MASK_64 = (1 << MAX_PINS) - 1


@dataclass(frozen=True)
class BeaconPacket:
    """Decoded (values, mask) pair carried by one datagram."""

    values: int
    mask: int

    def pins(self) -> List[int]:
        """Return the active pins in ascending order."""
        return [pin for pin in range(MAX_PINS) if self.mask & (1 << pin)]

    def states(self) -> Dict[int, bool]:
        """Return the reported level of every active pin."""
        return {pin: bool(self.values & (1 << pin)) for pin in self.pins()}

    def to_bytes(self) -> bytes:
        return encode(self.values, self.mask)


def active_mask(pins: Iterable[int]) -> int:
    """Return the bitmask with one bit set per pin."""
    mask = 0
    for pin in pins:
        mask |= 1 << check_pin(pin)
    return mask


def check_pin(pin: int) -> int:
    """Validate a pin number against the mask width."""
    if isinstance(pin, bool) or not isinstance(pin, int):
        raise ValueError(f"GPIO must be an integer: {pin!r}")
    if not 0 <= pin < MAX_PINS:
        raise ValueError(f"GPIO {pin} out of range (0-{MAX_PINS - 1})")
    return pin


def encode(values: int, mask: int) -> bytes:
    """Serialize the value and active masks in network byte order."""
    return struct.pack(PACKET_FORMAT, values & MASK_64, mask & MASK_64)


def decode(payload: bytes) -> BeaconPacket:
    """Parse a 16-byte datagram (raises ValueError on any other size)."""
    if len(payload) != PACKET_SIZE:
        raise ValueError(f"Expected {PACKET_SIZE} byte packet, got {len(payload)}")
    values, mask = struct.unpack(PACKET_FORMAT, payload)
    return BeaconPacket(values=values, mask=mask)
