#!/usr/bin/env python3
"""Print gpio_beacon packets received on the local network.

Usage example:
  ./scripts/listen.py --port 12121 --json
"""

from __future__ import annotations

import argparse
import json
import socket
import sys
from typing import Any, Dict

from gpio_beacon.broadcast import DEFAULT_PORT
from gpio_beacon.packet import BeaconPacket, decode


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments for the listener."""
    parser = argparse.ArgumentParser(description="Listen for gpio_beacon broadcasts")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="UDP port to listen on")
    parser.add_argument("--bind", default="", help="Local address to bind (default: all)")
    parser.add_argument("--json", action="store_true", help="Print one JSON object per packet")
    return parser.parse_args()


def describe(packet: BeaconPacket, sender: str) -> Dict[str, Any]:
    """Build a JSON-friendly view of a decoded packet."""
    return {
        "from": sender,
        "values": packet.values,
        "mask": packet.mask,
        "pins": {str(pin): int(high) for pin, high in packet.states().items()},
    }


def format_line(packet: BeaconPacket, sender: str) -> str:
    states = " ".join(f"{pin}={'high' if high else 'low'}" for pin, high in packet.states().items())
    return f"{sender}: {states}"


def main() -> int:
    """Receive datagrams until interrupted."""
    args = parse_args()
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((args.bind, args.port))
        try:
            while True:
                payload, (host, _port) = sock.recvfrom(1024)
                try:
                    packet = decode(payload)
                except ValueError as exc:
                    print(f"{host}: ignoring packet: {exc}", file=sys.stderr)
                    continue
                if args.json:
                    print(json.dumps(describe(packet, host)), flush=True)
                else:
                    print(format_line(packet, host), flush=True)
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
