"""Shared fixtures: a fake sysfs GPIO tree and a recording UDP socket."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Tuple
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gpio_beacon import broadcast  # noqa: E402


class FakeGpioTree:
    """Directory laid out like /sys/class/gpio."""

    def __init__(self, root: Path) -> None:
        self.root = root
        (root / "export").write_text("", encoding="ascii")

    def add_pin(self, pin: int, value: int = 0, direction: str = "out") -> None:
        pin_dir = self.root / f"gpio{pin}"
        pin_dir.mkdir(exist_ok=True)
        (pin_dir / "direction").write_text(direction, encoding="ascii")
        self.set(pin, value)

    def set(self, pin: int, value: int) -> None:
        (self.root / f"gpio{pin}" / "value").write_bytes(b"%d\n" % value)

    def direction(self, pin: int) -> str:
        return (self.root / f"gpio{pin}" / "direction").read_text(encoding="ascii")

    def exported(self) -> str:
        return (self.root / "export").read_text(encoding="ascii")


class FakeSocket:
    """Stand-in for socket.socket that records every datagram."""

    instances: List["FakeSocket"] = []
    fail_setsockopt = False
    fail_sendto = False

    def __init__(self, family: int = 0, type: int = 0, *args: Any) -> None:
        self.family = family
        self.type = type
        self.options: List[Tuple[int, int, int]] = []
        self.sent: List[Tuple[bytes, Tuple[str, int]]] = []
        self.shutdown_calls: List[int] = []
        self.closed = False
        FakeSocket.instances.append(self)

    def fileno(self) -> int:
        return 42

    def setsockopt(self, level: int, option: int, value: int) -> None:
        if FakeSocket.fail_setsockopt:
            raise OSError(92, "Protocol not available")
        self.options.append((level, option, value))

    def sendto(self, payload: bytes, address: Tuple[str, int]) -> int:
        if FakeSocket.fail_sendto:
            raise OSError(101, "Network is unreachable")
        self.sent.append((payload, address))
        return len(payload)

    def shutdown(self, how: int) -> None:
        self.shutdown_calls.append(how)
        raise OSError(107, "Transport endpoint is not connected")

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def gpio_tree(tmp_path: Path) -> FakeGpioTree:
    return FakeGpioTree(tmp_path)


@pytest.fixture
def fake_socket(monkeypatch) -> type:
    FakeSocket.instances = []
    FakeSocket.fail_setsockopt = False
    FakeSocket.fail_sendto = False
    monkeypatch.setattr(broadcast.socket, "socket", FakeSocket)
    return FakeSocket
