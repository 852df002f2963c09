"""Tests for sysfs pin configuration and reading."""

import errno

import pytest

from gpio_beacon import sysfs
from gpio_beacon.errors import PinConfigError, PinOpenError
from gpio_beacon.sysfs import SysfsPinReader, configure_input


class BrokenHandle:
    def __init__(self, fail_on: str = "read") -> None:
        self.fail_on = fail_on
        self.closed = False

    def seek(self, _offset):
        if self.fail_on == "seek":
            raise OSError(errno.EIO, "Input/output error")
        return 0

    def read(self, _size):
        if self.fail_on == "read":
            raise OSError(errno.EIO, "Input/output error")
        return b""

    def close(self):
        self.closed = True


def test_configure_input_exports_and_sets_direction(gpio_tree):
    gpio_tree.add_pin(17)
    delays = []
    configure_input(17, gpio_tree.root, sleep=delays.append)
    assert gpio_tree.exported() == "17"
    assert gpio_tree.direction(17) == "in"
    assert delays == [sysfs.EXPORT_SETTLE_DELAY]


def test_configure_input_tolerates_busy_export(gpio_tree, monkeypatch):
    gpio_tree.add_pin(4)
    real_write = sysfs._write_control

    def write(path, text):
        if path.name == "export":
            raise OSError(errno.EBUSY, "Device or resource busy")
        real_write(path, text)

    monkeypatch.setattr(sysfs, "_write_control", write)
    configure_input(4, gpio_tree.root, settle_delay=0)
    assert gpio_tree.direction(4) == "in"


def test_configure_input_direction_failure_is_fatal(gpio_tree):
    with pytest.raises(PinConfigError) as excinfo:
        configure_input(22, gpio_tree.root, settle_delay=0)
    assert "GPIO 22" in str(excinfo.value)
    assert "direction" in str(excinfo.value)


def test_read_uses_low_bit(gpio_tree):
    gpio_tree.add_pin(7, value=1)
    reader = SysfsPinReader(gpio_tree.root)
    assert reader.read(7) is True
    gpio_tree.set(7, 0)
    assert reader.read(7) is False
    reader.close()


def test_read_keeps_handle_open(gpio_tree):
    gpio_tree.add_pin(7, value=1)
    gpio_tree.add_pin(8, value=0)
    reader = SysfsPinReader(gpio_tree.root)
    reader.read(7)
    handle = reader._handles[7]
    reader.read(7)
    assert reader._handles[7] is handle
    assert reader.open_pins == [7]
    reader.read(8)
    assert reader.open_pins == [7, 8]
    reader.close()
    assert handle.closed
    assert reader.open_pins == []


def test_read_open_failure_is_fatal(gpio_tree):
    reader = SysfsPinReader(gpio_tree.root)
    with pytest.raises(PinOpenError) as excinfo:
        reader.read(5)
    assert "gpio5/value" in str(excinfo.value)


@pytest.mark.parametrize("fail_on", ["seek", "read", "empty"])
def test_read_errors_after_open_are_transient(gpio_tree, fail_on):
    reader = SysfsPinReader(gpio_tree.root)
    reader._handles[3] = BrokenHandle(fail_on)
    assert reader.read(3) is None


def test_close_without_reads_is_noop(gpio_tree):
    reader = SysfsPinReader(gpio_tree.root)
    reader.close()
    reader.close()
