"""Sysfs GPIO access for gpio_beacon (/sys/class/gpio)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Optional
import errno
import logging
import time

from .errors import PinConfigError, PinOpenError

LOGGER = logging.getLogger(__name__)

DEFAULT_SYSFS_ROOT = "/sys/class/gpio"
EXPORT_SETTLE_DELAY = 1.0


def configure_input(
    pin: int,
    root: str | Path = DEFAULT_SYSFS_ROOT,
    *,
    settle_delay: float = EXPORT_SETTLE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Export ``pin`` and set its direction to ``in``.

    An already exported pin (EBUSY) is not an error. The kernel creates the
    per-pin control files asynchronously after export, so the direction write
    is delayed by ``settle_delay`` seconds.
    """
    base = Path(root)
    export_path = base / "export"
    try:
        _write_control(export_path, str(pin))
    except OSError as exc:
        if exc.errno == errno.EBUSY:
            LOGGER.debug("GPIO %s already exported", pin)
        else:
            LOGGER.warning("Cannot export GPIO %s via %s: %s", pin, export_path, exc.strerror or exc)

    if settle_delay > 0:
        sleep(settle_delay)

    direction_path = base / f"gpio{pin}" / "direction"
    try:
        _write_control(direction_path, "in")
    except OSError as exc:
        raise PinConfigError(
            f"Cannot configure GPIO {pin} as input ({direction_path}): {exc.strerror or exc}"
        ) from exc
    LOGGER.info("Configured GPIO %s as input", pin)


def _write_control(path: Path, text: str) -> None:
    with open(path, "w", encoding="ascii") as handle:
        handle.write(text)


class PinReader:
    """Abstract pin reader."""

    def read(self, pin: int) -> Optional[bool]:
        raise NotImplementedError

    def close(self) -> None:
        return


class SysfsPinReader(PinReader):
    """Read pin levels from ``gpio<N>/value`` files, keeping each one open."""

    def __init__(self, root: str | Path = DEFAULT_SYSFS_ROOT) -> None:
        self._root = Path(root)
        self._handles: Dict[int, Any] = {}

    def value_path(self, pin: int) -> Path:
        return self._root / f"gpio{pin}" / "value"

    @property
    def open_pins(self) -> list[int]:
        return sorted(self._handles)

    def read(self, pin: int) -> Optional[bool]:
        """Return the current level of ``pin``, or None on a transient error.

        Raises PinOpenError when the value file cannot be opened the first
        time; the pin has not been configured as an input.
        """
        handle = self._handles.get(pin)
        path = self.value_path(pin)
        if handle is None:
            try:
                handle = open(path, "rb", buffering=0)
            except OSError as exc:
                raise PinOpenError(f"Cannot open '{path}' for input: {exc.strerror or exc}") from exc
            self._handles[pin] = handle

        try:
            handle.seek(0)
            data = handle.read(1)
        except OSError as exc:
            LOGGER.warning("Read error on %s: %s", path, exc.strerror or exc)
            return None
        if not data:
            LOGGER.warning("Read error on %s: no data", path)
            return None
        return bool(data[0] & 1)

    def close(self) -> None:
        for handle in self._handles.values():
            self._release_handle(handle)
        self._handles.clear()

    @staticmethod
    def _release_handle(handle: Any) -> None:
        try:
            handle.close()
        except OSError:
            pass
