"""The device a session exchanges bytes with.

A session only needs the small `Device` protocol. `SerialDevice` provides it on top of a pyserial
port; tests provide their own."""

from __future__ import annotations

import errno
from typing import TYPE_CHECKING
from typing import Protocol

import serial

import serterm

if TYPE_CHECKING:
    import logging

__all__ = [
    "DUMMY_PORT",
    "Device",
    "DeviceError",
    "DisconnectedError",
    "SerialDevice",
    "ShortReadError",
    "ShortWriteError",
    "open_device",
]

DUMMY_PORT = "dummy"
"""Port name that opens a loopback device instead of real hardware."""

_LOOPBACK_URL = "loop://"

_DISCONNECTED_ERRNOS = frozenset({errno.ENODEV, errno.ENXIO, errno.ENOENT})


class DeviceError(Exception):
    """Some error in communication with the device happened. Not recoverable."""


class DisconnectedError(DeviceError):
    """The device is no longer present."""


class ShortReadError(DeviceError):
    """Fewer bytes were read than requested."""


class ShortWriteError(DeviceError):
    """Fewer bytes were written than requested."""


class Device(Protocol):
    def bytes_available(self) -> int:
        """Number of bytes that can be read right now. Raise `DisconnectedError` if the device is gone."""
        ...

    def read_exact(self, count: int) -> bytes:
        """Read exactly `count` bytes, or raise."""
        ...

    def write_all(self, data: bytes) -> None:
        """Write all of `data`, or raise."""
        ...

    def close(self) -> None: ...


def _is_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, OSError) and exc.errno in _DISCONNECTED_ERRNOS:
        return True
    # pyserial's POSIX backend reports a vanished device this way on read
    if isinstance(exc, serial.SerialException) and "disconnected" in str(exc):
        return True
    return False


class SerialDevice:
    """A `Device` backed by a pyserial port (anything `serial.serial_for_url` returns)."""

    def __init__(
        self,
        port: serial.SerialBase,
        *,
        logger: "logging.Logger | None" = None,
    ):
        self._serial = port
        self.logger = logger or serterm.create_null_logger()

    @property
    def name(self) -> str:
        return str(self._serial.port)

    def bytes_available(self) -> int:
        try:
            return self._serial.in_waiting
        except (OSError, serial.SerialException) as exc:
            if _is_disconnect(exc):
                raise DisconnectedError(f"{self.name} is no longer present: {exc}") from exc
            raise DeviceError(f"Failed to query {self.name}: {exc}") from exc

    def read_exact(self, count: int) -> bytes:
        if count == 0:
            return b""
        try:
            data = self._serial.read(count)
        except (OSError, serial.SerialException) as exc:
            raise DeviceError(f"Failed to read {count:,} bytes from {self.name}: {exc}") from exc
        if len(data) != count:
            raise ShortReadError(f"Expected {count:,} bytes from {self.name}, got {len(data):,}")
        return bytes(data)

    def write_all(self, data: bytes) -> None:
        try:
            written = self._serial.write(data)
            self._serial.flush()
        except (OSError, serial.SerialException) as exc:
            raise DeviceError(f"Failed to write {len(data):,} bytes to {self.name}: {exc}") from exc
        if written is not None and written != len(data):
            raise ShortWriteError(f"Wrote {written:,} of {len(data):,} bytes to {self.name}")

    def close(self) -> None:
        if self._serial.is_open:
            self.logger.info(f"Closing {self.name}")
            self._serial.close()

    def __enter__(self) -> "SerialDevice":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"


def open_device(
    port: str,
    baud_rate: int = 9600,
    *,
    timeout: float = 0.5,
    logger: "logging.Logger | None" = None,
) -> SerialDevice:
    """Open `port` at `baud_rate`.

    `port` may be a device path like `/dev/ttyUSB0` or `COM7`, any pyserial URL, or `"dummy"` for
    a loopback device that echoes back whatever is written to it.

    Raise `DeviceError` if the port cannot be opened."""
    logger = logger or serterm.create_null_logger()
    url = _LOOPBACK_URL if port == DUMMY_PORT else port
    logger.info(f"Opening {url!r} @ {baud_rate:,} bps")
    try:
        serial_port = serial.serial_for_url(url, baudrate=baud_rate, timeout=timeout)
    except (serial.SerialException, ValueError) as exc:
        message = f"Could not open {port!r} @ {baud_rate:,} bps: {exc}"
        logger.error(message)
        raise DeviceError(message) from exc
    logger.info(f"Opened {serial_port.port!r}")
    return SerialDevice(serial_port, logger=logger)
