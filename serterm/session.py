"""The interactive state of a serial terminal.

A `Session` owns the device and everything derived from talking to it. The host calls `tick()`
once per frame with at most one key event, then draws `snapshot()`.

One tick does, in order:
1. Interpret the key event (if any) against the current mode. In insert mode this may write to
   the device.
2. Drain whatever bytes the device has available into the RX history and display.
3. Advance the cursor blink by the time since the previous tick.
"""

from __future__ import annotations

import dataclasses
import time
from typing import TYPE_CHECKING
from typing import Callable

import serterm
from serterm import codec
from serterm import cursor
from serterm.codec import Encoding
from serterm.device import Device
from serterm.device import DisconnectedError
from serterm.device import ShortReadError
from serterm.keys import KeyCode
from serterm.keys import KeyEvent
from serterm.modes import Control
from serterm.modes import Mode

if TYPE_CHECKING:
    import logging

__all__ = [
    "Session",
    "Snapshot",
]


@dataclasses.dataclass(frozen=True)
class Snapshot:
    """Read-only view of a session, for drawing one frame."""

    mode: Mode
    connected: bool
    encoding: Encoding
    tx_text: str
    """Everything echoed so far, always ending in exactly one cursor glyph."""
    tx_scroll: int
    rx_text: str
    rx_scroll: int
    rx_byte_count: int


class Session:
    def __init__(
        self,
        device: Device,
        *,
        encoding: Encoding = Encoding.ASCII,
        clock: Callable[[], float] = time.monotonic,
        logger: "logging.Logger | None" = None,
    ):
        self.device = device
        self.logger = logger or serterm.create_null_logger()
        self._clock = clock
        self._last_tick = clock()

        self.connected = True
        self.mode = Mode.NORMAL
        self.encoding = encoding
        self.cursor: cursor.CursorState = cursor.NormalCursor()

        self._tx_content = ""
        """Echo of what was sent, without the cursor glyph."""
        self.tx_scroll = 0

        self._rx_history = bytearray()
        """Every byte received, in order. The RX display is derived from this."""
        self._rx_display = ""
        self.rx_scroll = 0

    # --- Per-frame entry point ---
    def tick(self, event: KeyEvent | None = None) -> Control:
        """Run one frame. Return whether the host should keep going.

        Raise `DeviceError` on any device failure other than a disconnect."""
        now = self._clock()
        elapsed = max(0.0, now - self._last_tick)
        self._last_tick = now

        control = Control.CONTINUE
        if event is not None:
            control = self.handle_key(event)
        self.receive()
        self.cursor = cursor.advance(self.cursor, elapsed, key_pressed=event is not None)
        return control

    def snapshot(self) -> Snapshot:
        return Snapshot(
            mode=self.mode,
            connected=self.connected,
            encoding=self.encoding,
            tx_text=self.tx_text,
            tx_scroll=self.tx_scroll,
            rx_text=self._rx_display,
            rx_scroll=self.rx_scroll,
            rx_byte_count=len(self._rx_history),
        )

    # --- Key dispatch ---
    def handle_key(self, event: KeyEvent) -> Control:
        """Interpret one key press in the current mode. Unrecognized keys do nothing."""
        if self.mode is Mode.NORMAL:
            if event.code is KeyCode.ESCAPE or event.is_char("q"):
                self._set_mode(Mode.WANNA_QUIT)
            elif event.is_char("i"):
                self.enter_insert()
            elif event.is_char("h"):
                self.toggle_encoding()
        elif self.mode is Mode.INSERT:
            if event.code is KeyCode.ESCAPE:
                self.leave_insert()
            elif event.code is KeyCode.CHAR:
                self.send_char(event.char)
            elif event.code is KeyCode.TAB:
                self.send_char("\t", shown=codec.TAB_REPLACEMENT)
            elif event.code is KeyCode.ENTER:
                self.send_char("\n")
        elif self.mode is Mode.WANNA_QUIT:
            if event.code is KeyCode.ESCAPE or event.is_char("n", "q"):
                self._set_mode(Mode.NORMAL)
            elif event.is_char("y"):
                self.logger.info("Exit confirmed")
                return Control.EXIT
        elif self.mode is Mode.CONFIG:
            pass
        else:
            raise ValueError(f"Invalid mode: {self.mode}")
        return Control.CONTINUE

    def _set_mode(self, mode: Mode) -> None:
        self.logger.info(f"Mode {self.mode} -> {mode}")
        self.mode = mode

    def enter_insert(self) -> None:
        self._set_mode(Mode.INSERT)
        self.cursor = cursor.InsertCursor()

    def leave_insert(self) -> None:
        self._set_mode(Mode.NORMAL)
        self.cursor = cursor.NormalCursor()

    def toggle_encoding(self) -> None:
        """Switch between hex and ascii, rebuilding the whole RX display from the raw history."""
        self.encoding = self.encoding.toggled()
        self._rx_display = codec.render(self._rx_history, self.encoding)
        self.logger.info(f"RX encoding is now {self.encoding} ({len(self._rx_history):,} bytes re-rendered)")

    # --- TX ---
    def send_char(self, char: str, *, shown: str | None = None) -> None:
        """Write `char` to the device as UTF-8 and echo it into the TX pane.

        `shown` replaces what is echoed, not what is sent. Nothing is sent or echoed while
        disconnected."""
        if not self.connected:
            self.logger.warning("Not connected; dropping a keystroke")
            return
        data = char.encode("utf-8")
        self.device.write_all(data)
        self.logger.debug(f"TX {len(data):,} bytes")
        self._tx_content += char if shown is None else shown

    # --- RX ---
    def receive(self) -> None:
        """Drain available bytes from the device.

        If the device has gone away, mark the session disconnected and never touch the device
        again."""
        if not self.connected:
            return
        try:
            count = self.device.bytes_available()
        except DisconnectedError as exc:
            self.logger.warning(f"Device disconnected: {exc}")
            self.connected = False
            return
        if count == 0:
            return

        data = self.device.read_exact(count)
        if len(data) != count:
            raise ShortReadError(f"Expected {count:,} bytes, got {len(data):,}")
        self._rx_history += data
        self._rx_display += codec.render(data, self.encoding)
        self.logger.debug(f"RX {count:,} bytes ({len(self._rx_history):,} total)")

    # --- Scrolling ---
    def scroll_tx(self, delta: int) -> None:
        self.tx_scroll = max(0, self.tx_scroll + delta)

    def scroll_rx(self, delta: int) -> None:
        self.rx_scroll = max(0, self.rx_scroll + delta)

    # --- Views ---
    @property
    def cursor_glyph(self) -> str:
        return cursor.glyph(self.cursor)

    @property
    def tx_text(self) -> str:
        return self._tx_content + self.cursor_glyph

    @property
    def rx_text(self) -> str:
        return self._rx_display

    @property
    def rx_history(self) -> bytes:
        return bytes(self._rx_history)
