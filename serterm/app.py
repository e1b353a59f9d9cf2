"""Textual front end: polls keys, ticks the session at 60 Hz, and draws its snapshot."""

from __future__ import annotations

import collections
from typing import TYPE_CHECKING
from typing import Callable

from rich.logging import RichHandler
from rich.text import Text
from textual import events
from textual.app import App
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.timer import Timer
from textual.widget import Widget
from textual.widgets import RichLog
from textual.widgets import Static

import serterm
from serterm.device import DeviceError
from serterm.keys import KeyCode
from serterm.keys import KeyEvent
from serterm.keys import Modifier
from serterm.modes import Mode
from serterm.session import Session
from serterm.session import Snapshot

if TYPE_CHECKING:
    import logging

__all__ = [
    "SerialTerminalApp",
    "scrolled",
    "translate_key",
]

FRAME_RATE = 60

_MODIFIER_NAMES = {
    "shift": Modifier.SHIFT,
    "ctrl": Modifier.CTRL,
    "alt": Modifier.ALT,
    "meta": Modifier.ALT,
}

_SPECIAL_KEYS = {
    "escape": KeyCode.ESCAPE,
    "tab": KeyCode.TAB,
    "enter": KeyCode.ENTER,
}

_MODE_HINTS = {
    Mode.NORMAL: "[b]NORMAL[/]  i: insert  h: hex/ascii  q: quit",
    Mode.INSERT: "[b green]INSERT[/]  Esc: back to normal",
    Mode.CONFIG: "[b]CONFIG[/]",
    Mode.WANNA_QUIT: "[b yellow]Quit? [y/n][/]",
}


def translate_key(event: events.Key) -> KeyEvent:
    """Convert a Textual key event to a `KeyEvent`."""
    *modifier_names, _ = event.key.split("+")
    modifiers = Modifier.NONE
    for name in modifier_names:
        modifiers |= _MODIFIER_NAMES.get(name, Modifier.NONE)

    if event.key in _SPECIAL_KEYS:
        return KeyEvent(code=_SPECIAL_KEYS[event.key], modifiers=modifiers)
    if event.is_printable and event.character:
        return KeyEvent.from_char(event.character, modifiers)
    return KeyEvent(code=KeyCode.OTHER, modifiers=modifiers)


def scrolled(text: str, offset: int) -> str:
    """Drop the first `offset` lines of `text`."""
    if offset <= 0:
        return text
    return "\n".join(text.split("\n")[offset:])


class LoggingConsole(RichLog):
    file = False
    console: Widget

    def print(self, content):
        self.write(content)


class Pane(Static):
    """A bordered text pane that reports mouse wheel movement."""

    def __init__(self, title: str, on_scroll: Callable[[int], None], **kwargs):
        super().__init__(**kwargs)
        self.border_title = title
        self._scroll_callback = on_scroll

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self._scroll_callback(1)

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self._scroll_callback(-1)


class TerminalView(Vertical, can_focus=True):
    """Holds keyboard focus so that every key, Tab and Escape included, goes to the session."""

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.app.queue_key(translate_key(event))


class SerialTerminalApp(App):
    CSS = """
    Pane {
        border: round white;
        height: 1fr;
        padding: 0 1;
    }
    #status {
        height: 1;
    }
    LoggingConsole {
        border: round white;
        height: 10;
    }
    """

    def __init__(
        self,
        session: Session,
        *,
        logger: "logging.Logger | None" = None,
        show_debug_log: bool = False,
    ):
        super().__init__()
        self.session = session
        self.logger = logger or serterm.create_null_logger()
        self.show_debug_log = show_debug_log
        self.error: DeviceError | None = None
        """Set if the session failed. The host surfaces it once the terminal is restored."""
        self._pending_keys: collections.deque[KeyEvent] = collections.deque()
        self._log_handler: RichHandler | None = None
        self._frame_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        self.terminal_view = TerminalView()
        with self.terminal_view:
            self.tx_pane = Pane("TX", self.session.scroll_tx)
            yield self.tx_pane
            self.rx_pane = Pane("RX", self.session.scroll_rx)
            yield self.rx_pane
        self.status_line = Static(id="status")
        yield self.status_line

        if self.show_debug_log:
            self.debug_log = LoggingConsole(highlight=True, markup=True)
            self.debug_log.border_title = "DEBUG LOG"
            self.debug_log.styles.border_title_align = "center"
            self._log_handler = RichHandler(
                console=self.debug_log,
                omit_repeated_times=False,
                log_time_format="%X",
                rich_tracebacks=True,
            )
            self.logger.addHandler(self._log_handler)
            yield self.debug_log

    def on_mount(self) -> None:
        self.terminal_view.focus()
        self._frame_timer = self.set_interval(1 / FRAME_RATE, self.next_frame)
        self.draw(self.session.snapshot())

    def on_unmount(self) -> None:
        self._detach_log_handler()

    def _detach_log_handler(self) -> None:
        if self._log_handler is not None:
            self.logger.removeHandler(self._log_handler)
            self._log_handler = None

    def queue_key(self, key: KeyEvent) -> None:
        self._pending_keys.append(key)

    def next_frame(self) -> None:
        """One tick: at most one key, then redraw."""
        if self._frame_timer is None:
            return
        key = self._pending_keys.popleft() if self._pending_keys else None
        try:
            control = self.session.tick(key)
        except DeviceError as exc:
            self.logger.error(f"Device failure: {exc}", exc_info=exc)
            self.error = exc
            self._stop(return_code=1)
            return
        if control.exit:
            self._stop()
            return
        self.draw(self.session.snapshot())

    def _stop(self, return_code: int = 0) -> None:
        """No more ticks once the session is finished, even if keys are still queued."""
        if self._frame_timer is not None:
            self._frame_timer.stop()
            self._frame_timer = None
        self._detach_log_handler()
        self.exit(return_code=return_code)

    def draw(self, snapshot: Snapshot) -> None:
        self.tx_pane.update(Text(scrolled(snapshot.tx_text, snapshot.tx_scroll)))
        self.rx_pane.border_title = f"RX [{snapshot.encoding}]"
        self.rx_pane.border_subtitle = f"{snapshot.rx_byte_count:,} bytes"
        self.rx_pane.update(Text(scrolled(snapshot.rx_text, snapshot.rx_scroll)))

        connection = "[green]CONNECTED[/]" if snapshot.connected else "[b red]DISCONNECTED[/]"
        self.status_line.update(f"{_MODE_HINTS[snapshot.mode]}  |  {connection}")
