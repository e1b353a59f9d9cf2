import asyncio
import logging

import pytest
from mock_device import MockDevice
from rich.logging import RichHandler
from textual import events

from serterm.app import SerialTerminalApp
from serterm.app import scrolled
from serterm.app import translate_key
from serterm.cursor import NORMAL_GLYPH
from serterm.device import DeviceError
from serterm.keys import KeyCode
from serterm.keys import KeyEvent
from serterm.keys import Modifier
from serterm.modes import Mode
from serterm.session import Session


@pytest.mark.parametrize(
    ("key", "character", "expected"),
    [
        ("escape", "\x1b", KeyEvent(KeyCode.ESCAPE)),
        ("tab", "\t", KeyEvent(KeyCode.TAB)),
        ("enter", "\r", KeyEvent(KeyCode.ENTER)),
        ("a", "a", KeyEvent.from_char("a")),
        ("space", " ", KeyEvent.from_char(" ")),
        ("ctrl+a", "\x01", KeyEvent(KeyCode.OTHER, modifiers=Modifier.CTRL)),
        ("up", None, KeyEvent(KeyCode.OTHER)),
    ],
    ids=str,
)
def test_translate_key(key: str, character: str | None, expected: KeyEvent):
    assert translate_key(events.Key(key, character)) == expected


def test_scrolled():
    text = "one\ntwo\nthree"

    assert scrolled(text, 0) == text
    assert scrolled(text, 1) == "two\nthree"
    assert scrolled(text, 10) == ""


def run_with_pilot(app: SerialTerminalApp, interact) -> None:
    """Run `app` headless and call `interact(pilot)` inside it."""

    async def main():
        async with app.run_test() as pilot:
            await interact(pilot)

    asyncio.run(main())


def test_keys_reach_the_device_one_per_frame():
    device = MockDevice()
    session = Session(device)
    app = SerialTerminalApp(session)

    async def interact(pilot):
        await pilot.press("i", "tab", "a", "escape")
        await pilot.pause(0.3)

    run_with_pilot(app, interact)

    assert device.written == [b"\t", b"a"]
    assert session.mode is Mode.NORMAL
    assert session.tx_text == "    a" + NORMAL_GLYPH
    assert app.error is None


def test_confirmed_quit_exits():
    session = Session(MockDevice())
    app = SerialTerminalApp(session)

    async def interact(pilot):
        await pilot.press("q", "y")
        await pilot.pause(0.3)

    run_with_pilot(app, interact)

    assert app.return_code == 0
    assert app.error is None


def test_no_ticks_after_exit():
    session = Session(MockDevice())
    app = SerialTerminalApp(session)

    async def interact(pilot):
        for key in [KeyEvent.from_char("q"), KeyEvent.from_char("y"), KeyEvent.from_char("n")]:
            app.queue_key(key)
        await pilot.pause(0.3)

    run_with_pilot(app, interact)

    # `n` would have gone back to normal mode if it had been ticked
    assert session.mode is Mode.WANNA_QUIT
    assert app.return_code == 0


def test_device_failure_is_kept_and_exits_with_1():
    device = MockDevice()
    app = SerialTerminalApp(Session(device))

    async def interact(pilot):
        await pilot.pause(0.1)
        device.fail_with(DeviceError("boom"))
        await pilot.pause(0.3)

    run_with_pilot(app, interact)

    assert isinstance(app.error, DeviceError)
    assert str(app.error) == "boom"
    assert app.return_code == 1


def test_debug_log_handler_is_removed_on_exit():
    logger = logging.getLogger("serterm.test_app")
    app = SerialTerminalApp(Session(MockDevice()), logger=logger, show_debug_log=True)

    async def interact(pilot):
        assert any(isinstance(handler, RichHandler) for handler in logger.handlers)
        await pilot.press("q", "y")
        await pilot.pause(0.3)

    run_with_pilot(app, interact)

    assert not any(isinstance(handler, RichHandler) for handler in logger.handlers)
