"""The blinking caret at the end of the TX pane.

The blink state is advanced by `advance()`, which is a pure function of the previous state, the
elapsed time since the previous tick, and whether a key was pressed. The caller measures time, so
blinking does not depend on how often the screen is redrawn."""

import dataclasses
from typing import Union

__all__ = [
    "BLINK_INTERVAL",
    "HIDDEN_GLYPH",
    "INSERT_GLYPH",
    "NORMAL_GLYPH",
    "CursorState",
    "InsertCursor",
    "NormalCursor",
    "advance",
    "glyph",
]

BLINK_INTERVAL = 0.5
"""Seconds between blinks in insert mode."""

NORMAL_GLYPH = "▉"
"""Solid block, shown in every mode except insert."""

INSERT_GLYPH = "▎"
"""Thin bar, shown in insert mode while the caret is on."""

HIDDEN_GLYPH = " "


@dataclasses.dataclass(frozen=True)
class NormalCursor:
    """Solid, never blinks, carries no timing data."""


@dataclasses.dataclass(frozen=True)
class InsertCursor:
    visible: bool = True
    idle: float = 0.0
    """Seconds accumulated towards the next blink."""


CursorState = Union[NormalCursor, InsertCursor]


def advance(state: CursorState, elapsed: float, key_pressed: bool) -> CursorState:
    """Return the cursor state after one tick.

    - A key press turns the caret on and zeroes the idle time, so it is visible right after typing.
    - Otherwise `elapsed` is added to the idle time. Once that exceeds `BLINK_INTERVAL`, the caret
      flips and the interval is subtracted (not reset), which keeps the blink phase steady when
      ticks arrive late.
    """
    if isinstance(state, NormalCursor):
        return state
    if key_pressed:
        return InsertCursor(visible=True, idle=0.0)
    if elapsed < 0:
        raise ValueError(f"elapsed must not be negative, got {elapsed}")

    idle = state.idle + elapsed
    if idle > BLINK_INTERVAL:
        return InsertCursor(visible=not state.visible, idle=idle - BLINK_INTERVAL)
    return dataclasses.replace(state, idle=idle)


def glyph(state: CursorState) -> str:
    if isinstance(state, NormalCursor):
        return NORMAL_GLYPH
    return INSERT_GLYPH if state.visible else HIDDEN_GLYPH
