import pytest

from serterm import cursor
from serterm.cursor import BLINK_INTERVAL
from serterm.cursor import HIDDEN_GLYPH
from serterm.cursor import INSERT_GLYPH
from serterm.cursor import NORMAL_GLYPH
from serterm.cursor import InsertCursor
from serterm.cursor import NormalCursor


@pytest.mark.parametrize("elapsed", [0.0, 0.1, 0.5, 0.51, 3.0, 1000.0])
@pytest.mark.parametrize("key_pressed", [False, True])
def test_normal_cursor_is_always_solid(elapsed: float, key_pressed: bool):
    state = cursor.advance(NormalCursor(), elapsed, key_pressed)

    assert state == NormalCursor()
    assert cursor.glyph(state) == NORMAL_GLYPH


def test_insert_cursor_starts_visible():
    state = InsertCursor()

    assert state.visible
    assert state.idle == 0.0
    assert cursor.glyph(state) == INSERT_GLYPH


def test_no_flip_until_interval_is_exceeded():
    state = InsertCursor()
    state = cursor.advance(state, 0.25, key_pressed=False)
    state = cursor.advance(state, 0.25, key_pressed=False)

    # Exactly at the interval, not past it
    assert state.visible
    assert state.idle == pytest.approx(BLINK_INTERVAL)


def test_flips_exactly_once_after_interval():
    state = InsertCursor()
    state = cursor.advance(state, 0.3, key_pressed=False)
    assert state.visible

    state = cursor.advance(state, 0.3, key_pressed=False)
    assert not state.visible
    assert cursor.glyph(state) == HIDDEN_GLYPH

    state = cursor.advance(state, 0.3, key_pressed=False)
    assert not state.visible


def test_interval_is_subtracted_not_reset():
    state = cursor.advance(InsertCursor(), 0.7, key_pressed=False)

    assert not state.visible
    assert state.idle == pytest.approx(0.2)

    # 0.2 + 0.35 > 0.5, so the phase carried over
    state = cursor.advance(state, 0.35, key_pressed=False)
    assert state.visible
    assert state.idle == pytest.approx(0.05)


def test_key_press_shows_cursor_and_zeroes_idle_time():
    hidden = InsertCursor(visible=False, idle=0.4)

    state = cursor.advance(hidden, 0.3, key_pressed=True)

    assert state == InsertCursor(visible=True, idle=0.0)


def test_negative_elapsed_is_rejected():
    with pytest.raises(ValueError):
        cursor.advance(InsertCursor(), -0.1, key_pressed=False)
