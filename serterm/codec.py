"""Rendering of raw received bytes as display text.

Two renderings are supported:

- hex: every byte becomes two uppercase hex digits followed by a space, like `"41 09 "`
- ascii: every byte becomes the character with the same code point, except a tab byte,
  which becomes four spaces

Rendering is stateless, so a display buffer can always be rebuilt from the raw bytes alone."""

import enum
from typing import Iterable

__all__ = [
    "Encoding",
    "TAB_REPLACEMENT",
    "render",
    "render_ascii",
    "render_hex",
]

TAB_REPLACEMENT = "    "
"""What a tab is shown as, in both the RX and TX panes."""


class Encoding(enum.Enum):
    ASCII = "ascii"
    HEX = "hex"

    def toggled(self) -> "Encoding":
        return Encoding.ASCII if self is Encoding.HEX else Encoding.HEX

    def __str__(self) -> str:
        return self.name


def render_hex(data: Iterable[int]) -> str:
    """Like `b"\\x41\\x09"` -> `"41 09 "`"""
    return "".join(f"{byte:02X} " for byte in data)


def render_ascii(data: Iterable[int]) -> str:
    """Like `b"\\x41\\x09"` -> `"A    "`

    Bytes above 0x7F map to the Latin-1 character with the same value. No escape sequences are
    interpreted; control bytes other than tab go through untouched."""
    return "".join(TAB_REPLACEMENT if byte == 0x09 else chr(byte) for byte in data)


def render(data: Iterable[int], encoding: Encoding) -> str:
    if encoding is Encoding.HEX:
        return render_hex(data)
    elif encoding is Encoding.ASCII:
        return render_ascii(data)
    else:
        raise ValueError(f"Invalid encoding: {encoding}. Must be an `Encoding`.")
