"""Discrete key events, independent of whatever terminal library produced them."""

import dataclasses
import enum

__all__ = [
    "KeyCode",
    "KeyEvent",
    "Modifier",
]


class KeyCode(enum.Enum):
    CHAR = "char"
    ESCAPE = "escape"
    TAB = "tab"
    ENTER = "enter"
    OTHER = "other"


class Modifier(enum.IntFlag):
    NONE = 0
    SHIFT = 1
    CTRL = 2
    ALT = 4


@dataclasses.dataclass(frozen=True)
class KeyEvent:
    """A single key press.

    `char` is only meaningful when `code` is `KeyCode.CHAR`, and then it is exactly one character."""

    code: KeyCode
    char: str = ""
    modifiers: Modifier = Modifier.NONE

    def __post_init__(self):
        if self.code is KeyCode.CHAR and len(self.char) != 1:
            raise ValueError(f"A CHAR key event needs exactly one character, not {self.char!r}")

    @classmethod
    def from_char(cls, char: str, modifiers: Modifier = Modifier.NONE) -> "KeyEvent":
        return cls(code=KeyCode.CHAR, char=char, modifiers=modifiers)

    def is_char(self, *chars: str) -> bool:
        """Is this a CHAR event for any of `chars`?"""
        return self.code is KeyCode.CHAR and self.char in chars

    def __str__(self) -> str:
        if self.code is KeyCode.CHAR:
            return repr(self.char)
        return self.code.name
