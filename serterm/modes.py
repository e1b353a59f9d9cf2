import enum

__all__ = [
    "Control",
    "Mode",
]


class Mode(enum.Enum):
    """The input mode of a session. Decides what a key press means."""

    NORMAL = "normal"
    INSERT = "insert"
    CONFIG = "config"
    """Has no transition into it yet. Keys are ignored while in it."""
    WANNA_QUIT = "wanna_quit"

    def __str__(self) -> str:
        return self.name.replace("_", " ")


class Control(enum.Enum):
    """What the host loop should do after a tick."""

    CONTINUE = "continue"
    EXIT = "exit"

    @property
    def exit(self) -> bool:
        return self is Control.EXIT
