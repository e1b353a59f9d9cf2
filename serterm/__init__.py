from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import logging


def create_null_logger() -> "logging.Logger":  # type: ignore # noqa: F821
    """Create a null logger."""
    import logging

    logger = logging.getLogger("null")
    logger.addHandler(logging.NullHandler())
    return logger


from serterm.codec import Encoding  # noqa: E402
from serterm.device import Device  # noqa: E402
from serterm.device import DeviceError  # noqa: E402
from serterm.device import DisconnectedError  # noqa: E402
from serterm.device import open_device  # noqa: E402
from serterm.keys import KeyCode  # noqa: E402
from serterm.keys import KeyEvent  # noqa: E402
from serterm.modes import Control  # noqa: E402
from serterm.modes import Mode  # noqa: E402
from serterm.session import Session  # noqa: E402
from serterm.session import Snapshot  # noqa: E402
