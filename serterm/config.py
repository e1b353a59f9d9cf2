import json
from pathlib import Path
from typing import Literal

import pydantic

__all__ = ["TerminalConfig"]


class TerminalConfig(pydantic.BaseModel):
    """Everything needed to start a terminal session."""

    port: str
    """Like `/dev/ttyUSB0`, `COM7`, a pyserial URL, or `"dummy"` for a loopback device."""
    baud_rate: int = pydantic.Field(default=9600, gt=0)
    timeout: float = pydantic.Field(default=0.5, gt=0)
    """Read timeout of the port, in seconds."""
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: str | None = None
    """Diagnostics only. Received and sent bytes are never logged here."""
    show_debug_log: bool = False

    def log_file_path(self) -> Path | None:
        if self.log_file is None:
            return None
        return Path(self.log_file).expanduser().resolve()

    def to_json(self, path: Path) -> None:
        """Save the config to a JSON file."""
        comment = "Modify the things in 'config' to change the configuration. Command line flags override them."
        data = {
            "comment": comment,
            "config": self.model_dump(),
        }
        Path(path).write_text(json.dumps(data, indent=4))

    @classmethod
    def from_json(cls, path: Path, **overrides) -> "TerminalConfig":
        """Load a config from a JSON file. Keyword arguments that are not `None` replace values from the file."""
        path = Path(path).expanduser().resolve()
        json_dict = json.loads(path.read_text())
        config_dict = dict(json_dict["config"])
        config_dict.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(config_dict)
