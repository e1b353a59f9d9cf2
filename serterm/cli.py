"""Command line entry point: `serterm PORT [options]`."""

import argparse
import json
import logging
import sys
from pathlib import Path

import pydantic
from rich.console import Console

from serterm.app import SerialTerminalApp
from serterm.config import TerminalConfig
from serterm.device import DeviceError
from serterm.device import open_device
from serterm.session import Session

_stderr = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="serterm",
        description="Send keystrokes to a serial device as raw bytes and watch its replies as hex or text.",
    )
    parser.add_argument("port", nargs="?", help='Serial port, pyserial URL, or "dummy" for a loopback device')
    parser.add_argument("-b", "--baud", dest="baud_rate", type=int, help="Baud rate (default 9600)")
    parser.add_argument("--timeout", type=float, help="Read timeout in seconds (default 0.5)")
    parser.add_argument("--config", type=Path, help="JSON config file. Flags override its values.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Level for the debug pane and log file",
    )
    parser.add_argument("--log-file", help="Write diagnostics to this file")
    parser.add_argument(
        "--debug",
        dest="show_debug_log",
        action="store_true",
        default=None,
        help="Show a debug log pane",
    )
    return parser


def load_config(args: argparse.Namespace) -> TerminalConfig:
    """Build the config from `--config` (if given) and the command line flags."""
    overrides = {
        "port": args.port,
        "baud_rate": args.baud_rate,
        "timeout": args.timeout,
        "log_level": args.log_level,
        "log_file": args.log_file,
        "show_debug_log": args.show_debug_log,
    }
    if args.config:
        return TerminalConfig.from_json(args.config, **overrides)
    return TerminalConfig.model_validate({key: value for key, value in overrides.items() if value is not None})


def setup_logging(config: TerminalConfig) -> logging.Logger:
    """Logger for the whole program.

    It never propagates to the root logger, whose fallback handler would write over the screen."""
    logger = logging.getLogger("serterm")
    logger.setLevel(config.log_level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(logging.NullHandler())

    log_file_path = config.log_file_path()
    if log_file_path:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(file_handler)
    return logger


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.port is None and args.config is None:
        parser.error("a PORT or --config is required")

    try:
        config = load_config(args)
    except (OSError, KeyError, json.JSONDecodeError, pydantic.ValidationError) as exc:
        _stderr.print(f"[red]Invalid configuration:[/] {exc}", markup=True, highlight=False)
        return 2

    try:
        logger = setup_logging(config)
    except OSError as exc:
        _stderr.print(f"[red]Cannot write log file:[/] {exc}", markup=True, highlight=False)
        return 2
    logger.debug(f"Python info: {sys.executable=}")
    logger.debug(f"Config info: {config!r}")

    try:
        device = open_device(config.port, config.baud_rate, timeout=config.timeout, logger=logger.getChild("device"))
    except DeviceError as exc:
        _stderr.print(f"[red]{exc}[/]", markup=True, highlight=False)
        return 2

    with device:
        session = Session(device, logger=logger.getChild("session"))
        app = SerialTerminalApp(session, logger=logger, show_debug_log=config.show_debug_log)
        app.run()

    if app.error is not None:
        logger.critical(f"Session ended by device failure: {app.error}")
        _stderr.print(f"[red]Device failure:[/] {app.error}", markup=True, highlight=False)
        return 1
    return 0
