from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, TextIO

from .lib.env import Paths

_TAGS = {
    logging.DEBUG: ("DEBUG", "\033[0;34m"),
    logging.INFO: ("INFO", "\033[0;32m"),
    logging.WARNING: ("WARN", "\033[1;33m"),
    logging.ERROR: ("ERROR", "\033[0;31m"),
    logging.CRITICAL: ("ERROR", "\033[0;31m"),
}
_RESET = "\033[0m"


def default_log_path() -> str:
    return str(Paths.for_home().log_default)


class SeverityTagFormatter(logging.Formatter):
    """Console format: `[INFO] message`, coloured when writing to a terminal."""

    def __init__(self, color: bool):
        super().__init__(fmt="%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag, color = _TAGS.get(record.levelno, (record.levelname, ""))
        msg = super().format(record)
        if self.color and color:
            return f"{color}[{tag}]{_RESET} {msg}"
        return f"[{tag}] {msg}"


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = True,
    stream: Optional[TextIO] = None,
) -> str:
    """Configure logging.

    The log file receives every record at DEBUG, timestamped. The console
    gets severity-tagged records at `level`.

    If the requested log file cannot be opened, a file in the current
    working directory is used instead. Returns the actual file path.
    """

    log_path = log_path or default_log_path()
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_nvim_bootstrap_configured", False):
        return getattr(logger, "_nvim_bootstrap_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: logging.Handler
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError:
        chosen_path = str(Path.cwd() / "nvim-bootstrap.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        out = stream or sys.stderr
        console = logging.StreamHandler(out)
        console.setFormatter(SeverityTagFormatter(color=bool(getattr(out, "isatty", lambda: False)())))
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_nvim_bootstrap_configured", True)
    setattr(logger, "_nvim_bootstrap_log_path", chosen_path)
    setattr(logger, "_nvim_bootstrap_handlers", handlers)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
