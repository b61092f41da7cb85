from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = "/var/log/openclaw-vm-provision.log"

_COLORS = {
    logging.DEBUG: "\033[0;37m",
    logging.INFO: "\033[0;32m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[0;31m",
    logging.CRITICAL: "\033[0;31m",
}
_STEP_COLOR = "\033[0;34m"
_RESET = "\033[0m"
_LABELS = {logging.WARNING: "WARN", logging.CRITICAL: "ERROR"}


class ConsoleFormatter(logging.Formatter):
    """``[INFO] message`` prefixes, coloured by severity on a TTY.

    Records logged with ``extra={"step": True}`` get a blue ``[STEP]`` prefix.
    """

    def __init__(self, color: bool) -> None:
        super().__init__(fmt="%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if getattr(record, "step", False):
            label, color = "STEP", _STEP_COLOR
        else:
            label = _LABELS.get(record.levelno, record.levelname)
            color = _COLORS.get(record.levelno, "")
        if self.color and color:
            return f"{color}[{label}]{_RESET} {message}"
        return f"[{label}] {message}"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Every command and decision is recorded to /var/log/openclaw-vm-provision.log.
    If that path is not writable (e.g. a dry run as a normal user) the log
    falls back to a file in the working directory.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_openclaw_configured", False):
        return getattr(logger, "_openclaw_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError:
        chosen_path = str(Path.cwd() / "openclaw-vm-provision.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        isatty = getattr(console.stream, "isatty", None)
        console.setFormatter(ConsoleFormatter(color=bool(isatty and isatty())))
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_openclaw_configured", True)
    setattr(logger, "_openclaw_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path


def log_step(logger: logging.Logger, msg: str, *args: object) -> None:
    logger.info(msg, *args, extra={"step": True})
