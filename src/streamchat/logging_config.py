"""Process-wide logging setup."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(
    level: str | int = logging.INFO,
    log_file: str | None = None,
    stream: bool = True,
) -> None:
    """Configure root logging.

    Args:
        level: Level name ("debug", "info", ...) or numeric level
        log_file: Optional file to append records to
        stream: Also log to stdout. The TUI turns this off since stdout
            belongs to the terminal renderer.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers: list[logging.Handler] = []
    if stream:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a"))
    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
