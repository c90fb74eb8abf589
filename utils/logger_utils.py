import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB per simulation log
LOG_FILE_BACKUPS = 3

# Held at WARNING whatever LOG_LEVEL says
QUIET_LOGGERS = ("web3", "web3.providers", "urllib3", "aiohttp", "asyncio")


def resolve_log_level(log_level: Union[int, str]) -> int:
    """Accepts logging.DEBUG as well as "debug"; unknown names fall back to INFO."""
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(log_level.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _build_handlers(filename: Optional[str]) -> list:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]

    if filename:
        try:
            handlers.append(RotatingFileHandler(filename, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS))
        except OSError as e:
            sys.stderr.write(f"Warning: logging to console only, cannot open '{filename}': {e}\n")

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    filename: Optional[str] = None,
    log_level: Union[int, str] = logging.INFO,
    quiet_loggers: Iterable[str] = QUIET_LOGGERS,
) -> None:
    """
    Sets up the root logger once per process (CLI entry point or run.py).

    Args:
        filename: Optional log file, rotated once it reaches LOG_FILE_MAX_BYTES.
        log_level: Numeric level or level name, as read from the LOG_LEVEL setting.
        quiet_loggers: Third-party loggers kept at WARNING.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(resolve_log_level(log_level))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in _build_handlers(filename):
        root_logger.addHandler(handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
