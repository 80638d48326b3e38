# formclient/infrastructure/logging/log_setup.py
import sys
from typing import Optional

from loguru import logger

LOGGER_NAME = "formclient"


def _format(record) -> str:
    if "payload" in record["extra"]:
        return "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <5} | {message} {extra[payload]}\n{exception}"
    return "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <5} | {message}\n{exception}"


def setup_console_logging(level: Optional[str] = None, sink=None) -> int:
    """
    Turn formclient events on and route them to `sink` (stderr by default).
    Returns the loguru handler id, for logger.remove().
    """
    if level is None:
        from formclient.infrastructure.config.env_settings import get_settings

        level = get_settings().log_level
    logger.enable(LOGGER_NAME)
    return logger.add(
        sink if sink is not None else sys.stderr,
        level=level.upper(),
        format=_format,
        filter=LOGGER_NAME,
    )


def disable_logging() -> None:
    logger.disable(LOGGER_NAME)
