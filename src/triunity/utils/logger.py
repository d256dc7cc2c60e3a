# src/triunity/utils/logger.py
import logging
from typing import Optional, Union

ROOT_LOGGER_NAME = "triunity"


def get_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Create a logger under the triunity namespace with the given level"""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if level is not None:
        logger.setLevel(level)

    return logger
