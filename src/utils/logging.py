"""Logging helper shared by the chat backend modules."""

import logging
import os
import sys
from typing import Optional, Union

from src.utils.config import get_section

LOG_FORMAT = "%(asctime)s  [%(levelname)s]  %(name)s — %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Optional[Union[int, str]] = None) -> int:
    """
    Turn *level* into a logging level number.

    When *level* is None the ``CHATBOT_LOG_LEVEL`` environment variable is
    used, then ``logging.level`` in config.yaml, then INFO. Unknown names
    fall back to INFO.
    """
    if level is None:
        level = os.environ.get("CHATBOT_LOG_LEVEL") or get_section("logging").get("level", "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def get_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Return a configured logger with the given name.

    Logging format:  [LEVEL]  logger_name — message

    Parameters
    ----------
    name : str
        Typically __name__ of the calling module.
    level : int or str, optional
        Logging level; resolved from env/config when omitted.

    Returns
    -------
    logging.Logger
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    logger.setLevel(resolve_level(level))
    return logger
