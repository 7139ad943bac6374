"""Centralized logging configuration for the eztodo data layer."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "eztodo"


# PUBLIC_INTERFACE
def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Set up the 'eztodo' logger with a console handler and, when log_dir is
    given, a rotating file handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR). Unknown names fall back to INFO.
        log_dir: Optional directory for eztodo.log

    Returns:
        The configured package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Avoid duplicate handlers when the app is created more than once
    if logger.handlers:
        return logger

    simple_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    detailed_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(simple_formatter)
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path / f"{LOGGER_NAME}.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    return logger
