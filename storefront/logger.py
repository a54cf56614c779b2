"""File logging for the storefront console."""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from storefront.config import LOG_DIR


def setup_logger(log_dir: str | Path = LOG_DIR, level: int = logging.INFO) -> logging.Logger:
    """
    Configure the ``storefront`` logger.

    Output goes to a daily rotating file only; the Textual console owns the
    terminal. Calling this more than once keeps the first set of handlers.
    """
    logger = logging.getLogger("storefront")
    logger.setLevel(level)

    if logger.handlers:
        return logger

    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler = TimedRotatingFileHandler(
        filename=directory / "storefront.log",
        when="midnight",
        interval=1,
        backupCount=7,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logger.info("Logger initialized (daily rotation enabled)")
    return logger
