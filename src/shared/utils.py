"""Shared utility functions for the JHU daily reports loader."""

import logging
from datetime import date, datetime
from pathlib import Path

import pandas as pd


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Calling this twice for the same name does not stack handlers.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_path = str(log_file.resolve())
        has_file = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == log_path
            for h in logger.handlers
        )
        if not has_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def to_date(value: date | datetime | str) -> date:
    """Coerce a date, datetime or YYYY-MM-DD string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def daily_range(start: date | datetime | str, end: date | datetime | str) -> list[date]:
    """Inclusive list of calendar days from start to end.

    Raises:
        ValueError: If start is after end.
    """
    start_d, end_d = to_date(start), to_date(end)
    if start_d > end_d:
        raise ValueError(f"Start date {start_d} is after end date {end_d}")
    return [ts.date() for ts in pd.date_range(start_d, end_d, freq="D")]
