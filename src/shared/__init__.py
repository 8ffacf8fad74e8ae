"""Shared utilities and configuration."""

from src.shared.config import Config
from src.shared.errors import DailyReportError, FetchError, ParseError, SchemaMismatchError
from src.shared.utils import daily_range, setup_logger, to_date

__all__ = [
    "Config",
    "DailyReportError",
    "FetchError",
    "ParseError",
    "SchemaMismatchError",
    "daily_range",
    "setup_logger",
    "to_date",
]
