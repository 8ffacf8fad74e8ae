"""Loader exception hierarchy.

Every error carries the identifier of the daily file that caused it so a
failed run points straight at the offending day.
"""

from datetime import date


class DailyReportError(Exception):
    """Base exception for daily report load failures."""

    def __init__(self, message: str, identifier: str, report_date: date | None = None) -> None:
        super().__init__(f"{identifier}: {message}")
        self.identifier = identifier
        self.report_date = report_date


class FetchError(DailyReportError):
    """Raised when a daily file cannot be retrieved."""


class ParseError(DailyReportError):
    """Raised when a retrieved file is not a parseable table."""


class SchemaMismatchError(DailyReportError):
    """Raised when a day's columns match neither known schema variant."""
