"""Data ingestion module - collectors and preprocessors."""

from src.ingestion.collectors import BaseCollector, DailyFileNaming, JHUDailyReportCollector
from src.ingestion.preprocessors import BasePreprocessor, DailyReportNormalizer

__all__ = [
    "BaseCollector",
    "BasePreprocessor",
    "DailyFileNaming",
    "DailyReportNormalizer",
    "JHUDailyReportCollector",
]
