"""Data preprocessors for Bronze → Silver transformation."""

from src.ingestion.preprocessors.base_preprocessor import BasePreprocessor
from src.ingestion.preprocessors.daily_report_normalizer import DailyReportNormalizer

__all__ = [
    "BasePreprocessor",
    "DailyReportNormalizer",
]
