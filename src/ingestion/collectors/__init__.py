"""Collectors package."""

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.collectors.jhu_collector import DailyFileNaming, JHUDailyReportCollector

__all__ = ["BaseCollector", "DailyFileNaming", "JHUDailyReportCollector"]
