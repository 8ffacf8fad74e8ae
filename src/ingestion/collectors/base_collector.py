"""Abstract base class for daily report collectors.

Bronze (Raw) contract:
- One raw table per calendar day, keyed by that day's date
- Source fields preserved (no renaming, no type coercion beyond CSV parsing)
- Raw files cached under data/raw/{source}/ keyed by their date suffix
- Snapshot exports named {source}_{dataset}_{YYYYMMDD}.csv

Collectors are responsible ONLY for the Bronze layer (fetch + parse).
Schema reconciliation and derived fields are handled by preprocessors.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path

import pandas as pd

from src.shared.utils import setup_logger


class BaseCollector(ABC):
    """Base class for all daily report collectors.

    Subclasses must define:
        SOURCE_NAME (str): identifier used in file naming (e.g. "jhu").

    Subclasses must implement:
        collect(): fetch one raw table per day of a date range.
        health_check(): verify the source is reachable.
    """

    SOURCE_NAME: str  # e.g. "jhu"

    def __init__(self, output_dir: Path, log_file: Path | None = None) -> None:
        """Initialize the collector.

        Args:
            output_dir: Directory for raw files (created if missing).
            log_file: Optional path for file-based logging.
        """
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = setup_logger(self.__class__.__name__, log_file)

    @abstractmethod
    def collect(
        self,
        start_date: date | datetime | str,
        end_date: date | datetime | str,
    ) -> dict[date, pd.DataFrame]:
        """Collect one raw table per day, inclusive of both ends.

        Args:
            start_date: First day of the collection window.
            end_date: Last day of the collection window.

        Returns:
            Mapping of report date to raw DataFrame, in date order.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Verify the data source is reachable and responding.

        Returns:
            True if the source is available, False otherwise.
        """
        ...

    def export_csv(self, df: pd.DataFrame, dataset_name: str) -> Path:
        """Export a DataFrame to a raw snapshot CSV.

        File path: {output_dir}/{SOURCE_NAME}_{dataset_name}_{YYYYMMDD}.csv

        Args:
            df: DataFrame to export.
            dataset_name: Dataset identifier (e.g. "us_daily").

        Returns:
            Path to the written file.

        Raises:
            ValueError: If the DataFrame is empty.
        """
        if df.empty:
            raise ValueError(f"Cannot export empty DataFrame for '{dataset_name}'")

        date_str = datetime.now().strftime("%Y%m%d")
        path = self.output_dir / f"{self.SOURCE_NAME}_{dataset_name}_{date_str}.csv"
        df.to_csv(path, index=False, encoding="utf-8")
        self.logger.info("Exported %d records to %s", len(df), path)
        return path
