"""Abstract base class for daily report preprocessors.

Silver (Processed) contract:
- One normalized schema regardless of the raw variant
- Report date stamped from the file identifier
- Validated column set and date dtype
- Store in data/processed/{category}/
- File naming: {category}_{identifier}_{start_date}_{end_date}.{format}

Preprocessors are responsible for Bronze → Silver transformation. They
receive the raw per-day tables produced by a collector.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path

import pandas as pd

from src.shared.utils import setup_logger


class BasePreprocessor(ABC):
    """Base class for all data preprocessors.

    Subclasses must define:
        CATEGORY (str): data category for output (e.g., "covid").

    Subclasses must implement:
        preprocess(): fold raw daily tables into one Silver table.
        validate(): ensure data conforms to Silver contract.

    The export() method handles file naming and format selection.
    """

    CATEGORY: str  # e.g. "covid"

    def __init__(
        self,
        output_dir: Path,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the preprocessor.

        Args:
            output_dir: Directory for Silver (processed) exports.
            log_file: Optional path for file-based logging.
        """
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = setup_logger(self.__class__.__name__, log_file)

    @abstractmethod
    def preprocess(self, raw_tables: dict[date, pd.DataFrame]) -> pd.DataFrame:
        """Transform Bronze daily tables to one Silver table.

        Args:
            raw_tables: Mapping of report date to raw DataFrame.

        Returns:
            Normalized DataFrame.
        """
        ...

    @abstractmethod
    def validate(self, df: pd.DataFrame) -> bool:
        """Validate that DataFrame conforms to Silver schema.

        Args:
            df: DataFrame to validate.

        Returns:
            True if valid.

        Raises:
            ValueError: If validation fails with details.
        """
        ...

    def export(
        self,
        df: pd.DataFrame,
        identifier: str,
        start_date: date | datetime,
        end_date: date | datetime,
        format: str = "csv",
    ) -> Path:
        """Export DataFrame to the Silver layer.

        File path: {output_dir}/{CATEGORY}_{identifier}_{YYYY-MM-DD}_{YYYY-MM-DD}.{format}

        Args:
            df: DataFrame to export.
            identifier: Dataset identifier (e.g., "us_daily").
            start_date: Start date of the data.
            end_date: End date of the data.
            format: Output format ("csv" or "parquet").

        Returns:
            Path to the written file.

        Raises:
            ValueError: If the DataFrame is empty or format is invalid.
        """
        if df.empty:
            raise ValueError(f"Cannot export empty DataFrame for '{identifier}'")

        if format not in ("csv", "parquet"):
            raise ValueError(f"Invalid format '{format}'. Must be 'csv' or 'parquet'.")

        start_str = start_date.strftime("%Y-%m-%d")
        end_str = end_date.strftime("%Y-%m-%d")
        parts = [self.CATEGORY] + ([identifier] if identifier else []) + [start_str, end_str]
        filename = f"{'_'.join(parts)}.{format}"
        path = self.output_dir / filename

        if format == "csv":
            df.to_csv(path, index=False, encoding="utf-8")
        else:  # parquet
            df.to_parquet(path, index=False, engine="pyarrow")

        self.logger.info("Exported %d records to %s", len(df), path)
        return path
