"""Daily report preprocessor for Bronze → Silver transformation.

Folds the raw per-day JHU US tables into one table with a single
(legacy-named) schema.

Fold rules, applied strictly in date order:
    - Files dated before the cutover must use the legacy pair
      (Mortality_Rate, People_Tested).
    - Files dated on/after the cutover must use the current pair
      (Case_Fatality_Ratio, Total_Test_Results); they are renamed to the
      legacy pair before joining.
    - Every other column must match the accumulated table exactly.
    - Anything else raises SchemaMismatchError for that file.

Each day is stamped with its report date (from the file identifier, never
from "Last_Update") and outer-joined onto the accumulated table on the full
column set. Since every row carries its own report date, no two days'
rows collide and the join is a pure row union.

Silver Schema:
    Province_State, Date, Confirmed, Deaths, Incident_Rate, People_Tested,
    People_Hospitalized, Mortality_Rate, Testing_Rate, Hospitalization_Rate,
    New_Deaths, New_Hospitalizations
"""

from datetime import date
from pathlib import Path

import pandas as pd

from src.ingestion.collectors.jhu_collector import DailyFileNaming
from src.ingestion.preprocessors.base_preprocessor import BasePreprocessor
from src.pipelines.covid.deltas import add_daily_deltas
from src.pipelines.covid.schema import (
    CUMULATIVE_COLUMNS,
    CURRENT,
    CURRENT_TO_LEGACY,
    DATE_COLUMN,
    DROPPED_COLUMNS,
    OUTPUT_COLUMNS,
    RATE_COLUMNS,
    REGION_COLUMN,
    SchemaVariant,
)
from src.pipelines.covid.validate import (
    core_columns,
    detect_schema_variant,
    validate_clean_schema,
)
from src.shared.config import Config
from src.shared.errors import ParseError
from src.shared.utils import to_date


class DailyReportNormalizer(BasePreprocessor):
    """Schema-reconciling fold of JHU US daily reports.

    Holds no state between calls to preprocess(); every call starts a new
    accumulator and returns a fresh DataFrame.
    """

    CATEGORY = "covid"

    def __init__(
        self,
        output_dir: Path | None = None,
        cutover: date | str | None = None,
        naming: DailyFileNaming | None = None,
        mask_gaps: bool | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the normalizer.

        Args:
            output_dir: Directory for Silver exports (default: data/processed/covid/).
            cutover: First date using current column names (default: Config.JHU_SCHEMA_CUTOVER).
            naming: Used to name offending files in errors (default: MM-DD-YYYY.csv).
            mask_gaps: Mask deltas across calendar gaps (default: Config.MASK_DELTA_GAPS).
            log_file: Optional path for file-based logging.
        """
        super().__init__(
            output_dir=output_dir or Config.DATA_DIR / "processed" / "covid",
            log_file=log_file or Config.LOGS_DIR / "preprocessors" / "daily_report_normalizer.log",
        )
        self.cutover = to_date(cutover or Config.JHU_SCHEMA_CUTOVER)
        self.naming = naming or DailyFileNaming(base_url=Config.JHU_BASE_URL)
        self.mask_gaps = Config.MASK_DELTA_GAPS if mask_gaps is None else mask_gaps

    def preprocess(self, raw_tables: dict[date, pd.DataFrame]) -> pd.DataFrame:
        """Fold, clean and derive deltas.

        Args:
            raw_tables: {report_date: raw DataFrame}; processed in date order
                regardless of mapping order.

        Returns:
            Silver DataFrame sorted by (Province_State, Date).

        Raises:
            SchemaMismatchError: A day matches neither schema variant.
            ParseError: A present cell in a numeric column is not a number.
            ValueError: No tables were given.
        """
        if not raw_tables:
            raise ValueError("No daily tables to preprocess")

        accumulated = self.fold(raw_tables)
        clean = self._finalize(accumulated)
        self.validate(clean)

        self.logger.info(
            "Normalized %d days into %d rows (%d regions)",
            len(raw_tables),
            len(clean),
            clean[REGION_COLUMN].nunique(),
        )
        return clean

    def validate(self, df: pd.DataFrame) -> bool:
        validate_clean_schema(df)
        return True

    # ------------------------------------------------------------------
    # Fold
    # ------------------------------------------------------------------

    def fold(self, raw_tables: dict[date, pd.DataFrame]) -> pd.DataFrame:
        """Union all days into one legacy-named table, in date order.

        Returns:
            Accumulated table in arrival (date) order, raw columns retained.
        """
        frames: list[pd.DataFrame] = []
        baseline: frozenset[str] | None = None
        previous_variant: SchemaVariant | None = None

        for report_date, raw in sorted(raw_tables.items()):
            identifier = self.naming.file_name(report_date)
            variant = detect_schema_variant(
                raw.columns,
                identifier=identifier,
                report_date=report_date,
                baseline_core=baseline,
                cutover=self.cutover,
            )
            if previous_variant is not None and variant != previous_variant:
                self.logger.info(
                    "Schema cutover at %s: %s → %s", identifier, previous_variant.name, variant.name
                )
            previous_variant = variant

            if baseline is None:
                baseline = core_columns(raw.columns)

            frames.append(self._stamp(raw, report_date, variant))

        return self._union(frames)

    @staticmethod
    def _stamp(raw: pd.DataFrame, report_date: date, variant: SchemaVariant) -> pd.DataFrame:
        df = raw.copy()
        if variant == CURRENT:
            df = df.rename(columns=CURRENT_TO_LEGACY)
        df[DATE_COLUMN] = pd.Timestamp(report_date)
        return df

    @staticmethod
    def _union(frames: list[pd.DataFrame]) -> pd.DataFrame:
        # Outer join on the full column set; columns a side lacks are filled with NA
        return pd.concat(frames, join="outer", ignore_index=True)

    # ------------------------------------------------------------------
    # Clean
    # ------------------------------------------------------------------

    def _finalize(self, accumulated: pd.DataFrame) -> pd.DataFrame:
        df = accumulated.drop(columns=DROPPED_COLUMNS, errors="ignore")
        df = self._coerce_types(df)

        duplicated = df.duplicated(subset=[REGION_COLUMN, DATE_COLUMN], keep=False)
        if duplicated.any():
            self.logger.warning(
                "%d rows share a (%s, %s) key", int(duplicated.sum()), REGION_COLUMN, DATE_COLUMN
            )

        df = add_daily_deltas(df, mask_gaps=self.mask_gaps)

        extra = [c for c in df.columns if c not in OUTPUT_COLUMNS]
        return df[OUTPUT_COLUMNS + extra]

    def _coerce_types(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        for column in CUMULATIVE_COLUMNS:
            values = self._to_numeric(df, column)
            present = values.dropna()
            if (present % 1 == 0).all():
                values = values.astype("Int64")
            df[column] = values
        for column in RATE_COLUMNS:
            df[column] = self._to_numeric(df, column).astype("float64")
        return df

    def _to_numeric(self, df: pd.DataFrame, column: str) -> pd.Series:
        """Numeric view of a column; a present but non-numeric cell is an error.

        Raises:
            ParseError: Naming the first file (in date order) with a bad cell.
        """
        values = pd.to_numeric(df[column], errors="coerce")
        unparsed = values.isna() & df[column].notna()
        if unparsed.any():
            bad = df.loc[unparsed, [DATE_COLUMN, column]].sort_values(DATE_COLUMN, kind="mergesort")
            report_date = bad[DATE_COLUMN].iloc[0].date()
            raise ParseError(
                f"{int(unparsed.sum())} non-numeric value(s) in column '{column}', "
                f"first {bad[column].iloc[0]!r}",
                identifier=self.naming.file_name(report_date),
                report_date=report_date,
            )
        return values
