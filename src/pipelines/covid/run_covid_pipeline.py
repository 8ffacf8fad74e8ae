"""
COVID Daily Reports Pipeline Runner (RAW → CLEAN → manifest)
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from src.ingestion.collectors.jhu_collector import JHUDailyReportCollector
from src.ingestion.preprocessors.daily_report_normalizer import DailyReportNormalizer
from src.pipelines.covid.quality_checks import build_quality_report
from src.shared.config import Config
from src.shared.utils import setup_logger, to_date


# -------------------------------------------------------------------
# Paths
# -------------------------------------------------------------------

MANIFEST_DIR = Config.DATA_DIR / "manifests"


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------

def stack_raw_tables(raw_tables: dict) -> pd.DataFrame:
    """
    Stack raw daily tables as fetched, tagged with their report date.
    Both schema variants appear side by side; no renaming is applied.
    """
    return pd.concat(
        [table.assign(report_date=d.isoformat()) for d, table in raw_tables.items()],
        join="outer",
        ignore_index=True,
    )


# -------------------------------------------------------------------
# Pipeline
# -------------------------------------------------------------------

def run(
    collector: JHUDailyReportCollector | None = None,
    normalizer: DailyReportNormalizer | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    output_format: str = "csv",
    export_raw: bool = False,
    manifest_dir: Path | None = None,
) -> dict:
    """
    Load the configured range, persist the clean table and a run manifest.

    Returns:
        The manifest dictionary (also written as JSON)
    """
    logger = setup_logger("covid_pipeline", level=Config.LOG_LEVEL)

    start = to_date(start_date or Config.JHU_START_DATE)
    end = to_date(end_date or Config.JHU_END_DATE)

    collector = collector or JHUDailyReportCollector()
    normalizer = normalizer or DailyReportNormalizer(naming=collector.naming)

    # ---------------------------------------------------------------
    # Fetch (RAW)
    # ---------------------------------------------------------------

    raw_tables = collector.collect(start, end)

    raw_path = None
    if export_raw:
        raw_path = collector.export_csv(stack_raw_tables(raw_tables), "us_daily_raw")

    # ---------------------------------------------------------------
    # Raw → Clean
    # ---------------------------------------------------------------

    df_clean = normalizer.preprocess(raw_tables)

    # ---------------------------------------------------------------
    # Persist
    # ---------------------------------------------------------------

    clean_path = normalizer.export(df_clean, "us_daily", start, end, format=output_format)

    # ---------------------------------------------------------------
    # Quality
    # ---------------------------------------------------------------

    quality = build_quality_report(df_clean)
    if quality["date_gaps"]["gap_rows"]:
        logger.warning(
            "%d rows follow a calendar gap in their region (mask_gaps=%s)",
            quality["date_gaps"]["gap_rows"],
            normalizer.mask_gaps,
        )

    # ---------------------------------------------------------------
    # Manifest
    # ---------------------------------------------------------------

    run_time_utc = datetime.now(timezone.utc).isoformat()

    manifest = {
        "run_time_utc": run_time_utc,
        "pipeline": "covid",
        "source": "JHU CSSE",
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "schema_cutover": normalizer.cutover.isoformat(),
        "files_loaded": len(raw_tables),
        "rows_loaded": len(df_clean),
        "mask_gaps": normalizer.mask_gaps,
        "raw_file": str(raw_path) if raw_path else None,
        "clean_file": str(clean_path),
        "quality": quality,
    }

    manifest_dir = manifest_dir or MANIFEST_DIR
    manifest_dir.mkdir(parents=True, exist_ok=True)
    manifest_path = manifest_dir / f"covid_run_{run_time_utc.replace(':', '-')}.json"
    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    logger.info("COVID pipeline completed: %d rows → %s", len(df_clean), clean_path)
    return manifest


if __name__ == "__main__":
    run()
