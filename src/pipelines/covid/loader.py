"""
JHU US Daily Table Loader
Fetch (parallel) → fold (sequential, schema-aware) → deltas
"""

from datetime import date, datetime

import pandas as pd

from src.ingestion.collectors.jhu_collector import DailyFileNaming, JHUDailyReportCollector
from src.ingestion.preprocessors.daily_report_normalizer import DailyReportNormalizer
from src.shared.config import Config

DateLike = date | datetime | str


def load_daily_reports(
    date_range: tuple[DateLike, DateLike] | None = None,
    naming: DailyFileNaming | None = None,
    schema_cutover: DateLike | None = None,
    *,
    use_cache: bool = True,
    max_workers: int | None = None,
    mask_gaps: bool | None = None,
    collector: JHUDailyReportCollector | None = None,
    normalizer: DailyReportNormalizer | None = None,
) -> pd.DataFrame:
    """
    Load every daily report in date_range into one normalized table.

    Parameters:
        date_range: (start, end), both inclusive; defaults to the configured range
        naming: date → remote file mapping; defaults to Config.JHU_BASE_URL
        schema_cutover: first date using current column names
        use_cache: read/write the local raw cache
        max_workers: fetch threads
        mask_gaps: mask deltas across calendar gaps
        collector / normalizer: pre-built stages (tests, custom dirs); they
            carry their own naming, cutover and gap policy, so those
            arguments cannot be combined with them

    Returns:
        Fresh DataFrame sorted by (Province_State, Date); the loader keeps
        no reference to it.

    Raises:
        FetchError, ParseError, SchemaMismatchError: the whole load aborts
        ValueError: a stage option was given together with a pre-built stage
    """
    if collector is not None and (naming is not None or max_workers is not None):
        raise ValueError("naming/max_workers cannot be combined with a pre-built collector")
    if normalizer is not None and (schema_cutover is not None or mask_gaps is not None):
        raise ValueError("schema_cutover/mask_gaps cannot be combined with a pre-built normalizer")

    start, end = date_range or (Config.JHU_START_DATE, Config.JHU_END_DATE)

    collector = collector or JHUDailyReportCollector(
        naming=naming,
        use_cache=use_cache,
        max_workers=max_workers,
    )
    normalizer = normalizer or DailyReportNormalizer(
        cutover=schema_cutover,
        naming=collector.naming,
        mask_gaps=mask_gaps,
    )

    raw_tables = collector.collect(start, end)
    return normalizer.preprocess(raw_tables)
