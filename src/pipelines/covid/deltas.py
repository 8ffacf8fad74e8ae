"""
Per-region daily deltas of cumulative fields
"""

import pandas as pd

from src.pipelines.covid.schema import DATE_COLUMN, DELTA_COLUMNS, REGION_COLUMN

ONE_DAY = pd.Timedelta(days=1)


def sort_by_region_date(df: pd.DataFrame) -> pd.DataFrame:
    """Stable (region, date) ascending sort with a fresh index."""
    return df.sort_values([REGION_COLUMN, DATE_COLUMN], kind="mergesort").reset_index(drop=True)


def date_gap_mask(df: pd.DataFrame) -> pd.Series:
    """
    True where the previous same-region row is not exactly one day earlier.

    A region's first row is never a gap. Expects (region, date) order.
    """
    prev_date = df.groupby(REGION_COLUMN, sort=False)[DATE_COLUMN].shift(1)
    return prev_date.notna() & ((df[DATE_COLUMN] - prev_date) != ONE_DAY)


def add_daily_deltas(df: pd.DataFrame, mask_gaps: bool = False) -> pd.DataFrame:
    """
    Add New_Deaths / New_Hospitalizations as a grouped-by-region lag.

    Each delta is current minus the previous row of the same region in
    (region, date) order. It is missing for a region's first row and
    whenever either value is missing; a missing value is never bridged.

    Parameters:
        df: assembled table (any row order)
        mask_gaps: also leave the delta missing when the previous row of the
            region is not the previous calendar day

    Returns:
        New DataFrame sorted by (region, date) with the delta columns added
    """
    df = sort_by_region_date(df)
    grouped = df.groupby(REGION_COLUMN, sort=False)

    for delta_column, source_column in DELTA_COLUMNS.items():
        df[delta_column] = df[source_column] - grouped[source_column].shift(1)

    if mask_gaps:
        gaps = date_gap_mask(df)
        for delta_column in DELTA_COLUMNS:
            df[delta_column] = df[delta_column].mask(gaps)

    return df
