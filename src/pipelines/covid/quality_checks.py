"""
JHU Daily Report Quality Checks
"""

import pandas as pd

from src.pipelines.covid.deltas import date_gap_mask, sort_by_region_date
from src.pipelines.covid.schema import DATE_COLUMN, DELTA_COLUMNS, REGION_COLUMN


def check_missing_values(df: pd.DataFrame):
    """
    Detect missing values explicitly.
    Returns a JSON-serialisable report dictionary.
    """

    total_rows = int(len(df))

    missing_series = df.isna().sum()
    missing_by_column = {
        col: int(count)
        for col, count in missing_series.items()
        if count > 0
    }

    return {
        "total_rows": total_rows,
        "missing_by_column": missing_by_column,
        "has_missing": bool(missing_by_column),
    }


def check_unique_keys(df: pd.DataFrame):
    """
    Count rows sharing a (region, date) key.
    """

    duplicated = df.duplicated(subset=[REGION_COLUMN, DATE_COLUMN], keep=False)
    return {
        "duplicate_rows": int(duplicated.sum()),
        "is_unique": not bool(duplicated.any()),
    }


def check_negative_deltas(df: pd.DataFrame):
    """
    Count negative deltas, i.e. downward revisions of cumulative counts.
    Missing deltas are excluded.
    """

    return {
        column: int((df[column].dropna() < 0).sum())
        for column in DELTA_COLUMNS
        if column in df.columns
    }


def check_date_gaps(df: pd.DataFrame):
    """
    Regions whose consecutive rows are not exactly one calendar day apart.
    """

    ordered = sort_by_region_date(df)
    gaps = date_gap_mask(ordered)
    per_region = ordered.loc[gaps, REGION_COLUMN].value_counts()

    return {
        "gap_rows": int(gaps.sum()),
        "regions_with_gaps": {str(region): int(n) for region, n in per_region.items()},
    }


def build_quality_report(df: pd.DataFrame):
    """
    Aggregate all checks into one JSON-serialisable report.
    """

    return {
        "missing": check_missing_values(df),
        "keys": check_unique_keys(df),
        "negative_deltas": check_negative_deltas(df),
        "date_gaps": check_date_gaps(df),
    }
