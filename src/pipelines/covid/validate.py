"""
JHU Daily Report Schema Validation
Raw variant detection and clean-table contract
"""

from collections.abc import Iterable
from datetime import date

import pandas as pd

from src.pipelines.covid.schema import (
    DATE_COLUMN,
    DEFAULT_SCHEMA_CUTOVER,
    OUTPUT_COLUMNS,
    RENAMED_COLUMNS,
    REQUIRED_RAW_COLUMNS,
    SchemaVariant,
    expected_variant,
)
from src.shared.errors import SchemaMismatchError


def core_columns(columns: Iterable[str]) -> frozenset[str]:
    """Column set with both spellings of the renamed pair removed."""
    return frozenset(columns) - RENAMED_COLUMNS


def detect_schema_variant(
    columns: Iterable[str],
    identifier: str,
    report_date: date,
    baseline_core: frozenset[str] | None = None,
    cutover: date = DEFAULT_SCHEMA_CUTOVER,
) -> SchemaVariant:
    """
    Decide which schema variant a raw daily file uses.

    The variant is fixed by the file's date relative to the cutover; the
    file must carry exactly that variant's renamed pair. Every other column
    must equal the accumulated table's columns (baseline_core), or, for the
    first day, include all required columns.

    Raises:
        SchemaMismatchError: naming the file identifier
    """
    present = frozenset(columns)
    variant = expected_variant(report_date, cutover)

    renamed_present = present & RENAMED_COLUMNS
    if renamed_present != frozenset(variant.renamed_columns):
        raise SchemaMismatchError(
            f"expected {variant.name} columns {sorted(variant.renamed_columns)}, "
            f"found {sorted(renamed_present)}",
            identifier=identifier,
            report_date=report_date,
        )

    core = core_columns(present)

    if baseline_core is None:
        missing = core_columns(REQUIRED_RAW_COLUMNS) - core
        if missing:
            raise SchemaMismatchError(
                f"missing required columns {sorted(missing)}",
                identifier=identifier,
                report_date=report_date,
            )
        return variant

    if core != baseline_core:
        missing = sorted(baseline_core - core)
        unexpected = sorted(core - baseline_core)
        raise SchemaMismatchError(
            f"columns differ from accumulated table (missing={missing}, unexpected={unexpected})",
            identifier=identifier,
            report_date=report_date,
        )

    return variant


def validate_clean_schema(df: pd.DataFrame) -> None:
    """
    Validate the assembled table handed to downstream consumers.

    Enforces:
    - presence of every output column
    - datetime dtype on the date column
    - legacy names only

    Raises:
        ValueError: missing columns or a current-variant name leaked through
        TypeError: date column is not datetime64
    """
    missing = set(OUTPUT_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing output columns: {sorted(missing)}")

    leaked = (RENAMED_COLUMNS - set(OUTPUT_COLUMNS)) & set(df.columns)
    if leaked:
        raise ValueError(f"Current-schema columns in output: {sorted(leaked)}")

    if not pd.api.types.is_datetime64_any_dtype(df[DATE_COLUMN]):
        raise TypeError(f"Column '{DATE_COLUMN}' must be datetime64 dtype")
