"""
Root pytest configuration.

Builds synthetic JHU US daily report tables in either schema variant so
collector, normalizer and pipeline tests never touch the network.
"""

from collections.abc import Callable
from datetime import date

import pandas as pd
import pytest

LEGACY_RAW_COLUMNS = [
    "Province_State",
    "Country_Region",
    "Last_Update",
    "Lat",
    "Long_",
    "Confirmed",
    "Deaths",
    "Recovered",
    "Active",
    "FIPS",
    "Incident_Rate",
    "People_Tested",
    "People_Hospitalized",
    "Mortality_Rate",
    "UID",
    "ISO3",
    "Testing_Rate",
    "Hospitalization_Rate",
]

CURRENT_RAW_COLUMNS = [
    {"People_Tested": "Total_Test_Results", "Mortality_Rate": "Case_Fatality_Ratio"}.get(c, c)
    for c in LEGACY_RAW_COLUMNS
]

_DEFAULT_ROW = {
    "Country_Region": "US",
    "Last_Update": "2020-04-12 23:18:15",
    "Lat": 31.05,
    "Long_": -97.56,
    "Confirmed": 1000,
    "Deaths": 10,
    "Recovered": 100.0,
    "Active": 890.0,
    "FIPS": 48.0,
    "Incident_Rate": 44.1,
    "People_Tested": 20000.0,
    "People_Hospitalized": 50.0,
    "Mortality_Rate": 1.0,
    "UID": 84000048,
    "ISO3": "USA",
    "Testing_Rate": 689.7,
    "Hospitalization_Rate": 5.0,
}


@pytest.fixture
def make_daily_table() -> Callable[..., pd.DataFrame]:
    """
    Factory for one raw daily table.

    make_daily_table([{"Province_State": "Texas", "Deaths": 10}], variant="current")
    Values not given fall back to realistic defaults; rows are written in
    legacy field names and renamed when variant="current".
    """

    def _make(rows: list[dict], variant: str = "legacy", drop: tuple[str, ...] = ()) -> pd.DataFrame:
        records = [{**_DEFAULT_ROW, **row} for row in rows]
        df = pd.DataFrame.from_records(records, columns=LEGACY_RAW_COLUMNS)
        if variant == "current":
            df.columns = CURRENT_RAW_COLUMNS
        return df.drop(columns=list(drop))

    return _make


@pytest.fixture
def cutover() -> date:
    return date(2020, 11, 9)


@pytest.fixture
def two_day_tables(make_daily_table) -> dict[date, pd.DataFrame]:
    """Texas on the last legacy day (Deaths=10) and first current day (Deaths=15)."""
    return {
        date(2020, 11, 8): make_daily_table([{"Province_State": "Texas", "Deaths": 10}]),
        date(2020, 11, 9): make_daily_table(
            [{"Province_State": "Texas", "Deaths": 15}], variant="current"
        ),
    }
