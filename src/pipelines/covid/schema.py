"""
JHU US Daily Report Schema
Legacy / current column variants and the normalized output contract
"""

from dataclasses import dataclass
from datetime import date

REGION_COLUMN = "Province_State"
DATE_COLUMN = "Date"


@dataclass(frozen=True)
class SchemaVariant:
    """One naming of the two columns renamed on the cutover date."""

    name: str
    fatality_column: str
    tested_column: str

    @property
    def renamed_columns(self) -> tuple[str, str]:
        return (self.fatality_column, self.tested_column)


LEGACY = SchemaVariant(
    name="legacy",
    fatality_column="Mortality_Rate",
    tested_column="People_Tested",
)

CURRENT = SchemaVariant(
    name="current",
    fatality_column="Case_Fatality_Ratio",
    tested_column="Total_Test_Results",
)

# current name -> legacy name; legacy names are canonical in the output
CURRENT_TO_LEGACY = {
    CURRENT.fatality_column: LEGACY.fatality_column,
    CURRENT.tested_column: LEGACY.tested_column,
}

RENAMED_COLUMNS = frozenset(LEGACY.renamed_columns + CURRENT.renamed_columns)

# Files up to and including 2020-11-08 use legacy names
DEFAULT_SCHEMA_CUTOVER = date(2020, 11, 9)


def expected_variant(report_date: date, cutover: date = DEFAULT_SCHEMA_CUTOVER) -> SchemaVariant:
    """Variant a file dated report_date must use."""
    return CURRENT if report_date >= cutover else LEGACY


# Raw columns removed before handoff ("Long_" is how the source spells "Long")
DROPPED_COLUMNS = [
    "Country_Region",
    "UID",
    "ISO3",
    "FIPS",
    "Lat",
    "Long",
    "Long_",
    "Last_Update",
    "Active",
    "Recovered",
]

# Columns every raw day must carry (legacy names)
CUMULATIVE_COLUMNS = ["Confirmed", "Deaths", LEGACY.tested_column, "People_Hospitalized"]
RATE_COLUMNS = ["Incident_Rate", LEGACY.fatality_column, "Testing_Rate", "Hospitalization_Rate"]

REQUIRED_RAW_COLUMNS = [REGION_COLUMN, *CUMULATIVE_COLUMNS, *RATE_COLUMNS]

# delta column -> cumulative source column
DELTA_COLUMNS = {
    "New_Deaths": "Deaths",
    "New_Hospitalizations": "People_Hospitalized",
}

OUTPUT_COLUMNS = [
    REGION_COLUMN,
    DATE_COLUMN,
    "Confirmed",
    "Deaths",
    "Incident_Rate",
    LEGACY.tested_column,
    "People_Hospitalized",
    LEGACY.fatality_column,
    "Testing_Rate",
    "Hospitalization_Rate",
    *DELTA_COLUMNS,
]
