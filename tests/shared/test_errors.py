"""Tests for the loader exception hierarchy."""

from datetime import date

import pytest

from src.shared.errors import DailyReportError, FetchError, ParseError, SchemaMismatchError


@pytest.mark.parametrize("error_cls", [FetchError, ParseError, SchemaMismatchError])
def test_subclasses_share_base(error_cls):
    error = error_cls("boom", identifier="04-12-2020.csv", report_date=date(2020, 4, 12))
    assert isinstance(error, DailyReportError)
    assert error.identifier == "04-12-2020.csv"
    assert error.report_date == date(2020, 4, 12)


def test_message_names_the_file():
    error = SchemaMismatchError("missing required columns ['Deaths']", identifier="06-01-2020.csv")
    assert str(error) == "06-01-2020.csv: missing required columns ['Deaths']"
    assert error.report_date is None
