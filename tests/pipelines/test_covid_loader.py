"""Tests for the daily table loader and pipeline runner."""

import json
from datetime import date, timedelta
from unittest.mock import Mock, patch

import pandas as pd
import pytest

from src.ingestion.collectors.jhu_collector import DailyFileNaming, JHUDailyReportCollector
from src.ingestion.preprocessors.daily_report_normalizer import DailyReportNormalizer
from src.pipelines.covid.loader import load_daily_reports
from src.pipelines.covid.run_covid_pipeline import run, stack_raw_tables
from src.shared.errors import FetchError, SchemaMismatchError

BASE_URL = "https://example.test/daily_reports_us/"
START = date(2020, 11, 6)
END = date(2020, 11, 11)


def _response(content: bytes) -> Mock:
    resp = Mock()
    resp.status_code = 200
    resp.content = content
    resp.raise_for_status = Mock()
    return resp


@pytest.fixture
def remote_files(make_daily_table) -> dict[str, bytes]:
    """Six days across the cutover, three regions each."""
    files = {}
    day = START
    while day <= END:
        offset = (day - START).days
        variant = "current" if day >= date(2020, 11, 9) else "legacy"
        table = make_daily_table(
            [
                {"Province_State": "Texas", "Deaths": 100 + offset},
                {"Province_State": "Ohio", "Deaths": 40 + offset, "People_Hospitalized": None},
                {"Province_State": "Utah", "Deaths": 7},
            ],
            variant=variant,
        )
        files[f"{BASE_URL}{day:%m-%d-%Y}.csv"] = table.to_csv(index=False).encode()
        day += timedelta(days=1)
    return files


@pytest.fixture
def make_stages(tmp_path):
    def _make(cache_name: str = "cache", use_cache: bool = True):
        collector = JHUDailyReportCollector(
            output_dir=tmp_path / cache_name,
            naming=DailyFileNaming(base_url=BASE_URL),
            use_cache=use_cache,
            max_workers=3,
            log_file=tmp_path / "collector.log",
        )
        normalizer = DailyReportNormalizer(
            output_dir=tmp_path / "processed",
            cutover=date(2020, 11, 9),
            naming=collector.naming,
            log_file=tmp_path / "normalizer.log",
        )
        return collector, normalizer

    return _make


def _serve(collector, remote_files):
    return patch.object(
        collector._session, "get", side_effect=lambda url, timeout=None: _response(remote_files[url])
    )


# ---------------------------------------------------------------------------
# load_daily_reports
# ---------------------------------------------------------------------------


class TestLoadDailyReports:
    def test_row_count_and_legacy_names(self, make_stages, remote_files):
        collector, normalizer = make_stages()
        with _serve(collector, remote_files):
            df = load_daily_reports((START, END), collector=collector, normalizer=normalizer)

        assert len(df) == 6 * 3
        assert "Case_Fatality_Ratio" not in df.columns
        assert "Total_Test_Results" not in df.columns
        assert df["Date"].min() == pd.Timestamp(START)
        assert df["Date"].max() == pd.Timestamp(END)

    def test_deltas_across_cutover(self, make_stages, remote_files):
        collector, normalizer = make_stages()
        with _serve(collector, remote_files):
            df = load_daily_reports((START, END), collector=collector, normalizer=normalizer)

        texas = df[df["Province_State"] == "Texas"]
        assert pd.isna(texas["New_Deaths"].iloc[0])
        assert list(texas["New_Deaths"].iloc[1:]) == [1] * 5
        utah = df[df["Province_State"] == "Utah"]
        assert list(utah["New_Deaths"].iloc[1:]) == [0] * 5
        ohio = df[df["Province_State"] == "Ohio"]
        assert ohio["New_Hospitalizations"].isna().all()

    def test_idempotent_fresh_vs_cache(self, make_stages, remote_files):
        collector, normalizer = make_stages()
        with _serve(collector, remote_files):
            fresh = load_daily_reports((START, END), collector=collector, normalizer=normalizer)

        cached_collector, cached_normalizer = make_stages()
        with patch.object(cached_collector._session, "get", side_effect=AssertionError("network")):
            cached = load_daily_reports(
                (START, END), collector=cached_collector, normalizer=cached_normalizer
            )

        pd.testing.assert_frame_equal(fresh, cached)

    def test_idempotent_without_cache(self, make_stages, remote_files):
        first_collector, normalizer = make_stages(cache_name="a", use_cache=False)
        second_collector, _ = make_stages(cache_name="b", use_cache=False)
        with _serve(first_collector, remote_files):
            first = load_daily_reports((START, END), collector=first_collector, normalizer=normalizer)
        with _serve(second_collector, remote_files):
            second = load_daily_reports(
                (START, END), collector=second_collector, normalizer=normalizer
            )

        pd.testing.assert_frame_equal(first, second)

    def test_missing_day_aborts_load(self, make_stages, remote_files):
        collector, normalizer = make_stages()
        del remote_files[f"{BASE_URL}11-10-2020.csv"]

        def fake_get(url, timeout=None):
            if url not in remote_files:
                resp = _response(b"")
                resp.status_code = 404
                return resp
            return _response(remote_files[url])

        with patch.object(collector._session, "get", side_effect=fake_get):
            with pytest.raises(FetchError, match="11-10-2020.csv"):
                load_daily_reports((START, END), collector=collector, normalizer=normalizer)

    def test_schema_mismatch_aborts_load(self, make_stages, remote_files, make_daily_table):
        collector, normalizer = make_stages()
        broken = make_daily_table([{"Province_State": "Texas"}], drop=("Testing_Rate",))
        remote_files[f"{BASE_URL}11-07-2020.csv"] = broken.to_csv(index=False).encode()

        with _serve(collector, remote_files):
            with pytest.raises(SchemaMismatchError, match="11-07-2020.csv"):
                load_daily_reports((START, END), collector=collector, normalizer=normalizer)

    def test_naming_with_prebuilt_collector_rejected(self, make_stages):
        collector, normalizer = make_stages()
        with patch.object(collector._session, "get") as get:
            with pytest.raises(ValueError, match="pre-built collector"):
                load_daily_reports(
                    (START, END),
                    naming=DailyFileNaming(base_url="https://other.test/"),
                    collector=collector,
                    normalizer=normalizer,
                )
        get.assert_not_called()

    def test_cutover_with_prebuilt_normalizer_rejected(self, make_stages):
        collector, normalizer = make_stages()
        with pytest.raises(ValueError, match="pre-built normalizer"):
            load_daily_reports(
                (START, END), schema_cutover="2020-11-10", collector=collector, normalizer=normalizer
            )

    def test_builds_default_stages(self, tmp_path, monkeypatch, remote_files):
        monkeypatch.setattr("src.shared.config.Config.CACHE_DIR", tmp_path / "cache")
        monkeypatch.setattr("src.shared.config.Config.DATA_DIR", tmp_path)
        monkeypatch.setattr("src.shared.config.Config.LOGS_DIR", tmp_path / "logs")

        def fake_get(self, url, timeout=None):
            return _response(remote_files[url])

        with patch("requests.Session.get", new=fake_get):
            df = load_daily_reports(
                (START, END),
                naming=DailyFileNaming(base_url=BASE_URL),
                schema_cutover="2020-11-09",
            )

        assert len(df) == 18


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRun:
    def test_writes_clean_file_and_manifest(self, tmp_path, make_stages, remote_files):
        collector, normalizer = make_stages()
        with _serve(collector, remote_files):
            manifest = run(
                collector=collector,
                normalizer=normalizer,
                start_date=START.isoformat(),
                end_date=END.isoformat(),
                manifest_dir=tmp_path / "manifests",
            )

        assert manifest["files_loaded"] == 6
        assert manifest["rows_loaded"] == 18
        assert manifest["schema_cutover"] == "2020-11-09"
        assert manifest["raw_file"] is None
        assert pd.read_csv(manifest["clean_file"]).shape[0] == 18

        written = list((tmp_path / "manifests").glob("covid_run_*.json"))
        assert len(written) == 1
        assert json.loads(written[0].read_text())["rows_loaded"] == 18

    def test_export_raw(self, tmp_path, make_stages, remote_files):
        collector, normalizer = make_stages()
        with _serve(collector, remote_files):
            manifest = run(
                collector=collector,
                normalizer=normalizer,
                start_date=START.isoformat(),
                end_date=END.isoformat(),
                export_raw=True,
                manifest_dir=tmp_path / "manifests",
            )

        raw = pd.read_csv(manifest["raw_file"])
        assert len(raw) == 18
        assert {"People_Tested", "Total_Test_Results", "report_date"} <= set(raw.columns)

    def test_stack_raw_tables_keeps_both_variants(self, make_daily_table):
        stacked = stack_raw_tables(
            {
                date(2020, 11, 8): make_daily_table([{"Province_State": "Texas"}]),
                date(2020, 11, 9): make_daily_table([{"Province_State": "Texas"}], variant="current"),
            }
        )
        assert list(stacked["report_date"]) == ["2020-11-08", "2020-11-09"]
        assert stacked["People_Tested"].notna().sum() == 1
        assert stacked["Total_Test_Results"].notna().sum() == 1
