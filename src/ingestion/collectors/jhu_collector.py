"""JHU CSSE US daily reports collector.

Bronze Layer: fetches one CSV per calendar day from the JHU CSSE COVID-19
repository and caches the raw bytes in data/raw/jhu_us_daily/.

Each day's file is named MM-DD-YYYY.csv. Files are independent of each
other, so the fetch stage runs on a thread pool; results are always
returned keyed and ordered by date, never by arrival.

Failure policy: any day that cannot be fetched (FetchError) or parsed
(ParseError) aborts the whole collection. HTTP-level retries with
exponential backoff happen inside the session adapter before a FetchError
is raised.

Schema reconciliation (Bronze → Silver) is handled by
daily_report_normalizer.py.

Source: https://github.com/CSSEGISandData/COVID-19
"""

import io
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

import pandas as pd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.ingestion.collectors.base_collector import BaseCollector
from src.shared.config import Config
from src.shared.errors import DailyReportError, FetchError, ParseError
from src.shared.utils import daily_range, to_date


@dataclass(frozen=True)
class DailyFileNaming:
    """Immutable date → remote file mapping."""

    base_url: str
    date_format: str = "%m-%d-%Y"
    extension: str = ".csv"

    def file_name(self, report_date: date) -> str:
        return f"{report_date.strftime(self.date_format)}{self.extension}"

    def url(self, report_date: date) -> str:
        return f"{self.base_url.rstrip('/')}/{self.file_name(report_date)}"


class JHUDailyReportCollector(BaseCollector):
    """Collector for JHU CSSE US daily report CSVs.

    Returns raw DataFrames with all source fields preserved. The report
    date is NOT read from file content ("Last_Update" is unreliable); it is
    the key of the returned mapping, derived from the file name.
    """

    SOURCE_NAME = "jhu"

    STATUS_FORCELIST = [429, 500, 502, 503, 504]

    def __init__(
        self,
        output_dir: Path | None = None,
        naming: DailyFileNaming | None = None,
        use_cache: bool = True,
        max_workers: int | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            output_dir: Raw cache directory (default: Config.CACHE_DIR).
            naming: Date → file mapping (default: Config.JHU_BASE_URL, MM-DD-YYYY.csv).
            use_cache: Read from and write to the raw cache.
            max_workers: Fetch threads (default: Config.FETCH_WORKERS; 1 = sequential).
            log_file: Optional path for file-based logging.
        """
        super().__init__(
            output_dir=output_dir or Config.CACHE_DIR,
            log_file=log_file or Config.LOGS_DIR / "collectors" / "jhu_collector.log",
        )
        self.naming = naming or DailyFileNaming(base_url=Config.JHU_BASE_URL)
        self.use_cache = use_cache
        self.max_workers = max(1, max_workers or Config.FETCH_WORKERS)
        self._session = self._create_session()
        self.logger.info(
            "JHUDailyReportCollector initialized, cache=%s (enabled=%s), workers=%d",
            self.output_dir,
            self.use_cache,
            self.max_workers,
        )

    # ------------------------------------------------------------------
    # BaseCollector interface
    # ------------------------------------------------------------------

    def collect(
        self,
        start_date: date | datetime | str,
        end_date: date | datetime | str,
    ) -> dict[date, pd.DataFrame]:
        """Fetch and parse every daily file between start_date and end_date.

        Args:
            start_date: First report date (inclusive).
            end_date: Last report date (inclusive).

        Returns:
            {report_date: raw DataFrame}, ordered by date.

        Raises:
            FetchError: A day could not be retrieved (earliest failing day wins).
            ParseError: A day's file is not a parseable CSV table.
            ValueError: start_date is after end_date.
        """
        dates = daily_range(start_date, end_date)
        self.logger.info(
            "Collecting %d daily files %s to %s", len(dates), dates[0], dates[-1]
        )

        if self.max_workers == 1 or len(dates) == 1:
            tables = [self.fetch_day(d) for d in dates]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(dates))) as executor:
                try:
                    # map() re-raises in submission order, so the earliest bad day surfaces
                    tables = list(executor.map(self.fetch_day, dates))
                except DailyReportError:
                    executor.shutdown(wait=True, cancel_futures=True)
                    raise

        self.logger.info(
            "Done: %d files, %d rows", len(tables), sum(len(t) for t in tables)
        )
        return dict(zip(dates, tables))

    def health_check(self) -> bool:
        """Check that the first configured daily file is reachable."""
        try:
            url = self.naming.url(to_date(Config.JHU_START_DATE))
            return self._session.head(url, timeout=10, allow_redirects=True).ok
        except requests.exceptions.RequestException:
            return False

    # ------------------------------------------------------------------
    # Per-day fetch
    # ------------------------------------------------------------------

    def fetch_day(self, report_date: date) -> pd.DataFrame:
        """Fetch (or read from cache) and parse one day's table.

        Args:
            report_date: Day to load.

        Returns:
            Raw DataFrame exactly as parsed from the CSV.
        """
        identifier = self.naming.file_name(report_date)
        content = self._read_raw(report_date, identifier)
        return self._parse(content, identifier, report_date)

    def cache_path(self, report_date: date) -> Path:
        return self.output_dir / self.naming.file_name(report_date)

    def _read_raw(self, report_date: date, identifier: str) -> bytes:
        path = self.cache_path(report_date)
        if self.use_cache and path.exists():
            self.logger.debug("Cache hit %s", path)
            return path.read_bytes()

        content = self._download(report_date, identifier)
        if self.use_cache:
            self._write_cache(path, content)
        return content

    def _parse(self, content: bytes, identifier: str, report_date: date) -> pd.DataFrame:
        try:
            df = pd.read_csv(io.BytesIO(content))
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
            raise ParseError(
                f"not a parseable CSV table ({exc})",
                identifier=identifier,
                report_date=report_date,
            ) from exc

        if df.columns.empty:
            raise ParseError("table has no columns", identifier=identifier, report_date=report_date)

        self.logger.debug("Parsed %d rows from %s", len(df), identifier)
        return df

    # ------------------------------------------------------------------
    # Private: HTTP layer
    # ------------------------------------------------------------------

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=Config.MAX_RETRIES,
            backoff_factor=Config.RETRY_BACKOFF,
            status_forcelist=self.STATUS_FORCELIST,
            allowed_methods=["GET", "HEAD"],
        )
        adapter = HTTPAdapter(max_retries=retry, pool_maxsize=max(10, self.max_workers))
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _download(self, report_date: date, identifier: str) -> bytes:
        """GET one daily file.

        Raises:
            FetchError: Network failure, HTTP error status or empty body.
        """
        url = self.naming.url(report_date)
        self.logger.debug("GET %s", url)

        try:
            response = self._session.get(url, timeout=Config.REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "unknown"
            raise FetchError(
                f"HTTP {status} for {url}", identifier=identifier, report_date=report_date
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise FetchError(
                f"request failed for {url} ({exc})", identifier=identifier, report_date=report_date
            ) from exc

        if not response.content:
            raise FetchError(
                f"empty response body for {url}", identifier=identifier, report_date=report_date
            )

        return response.content

    def _write_cache(self, path: Path, content: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self.logger.debug("Cached %s", path)
