"""Configuration management for the JHU daily reports loader."""
import os
from datetime import date, datetime
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).parent.parent.parent
    DATA_DIR = ROOT_DIR / "data"
    LOGS_DIR = ROOT_DIR / "logs"
    CACHE_DIR = DATA_DIR / "raw" / "jhu_us_daily"

    # Source
    JHU_BASE_URL: str = os.getenv(
        "JHU_BASE_URL",
        "https://raw.githubusercontent.com/CSSEGISandData/COVID-19/master/"
        "csse_covid_19_data/csse_covid_19_daily_reports_us/",
    )
    JHU_START_DATE: str = os.getenv("JHU_START_DATE", "2020-04-12")
    JHU_END_DATE: str = os.getenv("JHU_END_DATE", "2022-02-27")
    JHU_SCHEMA_CUTOVER: str = os.getenv("JHU_SCHEMA_CUTOVER", "2020-11-09")

    # HTTP
    FETCH_WORKERS: int = int(os.getenv("FETCH_WORKERS", "8"))
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
    RETRY_BACKOFF: float = float(os.getenv("RETRY_BACKOFF", "2.0"))

    # Derived fields
    MASK_DELTA_GAPS: bool = _env_flag("MASK_DELTA_GAPS")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(
        cls,
        start_date: str | None = None,
        end_date: str | None = None,
        schema_cutover: str | None = None,
        fetch_workers: int | None = None,
    ) -> None:
        """Validate the date range, cutover and worker count.

        Explicit arguments (e.g. command-line overrides) replace the
        configured values, so only the values actually used are checked.
        """
        start = cls._parse_date("JHU_START_DATE", start_date or cls.JHU_START_DATE)
        end = cls._parse_date("JHU_END_DATE", end_date or cls.JHU_END_DATE)
        cls._parse_date("JHU_SCHEMA_CUTOVER", schema_cutover or cls.JHU_SCHEMA_CUTOVER)
        if start > end:
            raise ValueError(f"JHU_START_DATE ({start}) is after JHU_END_DATE ({end})")
        workers = cls.FETCH_WORKERS if fetch_workers is None else fetch_workers
        if workers < 1:
            raise ValueError("FETCH_WORKERS must be at least 1")

    @staticmethod
    def _parse_date(name: str, value: str) -> date:
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError as exc:
            raise ValueError(f"{name} must be YYYY-MM-DD, got {value!r}") from exc

    @property
    def start_date(self) -> date:
        return self._parse_date("JHU_START_DATE", self.JHU_START_DATE)

    @property
    def end_date(self) -> date:
        return self._parse_date("JHU_END_DATE", self.JHU_END_DATE)

    @property
    def schema_cutover(self) -> date:
        return self._parse_date("JHU_SCHEMA_CUTOVER", self.JHU_SCHEMA_CUTOVER)


config = Config()
