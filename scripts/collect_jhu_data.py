"""JHU US daily reports collection and normalization script.

Two-stage pipeline:
1. Collection (Bronze): Fetch one CSV per day from the JHU CSSE repository → data/raw/jhu_us_daily/
2. Normalization (Silver): Fold into one legacy-named table with daily deltas → data/processed/covid/

Usage:
    # Full configured range (2020-04-12 to 2022-02-27)
    python scripts/collect_jhu_data.py

    # Custom date range
    python scripts/collect_jhu_data.py --start 2020-11-01 --end 2020-11-30

    # Ignore the local raw cache
    python scripts/collect_jhu_data.py --no-cache

    # Parquet output, deltas masked across missing days
    python scripts/collect_jhu_data.py --format parquet --mask-gaps

    # Health check only
    python scripts/collect_jhu_data.py --health-check

Example:
    $ python scripts/collect_jhu_data.py --start 2020-11-07 --end 2020-11-10
    [INFO] JHUDailyReportCollector initialized
    [INFO] Collecting 4 daily files 2020-11-07 to 2020-11-10
    [INFO] Schema cutover at 11-09-2020.csv: legacy → current
    [INFO] Normalized 4 days into 232 rows (58 regions)
    [INFO] Pipeline Complete!
"""

import argparse
import sys

from src.ingestion.collectors.jhu_collector import JHUDailyReportCollector
from src.ingestion.preprocessors.daily_report_normalizer import DailyReportNormalizer
from src.pipelines.covid.run_covid_pipeline import run
from src.shared.config import Config
from src.shared.errors import DailyReportError
from src.shared.utils import setup_logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Collect and normalize JHU CSSE US daily COVID-19 reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--start",
        type=str,
        default=Config.JHU_START_DATE,
        help=f"Start date (YYYY-MM-DD). Default: {Config.JHU_START_DATE}",
        metavar="DATE",
    )

    parser.add_argument(
        "--end",
        type=str,
        default=Config.JHU_END_DATE,
        help=f"End date (YYYY-MM-DD). Default: {Config.JHU_END_DATE}",
        metavar="DATE",
    )

    parser.add_argument(
        "--cutover",
        type=str,
        default=Config.JHU_SCHEMA_CUTOVER,
        help=f"First date using current column names. Default: {Config.JHU_SCHEMA_CUTOVER}",
        metavar="DATE",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=Config.FETCH_WORKERS,
        help=f"Parallel fetch threads (default: {Config.FETCH_WORKERS})",
    )

    parser.add_argument(
        "--format",
        choices=["csv", "parquet"],
        default="csv",
        help="Silver output format (default: csv)",
    )

    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Do not read or write the local raw cache",
    )

    parser.add_argument(
        "--mask-gaps",
        action="store_true",
        default=Config.MASK_DELTA_GAPS,
        help="Leave deltas missing when the previous row of a region is not the previous day",
    )

    parser.add_argument(
        "--export-raw",
        action="store_true",
        help="Also export the stacked raw tables as one Bronze snapshot CSV",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check only and exit",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main collection script."""
    args = parse_args(argv)

    logger = setup_logger(
        "collect_jhu",
        level="DEBUG" if args.verbose else Config.LOG_LEVEL,
    )

    try:
        try:
            Config.validate(
                start_date=args.start,
                end_date=args.end,
                schema_cutover=args.cutover,
                fetch_workers=args.workers,
            )
        except ValueError as e:
            logger.error("Invalid arguments: %s", e)
            return 1

        collector = JHUDailyReportCollector(
            use_cache=not args.no_cache,
            max_workers=args.workers,
        )

        if args.health_check:
            if not collector.health_check():
                logger.error("JHU source health check failed")
                logger.error("Please check your internet connection")
                return 1
            logger.info("Health check: PASSED")
            return 0

        normalizer = DailyReportNormalizer(
            cutover=args.cutover,
            naming=collector.naming,
            mask_gaps=args.mask_gaps,
        )

        logger.info("=" * 60)
        logger.info("JHU US daily reports %s to %s (cutover %s)", args.start, args.end, args.cutover)
        logger.info("=" * 60)

        manifest = run(
            collector=collector,
            normalizer=normalizer,
            start_date=args.start,
            end_date=args.end,
            output_format=args.format,
            export_raw=args.export_raw,
        )

        logger.info(
            "  ✓ %d files, %d rows → %s",
            manifest["files_loaded"],
            manifest["rows_loaded"],
            manifest["clean_file"],
        )
        logger.info("=" * 60)
        logger.info("✓ Pipeline Complete!")
        logger.info("=" * 60)
        return 0

    except DailyReportError as e:
        logger.error("Load aborted: %s", e)
        return 1

    except KeyboardInterrupt:
        logger.warning("Collection interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Unexpected error during collection: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
