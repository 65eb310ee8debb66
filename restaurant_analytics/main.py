"""
Prefect Workflow Orchestration - Batch Reporting

Main entry point for the restaurant reporting run:
- Load source tables
- Run data quality checks
- Build the reporting views
- Write views to the reports directory

Usage:
    restaurant-report
    restaurant-report --visits data/raw/restaurants_visitors.csv --output data/reports --format csv
"""

import argparse
import sys
from typing import List, Optional

import structlog
from prefect import flow, task, get_run_logger
from prefect.cache_policies import NO_CACHE

from restaurant_analytics.config import Settings, get_settings
from restaurant_analytics.config.logging import configure_logging
from restaurant_analytics.ingestion.batch_loader import (
    BatchLoader,
    FileFormat,
    SourceLoadError,
    SourceTables,
)
from restaurant_analytics.quality.validators import ValidationStatus
from restaurant_analytics.transformation.transformers import (
    PipelineResult,
    ReportingPipeline,
    ReportParameters,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# TASKS
# =============================================================================

@task(
    name="load_sources",
    description="Load and normalize the visit, calendar and store tables",
    cache_policy=NO_CACHE,
)
def load_sources(settings: Settings) -> SourceTables:
    """Load the three source tables named in the settings"""
    logger = get_run_logger()

    sources = settings.sources
    tables = BatchLoader().load_sources(
        visits_path=sources.visits_path,
        calendar_path=sources.calendar_path,
        stores_path=sources.stores_path,
        file_format=FileFormat(sources.file_format),
        delimiter=sources.delimiter,
        datetime_format=sources.datetime_format,
    )

    logger.info(
        f"Sources loaded: {len(tables.visits)} visits, "
        f"{len(tables.calendar)} calendar days, {len(tables.stores)} stores"
    )
    return tables


@task(
    name="build_reports",
    description="Validate, clean and enrich sources and build the reporting views",
    cache_policy=NO_CACHE,
)
def build_reports(sources: SourceTables, parameters: ReportParameters) -> PipelineResult:
    """Run the reporting pipeline over loaded sources"""
    return ReportingPipeline(parameters).run(sources)


@task(
    name="summarize_quality",
    description="Summarize data quality outcomes per source table",
    cache_policy=NO_CACHE,
)
def summarize_quality(result: PipelineResult) -> dict:
    """Summarize validation outcomes per source table"""
    logger = get_run_logger()

    summary = {}
    for table, validation in result.validation.items():
        summary[table.value] = {
            "status": validation.status.value,
            "passed_checks": validation.passed_checks,
            "total_checks": validation.total_checks,
            "success_rate": validation.success_rate,
        }
        if validation.status != ValidationStatus.PASSED:
            logger.warning(
                f"Data quality {validation.status.value} for {table.value}: "
                f"{validation.failed_checks} failed, {validation.warning_count} warnings"
            )
    return summary


@task(
    name="write_reports",
    description="Write every reporting view to the reports directory",
    retries=2,
    retry_delay_seconds=10,
    cache_policy=NO_CACHE,
)
def write_reports(result: PipelineResult, output_path: str, output_format: str) -> List[str]:
    """Write views as <view>.<format> files"""
    logger = get_run_logger()

    written = ReportingPipeline().write_views(result, output_path, output_format=output_format)

    logger.info(f"Wrote {len(written)} views to {output_path}")
    return written


# =============================================================================
# FLOWS
# =============================================================================

@flow(
    name="restaurant_reporting",
    description="Batch BI reporting over restaurant reservation data",
)
def run_reporting(settings: Optional[Settings] = None, write_output: bool = True) -> PipelineResult:
    """
    Batch reporting run.

    Steps:
    1. Load source tables
    2. Validate, clean, enrich and build views
    3. Summarize data quality
    4. Write views to the reports directory
    """
    logger = get_run_logger()
    settings = settings or get_settings()

    sources = load_sources(settings)

    result = build_reports(sources, ReportParameters.from_settings(settings.reports))
    summarize_quality(result)

    if write_output:
        result.output_paths = write_reports(
            result,
            settings.reports.output_path,
            settings.reports.output_format,
        )

    logger.info(f"Reporting run built {len(result.views)} views")
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Restaurant reservation reporting run")
    parser.add_argument("--visits", help="Visit/reservation records file")
    parser.add_argument("--calendar", help="Calendar dimension file")
    parser.add_argument("--stores", help="Store dimension file")
    parser.add_argument("--source-format", choices=[f.value for f in FileFormat], help="Source file format")
    parser.add_argument("--output", help="Directory for rendered views")
    parser.add_argument("--format", choices=["parquet", "csv"], help="Output format")
    parser.add_argument("--top-n", type=int, help="Last rank kept in top-N rankings")
    parser.add_argument("--year", type=int, help="ISO year of week-over-week views")
    parser.add_argument("--min-week", type=int, help="First ISO week of week-over-week views")
    parser.add_argument("--log-level", help="Override log level")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of settings with command line overrides applied"""
    source_overrides = {
        key: value
        for key, value in {
            "visits_path": args.visits,
            "calendar_path": args.calendar,
            "stores_path": args.stores,
            "file_format": args.source_format,
        }.items()
        if value is not None
    }
    report_overrides = {
        key: value
        for key, value in {
            "output_path": args.output,
            "output_format": args.format,
            "top_n": args.top_n,
            "year": args.year,
            "min_week": args.min_week,
        }.items()
        if value is not None
    }
    return settings.model_copy(update={
        "sources": settings.sources.model_copy(update=source_overrides),
        "reports": settings.reports.model_copy(update=report_overrides),
    })


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = apply_overrides(get_settings(), args)

    try:
        result = run_reporting(settings)
    except SourceLoadError as e:
        logger.error(
            "Reporting run aborted",
            table=e.table.value,
            file=e.result.file_path if e.result else None,
            error=str(e),
        )
        return 1

    logger.info(
        "Reporting run complete",
        views=len(result.views),
        files=len(result.output_paths),
        duration_seconds=result.duration_seconds,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
