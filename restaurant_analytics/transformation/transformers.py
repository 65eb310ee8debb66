"""
Reporting Pipeline

Orchestrates validation, cleaning, enrichment and the reporting views into
a single deterministic batch run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl
import structlog

from restaurant_analytics.config.settings import ReportSettings
from restaurant_analytics.ingestion.batch_loader import SourceTables
from restaurant_analytics.quality.validators import (
    ValidationResult,
    create_calendar_validator,
    create_stores_validator,
    create_visits_validator,
    profile_nulls,
)
from restaurant_analytics.reporting import views
from restaurant_analytics.schema import SourceTable
from .cleaners import CleaningStats, DataCleaner
from .enrichers import enrich_visit_data

logger = structlog.get_logger(__name__)


class ReportView(str, Enum):
    """Reporting views produced by a pipeline run"""
    TOP_STORES_ON_HOLIDAYS = "top_stores_on_holidays"
    TOP_GENRES_ON_HOLIDAYS = "top_genres_on_holidays"
    BEST_DAY_OVERALL = "best_day_overall"
    BEST_DAY_BY_GENRE = "best_day_by_genre"
    WEEKLY_TOTALS = "weekly_totals"
    WEEKLY_TOTALS_BY_GENRE = "weekly_totals_by_genre"
    DAILY_TREND = "daily_trend"
    DATA_QUALITY = "data_quality"


@dataclass(frozen=True)
class ReportParameters:
    """Explicit parameters of one reporting run"""
    top_n: int = 5
    year: Optional[int] = None
    min_week: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: ReportSettings) -> "ReportParameters":
        return cls(top_n=settings.top_n, year=settings.year, min_week=settings.min_week)


@dataclass
class PipelineResult:
    """Result of a reporting pipeline run"""
    views: Dict[ReportView, pl.DataFrame]
    facts: pl.DataFrame
    cleaning: Dict[SourceTable, CleaningStats]
    validation: Dict[SourceTable, ValidationResult]
    started_at: datetime
    completed_at: datetime
    duration_seconds: float
    output_paths: List[str] = field(default_factory=list)

    def view(self, name: Union[ReportView, str]) -> pl.DataFrame:
        return self.views[ReportView(name)]


class ReportingPipeline:
    """
    Reporting pipeline orchestrator.

    Stateless between runs: the same sources and parameters always produce
    the same views.

    Example:
        pipeline = ReportingPipeline(ReportParameters(top_n=5, year=2017, min_week=19))
        result = pipeline.run(sources)
        pipeline.write_views(result, "data/reports")
    """

    def __init__(self, parameters: Optional[ReportParameters] = None):
        self.parameters = parameters or ReportParameters()
        self.cleaner = DataCleaner()

    def validate(self, sources: SourceTables) -> Dict[SourceTable, ValidationResult]:
        """
        Run the data quality suites of the three source tables.

        Calendar day labels are checked after normalization, so abbreviations
        that cleaning repairs are not reported as invalid.
        """
        calendar, _ = self.cleaner.normalize_day_labels(sources.calendar)
        return {
            SourceTable.VISITS: create_visits_validator(sources.stores).validate(sources.visits),
            SourceTable.CALENDAR: create_calendar_validator().validate(calendar),
            SourceTable.STORES: create_stores_validator().validate(sources.stores),
        }

    def build_views(
        self,
        facts: pl.DataFrame,
        stores: pl.DataFrame,
        data_quality: pl.DataFrame,
    ) -> Dict[ReportView, pl.DataFrame]:
        """Compute every reporting view from the enriched fact table"""
        params = self.parameters
        return {
            ReportView.TOP_STORES_ON_HOLIDAYS: views.top_stores_on_holidays(facts, stores, top_n=params.top_n),
            ReportView.TOP_GENRES_ON_HOLIDAYS: views.top_genres_on_holidays(facts, top_n=params.top_n),
            ReportView.BEST_DAY_OVERALL: views.best_day_overall(facts),
            ReportView.BEST_DAY_BY_GENRE: views.best_day_by_genre(facts),
            ReportView.WEEKLY_TOTALS: views.weekly_totals_overall(facts, year=params.year, min_week=params.min_week),
            ReportView.WEEKLY_TOTALS_BY_GENRE: views.weekly_totals_by_genre(facts, year=params.year, min_week=params.min_week),
            ReportView.DAILY_TREND: views.daily_trend(facts),
            ReportView.DATA_QUALITY: data_quality,
        }

    def run(self, sources: SourceTables) -> PipelineResult:
        """
        Run the full pipeline.

        Pipeline:
        1. Profile nulls and validate the source tables
        2. Clean visits and dimensions
        3. Enrich visits with calendar and store attributes
        4. Build the reporting views
        """
        started_at = datetime.utcnow()
        logger.info(
            "Starting reporting pipeline",
            visits=len(sources.visits),
            calendar=len(sources.calendar),
            stores=len(sources.stores),
            top_n=self.parameters.top_n,
            year=self.parameters.year,
            min_week=self.parameters.min_week,
        )

        # Step 1: Data quality
        data_quality = pl.concat([
            profile_nulls(sources.visits, SourceTable.VISITS.value),
            profile_nulls(sources.calendar, SourceTable.CALENDAR.value),
            profile_nulls(sources.stores, SourceTable.STORES.value),
        ])
        validation = self.validate(sources)

        # Step 2: Clean
        visits, visit_stats = self.cleaner.clean_visits(sources.visits)
        calendar, calendar_stats = self.cleaner.clean_calendar(sources.calendar)
        stores, store_stats = self.cleaner.clean_stores(sources.stores)

        # Step 3: Enrich
        facts = enrich_visit_data(visits, calendar, stores)

        # Step 4: Views
        report_views = self.build_views(facts, stores, data_quality)

        completed_at = datetime.utcnow()
        result = PipelineResult(
            views=report_views,
            facts=facts,
            cleaning={
                SourceTable.VISITS: visit_stats,
                SourceTable.CALENDAR: calendar_stats,
                SourceTable.STORES: store_stats,
            },
            validation=validation,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )

        logger.info(
            "Reporting pipeline complete",
            views=len(report_views),
            fact_rows=len(facts),
            duration_seconds=result.duration_seconds,
        )
        return result

    def write_views(
        self,
        result: PipelineResult,
        output_path: Union[str, Path],
        output_format: str = "parquet",
    ) -> List[str]:
        """
        Write every view to ``output_path`` as ``<view>.<format>``.

        Returns:
            Paths of the written files, also recorded on the result
        """
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)

        written = []
        for name, df in result.views.items():
            output_file = output_dir / f"{name.value}.{output_format}"
            if output_format == "parquet":
                df.write_parquet(output_file)
            elif output_format == "csv":
                df.write_csv(output_file)
            else:
                raise ValueError(f"Unsupported output format: {output_format}")
            logger.info("View written", view=name.value, rows=len(df), file=str(output_file))
            written.append(str(output_file))

        result.output_paths = written
        return written
