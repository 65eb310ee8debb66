"""
Data Enrichment Module

Attaches calendar and store attributes to cleaned visit records.
Every join is a left join against the calendar or store dimension.
"""

import polars as pl
import structlog

logger = structlog.get_logger(__name__)

CALENDAR_ATTRIBUTES = ["day_of_week", "is_holiday"]
STORE_ATTRIBUTES = ["genre", "area"]


class DataEnricher:
    """
    Enricher producing the reporting fact table.

    Every join is a left join with respect to the visit records: a visit
    whose date or store has no dimension row keeps its own fields and gets
    nulls for the missing attributes.
    """

    def join_calendar(self, visits: pl.DataFrame, calendar: pl.DataFrame) -> pl.DataFrame:
        """Attach day_of_week and is_holiday by visit_date"""
        dates = calendar.get_column("date").drop_nulls().to_list()
        unmatched = visits.filter(
            pl.col("visit_date").is_not_null() & ~pl.col("visit_date").is_in(dates)
        ).height
        if unmatched:
            logger.warning("Visit dates missing from calendar", rows=unmatched)

        return visits.join(
            calendar.select(["date", *CALENDAR_ATTRIBUTES]),
            left_on="visit_date",
            right_on="date",
            how="left",
        )

    def join_stores(self, visits: pl.DataFrame, stores: pl.DataFrame) -> pl.DataFrame:
        """Attach genre and area by store_id"""
        store_ids = stores.get_column("store_id").drop_nulls().to_list()
        unmatched = visits.filter(
            pl.col("store_id").is_not_null() & ~pl.col("store_id").is_in(store_ids)
        ).height
        if unmatched:
            logger.warning("Visit stores missing from store table", rows=unmatched)

        return visits.join(
            stores.select(["store_id", *STORE_ATTRIBUTES]),
            on="store_id",
            how="left",
        )


def enrich_visit_data(
    visits: pl.DataFrame,
    calendar: pl.DataFrame,
    stores: pl.DataFrame,
) -> pl.DataFrame:
    """
    Build the reporting fact table from cleaned visits and dimensions.

    Args:
        visits: Cleaned visit records (with visit_date)
        calendar: Cleaned calendar dimension
        stores: Cleaned store dimension

    Returns:
        One row per visit record with calendar and store attributes
    """
    enricher = DataEnricher()

    df = enricher.join_calendar(visits, calendar)
    df = enricher.join_stores(df, stores)

    logger.info("Visit facts enriched", rows=len(df))
    return df
