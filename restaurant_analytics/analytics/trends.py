"""
Week-over-Week Trend Engine

Weekly totals with the preceding week's total and the relative change.
"""

from typing import List, Optional, Sequence

import polars as pl
import structlog

from .aggregation import TOTAL_COLUMN

logger = structlog.get_logger(__name__)

WEEK_COLUMNS = ["iso_year", "iso_week"]


def weekly_totals(
    daily: pl.DataFrame,
    partition_by: Optional[Sequence[str]] = None,
) -> pl.DataFrame:
    """
    Roll a date-keyed daily aggregate up to ISO weeks.

    Args:
        daily: Daily aggregate with ``visit_date`` and
            ``total_reserved_visitors`` (plus any partition columns)
        partition_by: Secondary key kept in the weekly grain, e.g. genre

    Returns:
        Partition columns, ``iso_year``, ``iso_week`` and ``total_visitors``;
        a week whose daily totals are all null has a null total
    """
    keys = list(partition_by or []) + WEEK_COLUMNS
    return (
        daily.with_columns([
            pl.col("visit_date").dt.iso_year().alias("iso_year"),
            pl.col("visit_date").dt.week().alias("iso_week"),
        ])
        .group_by(keys)
        .agg(
            pl.when(pl.col(TOTAL_COLUMN).count() > 0)
            .then(pl.col(TOTAL_COLUMN).sum())
            .cast(pl.Int64)
            .alias("total_visitors")
        )
        .sort(keys)
    )


def week_over_week(
    weekly: pl.DataFrame,
    partition_by: Optional[Sequence[str]] = None,
    year: Optional[int] = None,
    min_week: Optional[int] = None,
) -> pl.DataFrame:
    """
    Attach the prior week's total and the week-over-week change.

    ``prior_week_total`` is the total of the preceding row in the same
    partition and ISO year, ordered by week; the first row of each
    partition has none. ``pct_change`` is ``total / prior - 1`` as a
    fraction and is null whenever the prior total is null or zero.

    ``year`` and ``min_week`` select the reported rows after the lag has
    been computed, so the first reported week still sees its real
    predecessor.

    Args:
        weekly: Output of :func:`weekly_totals`
        partition_by: Secondary partition key, e.g. ["genre"]
        year: Report only this ISO year
        min_week: Report only weeks >= this ISO week number

    Returns:
        Weekly rows with ``prior_week_total`` and ``pct_change``
    """
    partition: List[str] = list(partition_by or [])
    lag_groups = partition + ["iso_year"]

    df = weekly.sort(partition + WEEK_COLUMNS)
    prior = pl.col("total_visitors").shift(1).over(lag_groups)
    df = df.with_columns(prior.alias("prior_week_total"))

    prior_total = pl.col("prior_week_total")
    df = df.with_columns(
        pl.when(prior_total.is_null() | (prior_total == 0))
        .then(None)
        .otherwise(pl.col("total_visitors") / prior_total - 1)
        .cast(pl.Float64)
        .alias("pct_change")
    )

    if year is not None:
        df = df.filter(pl.col("iso_year") == year)
    if min_week is not None:
        df = df.filter(pl.col("iso_week") >= min_week)

    logger.debug(
        "Week-over-week computed",
        partition_by=partition,
        year=year,
        min_week=min_week,
        rows=len(df),
    )
    return df


def daily_trend(daily: pl.DataFrame) -> pl.DataFrame:
    """Order a date-keyed daily aggregate chronologically as ``total_visitors``"""
    return (
        daily.select([
            pl.col("visit_date"),
            pl.col(TOTAL_COLUMN).alias("total_visitors"),
        ])
        .sort("visit_date")
    )
