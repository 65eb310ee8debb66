"""
Aggregation Engine

Sums reserved visitors over the enriched fact table along a fixed set of
grouping keys. Every ranking and average downstream is computed from these
daily sums, never from the raw sub-daily reservation rows.
"""

from enum import Enum
from typing import Dict, List, Optional, Union

import polars as pl
import structlog

logger = structlog.get_logger(__name__)

TOTAL_COLUMN = "total_reserved_visitors"
VALUE_COLUMN = "reserved_visitor_count"


class GroupingKey(str, Enum):
    """Supported aggregation grains"""
    STORE = "store"
    GENRE = "genre"
    STORE_DATE = "store+date"
    GENRE_DATE = "genre+date"
    DATE = "date"
    DATE_DAY_OF_WEEK = "date+day_of_week"
    GENRE_DATE_DAY_OF_WEEK = "genre+date+day_of_week"


GROUPING_COLUMNS: Dict[GroupingKey, List[str]] = {
    GroupingKey.STORE: ["store_id"],
    GroupingKey.GENRE: ["genre"],
    GroupingKey.STORE_DATE: ["store_id", "visit_date"],
    GroupingKey.GENRE_DATE: ["genre", "visit_date"],
    GroupingKey.DATE: ["visit_date"],
    GroupingKey.DATE_DAY_OF_WEEK: ["visit_date", "day_of_week"],
    GroupingKey.GENRE_DATE_DAY_OF_WEEK: ["genre", "visit_date", "day_of_week"],
}


def grouping_columns(key: Union[GroupingKey, str]) -> List[str]:
    """
    Resolve a grouping key to its fact table columns.

    Raises:
        ValueError: unknown grouping key
    """
    return list(GROUPING_COLUMNS[GroupingKey(key)])


def aggregate_visitors(
    facts: pl.DataFrame,
    key: Union[GroupingKey, str],
    holiday_only: bool = False,
    predicate: Optional[pl.Expr] = None,
) -> pl.DataFrame:
    """
    Sum reserved visitors per distinct value of the grouping key.

    A fact row contributes to the aggregate only when every grouping column
    is non-null, so a visit with an unknown store still counts toward
    date-only sums while being left out of genre sums. Filters behave the
    same way: a visit with no calendar row has a null holiday flag and is
    excluded by ``holiday_only``.

    Args:
        facts: Enriched fact table
        key: Grouping key
        holiday_only: Keep only visits on holiday dates
        predicate: Additional row filter

    Returns:
        One row per grouping key value with an integer
        ``total_reserved_visitors`` column, ordered by the key columns.
        The total is null when no row of the group has a count.
    """
    columns = grouping_columns(key)

    df = facts
    if holiday_only:
        df = df.filter(pl.col("is_holiday"))
    if predicate is not None:
        df = df.filter(predicate)

    df = df.drop_nulls(subset=columns)

    # A group whose counts are all null has a null total, not zero
    total = pl.when(pl.col(VALUE_COLUMN).count() > 0).then(pl.col(VALUE_COLUMN).sum())

    aggregated = (
        df.group_by(columns)
        .agg(total.cast(pl.Int64).alias(TOTAL_COLUMN))
        .sort(columns)
    )

    logger.debug(
        "Visitors aggregated",
        key=GroupingKey(key).value,
        holiday_only=holiday_only,
        input_rows=len(facts),
        groups=len(aggregated),
    )
    return aggregated
