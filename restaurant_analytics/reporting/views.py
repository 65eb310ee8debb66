"""
Reporting Views

Named business views built from the enriched fact table. Each view is a
pure function returning a new DataFrame with presentation column names;
averages are rounded here and nowhere earlier.
"""

from typing import Optional

import polars as pl

from restaurant_analytics.analytics.aggregation import GroupingKey, aggregate_visitors
from restaurant_analytics.analytics.ranking import METRIC_COLUMN, RANK_COLUMN, rank_entities
from restaurant_analytics.analytics.trends import daily_trend as _daily_trend
from restaurant_analytics.analytics.trends import week_over_week, weekly_totals

# Decimal places of user-facing averages
VISITOR_AVG_DECIMALS = 0
DAY_OF_WEEK_AVG_DECIMALS = 1


def _avg(decimals: int) -> pl.Expr:
    # Exact halves round away from zero: 2.5 shows as 3
    return pl.col(METRIC_COLUMN).round(decimals, mode="half_away_from_zero").alias("avg_visitors")


def top_stores_on_holidays(
    facts: pl.DataFrame,
    stores: pl.DataFrame,
    top_n: int = 5,
) -> pl.DataFrame:
    """
    Stores ranked by average daily reserved visitors on holidays.

    Ties at rank ``top_n`` are all returned. Stores missing from the store
    table keep their rank with a null genre.
    """
    daily = aggregate_visitors(facts, GroupingKey.STORE_DATE, holiday_only=True)
    ranked = rank_entities(daily, ["store_id"], max_rank=top_n)
    return (
        ranked.join(stores.select(["store_id", "genre"]), on="store_id", how="left")
        .select([
            "store_id",
            "genre",
            _avg(VISITOR_AVG_DECIMALS),
            RANK_COLUMN,
        ])
        .sort([RANK_COLUMN, "store_id"])
    )


def top_genres_on_holidays(
    facts: pl.DataFrame,
    top_n: Optional[int] = 5,
) -> pl.DataFrame:
    """Genres ranked by average daily reserved visitors on holidays"""
    daily = aggregate_visitors(facts, GroupingKey.GENRE_DATE, holiday_only=True)
    ranked = rank_entities(daily, ["genre"], max_rank=top_n)
    return ranked.select(["genre", _avg(VISITOR_AVG_DECIMALS), RANK_COLUMN])


def best_day_overall(facts: pl.DataFrame) -> pl.DataFrame:
    """Days of the week ranked by average daily reserved visitors"""
    daily = aggregate_visitors(facts, GroupingKey.DATE_DAY_OF_WEEK)
    ranked = rank_entities(daily, ["day_of_week"])
    return ranked.select(["day_of_week", _avg(DAY_OF_WEEK_AVG_DECIMALS), RANK_COLUMN])


def best_day_by_genre(facts: pl.DataFrame) -> pl.DataFrame:
    """
    Days of the week ranked within each genre.

    The daily aggregate is one row per (genre, date); its day of week is an
    attribute of the date, so each date is averaged exactly once.
    """
    daily = aggregate_visitors(facts, GroupingKey.GENRE_DATE_DAY_OF_WEEK)
    ranked = rank_entities(
        daily,
        ["genre", "day_of_week"],
        partition_by=["genre"],
    )
    return ranked.select([
        "genre",
        "day_of_week",
        _avg(VISITOR_AVG_DECIMALS),
        RANK_COLUMN,
    ])


def weekly_totals_overall(
    facts: pl.DataFrame,
    year: Optional[int] = None,
    min_week: Optional[int] = None,
) -> pl.DataFrame:
    """Total reserved visitors per ISO week with week-over-week change"""
    daily = aggregate_visitors(facts, GroupingKey.DATE)
    return week_over_week(weekly_totals(daily), year=year, min_week=min_week)


def weekly_totals_by_genre(
    facts: pl.DataFrame,
    year: Optional[int] = None,
    min_week: Optional[int] = None,
) -> pl.DataFrame:
    """Weekly totals and week-over-week change, partitioned by genre"""
    daily = aggregate_visitors(facts, GroupingKey.GENRE_DATE)
    weekly = weekly_totals(daily, partition_by=["genre"])
    return week_over_week(weekly, partition_by=["genre"], year=year, min_week=min_week)


def daily_trend(facts: pl.DataFrame) -> pl.DataFrame:
    """Total reserved visitors per visit date, chronologically"""
    return _daily_trend(aggregate_visitors(facts, GroupingKey.DATE))
