"""
Aggregation, Ranking and Trend Engines
"""
from .aggregation import GroupingKey, aggregate_visitors, grouping_columns
from .ranking import dense_rank, mean_by_entity, rank_entities, rank_window
from .trends import daily_trend, week_over_week, weekly_totals

__all__ = [
    "GroupingKey",
    "aggregate_visitors",
    "grouping_columns",
    "dense_rank",
    "mean_by_entity",
    "rank_entities",
    "rank_window",
    "daily_trend",
    "week_over_week",
    "weekly_totals",
]
