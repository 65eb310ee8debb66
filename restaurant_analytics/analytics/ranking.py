"""
Ranking Engine

Dense ranking of entities by the mean of their daily visitor totals.
"""

from typing import List, Optional, Sequence

import polars as pl
import structlog

from .aggregation import TOTAL_COLUMN

logger = structlog.get_logger(__name__)

METRIC_COLUMN = "metric_value"
RANK_COLUMN = "rank"


def mean_by_entity(
    daily: pl.DataFrame,
    entity_columns: Sequence[str],
    value_column: str = TOTAL_COLUMN,
) -> pl.DataFrame:
    """Average a daily aggregate per entity into ``metric_value``"""
    return (
        daily.group_by(list(entity_columns))
        .agg(pl.col(value_column).mean().alias(METRIC_COLUMN))
        .sort(list(entity_columns))
    )


def dense_rank(
    df: pl.DataFrame,
    metric_column: str = METRIC_COLUMN,
    partition_by: Optional[Sequence[str]] = None,
) -> pl.DataFrame:
    """
    Assign a dense rank by metric descending.

    Equal metrics share a rank and the next distinct metric gets the next
    integer (10, 10, 8 ranks as 1, 1, 2). With ``partition_by`` the ranking
    restarts in every partition.
    """
    rank = pl.col(metric_column).rank(method="dense", descending=True).cast(pl.Int64)
    if partition_by:
        rank = rank.over(list(partition_by))
    return df.with_columns(rank.alias(RANK_COLUMN))


def rank_window(
    df: pl.DataFrame,
    min_rank: int = 1,
    max_rank: Optional[int] = None,
) -> pl.DataFrame:
    """
    Keep rows whose rank lies in ``[min_rank, max_rank]``.

    The window is applied to rank values, not row counts, so every entity
    tied at the boundary rank is kept.

    Raises:
        ValueError: invalid window bounds
    """
    if min_rank < 1:
        raise ValueError(f"min_rank must be >= 1, got {min_rank}")
    if max_rank is not None and max_rank < min_rank:
        raise ValueError(f"max_rank ({max_rank}) must be >= min_rank ({min_rank})")

    condition = pl.col(RANK_COLUMN) >= min_rank
    if max_rank is not None:
        condition = condition & (pl.col(RANK_COLUMN) <= max_rank)
    return df.filter(condition)


def rank_entities(
    daily: pl.DataFrame,
    entity_columns: Sequence[str],
    min_rank: int = 1,
    max_rank: Optional[int] = None,
    partition_by: Optional[Sequence[str]] = None,
) -> pl.DataFrame:
    """
    Rank entities by their mean daily total.

    Args:
        daily: Daily aggregate holding the entity columns and
            ``total_reserved_visitors``
        entity_columns: Columns identifying a ranked entity (including any
            partition columns)
        min_rank: First rank kept
        max_rank: Last rank kept, ties included; None keeps all
        partition_by: Columns the ranking restarts on

    Returns:
        Entity columns, ``metric_value`` and ``rank``, ordered by partition,
        rank, then entity columns ascending
    """
    entity_columns = list(entity_columns)
    partition: List[str] = list(partition_by or [])

    ranked = dense_rank(
        mean_by_entity(daily, entity_columns),
        partition_by=partition,
    )
    ranked = rank_window(ranked, min_rank=min_rank, max_rank=max_rank)

    order = partition + [RANK_COLUMN] + [c for c in entity_columns if c not in partition]
    ranked = ranked.sort(order)

    logger.debug(
        "Entities ranked",
        entities=entity_columns,
        partition_by=partition,
        rows=len(ranked),
    )
    return ranked
