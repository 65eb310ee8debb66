"""
Data Cleaning Module

Cleaning transformations for the reservation source tables.
Handles:
- Whitespace trimming of text columns
- Canonical visit date derivation from the visit timestamp
- Day-of-week label normalization
- Dimension deduplication on the table key

Fact rows are never discarded. Rows whose visit timestamp is missing keep
a null visit date and are counted so the caller can see them.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import polars as pl
import structlog

from restaurant_analytics.schema import DAYS_OF_WEEK, DIMENSION_KEYS, SourceTable

logger = structlog.get_logger(__name__)

_DAY_LABELS: Dict[str, str] = {
    **{day.lower(): day for day in DAYS_OF_WEEK},
    **{day[:3].lower(): day for day in DAYS_OF_WEEK},
}


@dataclass
class CleaningStats:
    """Statistics from cleaning operations"""
    total_rows: int
    rows_after_cleaning: int
    missing_visit_dates: int = 0
    duplicates_removed: int = 0
    format_corrections: int = 0


class DataCleaner:
    """
    Cleaner for visit records and the calendar and store dimensions.

    Example:
        cleaner = DataCleaner()
        visits, stats = cleaner.clean_visits(raw_visits)
    """

    def _trim_strings(self, df: pl.DataFrame, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """Trim whitespace from string columns, mapping empty strings to null"""
        string_cols = columns or [
            col for col, dtype in zip(df.columns, df.dtypes)
            if dtype == pl.String
        ]

        for col in string_cols:
            if col in df.columns:
                trimmed = pl.col(col).str.strip_chars()
                df = df.with_columns(
                    pl.when(trimmed == "").then(None).otherwise(trimmed).alias(col)
                )

        return df

    def _remove_duplicates(
        self,
        df: pl.DataFrame,
        subset: List[str],
    ) -> Tuple[pl.DataFrame, int]:
        """Keep the first row per key, preserving input order"""
        deduplicated = df.unique(subset=subset, keep="first", maintain_order=True)
        return deduplicated, len(df) - len(deduplicated)

    def derive_visit_date(self, df: pl.DataFrame) -> pl.DataFrame:
        """Add visit_date as the calendar date part of visit_timestamp"""
        return df.with_columns(
            pl.col("visit_timestamp").dt.date().alias("visit_date")
        )

    def clean_visits(self, df: pl.DataFrame) -> Tuple[pl.DataFrame, CleaningStats]:
        """
        Clean visit records.

        Args:
            df: Normalized visit records

        Returns:
            Visit records with visit_date populated, and cleaning stats
        """
        total_rows = len(df)

        df = self._trim_strings(df, ["store_id"])
        df = self.derive_visit_date(df)

        missing_dates = df["visit_date"].null_count()
        if missing_dates:
            logger.warning(
                "Visit records without a visit timestamp",
                rows=missing_dates,
                total_rows=total_rows,
            )

        stats = CleaningStats(
            total_rows=total_rows,
            rows_after_cleaning=len(df),
            missing_visit_dates=missing_dates,
        )
        logger.info("Visits cleaned", rows=len(df), missing_visit_dates=missing_dates)
        return df, stats

    def normalize_day_labels(self, df: pl.DataFrame) -> Tuple[pl.DataFrame, int]:
        """
        Map day labels such as "mon" or " sunday" to their full names.

        Unrecognized labels are kept as they are.

        Returns:
            Calendar with normalized labels and the number of labels changed
        """
        df = self._trim_strings(df, ["day_of_week"])

        normalized = pl.col("day_of_week").str.to_lowercase().replace_strict(
            _DAY_LABELS, default=pl.col("day_of_week")
        )
        corrections = df.filter(
            pl.col("day_of_week").is_not_null() & (normalized != pl.col("day_of_week"))
        ).height
        return df.with_columns(normalized.alias("day_of_week")), corrections

    def clean_calendar(self, df: pl.DataFrame) -> Tuple[pl.DataFrame, CleaningStats]:
        """Normalize day labels and deduplicate on date"""
        total_rows = len(df)
        df, corrections = self.normalize_day_labels(df)

        df, duplicates = self._remove_duplicates(df, [DIMENSION_KEYS[SourceTable.CALENDAR]])
        if duplicates:
            logger.warning("Duplicate calendar dates removed", duplicates=duplicates)

        return df, CleaningStats(
            total_rows=total_rows,
            rows_after_cleaning=len(df),
            duplicates_removed=duplicates,
            format_corrections=corrections,
        )

    def clean_stores(self, df: pl.DataFrame) -> Tuple[pl.DataFrame, CleaningStats]:
        """Trim text attributes and deduplicate on store_id"""
        total_rows = len(df)
        df = self._trim_strings(df, ["store_id", "genre", "area"])

        df, duplicates = self._remove_duplicates(df, [DIMENSION_KEYS[SourceTable.STORES]])
        if duplicates:
            logger.warning("Duplicate store rows removed", duplicates=duplicates)

        return df, CleaningStats(
            total_rows=total_rows,
            rows_after_cleaning=len(df),
            duplicates_removed=duplicates,
        )


def clean_dataframe(
    df: pl.DataFrame,
    table: SourceTable,
) -> pl.DataFrame:
    """
    Convenience function to clean one source table.

    Args:
        df: Normalized source table
        table: Which source table df holds

    Returns:
        Cleaned DataFrame
    """
    cleaner = DataCleaner()

    if table == SourceTable.VISITS:
        return cleaner.clean_visits(df)[0]
    elif table == SourceTable.CALENDAR:
        return cleaner.clean_calendar(df)[0]
    elif table == SourceTable.STORES:
        return cleaner.clean_stores(df)[0]
    raise ValueError(f"Unknown source table: {table}")
