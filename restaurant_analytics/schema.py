"""
Canonical Table Schemas

Column names and polars dtypes of the three source tables after
normalization, plus the mapping from the original dataset's column names.
"""

from enum import Enum
from typing import Dict

import polars as pl


class SourceTable(str, Enum):
    """Source tables consumed by the pipeline"""
    VISITS = "visits"
    CALENDAR = "calendar"
    STORES = "stores"


DAYS_OF_WEEK = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]

VISITS_SCHEMA: Dict[str, pl.DataType] = {
    "store_id": pl.String,
    "visit_timestamp": pl.Datetime("us"),
    "reservation_timestamp": pl.Datetime("us"),
    "reserved_visitor_count": pl.Int64,
}

CALENDAR_SCHEMA: Dict[str, pl.DataType] = {
    "date": pl.Date,
    "day_of_week": pl.String,
    "is_holiday": pl.Boolean,
}

STORES_SCHEMA: Dict[str, pl.DataType] = {
    "store_id": pl.String,
    "genre": pl.String,
    "area": pl.String,
    "latitude": pl.Decimal(10, 7),
    "longitude": pl.Decimal(10, 7),
}

TABLE_SCHEMAS: Dict[SourceTable, Dict[str, pl.DataType]] = {
    SourceTable.VISITS: VISITS_SCHEMA,
    SourceTable.CALENDAR: CALENDAR_SCHEMA,
    SourceTable.STORES: STORES_SCHEMA,
}

# Column names used by the original reservation dataset
SOURCE_COLUMN_ALIASES: Dict[SourceTable, Dict[str, str]] = {
    SourceTable.VISITS: {
        "id": "store_id",
        "air_store_id": "store_id",
        "visit_datetime": "visit_timestamp",
        "reserve_datetime": "reservation_timestamp",
        "reserve_visitors": "reserved_visitor_count",
    },
    SourceTable.CALENDAR: {
        "calendar_date": "date",
        "holiday_flg": "is_holiday",
    },
    SourceTable.STORES: {
        "air_store_id": "store_id",
        "genre_name": "genre",
        "air_genre_name": "genre",
        "area_name": "area",
        "air_area_name": "area",
    },
}

# Key columns each dimension is unique by
DIMENSION_KEYS: Dict[SourceTable, str] = {
    SourceTable.CALENDAR: "date",
    SourceTable.STORES: "store_id",
}
