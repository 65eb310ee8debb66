"""
Test Suite Configuration
"""
from datetime import date, datetime

import pytest
import polars as pl
from prefect.testing.utilities import prefect_test_harness

from restaurant_analytics.config import Settings
from restaurant_analytics.ingestion.batch_loader import SourceTables
from restaurant_analytics.transformation.cleaners import DataCleaner
from restaurant_analytics.transformation.enrichers import enrich_visit_data


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture(scope="session")
def prefect_harness():
    """Run flows against a temporary Prefect database"""
    with prefect_test_harness():
        yield


@pytest.fixture
def sample_visits_df() -> pl.DataFrame:
    """Normalized visit records across a holiday, two weekdays and an unknown store"""
    return pl.DataFrame(
        {
            "store_id": ["s1", "s1", "s2", "s2", "s3", "s1", "s9", "s2"],
            "visit_timestamp": [
                datetime(2017, 1, 1, 12, 0),
                datetime(2017, 1, 1, 19, 0),
                datetime(2017, 1, 1, 18, 30),
                datetime(2017, 1, 2, 20, 0),
                datetime(2017, 1, 2, 13, 0),
                datetime(2017, 1, 3, 18, 0),
                datetime(2017, 1, 3, 19, 0),
                None,
            ],
            "reservation_timestamp": [
                datetime(2016, 12, 20, 10, 0),
                datetime(2016, 12, 30, 9, 0),
                datetime(2016, 12, 31, 8, 0),
                datetime(2017, 1, 1, 15, 0),
                datetime(2017, 1, 1, 16, 0),
                datetime(2017, 1, 2, 11, 0),
                datetime(2017, 1, 2, 12, 0),
                datetime(2017, 1, 2, 13, 0),
            ],
            "reserved_visitor_count": [2, 4, 3, 5, 6, 1, 7, 2],
        },
        schema={
            "store_id": pl.String,
            "visit_timestamp": pl.Datetime("us"),
            "reservation_timestamp": pl.Datetime("us"),
            "reserved_visitor_count": pl.Int64,
        },
    )


@pytest.fixture
def sample_calendar_df() -> pl.DataFrame:
    """Calendar dimension: 2017-01-01 is a holiday"""
    return pl.DataFrame({
        "date": [date(2017, 1, 1), date(2017, 1, 2), date(2017, 1, 3)],
        "day_of_week": ["Sunday", "Monday", "Tuesday"],
        "is_holiday": [True, False, False],
    })


@pytest.fixture
def sample_stores_df() -> pl.DataFrame:
    """Store dimension; s9 is deliberately absent"""
    return pl.DataFrame({
        "store_id": ["s1", "s2", "s3"],
        "genre": ["Izakaya", "Cafe/Sweets", "Izakaya"],
        "area": ["Tokyo", "Osaka", "Tokyo"],
        "latitude": [35.6581, 34.7024, 35.6895],
        "longitude": [139.7017, 135.4959, 139.6917],
    })


@pytest.fixture
def sample_sources(sample_visits_df, sample_calendar_df, sample_stores_df) -> SourceTables:
    return SourceTables(
        visits=sample_visits_df,
        calendar=sample_calendar_df,
        stores=sample_stores_df,
    )


@pytest.fixture
def sample_facts_df(sample_visits_df, sample_calendar_df, sample_stores_df) -> pl.DataFrame:
    """Enriched fact table built from the sample tables"""
    visits, _ = DataCleaner().clean_visits(sample_visits_df)
    return enrich_visit_data(visits, sample_calendar_df, sample_stores_df)


def make_facts(rows) -> pl.DataFrame:
    """Build an enriched fact table from (store_id, genre, visit_date, day_of_week, is_holiday, count) rows"""
    store_ids, genres, dates, days, holidays, counts = zip(*rows) if rows else ([],) * 6
    return pl.DataFrame(
        {
            "store_id": list(store_ids),
            "genre": list(genres),
            "visit_date": list(dates),
            "day_of_week": list(days),
            "is_holiday": list(holidays),
            "reserved_visitor_count": list(counts),
        },
        schema={
            "store_id": pl.String,
            "genre": pl.String,
            "visit_date": pl.Date,
            "day_of_week": pl.String,
            "is_holiday": pl.Boolean,
            "reserved_visitor_count": pl.Int64,
        },
    )


@pytest.fixture
def facts_factory():
    return make_facts
