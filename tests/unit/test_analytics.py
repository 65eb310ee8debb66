"""
Unit Tests - Aggregation, Ranking and Trends
"""
from datetime import date

import pytest
import polars as pl

from restaurant_analytics.analytics.aggregation import (
    GroupingKey,
    aggregate_visitors,
    grouping_columns,
)
from restaurant_analytics.analytics.ranking import (
    dense_rank,
    mean_by_entity,
    rank_entities,
    rank_window,
)
from restaurant_analytics.analytics.trends import (
    daily_trend,
    week_over_week,
    weekly_totals,
)


def _weekly(totals, weeks, year=2017, genre=None):
    data = {
        "iso_year": [year] * len(weeks),
        "iso_week": weeks,
        "total_visitors": totals,
    }
    schema = {"iso_year": pl.Int32, "iso_week": pl.Int8, "total_visitors": pl.Int64}
    if genre is not None:
        data = {"genre": [genre] * len(weeks), **data}
        schema = {"genre": pl.String, **schema}
    return pl.DataFrame(data, schema=schema)


class TestAggregation:
    """Tests for aggregate_visitors"""

    def test_grouping_columns(self):
        """Test grouping key resolution"""
        assert grouping_columns(GroupingKey.GENRE_DATE) == ["genre", "visit_date"]
        assert grouping_columns("date+day_of_week") == ["visit_date", "day_of_week"]

    def test_unknown_grouping_key(self, sample_facts_df):
        """Test unknown grouping key is rejected"""
        with pytest.raises(ValueError):
            aggregate_visitors(sample_facts_df, "area")

    def test_store_date_sums(self, sample_facts_df):
        """Test sub-daily rows collapse to one row per store and date"""
        result = aggregate_visitors(sample_facts_df, GroupingKey.STORE_DATE)

        s1 = result.filter(pl.col("store_id") == "s1")
        assert s1["visit_date"].to_list() == [date(2017, 1, 1), date(2017, 1, 3)]
        assert s1["total_reserved_visitors"].to_list() == [6, 1]

    def test_conservation_of_totals(self, sample_facts_df):
        """Test date-keyed totals sum to the input total of dated records"""
        result = aggregate_visitors(sample_facts_df, GroupingKey.DATE)

        dated = sample_facts_df.filter(pl.col("visit_date").is_not_null())
        assert result["total_reserved_visitors"].sum() == dated["reserved_visitor_count"].sum()
        assert result["total_reserved_visitors"].to_list() == [9, 11, 8]

    def test_conservation_across_random_dates(self, facts_factory):
        """Test totals are conserved over many records sharing dates"""
        rows = [
            ("s1", "Izakaya", date(2017, 3, 1 + i % 5), "Monday", False, i)
            for i in range(50)
        ]
        facts = facts_factory(rows)

        result = aggregate_visitors(facts, GroupingKey.DATE)

        assert result["total_reserved_visitors"].sum() == sum(range(50))
        assert len(result) == 5

    def test_store_only_keeps_undated_records(self, sample_facts_df):
        """Test records without a visit date still count toward store totals"""
        result = aggregate_visitors(sample_facts_df, GroupingKey.STORE)

        totals = dict(zip(result["store_id"], result["total_reserved_visitors"]))
        assert totals == {"s1": 7, "s2": 10, "s3": 6, "s9": 7}

    def test_unmatched_store_excluded_from_genre(self, sample_facts_df):
        """Test unknown store counts by date but not by genre"""
        by_date = aggregate_visitors(sample_facts_df, GroupingKey.DATE)
        by_genre = aggregate_visitors(sample_facts_df, GroupingKey.GENRE_DATE)

        jan3 = by_date.filter(pl.col("visit_date") == date(2017, 1, 3))
        assert jan3["total_reserved_visitors"].item() == 8

        assert by_genre["genre"].null_count() == 0
        izakaya_jan3 = by_genre.filter(
            (pl.col("genre") == "Izakaya") & (pl.col("visit_date") == date(2017, 1, 3))
        )
        assert izakaya_jan3["total_reserved_visitors"].item() == 1

    def test_holiday_filter(self, sample_facts_df):
        """Test holiday filter keeps only holiday dates"""
        result = aggregate_visitors(sample_facts_df, GroupingKey.STORE_DATE, holiday_only=True)

        assert result["visit_date"].unique().to_list() == [date(2017, 1, 1)]
        assert result["total_reserved_visitors"].sum() == 9

    def test_holiday_filter_excludes_missing_calendar(self, facts_factory):
        """Test visits with no calendar row are not treated as holidays"""
        facts = facts_factory([
            ("s1", "Izakaya", date(2017, 1, 1), "Sunday", True, 4),
            ("s1", "Izakaya", date(2030, 1, 1), None, None, 10),
        ])

        result = aggregate_visitors(facts, GroupingKey.STORE, holiday_only=True)

        assert result["total_reserved_visitors"].to_list() == [4]

    def test_custom_predicate(self, sample_facts_df):
        """Test arbitrary filter predicate"""
        result = aggregate_visitors(
            sample_facts_df,
            GroupingKey.STORE,
            predicate=pl.col("area") == "Osaka",
        )

        assert result["store_id"].to_list() == ["s2"]

    def test_input_not_mutated(self, sample_facts_df):
        """Test aggregation leaves its input untouched"""
        before = sample_facts_df.clone()
        aggregate_visitors(sample_facts_df, GroupingKey.GENRE_DATE_DAY_OF_WEEK, holiday_only=True)
        assert sample_facts_df.equals(before)

    def test_all_null_counts_sum_to_null(self, facts_factory):
        """Test a group without any known count has a null total, not zero"""
        facts = facts_factory([
            ("s1", "Izakaya", date(2017, 1, 1), "Sunday", True, None),
            ("s1", "Izakaya", date(2017, 1, 2), "Monday", True, 10),
            ("s1", "Izakaya", date(2017, 1, 2), "Monday", True, None),
        ])

        result = aggregate_visitors(facts, GroupingKey.STORE_DATE)

        assert result["total_reserved_visitors"].to_list() == [None, 10]

    def test_null_daily_total_skipped_by_mean(self, facts_factory):
        """Test a day with no known count does not pull the mean down"""
        facts = facts_factory([
            ("s1", "Izakaya", date(2017, 1, 1), "Sunday", True, None),
            ("s1", "Izakaya", date(2017, 1, 2), "Monday", True, 10),
        ])

        daily = aggregate_visitors(facts, GroupingKey.STORE_DATE)

        assert mean_by_entity(daily, ["store_id"])["metric_value"].to_list() == [10.0]


class TestRanking:
    """Tests for dense ranking"""

    def test_dense_rank_ties(self):
        """Test tied metrics share a rank and the next rank has no gap"""
        df = pl.DataFrame({"entity": ["A", "B", "C"], "metric_value": [10.0, 10.0, 8.0]})

        result = dense_rank(df)

        assert result["rank"].to_list() == [1, 1, 2]

    def test_dense_rank_partitioned(self):
        """Test ranking restarts per partition"""
        df = pl.DataFrame({
            "genre": ["x", "x", "y", "y"],
            "day": ["Mon", "Tue", "Mon", "Tue"],
            "metric_value": [5.0, 7.0, 9.0, 1.0],
        })

        result = dense_rank(df, partition_by=["genre"])

        assert result["rank"].to_list() == [2, 1, 1, 2]

    def test_rank_window_keeps_boundary_ties(self):
        """Test a tie at the last rank widens the window"""
        df = pl.DataFrame({
            "entity": ["a", "b", "c", "d", "e", "f", "g"],
            "metric_value": [90.0, 80.0, 70.0, 60.0, 50.0, 50.0, 40.0],
        })

        result = rank_window(dense_rank(df), min_rank=1, max_rank=5)

        assert len(result) == 6
        assert set(result["entity"].to_list()) == {"a", "b", "c", "d", "e", "f"}

    def test_rank_window_validation(self):
        """Test invalid rank windows are rejected"""
        df = dense_rank(pl.DataFrame({"entity": ["a"], "metric_value": [1.0]}))

        with pytest.raises(ValueError):
            rank_window(df, min_rank=0)
        with pytest.raises(ValueError):
            rank_window(df, min_rank=3, max_rank=2)

    def test_mean_by_entity_uses_daily_grain(self, facts_factory):
        """Test means are taken over daily totals, not raw rows"""
        facts = facts_factory([
            # s1: one day with three small reservations
            ("s1", "Izakaya", date(2017, 1, 1), "Sunday", True, 2),
            ("s1", "Izakaya", date(2017, 1, 1), "Sunday", True, 2),
            ("s1", "Izakaya", date(2017, 1, 1), "Sunday", True, 2),
            # s2: one day with a single reservation
            ("s2", "Cafe/Sweets", date(2017, 1, 1), "Sunday", True, 5),
        ])
        daily = aggregate_visitors(facts, GroupingKey.STORE_DATE)

        result = mean_by_entity(daily, ["store_id"])

        assert dict(zip(result["store_id"], result["metric_value"])) == {"s1": 6.0, "s2": 5.0}

    def test_rank_entities_ordering(self, facts_factory):
        """Test output is ordered by rank, then entity id"""
        facts = facts_factory([
            ("s3", "Izakaya", date(2017, 1, 1), "Sunday", True, 4),
            ("s1", "Izakaya", date(2017, 1, 1), "Sunday", True, 4),
            ("s2", "Izakaya", date(2017, 1, 1), "Sunday", True, 9),
        ])
        daily = aggregate_visitors(facts, GroupingKey.STORE_DATE)

        result = rank_entities(daily, ["store_id"], max_rank=5)

        assert result["store_id"].to_list() == ["s2", "s1", "s3"]
        assert result["rank"].to_list() == [1, 2, 2]

    def test_rank_entities_top_n_with_tie(self, facts_factory):
        """Test top-5 with a tie at rank 5 returns six stores"""
        counts = {"s1": 60, "s2": 50, "s3": 40, "s4": 30, "s5": 20, "s6": 20, "s7": 10}
        facts = facts_factory([
            (store, "Izakaya", date(2017, 1, 1), "Sunday", True, count)
            for store, count in counts.items()
        ])
        daily = aggregate_visitors(facts, GroupingKey.STORE_DATE)

        result = rank_entities(daily, ["store_id"], min_rank=1, max_rank=5)

        assert result["store_id"].to_list() == ["s1", "s2", "s3", "s4", "s5", "s6"]
        assert result["rank"].to_list() == [1, 2, 3, 4, 5, 5]


class TestTrends:
    """Tests for week-over-week trends"""

    def test_prior_week_and_pct_change(self):
        """Test lag and relative change over consecutive weeks"""
        result = week_over_week(_weekly([100, 150, 200], [1, 2, 3]))

        assert result["prior_week_total"].to_list() == [None, 100, 150]
        assert result["pct_change"][0] is None
        assert result["pct_change"][1] == pytest.approx(0.5)
        assert result["pct_change"][2] == pytest.approx(200 / 150 - 1)

    def test_zero_prior_week_is_null(self):
        """Test a zero prior total yields a null change, not an error or inf"""
        result = week_over_week(_weekly([0, 50], [1, 2]))

        assert result["prior_week_total"].to_list() == [None, 0]
        assert result["pct_change"].to_list() == [None, None]

    def test_min_week_filter_applied_after_lag(self):
        """Test the first reported week keeps its real predecessor"""
        result = week_over_week(_weekly([100, 150, 200], [18, 19, 20]), min_week=19)

        assert result["iso_week"].to_list() == [19, 20]
        assert result["prior_week_total"].to_list() == [100, 150]
        assert result["pct_change"][0] == pytest.approx(0.5)

    def test_partitions_do_not_share_lag(self):
        """Test the lag restarts in each partition"""
        weekly = pl.concat([
            _weekly([10, 20], [1, 2], genre="Izakaya"),
            _weekly([30, 60], [1, 2], genre="Cafe/Sweets"),
        ])

        result = week_over_week(weekly, partition_by=["genre"])

        assert result["genre"].to_list() == ["Cafe/Sweets", "Cafe/Sweets", "Izakaya", "Izakaya"]
        assert result["prior_week_total"].to_list() == [None, 30, None, 10]
        assert result["pct_change"].to_list()[1] == pytest.approx(1.0)

    def test_no_wraparound_across_years(self):
        """Test the first week of a year has no prior week"""
        weekly = pl.concat([_weekly([40], [52], year=2016), _weekly([80], [1], year=2017)])

        result = week_over_week(weekly)

        assert result["prior_week_total"].to_list() == [None, None]

    def test_year_filter(self):
        """Test year selection"""
        weekly = pl.concat([_weekly([40], [52], year=2016), _weekly([80, 120], [1, 2], year=2017)])

        result = week_over_week(weekly, year=2017)

        assert result["iso_year"].unique().to_list() == [2017]
        assert result["prior_week_total"].to_list() == [None, 80]

    def test_weekly_totals_from_daily(self, sample_facts_df):
        """Test daily totals roll up to ISO weeks"""
        daily = aggregate_visitors(sample_facts_df, GroupingKey.DATE)

        result = weekly_totals(daily)

        # 2017-01-01 is a Sunday and belongs to ISO week 52 of 2016
        assert result.select(["iso_year", "iso_week", "total_visitors"]).rows() == [
            (2016, 52, 9),
            (2017, 1, 19),
        ]

    def test_week_of_null_days_is_null(self):
        """Test a week whose daily totals are all null has a null total"""
        daily = pl.DataFrame(
            {
                "visit_date": [date(2017, 5, 1), date(2017, 5, 8), date(2017, 5, 9)],
                "total_reserved_visitors": [None, 4, None],
            },
            schema={"visit_date": pl.Date, "total_reserved_visitors": pl.Int64},
        )

        result = weekly_totals(daily)

        assert result.select(["iso_week", "total_visitors"]).rows() == [(18, None), (19, 4)]

    def test_daily_trend_sorted(self, sample_facts_df):
        """Test daily trend is chronological"""
        daily = aggregate_visitors(sample_facts_df, GroupingKey.DATE).sort("visit_date", descending=True)

        result = daily_trend(daily)

        assert result.columns == ["visit_date", "total_visitors"]
        assert result["visit_date"].is_sorted()
