"""
Reporting Views Module
"""
from .views import (
    best_day_by_genre,
    best_day_overall,
    daily_trend,
    top_genres_on_holidays,
    top_stores_on_holidays,
    weekly_totals_by_genre,
    weekly_totals_overall,
)

__all__ = [
    "best_day_by_genre",
    "best_day_overall",
    "daily_trend",
    "top_genres_on_holidays",
    "top_stores_on_holidays",
    "weekly_totals_by_genre",
    "weekly_totals_overall",
]
