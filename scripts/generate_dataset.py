"""
Restaurant Reservation Dataset Generator
Generates a synthetic reservation dataset using vectorized operations.

Writes the three source files in the original dataset's column layout:
restaurants_visitors.csv, date_info.csv and store_info.csv.
"""

import argparse
from datetime import date, datetime, timedelta
from pathlib import Path

import numpy as np
import polars as pl

DEFAULT_OUTPUT_DIR = Path(__file__).parent.parent / "data" / "raw"

GENRES = [
    "Izakaya",
    "Cafe/Sweets",
    "Dining bar",
    "Italian/French",
    "Bar/Cocktail",
    "Japanese food",
    "Yakiniku/Korean food",
    "Western food",
    "Creative cuisine",
    "Okonomiyaki/Monja/Teppanyaki",
    "Other",
    "International cuisine",
    "Karaoke/Party",
    "Asian",
]

AREAS = [
    "Tōkyō-to Minato-ku Shibakōen",
    "Tōkyō-to Shibuya-ku Shibuya",
    "Ōsaka-fu Ōsaka-shi Ōhiraki",
    "Fukuoka-ken Fukuoka-shi Daimyō",
    "Hokkaidō Sapporo-shi Minami 3 Jōnishi",
    "Hiroshima-ken Hiroshima-shi Kokutaijimachi",
]

# Fixed-date national holidays, month/day
HOLIDAYS = [(1, 1), (1, 2), (1, 3), (2, 11), (4, 29), (5, 3), (5, 4), (5, 5), (11, 3), (11, 23), (12, 23)]


# ==========================================
# CALENDAR
# ==========================================
def generate_calendar(start: date, end: date) -> pl.DataFrame:
    print(f"📊 Generating calendar {start} → {end}...")

    days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
    df = pl.DataFrame({
        "calendar_date": days,
        "day_of_week": [d.strftime("%A") for d in days],
        "holiday_flg": [int((d.month, d.day) in HOLIDAYS) for d in days],
    })
    print(f"   ✅ date_info: {len(df):,} rows")
    return df


# ==========================================
# STORES
# ==========================================
def generate_stores(n: int, rng: np.random.Generator) -> pl.DataFrame:
    print(f"📊 Generating {n:,} stores...")

    df = pl.DataFrame({
        "store_id": [f"air_{i:06d}" for i in range(n)],
        "genre_name": rng.choice(GENRES, n),
        "area_name": rng.choice(AREAS, n),
        "latitude": np.round(rng.uniform(33.5, 43.1, n), 7),
        "longitude": np.round(rng.uniform(130.2, 141.4, n), 7),
    })
    print(f"   ✅ store_info: {len(df):,} rows")
    return df


# ==========================================
# RESERVATIONS - VECTORIZED
# ==========================================
def generate_visits(
    n: int,
    stores: pl.DataFrame,
    calendar: pl.DataFrame,
    rng: np.random.Generator,
) -> pl.DataFrame:
    print(f"📊 Generating {n:,} reservations (vectorized)...")

    store_ids = stores["store_id"].to_numpy()
    days = calendar["calendar_date"].to_list()
    start = datetime.combine(days[0], datetime.min.time())

    day_offsets = rng.integers(0, len(days), n)
    hours = rng.choice([11, 12, 13, 17, 18, 19, 20, 21], n)
    lead_hours = rng.integers(1, 24 * 30, n)

    visit_times = [start + timedelta(days=int(d), hours=int(h)) for d, h in zip(day_offsets, hours)]
    reserve_times = [v - timedelta(hours=int(lead)) for v, lead in zip(visit_times, lead_hours)]

    # Friday to Sunday draws larger parties
    is_busy = np.array([visit_times[i].weekday() >= 4 for i in range(n)])
    visitors = np.where(is_busy, rng.poisson(5, n), rng.poisson(3, n)) + 1

    df = pl.DataFrame({
        "id": rng.choice(store_ids, n),
        "visit_datetime": visit_times,
        "reserve_datetime": reserve_times,
        "reserve_visitors": visitors.astype(np.int64),
    }).sort("visit_datetime")
    print(f"   ✅ restaurants_visitors: {len(df):,} rows")
    return df


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic reservation dataset")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT_DIR, help="Output directory")
    parser.add_argument("--stores", type=int, default=300, help="Number of stores")
    parser.add_argument("--visits", type=int, default=100_000, help="Number of reservation records")
    parser.add_argument("--start", type=date.fromisoformat, default=date(2016, 1, 1), help="First calendar date")
    parser.add_argument("--end", type=date.fromisoformat, default=date(2017, 5, 31), help="Last calendar date")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    args.output.mkdir(parents=True, exist_ok=True)

    calendar = generate_calendar(args.start, args.end)
    stores = generate_stores(args.stores, rng)
    visits = generate_visits(args.visits, stores, calendar, rng)

    calendar.write_csv(args.output / "date_info.csv")
    stores.write_csv(args.output / "store_info.csv")
    visits.write_csv(args.output / "restaurants_visitors.csv", datetime_format="%Y-%m-%d %H:%M:%S")

    print(f"\n✅ Dataset written to {args.output}")


if __name__ == "__main__":
    main()
