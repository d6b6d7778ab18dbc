from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from winedash.schemas import (
    CountryStats,
    HeatmapResponse,
    PriceRatingBucket,
    PriceRatingPoint,
    VarietyShare,
    Wine,
    WineInBucket,
    WineSearchResult,
)

WINE_COLUMNS = ["id", "title", "country", "variety", "winery", "price", "points"]
BUCKET_WINE_COLUMNS = ["id", "name", "winery", "price", "points", "country", "variety"]
COUNTRY_COLUMNS = [
    "country",
    "original_country",
    "avg_points",
    "count",
    "avg_price",
    "min_price",
    "max_price",
    "top_varieties_label",
]
BUCKET_COLUMNS = [
    "price_min",
    "price_max",
    "points_min",
    "points_max",
    "price_mid",
    "points_mid",
    "count",
    "label",
    "examples_label",
]
HEATMAP_COLUMNS = ["price_min", "price_max", "points_min", "points_max", "count", "price_label", "points_label"]
POINT_COLUMNS = ["id", "price", "points", "country", "variety", "winery"]


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_price(value: object, decimals: int = 0) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"${float(value):,.{decimals}f}"


def format_points(value: object) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"{round_half_up(value, 1):g} pts"


def format_varieties(varieties: Iterable[VarietyShare], limit: int = 3) -> str:
    parts = [f"{v.name}: {v.percentage:g}%" for v in list(varieties)[:limit]]
    return ", ".join(parts)


def _frame(records: List[dict], columns: Sequence[str]) -> pd.DataFrame:
    if not records:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame.from_records(records, columns=list(columns))


def wines_frame(wines: Iterable[Wine]) -> pd.DataFrame:
    return _frame([w.model_dump(include=set(WINE_COLUMNS)) for w in wines], WINE_COLUMNS)


def search_results_frame(wines: Iterable[WineSearchResult]) -> pd.DataFrame:
    return _frame([w.model_dump() for w in wines], WINE_COLUMNS)


def bucket_wines_frame(wines: Iterable[WineInBucket]) -> pd.DataFrame:
    return _frame([w.model_dump() for w in wines], BUCKET_WINE_COLUMNS)


def country_stats_frame(stats: Iterable[CountryStats]) -> pd.DataFrame:
    records = []
    for s in stats:
        records.append(
            {
                "country": s.country,
                "original_country": s.original_country or s.country,
                "avg_points": s.avg_points,
                "count": s.count,
                "avg_price": s.avg_price,
                "min_price": s.min_price,
                "max_price": s.max_price,
                "top_varieties_label": format_varieties(s.top_varieties),
            }
        )
    df = _frame(records, COUNTRY_COLUMNS)
    if not df.empty:
        df = df.sort_values("avg_points", ascending=False).reset_index(drop=True)
    return df


def aggregated_buckets_frame(buckets: Iterable[PriceRatingBucket]) -> pd.DataFrame:
    records = []
    for b in buckets:
        examples = ", ".join(e.name for e in b.examples[:3])
        records.append(
            {
                "price_min": b.price_min,
                "price_max": b.price_max,
                "points_min": b.points_min,
                "points_max": b.points_max,
                "price_mid": (b.price_min + b.price_max) / 2,
                "points_mid": (b.points_min + b.points_max) / 2,
                "count": b.count,
                "label": f"${b.price_min:g}-{b.price_max:g}, {b.points_min:g}-{b.points_max:g} points",
                "examples_label": examples,
            }
        )
    return _frame(records, BUCKET_COLUMNS)


def heatmap_frame(heatmap: HeatmapResponse) -> pd.DataFrame:
    """One row per non-empty cell, with the cell's price/points bounds.

    ``heatmap.data`` holds ``[x_index, y_index, count]`` triples indexing into
    ``x_categories`` (price bucket starts) and ``y_categories`` (points starts).
    """
    price_w = heatmap.bucket_size.price
    points_w = heatmap.bucket_size.points
    records = []
    for cell in heatmap.data:
        if len(cell) < 3:
            continue
        x, y, count = int(cell[0]), int(cell[1]), cell[2]
        if not (0 <= x < len(heatmap.x_categories) and 0 <= y < len(heatmap.y_categories)):
            continue
        if not count:
            continue
        price_min = float(heatmap.x_categories[x])
        points_min = float(heatmap.y_categories[y])
        records.append(
            {
                "price_min": price_min,
                "price_max": price_min + price_w,
                "points_min": points_min,
                "points_max": points_min + points_w,
                "count": int(count),
                "price_label": f"${price_min:g}-{price_min + price_w:g}",
                "points_label": f"{points_min:g}",
            }
        )
    return _frame(records, HEATMAP_COLUMNS)


def price_rating_frame(points: Iterable[PriceRatingPoint]) -> pd.DataFrame:
    df = _frame([p.model_dump() for p in points], POINT_COLUMNS)
    if not df.empty:
        df["country"] = df["country"].fillna("Unknown")
    return df
