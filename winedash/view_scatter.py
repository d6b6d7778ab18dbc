from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from winedash.buckets import BucketRange, bucket_from_selection
from winedash.charts import (
    BUCKET_SELECTION,
    CELL_SELECTION,
    WINE_SELECTION,
    bucket_scatter_chart,
    heatmap_chart,
    price_rating_chart,
    to_vega_spec,
)
from winedash.data import aggregated_buckets_frame, heatmap_frame, price_rating_frame
from winedash.schemas import HeatmapResponse, PriceRatingBucket, PriceRatingPoint, WineExample


def _selection_rows(selection: Any, name: str) -> List[Mapping[str, Any]]:
    if not isinstance(selection, dict):
        return []
    rows = selection.get(name) or []
    return [r for r in rows if isinstance(r, dict)]


def compute_bucket_scatter(buckets: Sequence[PriceRatingBucket], *, exhausted: bool = False) -> Dict[str, Any]:
    df = aggregated_buckets_frame(buckets)
    return {
        "kpis": {
            "buckets": int(len(df)),
            "wines": int(df["count"].sum()) if not df.empty else 0,
            "all_loaded": bool(exhausted),
        },
        "table": df,
        "chart": to_vega_spec(bucket_scatter_chart(df)) if not df.empty else None,
    }


def scatter_bucket_from_selection(selection: Any, *, price_width: float, points_width: float) -> Optional[BucketRange]:
    """Bucket behind a clicked scatter point (the point sits at the bucket centre)."""
    return bucket_from_selection(
        _selection_rows(selection, BUCKET_SELECTION),
        price_field="price_mid",
        points_field="points_mid",
        price_width=price_width,
        points_width=points_width,
    )


def compute_heatmap(heatmap: HeatmapResponse) -> Dict[str, Any]:
    df = heatmap_frame(heatmap)
    return {
        "kpis": {
            "total_wines": int(heatmap.total_wines),
            "max_count": int(heatmap.max_count),
            "cells": int(len(df)),
            "bucket_size": {"price": heatmap.bucket_size.price, "points": heatmap.bucket_size.points},
        },
        "table": df,
        "chart": to_vega_spec(heatmap_chart(df)) if not df.empty else None,
    }


def heatmap_cell_bucket(heatmap: HeatmapResponse, selection: Any) -> Optional[BucketRange]:
    """Bucket for a clicked heatmap cell, sized by the heatmap's own bucket size."""
    return bucket_from_selection(
        _selection_rows(selection, CELL_SELECTION),
        price_field="price_min",
        points_field="points_min",
        price_width=heatmap.bucket_size.price,
        points_width=heatmap.bucket_size.points,
    )


def heatmap_examples(heatmap: HeatmapResponse, bucket: BucketRange) -> List[WineExample]:
    for info in heatmap.bucket_map.values():
        if info.price_min == bucket.price_min and info.points_min == bucket.points_min:
            return list(info.examples)
    return []


def compute_price_rating(points: Sequence[PriceRatingPoint], *, total: int = 0) -> Dict[str, Any]:
    df = price_rating_frame(points)
    return {
        "kpis": {
            "shown": int(len(df)),
            "total": int(total or len(df)),
            "countries": int(df["country"].nunique()) if not df.empty else 0,
        },
        "table": df,
        "chart": to_vega_spec(price_rating_chart(df)) if not df.empty else None,
    }


def wine_id_from_selection(selection: Any) -> Optional[int]:
    for row in _selection_rows(selection, WINE_SELECTION):
        value = row.get("id")
        if value is None or pd.isna(value):
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return None
