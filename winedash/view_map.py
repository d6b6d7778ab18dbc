from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd

from winedash.charts import COUNTRY_SELECTION, to_vega_spec, world_map_chart
from winedash.data import country_stats_frame
from winedash.schemas import CountryStatsResponse


def toggle_country(current: Optional[str], clicked: Optional[str]) -> Optional[str]:
    """Clicking the selected country again clears the selection."""
    if not clicked:
        return current
    return None if clicked == current else clicked


def resolve_country_query(stats: pd.DataFrame, country: str) -> str:
    """Name the backend expects for a country shown on the map.

    Map names come from the polygons (e.g. "United States of America"), the
    drill-down endpoint wants the dataset's own spelling (``original_country``).
    """
    if stats.empty or "original_country" not in stats.columns:
        return country
    match = stats[stats["country"] == country]
    if match.empty:
        return country
    original = match.iloc[0]["original_country"]
    return str(original) if original is not None and pd.notna(original) else country


def country_from_selection(selection: Any) -> Optional[str]:
    rows = []
    if isinstance(selection, dict):
        rows = selection.get(COUNTRY_SELECTION) or []
    for row in rows:
        name = row.get("country") if isinstance(row, dict) else None
        if name:
            return str(name)
    return None


def compute_world_map(stats: CountryStatsResponse, geojson_url: str, *, selected_country: Optional[str] = None) -> Dict[str, Any]:
    df = country_stats_frame(stats.items)
    selected = None
    if selected_country and not df.empty:
        row = df[df["country"] == selected_country]
        if not row.empty:
            selected = row.iloc[0].to_dict()

    top = df.head(1)
    kpis = {
        "countries": int(stats.total_countries or len(df)),
        "wines": int(df["count"].sum()) if not df.empty else 0,
        "best_rated": str(top.iloc[0]["country"]) if not top.empty else None,
        "best_rating": float(top.iloc[0]["avg_points"]) if not top.empty else None,
    }
    return {
        "kpis": kpis,
        "selected": selected,
        "table": df,
        "chart": to_vega_spec(world_map_chart(df, geojson_url)) if not df.empty else None,
    }
