from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

COUNTRY_SELECTION = "country_pick"
BUCKET_SELECTION = "bucket_pick"
CELL_SELECTION = "cell_pick"
WINE_SELECTION = "wine_pick"

RATING_DOMAIN = [80, 95]
RATING_COLORS = ["#f2da87", "#cc4025"]
HIGHLIGHT_COLOR = "#7b68ee"
POINT_COLOR = "#6366f1"
SCATTER_PRICE_MAX = 500


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def world_map_chart(stats: pd.DataFrame, geojson_url: str, *, height: int = 460) -> alt.Chart:
    countries = alt.Data(url=geojson_url, format=alt.DataFormat(property="features", type="json"))
    country_pick = alt.selection_point(name=COUNTRY_SELECTION, fields=["country"], on="click", empty=False)
    lookup_fields = ["country", "avg_points", "count", "avg_price", "top_varieties_label"]
    return (
        alt.Chart(countries)
        .mark_geoshape(stroke="white", strokeWidth=0.5)
        .transform_lookup(
            lookup="properties.name",
            from_=alt.LookupData(data=stats[lookup_fields], key="country", fields=lookup_fields),
        )
        .encode(
            color=alt.condition(
                "isValid(datum.avg_points)",
                alt.Color(
                    "avg_points:Q",
                    title="Avg rating",
                    scale=alt.Scale(domain=RATING_DOMAIN, range=RATING_COLORS, clamp=True),
                ),
                alt.value("#e5e7eb"),
            ),
            stroke=alt.condition(country_pick, alt.value(HIGHLIGHT_COLOR), alt.value("white")),
            tooltip=[
                alt.Tooltip("properties.name:N", title="Country"),
                alt.Tooltip("avg_points:Q", title="Average rating", format=".1f"),
                alt.Tooltip("count:Q", title="Wine count", format=","),
                alt.Tooltip("avg_price:Q", title="Average price", format="$.2f"),
                alt.Tooltip("top_varieties_label:N", title="Top varieties"),
            ],
        )
        .add_params(country_pick)
        .project("equalEarth")
        .properties(height=height, title="Global Wine Ratings")
    )


def bucket_scatter_chart(buckets: pd.DataFrame, *, height: int = 460) -> alt.Chart:
    bucket_pick = alt.selection_point(name=BUCKET_SELECTION, fields=["price_mid", "points_mid"], on="click", empty=False)
    return (
        alt.Chart(buckets)
        .mark_circle(color=POINT_COLOR, clip=True)
        .encode(
            x=alt.X(
                "price_mid:Q",
                title="Price (USD)",
                scale=alt.Scale(domain=[0, SCATTER_PRICE_MAX]),
                axis=alt.Axis(format="$,.0f", grid=False),
            ),
            y=alt.Y("points_mid:Q", title="Points", scale=alt.Scale(domain=[80, 100]), axis=alt.Axis(gridDash=[4, 4])),
            size=alt.Size("count:Q", title="Wines", scale=alt.Scale(range=[20, 400])),
            opacity=alt.condition(bucket_pick, alt.value(0.9), alt.value(0.3)),
            tooltip=[
                alt.Tooltip("label:N", title="Bucket"),
                alt.Tooltip("count:Q", title="Wines", format=","),
                alt.Tooltip("examples_label:N", title="Examples"),
            ],
        )
        .add_params(bucket_pick)
        .properties(height=height)
    )


def heatmap_chart(cells: pd.DataFrame, *, height: int = 460) -> alt.Chart:
    cell_pick = alt.selection_point(name=CELL_SELECTION, fields=["price_min", "points_min"], on="click", empty=False)
    return (
        alt.Chart(cells)
        .mark_rect()
        .encode(
            x=alt.X("price_label:O", title="Price", sort=alt.EncodingSortField(field="price_min", order="ascending")),
            y=alt.Y("points_label:O", title="Points", sort=alt.EncodingSortField(field="points_min", order="descending")),
            color=alt.Color("count:Q", title="Wines", scale=alt.Scale(scheme="reds")),
            stroke=alt.condition(cell_pick, alt.value(HIGHLIGHT_COLOR), alt.value("transparent")),
            tooltip=[
                alt.Tooltip("price_label:N", title="Price"),
                alt.Tooltip("points_label:N", title="Points"),
                alt.Tooltip("count:Q", title="Wines", format=","),
            ],
        )
        .add_params(cell_pick)
        .properties(height=height)
    )


def price_rating_chart(points: pd.DataFrame, *, height: int = 460) -> alt.Chart:
    wine_pick = alt.selection_point(name=WINE_SELECTION, fields=["id"], on="click", empty=False)
    return (
        alt.Chart(points)
        .mark_circle(size=40)
        .encode(
            x=alt.X("price:Q", title="Price (USD)", axis=alt.Axis(format="$,.0f", grid=False)),
            y=alt.Y("points:Q", title="Rating (points)", scale=alt.Scale(domain=[80, 100])),
            color=alt.Color("country:N", title="Country", legend=alt.Legend(orient="bottom", columns=6)),
            opacity=alt.condition(wine_pick, alt.value(1.0), alt.value(0.6)),
            tooltip=["winery", "country", "variety", alt.Tooltip("price:Q", format="$.2f"), "points"],
        )
        .add_params(wine_pick)
        .properties(height=height, title="Wine Price vs. Rating")
    )
