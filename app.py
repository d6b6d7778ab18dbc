import logging
from contextlib import contextmanager
from typing import Any, Callable, List, Optional

import pandas as pd
import streamlit as st

from winedash.buckets import BucketRange
from winedash.charts import BUCKET_SELECTION, CELL_SELECTION, COUNTRY_SELECTION, WINE_SELECTION
from winedash.client import WineApiClient
from winedash.config import configure_logging, get_settings
from winedash.data import bucket_wines_frame, format_points, format_price, search_results_frame, wines_frame
from winedash.errors import WineApiError
from winedash.filters import (
    HeatmapFilters,
    ListingFilters,
    PriceRatingFilters,
    SearchFilters,
    decode_search_filters,
    encode_search_filters,
    normalize_search_filters,
)
from winedash.pagination import CursorFeed, PageAccumulator
from winedash.rag import RagAnswerCache
from winedash.schemas import (
    AggregatedPriceRatingResponse,
    CountryStatsResponse,
    FilterOptions,
    HeatmapResponse,
    PriceRatingResponse,
    RagAnswerResponse,
    Wine,
    WineListResponse,
    WineSearchResponse,
)
from winedash.view_map import compute_world_map, country_from_selection, resolve_country_query, toggle_country
from winedash.view_scatter import (
    compute_bucket_scatter,
    compute_heatmap,
    compute_price_rating,
    heatmap_cell_bucket,
    heatmap_examples,
    scatter_bucket_from_selection,
    wine_id_from_selection,
)
from winedash.view_search import compute_listing, compute_rag_answer, compute_search_results, out_of_range_page

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger("winedash.app")

PAGES = ["Home", "Dashboard", "Browse", "Search", "Ask", "Wine details"]
PAGE_SLUGS = {"Home": "home", "Dashboard": "dashboard", "Browse": "browse", "Search": "search", "Ask": "ask", "Wine details": "wine"}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #4a0d1a;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.9rem;color: #7b1e3a;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .wine-card {border-left: 4px solid #7b1e3a;padding: 6px 12px;margin-bottom: 8px;background: #fafafa;border-radius: 6px;}
        .wine-card .meta {color: #6b7280;font-size: 0.85rem;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(filters: SearchFilters) -> str:
    chips = [
        f"Search: {filters.search}" if filters.search else "Search: any",
        f"Country: {filters.country}" if filters.country else "Country: All",
        f"Variety: {filters.variety}" if filters.variety else "Variety: All",
    ]
    if filters.min_price is not None or filters.max_price is not None:
        low = format_price(filters.min_price) if filters.min_price is not None else "$0"
        high = format_price(filters.max_price) if filters.max_price is not None else "any"
        chips.append(f"Price: {low}-{high}")
    if filters.min_points is not None:
        chips.append(f"Points: {filters.min_points}+")
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str = ""):
    """Top bar with Refresh; returns the slot an Export CSV button is drawn into once the page has its table."""
    inject_base_styles()
    top = st.container()
    c1, c2 = top.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        btn_cols = st.columns(2)
        if btn_cols[0].button("Refresh", key=f"refresh_{title}"):
            st.cache_data.clear()
            st.rerun()
        export_slot = btn_cols[1].empty()
    if filter_summary_html:
        st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)
    return export_slot


def render_export(target, df: Optional[pd.DataFrame], file_name: str, key: str):
    if df is None or df.empty:
        return
    target.download_button(
        "Export CSV",
        data=df.to_csv(index=False).encode("utf-8"),
        file_name=file_name,
        mime="text/csv",
        key=key,
    )


def render_wine_card(title: str, meta: List[str], description: str = ""):
    meta_html = " · ".join(m for m in meta if m)
    st.markdown(
        f"<div class='wine-card'><strong>{title}</strong><div class='meta'>{meta_html}</div></div>",
        unsafe_allow_html=True,
    )
    if description:
        st.caption(description)


def fetch_or_error(label: str, error_text: str, fn: Callable[..., Any], *args: Any) -> Any:
    try:
        return fn(*args)
    except WineApiError:
        logger.exception("%s failed", label)
        st.error(error_text)
        return None


def in_range(value, low, high=None):
    if value is None or value < low or (high is not None and value > high):
        return None
    return value


def new_pick(slot: str, value: Any) -> bool:
    """True when a chart selection differs from the one already handled."""
    if st.session_state.get(slot) == value:
        return False
    st.session_state[slot] = value
    return True


# ---------- API access (cached) ----------
@st.cache_resource
def get_client() -> WineApiClient:
    return WineApiClient(settings)


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_country_stats(min_wines: int) -> CountryStatsResponse:
    return get_client().get_country_stats(min_wines)


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_country_list() -> List[str]:
    return get_client().get_country_list()


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_variety_list() -> List[str]:
    return get_client().get_variety_list()


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_filter_options() -> FilterOptions:
    return get_client().get_filter_options()


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_scatter_page(page: int, page_size: int) -> AggregatedPriceRatingResponse:
    return get_client().get_price_rating_aggregated(page, page_size)


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_heatmap(filters: HeatmapFilters) -> HeatmapResponse:
    return get_client().get_price_rating_heatmap(filters)


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_price_rating(filters: PriceRatingFilters, page: int, page_size: int) -> PriceRatingResponse:
    return get_client().get_price_rating_points(filters, page, page_size)


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def run_search(filters: SearchFilters) -> WineSearchResponse:
    return get_client().search_wines(filters.to_request())


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_listing(filters: ListingFilters) -> WineListResponse:
    return get_client().list_wines(filters)


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_wine(wine_id: int) -> Wine:
    return get_client().get_wine(wine_id)


def session_feed(name: str) -> CursorFeed:
    if name not in st.session_state:
        st.session_state[name] = CursorFeed()
    return st.session_state[name]


def country_fetch(country: str):
    def fetch(cursor: Optional[str]):
        limit = settings.country_first_page_size if cursor is None else settings.country_page_size
        result = get_client().get_wines_by_country(country, limit, cursor)
        return result.wines, result.next_cursor, result.has_next, None

    return fetch


def bucket_fetch(bucket: BucketRange):
    def fetch(cursor: Optional[str]):
        result = get_client().get_bucket_wines(bucket, settings.bucket_page_size, cursor)
        return result.wines, result.pagination.next_cursor, result.pagination.has_next, result.total

    return fetch


# ---------- UI setup ----------
st.set_page_config(page_title="Wine Review Dashboard", layout="wide")
inject_base_styles()

if "rag_cache" not in st.session_state:
    st.session_state["rag_cache"] = RagAnswerCache(settings.rag_cache_size)

requested_view = st.query_params.get("view", "home")
slug_to_page = {v: k for k, v in PAGE_SLUGS.items()}
default_page = slug_to_page.get(requested_view, "Home")

with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", PAGES, index=PAGES.index(default_page), label_visibility="collapsed")
    st.markdown("---")
    st.caption(f"API: {settings.api_base_url}")

if PAGE_SLUGS[nav_choice] != requested_view:
    st.query_params["view"] = PAGE_SLUGS[nav_choice]


def render_wine_details(wine_id: int, *, closable: bool = True):
    wine = fetch_or_error("load_wine", f"Failed to load wine #{wine_id}.", load_wine, wine_id)
    if wine is None:
        return
    with card(wine.title):
        st.write(wine.description)
        cols = st.columns(4)
        cols[0].metric("Points", format_points(wine.points))
        cols[1].metric("Price", format_price(wine.price, 2))
        cols[2].metric("Country", wine.country or "N/A")
        cols[3].metric("Variety", wine.variety or "N/A")
        details = {
            "Winery": wine.winery,
            "Province": wine.province,
            "Region": ", ".join(r for r in [wine.region_1, wine.region_2] if r),
            "Designation": wine.designation,
            "Taster": wine.taster_name,
        }
        st.table(pd.DataFrame([(k, v or "N/A") for k, v in details.items()], columns=["Field", "Value"]))
        if closable and st.button("Close", key=f"close_wine_{wine_id}"):
            st.session_state.pop("selected_wine_id", None)
            st.rerun()


def render_feed(feed: CursorFeed, frame: pd.DataFrame, *, title: str, more_key: str, fetch, empty_text: str, error_text: str):
    with card(title):
        if feed.failed:
            st.error(error_text)
            if st.button("Retry", key=f"{more_key}_retry"):
                try:
                    feed.load_first(feed.key, fetch)
                except WineApiError:
                    logger.exception("retry %s failed", more_key)
                st.rerun()
            return
        if frame.empty:
            st.info(empty_text)
        else:
            st.dataframe(frame, use_container_width=True, hide_index=True)
            shown = len(feed.items)
            total = f" of {feed.total:,}" if feed.total is not None else ""
            st.caption(f"Showing {shown:,}{total} wines.")
            render_export(st, frame, f"{more_key}.csv", f"export_{more_key}")
        if feed.can_load_more and st.button("Load more wines", key=more_key):
            with st.spinner("Loading more wines..."):
                try:
                    feed.load_more(fetch)
                except WineApiError:
                    logger.exception("load_more %s failed", more_key)
                    st.error("Failed to load more wines.")
                else:
                    st.rerun()


# ----- Page renderers -----

def render_home_page():
    render_page_header("Discover the World of Wine", "Home")
    st.markdown(
        "Explore a database of professional wine reviews. Filter, visualize, and gain insights "
        "about wines from around the world."
    )
    cols = st.columns(3)
    features = [
        ("Interactive Visualizations", "Explore wines through a world map, price/rating scatter and heatmap."),
        ("Global Database", "Access reviews of wines from every major producing country."),
        ("Advanced Filtering", "Search by keyword, country, variety, price and rating, or just ask a question."),
    ]
    for col, (title, text) in zip(cols, features):
        with col:
            with card(title):
                st.write(text)
    if st.button("Explore Data", type="primary"):
        st.query_params["view"] = "dashboard"
        st.rerun()


def render_world_map_section():
    stats = fetch_or_error("country_stats", "Failed to load wine data for the map.", load_country_stats, settings.country_min_wines)
    if stats is None:
        return
    map_version = st.session_state.get("_map_version", 0)
    selected_country = st.session_state.get("selected_country")
    payload = compute_world_map(stats, settings.geojson_url, selected_country=selected_country)
    table: pd.DataFrame = payload["table"]

    with card("Global Wine Ratings"):
        kpis = payload["kpis"]
        cols = st.columns(3)
        cols[0].metric("Countries", f"{kpis['countries']:,}")
        cols[1].metric("Wines", f"{kpis['wines']:,}")
        cols[2].metric("Best rated", kpis["best_rated"] or "N/A", delta=format_points(kpis["best_rating"]) if kpis["best_rating"] else None)
        if payload["chart"] is None:
            st.info("No map data available.")
            return
        event = st.vega_lite_chart(
            payload["chart"],
            use_container_width=True,
            on_select="rerun",
            selection_mode=[COUNTRY_SELECTION],
            key=f"world_map_{map_version}",
        )
        picked = country_from_selection(event.selection if event else None)
        options = [""] + table["country"].tolist()
        fallback = st.selectbox("Or pick a country", options, index=0, key=f"country_select_{map_version}")
        if new_pick("_map_pick", picked) and picked:
            selected_country = toggle_country(selected_country, picked)
        elif new_pick("_select_pick", fallback) and fallback:
            selected_country = toggle_country(selected_country, fallback)

    feed = session_feed("country_feed")
    if selected_country != st.session_state.get("selected_country"):
        st.session_state["selected_country"] = selected_country
    if selected_country is None:
        return

    query_name = resolve_country_query(table, selected_country)
    fetch = country_fetch(query_name)
    if feed.key != query_name:
        with st.spinner(f"Loading wines from {selected_country}..."):
            try:
                feed.load_first(query_name, fetch)
            except WineApiError:
                logger.exception("wines by country failed")

    c1, c2 = st.columns([8, 2])
    c1.markdown(f"Showing data for **{selected_country}**")
    if c2.button("Clear filter", key="clear_country"):
        st.session_state["selected_country"] = None
        st.session_state["_map_version"] = map_version + 1
        st.session_state.pop("_map_pick", None)
        st.session_state.pop("_select_pick", None)
        feed.reset()
        st.rerun()
    render_feed(
        feed,
        search_results_frame(feed.items),
        title=f"Wines from {selected_country}",
        more_key="country_more",
        fetch=fetch,
        empty_text="No wines found for this country.",
        error_text=f"Failed to load wines for {selected_country}.",
    )


def render_bucket_feed(slot: str, bucket: Optional[BucketRange], *, examples=None):
    feed = session_feed(f"{slot}_feed")
    if bucket is None:
        return
    fetch = bucket_fetch(bucket)
    if feed.key != bucket:
        with st.spinner("Loading wines in the selected area..."):
            try:
                feed.load_first(bucket, fetch)
            except WineApiError:
                logger.exception("bucket wines failed")
    if examples:
        st.caption("Examples: " + ", ".join(f"{e.name} ({format_price(e.price)})" for e in examples[:5]))
    render_feed(
        feed,
        bucket_wines_frame(feed.items),
        title=f"Wines in {bucket.label}",
        more_key=f"{slot}_more",
        fetch=fetch,
        empty_text="No wines found in this range.",
        error_text="Failed to fetch wines for the selected area.",
    )


def render_scatter_section():
    pages: PageAccumulator = st.session_state.setdefault("scatter_pages", PageAccumulator())
    if pages.pages_loaded == 0 and not pages.exhausted:
        response = fetch_or_error("scatter page 1", "Failed to load wine scatter data.", load_scatter_page, 1, settings.scatter_page_size)
        if response is None:
            return
        pages.bucket_size = (response.bucket_size.price, response.bucket_size.points)
        pages.absorb(1, response.buckets)

    payload = compute_bucket_scatter(pages.items, exhausted=pages.exhausted)
    price_w, points_w = pages.bucket_size or (settings.price_bucket_width, settings.points_bucket_width)
    with card("Wine Price vs Rating", actions="click a point to list its wines"):
        kpis = payload["kpis"]
        cols = st.columns(3)
        cols[0].metric("Buckets", f"{kpis['buckets']:,}")
        cols[1].metric("Wines", f"{kpis['wines']:,}")
        cols[2].metric("Status", "All wines loaded" if kpis["all_loaded"] else "More available")
        if payload["chart"] is None:
            st.info("No data available.")
            return
        event = st.vega_lite_chart(
            payload["chart"], use_container_width=True, on_select="rerun", selection_mode=[BUCKET_SELECTION], key="bucket_scatter"
        )
        if not pages.exhausted and st.button("Load more buckets", key="scatter_pages_more"):
            page = pages.next_page
            response = fetch_or_error(f"scatter page {page}", "Failed to load more scatter data.", load_scatter_page, page, settings.scatter_page_size)
            if response is not None:
                pages.absorb(page, response.buckets)
                st.rerun()

    bucket = scatter_bucket_from_selection(event.selection if event else None, price_width=price_w, points_width=points_w)
    if bucket is not None:
        st.session_state["selected_bucket"] = bucket
    render_bucket_feed("scatter", st.session_state.get("selected_bucket"))


def render_heatmap_section(countries: List[str]):
    with card("Heatmap filters"):
        cols = st.columns(4)
        country = cols[0].selectbox("Country", [""] + countries, key="hm_country")
        variety = cols[1].text_input("Variety", key="hm_variety")
        price_size = cols[2].number_input("Price bucket ($)", min_value=1, max_value=500, value=int(settings.price_bucket_width), key="hm_price_size")
        points_size = cols[3].number_input("Points bucket", min_value=1, max_value=10, value=int(settings.points_bucket_width), key="hm_points_size")
    filters = HeatmapFilters(country=country, variety=variety.strip(), price_bucket_size=price_size, points_bucket_size=points_size)
    heatmap = fetch_or_error("heatmap", "Failed to load heatmap data.", load_heatmap, filters)
    if heatmap is None:
        return
    payload = compute_heatmap(heatmap)
    with card("Price / Rating Heatmap", actions=f"{payload['kpis']['total_wines']:,} wines"):
        if payload["chart"] is None:
            st.info("No data available.")
            return
        event = st.vega_lite_chart(
            payload["chart"], use_container_width=True, on_select="rerun", selection_mode=[CELL_SELECTION], key="heatmap"
        )
    bucket = heatmap_cell_bucket(heatmap, event.selection if event else None)
    if bucket is not None:
        render_bucket_feed("heatmap", bucket, examples=heatmap_examples(heatmap, bucket))


def render_price_rating_section(countries: List[str]):
    cols = st.columns(2)
    country = cols[0].selectbox("Country", [""] + countries, key="pr_country")
    variety = cols[1].text_input("Variety", key="pr_variety")
    filters = PriceRatingFilters(country=country, variety=variety.strip())
    response = fetch_or_error("price rating", "Failed to load data.", load_price_rating, filters, 1, 1000)
    if response is None:
        return
    payload = compute_price_rating(response.data, total=response.total)
    with card("Wine Price vs. Rating", actions=f"{payload['kpis']['shown']:,} of {payload['kpis']['total']:,} wines"):
        if payload["chart"] is None:
            st.info("No data available")
            return
        event = st.vega_lite_chart(
            payload["chart"], use_container_width=True, on_select="rerun", selection_mode=[WINE_SELECTION], key="price_rating"
        )
    wine_id = wine_id_from_selection(event.selection if event else None)
    if wine_id is not None and new_pick("_wine_pick", wine_id):
        st.session_state["selected_wine_id"] = wine_id
    if st.session_state.get("selected_wine_id") is not None:
        render_wine_details(st.session_state["selected_wine_id"])


def render_dashboard_page():
    render_page_header("Wine Dashboard", "Home / Dashboard")
    st.caption("Explore the interactive wine world map. Click a country to list its wines.")
    countries = fetch_or_error("country_list", "Failed to load countries.", load_country_list) or []
    tab_map, tab_scatter, tab_heatmap, tab_points = st.tabs(["World map", "Scatterplot", "Heatmap", "Price vs rating"])
    with tab_map:
        render_world_map_section()
    with tab_scatter:
        render_scatter_section()
    with tab_heatmap:
        render_heatmap_section(countries)
    with tab_points:
        render_price_rating_section(countries)


def render_browse_page():
    export_slot = render_page_header("Browse Wines", "Home / Browse")
    options = fetch_or_error("filter_options", "Failed to load filter options.", load_filter_options) or FilterOptions()
    with card("Filters"):
        cols = st.columns(4)
        country = cols[0].selectbox("Country", [""] + options.countries, key="browse_country")
        wine_type = cols[1].selectbox("Type", [""] + options.types, key="browse_type")
        min_price = cols[2].number_input("Min price", min_value=0.0, value=None, key="browse_min_price")
        max_price = cols[3].number_input("Max price", min_value=0.0, value=None, key="browse_max_price")
    page = int(st.session_state.get("browse_page", 1))
    filters = ListingFilters(country=country, type=wine_type, min_price=min_price, max_price=max_price, page=page)
    if st.session_state.get("_browse_filters") != (country, wine_type, min_price, max_price):
        st.session_state["_browse_filters"] = (country, wine_type, min_price, max_price)
        st.session_state["browse_page"] = 1
        filters = ListingFilters(country=country, type=wine_type, min_price=min_price, max_price=max_price, page=1)
    response = fetch_or_error("list_wines", "Failed to fetch wines.", load_listing, filters)
    if response is None:
        return
    payload = compute_listing(filters, response)
    frame = wines_frame(payload["wines"])
    render_export(export_slot, frame, "wines.csv", "export_browse")
    with card(f"Wines ({payload['total']:,})"):
        if frame.empty:
            st.info("No wines found.")
        else:
            st.dataframe(frame, use_container_width=True, hide_index=True)
        render_pager("browse_page", payload["page"], payload["pages"], payload["has_previous"], payload["has_next"])


def render_pager(state_key: str, page: int, pages: int, has_previous: bool, has_next: bool) -> Optional[int]:
    if pages <= 1:
        return None
    cols = st.columns([1, 2, 1])
    target = None
    if cols[0].button("Previous", key=f"{state_key}_prev", disabled=not has_previous):
        target = page - 1
    cols[1].markdown(f"<div style='text-align:center'>Page {page} of {pages}</div>", unsafe_allow_html=True)
    if cols[2].button("Next", key=f"{state_key}_next", disabled=not has_next):
        target = page + 1
    if target is not None:
        st.session_state[state_key] = target
        st.rerun()
    return target


def render_search_page():
    filters: SearchFilters = st.session_state.get("search_filters") or decode_search_filters(st.query_params.to_dict(), default_size=settings.search_page_size)
    searched = bool(st.session_state.get("search_made")) or bool(encode_search_filters(filters, default_size=settings.search_page_size))
    export_slot = render_page_header("Search Wines", "Home / Search", format_filter_summary(filters))

    countries = fetch_or_error("country_list", "Failed to load countries.", load_country_list) or []
    varieties = fetch_or_error("variety_list", "Failed to load varieties.", load_variety_list) or []
    with st.form("search_form"):
        search = st.text_input("Search wines...", value=filters.search)
        cols = st.columns(2)
        country_options = [""] + countries
        country = cols[0].selectbox(
            "Country", country_options, index=country_options.index(filters.country) if filters.country in country_options else 0
        )
        if varieties:
            variety_options = [""] + varieties
            variety = cols[1].selectbox(
                "Variety", variety_options, index=variety_options.index(filters.variety) if filters.variety in variety_options else 0
            )
        else:
            variety = cols[1].text_input("Variety", value=filters.variety)
        cols = st.columns(3)
        min_price = cols[0].number_input("Min Price", min_value=0.0, value=in_range(filters.min_price, 0.0))
        max_price = cols[1].number_input("Max Price", min_value=0.0, value=in_range(filters.max_price, 0.0))
        min_points = cols[2].number_input("Min Points", min_value=80, max_value=100, step=1, value=in_range(filters.min_points, 80, 100))
        submitted = st.form_submit_button("Search", type="primary")

    if submitted:
        filters = normalize_search_filters(
            {
                "search": search,
                "country": country,
                "variety": variety,
                "min_price": min_price,
                "max_price": max_price,
                "min_points": min_points,
                "page": 1,
                "size": settings.search_page_size,
            },
            default_size=settings.search_page_size,
        )
        searched = True

    page_target = st.session_state.pop("search_page", None)
    if page_target is not None:
        filters = filters.with_page(page_target)
    st.session_state["search_filters"] = filters
    st.session_state["search_made"] = searched
    if searched:
        st.query_params.from_dict({"view": "search", **encode_search_filters(filters, default_size=settings.search_page_size)})

    response = None
    if searched:
        with st.spinner("Searching..."):
            response = fetch_or_error("search", "Failed to fetch wines. Please try again.", run_search, filters)
        last_page = out_of_range_page(filters, response)
        if last_page is not None:
            st.session_state["search_filters"] = filters.with_page(last_page)
            st.rerun()
    payload = compute_search_results(filters, response, searched=searched and response is not None)
    render_export(export_slot, payload["table"], "search_results.csv", "export_search")
    if payload["message"]:
        st.info(payload["message"])
    for wine in payload["items"]:
        meta = [wine.country or "", wine.variety or "", wine.winery or "", format_price(wine.price), format_points(wine.points)]
        cols = st.columns([9, 1])
        with cols[0]:
            render_wine_card(wine.title, meta)
        if cols[1].button("Open", key=f"open_search_{wine.id}"):
            st.session_state["selected_wine_id"] = wine.id
    if payload["show_pagination"]:
        render_pager("search_page", payload["page"], payload["pages"], payload["has_previous"], payload["has_next"])
    if st.session_state.get("selected_wine_id") is not None:
        render_wine_details(st.session_state["selected_wine_id"])


def render_ask_page():
    render_page_header("Ask a Sommelier", "Home / Ask")
    cache: RagAnswerCache = st.session_state["rag_cache"]
    with st.form("rag_form"):
        query = st.text_input("Ask a wine-related question...", value=st.session_state.get("rag_query", ""))
        submitted = st.form_submit_button("Ask", type="primary")
    st.session_state["rag_query"] = query

    result: Optional[RagAnswerResponse] = cache.get(query)
    asked = result is not None
    if submitted and query.strip():
        with st.spinner("Searching..."):
            try:
                result = cache.ask(query, get_client().get_rag_answer)
                asked = True
            except WineApiError:
                logger.exception("rag answer failed")
                st.error("Something went wrong while fetching the answer. Please try again.")
    payload = compute_rag_answer(result, submitted=asked)
    if payload["message"]:
        st.info(payload["message"])
    if payload["answer"]:
        with card("Answer"):
            st.markdown(payload["answer"])
        if payload["sources"]:
            st.subheader("Recommended Wine Descriptions")
            for idx, source in enumerate(payload["sources"]):
                cols = st.columns([9, 1])
                with cols[0]:
                    render_wine_card(source["title"], [source["country"] or "", source["variety"] or ""], source["description"])
                if source["wine_id"] is not None and cols[1].button("Open", key=f"open_source_{idx}_{source['wine_id']}"):
                    st.session_state["selected_wine_id"] = source["wine_id"]
    if len(cache):
        with st.expander(f"Previous questions ({len(cache)})"):
            for previous in reversed(cache.queries()):
                st.write(previous)
    if st.session_state.get("selected_wine_id") is not None:
        render_wine_details(st.session_state["selected_wine_id"])


def render_wine_details_page():
    render_page_header("Wine Details", "Home / Wines")
    default_id = st.query_params.get("wine_id") or st.session_state.get("selected_wine_id") or 1
    try:
        default_id = int(default_id)
    except (TypeError, ValueError):
        default_id = 1
    wine_id = st.number_input("Wine ID", min_value=1, step=1, value=default_id)
    st.query_params["wine_id"] = str(int(wine_id))
    render_wine_details(int(wine_id), closable=False)


current_page = nav_choice
if current_page == "Home":
    render_home_page()
elif current_page == "Dashboard":
    render_dashboard_page()
elif current_page == "Browse":
    render_browse_page()
elif current_page == "Search":
    render_search_page()
elif current_page == "Ask":
    render_ask_page()
else:
    render_wine_details_page()

st.markdown("---")
st.caption("Wine reviews dashboard · data served by the wine review API")
