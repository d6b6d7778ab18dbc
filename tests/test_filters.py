"""
Tests for filter normalization and query-string round trips
"""

from winedash.filters import (
    HeatmapFilters,
    ListingFilters,
    PriceRatingFilters,
    SearchFilters,
    decode_search_filters,
    encode_search_filters,
    normalize_search_filters,
)


def test_round_trip_through_query_params():
    filters = SearchFilters(search="pinot", country="New Zealand", min_price=15.5, max_price=40, min_points=88, page=3)
    params = encode_search_filters(filters)
    assert params == {
        "search": "pinot",
        "country": "New Zealand",
        "min_price": "15.5",
        "max_price": "40",
        "min_points": "88",
        "page": "3",
    }
    assert decode_search_filters(params) == filters


def test_defaults_encode_to_nothing():
    assert encode_search_filters(SearchFilters()) == {}
    assert decode_search_filters({}) == SearchFilters()


def test_decode_takes_first_of_repeated_values():
    filters = decode_search_filters({"country": ["Chile", "Peru"], "page": ["2"]})
    assert filters.country == "Chile"
    assert filters.page == 2


def test_normalize_cleans_bad_values():
    filters = normalize_search_filters(
        {"search": "  rosé ", "min_price": "", "max_price": "abc", "min_points": "90.0", "page": "-4", "size": "500"}
    )
    assert filters.search == "rosé"
    assert filters.min_price is None
    assert filters.max_price is None
    assert filters.min_points == 90
    assert filters.page == 1
    assert filters.size == 100


def test_non_finite_prices_are_dropped():
    filters = normalize_search_filters({"min_price": "nan", "max_price": "inf"})
    assert filters.min_price is None
    assert filters.max_price is None


def test_changing_a_filter_resets_page():
    filters = SearchFilters(country="Chile", page=4)
    assert filters.with_changes(country="Peru").page == 1
    assert filters.with_changes(page=2).page == 2
    assert filters.with_page(0).page == 1


def test_blank_filters_become_absent_in_request():
    request = SearchFilters(country="Chile").to_request()
    assert request.model_dump(exclude_none=True) == {"country": "Chile", "page": 1, "size": 20}


def test_listing_params_keep_zero_but_drop_blank():
    params = ListingFilters(country="", min_price=0, page=2).to_params()
    assert params == {"min_price": 0, "page": 2, "limit": 20}


def test_heatmap_and_price_rating_params_drop_zero():
    assert HeatmapFilters(country="US", min_price=0, price_bucket_size=20).to_params() == {
        "country": "US",
        "price_bucket_size": 20,
    }
    assert PriceRatingFilters(variety="Merlot", min_points=0).to_params() == {"variety": "Merlot"}


def test_configured_page_size_survives_the_url():
    filters = normalize_search_filters({"country": "Chile"}, default_size=50)
    params = encode_search_filters(filters, default_size=50)
    assert params == {"country": "Chile"}
    assert decode_search_filters(params, default_size=50) == filters
    assert decode_search_filters({}, default_size=50).size == 50
