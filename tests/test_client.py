"""
Tests for the wine API client against the in-memory backend
"""

import httpx
import pytest

from winedash.buckets import BucketRange
from winedash.client import WineApiClient, _clean_params
from winedash.errors import WineApiError
from winedash.filters import HeatmapFilters, ListingFilters, PriceRatingFilters, SearchFilters


class TestWines:
    def test_list_wines_by_country(self, api):
        result = api.list_wines(ListingFilters(country="Portugal"))
        assert result.total == 2
        assert {w.id for w in result.wines} == {1, 6}

    def test_get_wine(self, api):
        wine = api.get_wine(3)
        assert wine.title == "Kiwi Pinot 2018"
        assert wine.points == 91

    def test_missing_wine_raises_with_status(self, api):
        with pytest.raises(WineApiError) as exc_info:
            api.get_wine(999)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Failed to fetch wine with ID 999"
        assert exc_info.value.detail == "Wine not found"

    def test_filter_options_reads_camel_case_price_range(self, api):
        options = api.get_filter_options()
        assert "New Zealand" in options.countries
        assert options.price_range.max == 35.0

    def test_search_sends_only_set_fields(self, api):
        result = api.search_wines(SearchFilters(country="New Zealand", min_points=88).to_request())
        assert result.total == 2
        assert result.pages == 1
        assert {w.id for w in result.items} == {2, 3}

    def test_variety_list(self, api):
        assert "Pinot Noir" in api.get_variety_list()


class TestDrillDowns:
    def test_bucket_wines(self, api):
        bucket = BucketRange(price_min=20, price_max=30, points_min=87, points_max=88)
        result = api.get_bucket_wines(bucket, limit=10)
        assert {w.id for w in result.wines} == {1, 4, 5}
        assert result.total == 3
        assert result.pagination.has_next is False

    def test_bucket_wines_cursor(self, api):
        bucket = BucketRange(price_min=20, price_max=30, points_min=87, points_max=88)
        first = api.get_bucket_wines(bucket, limit=2)
        assert first.pagination.has_next is True
        second = api.get_bucket_wines(bucket, limit=2, cursor=first.pagination.next_cursor)
        assert [w.id for w in first.wines + second.wines] == [1, 4, 5]
        assert second.pagination.has_next is False

    def test_country_name_is_percent_encoded(self, api):
        result = api.get_wines_by_country("New Zealand", limit=10)
        assert result.country == "New Zealand"
        assert {w.id for w in result.wines} == {2, 3, 7}


class TestStats:
    def test_country_stats_uses_configured_minimum(self, api):
        assert api.get_country_stats().items == []
        result = api.get_country_stats(min_wines=2)
        by_name = {c.country: c for c in result.items}
        assert by_name["United States of America"].original_country == "US"

    def test_country_list(self, api):
        assert api.get_country_list() == ["New Zealand", "Portugal", "US"]

    def test_aggregated_pages(self, api):
        first = api.get_price_rating_aggregated(page=1, page_size=3)
        assert len(first.buckets) == 3
        assert first.bucket_size.price == 10
        beyond = api.get_price_rating_aggregated(page=99, page_size=3)
        assert beyond.buckets == []

    def test_heatmap(self, api):
        result = api.get_price_rating_heatmap(HeatmapFilters(price_bucket_size=10, points_bucket_size=1))
        assert result.max_count == 2
        assert "20-87" in result.bucket_map

    def test_price_rating_points(self, api):
        result = api.get_price_rating_points(PriceRatingFilters(country="US"))
        assert result.total == 2

    def test_rag_answer(self, api):
        result = api.get_rag_answer("crisp white")
        assert "crisp white" in result.answer
        assert result.sources[0].id == "2"

    def test_rag_error_detail(self, api):
        with pytest.raises(WineApiError) as exc_info:
            api.get_rag_answer("   ")
        assert exc_info.value.status_code == 400
        assert str(exc_info.value) == "Failed to fetch RAG answer: Query must not be empty"


class TestTransportFailures:
    def _client(self, settings, handler):
        http = httpx.Client(base_url="http://testserver", transport=httpx.MockTransport(handler))
        return WineApiClient(settings, http=http)

    def test_connection_error(self, settings):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with self._client(settings, handler) as client:
            with pytest.raises(WineApiError) as exc_info:
                client.get_country_list()
        assert exc_info.value.status_code is None
        assert exc_info.value.detail == "No response received from server"

    def test_invalid_json(self, settings):
        with self._client(settings, lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(WineApiError) as exc_info:
                client.get_wine(1)
        assert exc_info.value.detail == "Invalid JSON response"

    def test_unexpected_shape(self, settings):
        with self._client(settings, lambda request: httpx.Response(200, json={"nope": True})) as client:
            with pytest.raises(WineApiError) as exc_info:
                client.get_wine(1)
        assert exc_info.value.detail == "Unexpected response format"

    def test_none_params_are_not_sent(self, settings):
        seen = {}

        def handler(request):
            seen["query"] = dict(request.url.params)
            return httpx.Response(200, json={"wines": [], "pagination": {"has_next": False}, "total": 0})

        bucket = BucketRange(price_min=20, price_max=30, points_min=87, points_max=88)
        with self._client(settings, handler) as client:
            client.get_bucket_wines(bucket, limit=10)
        assert "cursor" not in seen["query"]
        assert seen["query"]["limit"] == "10"

    def test_clean_params(self):
        assert _clean_params({"a": None, "b": "", "c": 0, "d": "x"}) == {"c": 0, "d": "x"}
        assert _clean_params(None) == {}
