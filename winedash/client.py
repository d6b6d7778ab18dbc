"""httpx wrapper for the wine review API.

Every call returns a validated pydantic model or raises ``WineApiError``
with a fixed per-operation message. No retries.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from winedash.buckets import BucketRange
from winedash.config import DashboardSettings, get_settings
from winedash.errors import WineApiError
from winedash.filters import HeatmapFilters, ListingFilters, PriceRatingFilters
from winedash.schemas import (
    AggregatedPriceRatingResponse,
    BucketWinesResponse,
    CountryStatsResponse,
    FilterOptions,
    HeatmapResponse,
    PriceRatingResponse,
    RagAnswerResponse,
    Wine,
    WineListResponse,
    WineSearchRequest,
    WineSearchResponse,
    WinesByCountryResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
_STRING_LIST = TypeAdapter(List[str])


def build_http_client(settings: DashboardSettings | None = None) -> httpx.Client:
    settings = settings or get_settings()
    return httpx.Client(
        base_url=settings.api_base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        follow_redirects=True,
    )


def _clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in (params or {}).items() if v is not None and v != ""}


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase or f"HTTP {response.status_code}"


class WineApiClient:
    def __init__(self, settings: DashboardSettings | None = None, *, http: httpx.Client | None = None):
        self.settings = settings or get_settings()
        self._http = http or build_http_client(self.settings)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "WineApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        error_message: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response = self._http.request(method, path, params=_clean_params(params), json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            logger.error("%s %s -> %s (%s)", method, path, exc.response.status_code, detail)
            raise WineApiError(error_message, status_code=exc.response.status_code, detail=detail) from exc
        except httpx.RequestError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise WineApiError(error_message, detail="No response received from server") from exc
        try:
            return response.json()
        except ValueError as exc:
            logger.error("%s %s returned a non-JSON body", method, path)
            raise WineApiError(error_message, status_code=response.status_code, detail="Invalid JSON response") from exc

    def _get_model(self, model: Type[ModelT], path: str, *, error_message: str, **kwargs: Any) -> ModelT:
        data = self._request("GET", path, error_message=error_message, **kwargs)
        return self._validate(model, data, error_message)

    @staticmethod
    def _validate(model: Type[ModelT], data: Any, error_message: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("unexpected %s payload: %s", model.__name__, exc)
            raise WineApiError(error_message, detail="Unexpected response format") from exc

    # ---------- wines ----------

    def list_wines(self, filters: ListingFilters | None = None) -> WineListResponse:
        params = (filters or ListingFilters()).to_params()
        return self._get_model(WineListResponse, "/api/wines", error_message="Failed to fetch wines", params=params)

    def get_wine(self, wine_id: int) -> Wine:
        return self._get_model(Wine, f"/api/wines/{int(wine_id)}", error_message=f"Failed to fetch wine with ID {wine_id}")

    def get_filter_options(self) -> FilterOptions:
        return self._get_model(FilterOptions, "/api/wines/filters", error_message="Failed to fetch filter options")

    def search_wines(self, request: WineSearchRequest) -> WineSearchResponse:
        message = "Failed to search wines"
        data = self._request("POST", "/api/wines/search", error_message=message, json=request.model_dump(exclude_none=True))
        return self._validate(WineSearchResponse, data, message)

    def get_bucket_wines(self, bucket: BucketRange, limit: int = 10, cursor: Optional[str] = None) -> BucketWinesResponse:
        params: Dict[str, Any] = dict(bucket.as_params(), limit=limit, cursor=cursor)
        return self._get_model(BucketWinesResponse, "/api/wines/bucket/", error_message="Failed to fetch bucket wines", params=params)

    def get_wines_by_country(self, country: str, limit: int = 10, cursor: Optional[str] = None) -> WinesByCountryResponse:
        return self._get_model(
            WinesByCountryResponse,
            f"/api/wines/by-country/{quote(country, safe='')}",
            error_message=f"Failed to fetch wines for {country}",
            params={"limit": limit, "cursor": cursor},
        )

    def get_variety_list(self) -> List[str]:
        message = "Failed to fetch variety list"
        return self._validate_strings(self._request("GET", "/api/wines/variety-list", error_message=message), message)

    # ---------- stats ----------

    def get_country_stats(self, min_wines: int | None = None) -> CountryStatsResponse:
        min_wines = self.settings.country_min_wines if min_wines is None else min_wines
        return self._get_model(
            CountryStatsResponse,
            "/api/stats/countries",
            error_message="Failed to fetch country statistics",
            params={"min_wines": min_wines},
        )

    def get_country_list(self) -> List[str]:
        message = "Failed to fetch country list"
        return self._validate_strings(self._request("GET", "/api/stats/country-list", error_message=message), message)

    def get_price_rating_aggregated(self, page: int = 1, page_size: int | None = None) -> AggregatedPriceRatingResponse:
        return self._get_model(
            AggregatedPriceRatingResponse,
            "/api/stats/price-rating-aggregated",
            error_message="Failed to fetch scatter data",
            params={"page": page, "page_size": page_size or self.settings.scatter_page_size},
        )

    def get_price_rating_heatmap(self, filters: HeatmapFilters | None = None) -> HeatmapResponse:
        return self._get_model(
            HeatmapResponse,
            "/api/stats/price-rating-heatmap",
            error_message="Failed to load heatmap data",
            params=(filters or HeatmapFilters()).to_params(),
        )

    def get_price_rating_points(
        self, filters: PriceRatingFilters | None = None, page: int = 1, page_size: int = 1000
    ) -> PriceRatingResponse:
        params = dict((filters or PriceRatingFilters()).to_params(), page=page, page_size=page_size)
        return self._get_model(PriceRatingResponse, "/api/stats/price-rating", error_message="Failed to load data", params=params)

    # ---------- search ----------

    def get_rag_answer(self, query: str) -> RagAnswerResponse:
        message = "Failed to fetch RAG answer"
        data = self._request("POST", "/api/search/answer", error_message=message, json={"query": query})
        return self._validate(RagAnswerResponse, data, message)

    @staticmethod
    def _validate_strings(data: Any, error_message: str) -> List[str]:
        if data is None:
            return []
        try:
            return _STRING_LIST.validate_python(data)
        except ValidationError as exc:
            logger.error("unexpected list payload: %s", exc)
            raise WineApiError(error_message, detail="Unexpected response format") from exc
