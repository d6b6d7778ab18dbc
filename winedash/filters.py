from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from winedash.schemas import WineSearchRequest

SEARCH_PAGE_SIZE_DEFAULT = 20
SEARCH_PAGE_SIZE_MAX = 100


def _as_optional_float(value: object) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        out = float(value)  # type: ignore[arg-type]
    except Exception:
        return None
    return out if math.isfinite(out) else None


def _as_optional_int(value: object) -> Optional[int]:
    out = _as_optional_float(value)
    return int(out) if out is not None else None


def _as_int(value: object, default: int) -> int:
    out = _as_optional_int(value)
    return default if out is None else out


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _drop_empty(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None and v != ""}


def _drop_falsy(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v}


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


@dataclass(frozen=True)
class SearchFilters:
    search: str = ""
    country: str = ""
    variety: str = ""
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_points: Optional[int] = None
    page: int = 1
    size: int = SEARCH_PAGE_SIZE_DEFAULT

    def to_request(self) -> WineSearchRequest:
        return WineSearchRequest(
            search=self.search or None,
            country=self.country or None,
            variety=self.variety or None,
            min_price=self.min_price,
            max_price=self.max_price,
            min_points=self.min_points,
            page=self.page,
            size=self.size,
        )

    def with_page(self, page: int) -> "SearchFilters":
        return replace(self, page=max(1, int(page)))

    def with_changes(self, **changes: Any) -> "SearchFilters":
        """Apply filter edits; the page goes back to 1 unless given explicitly."""
        raw = asdict(self)
        raw.update(changes)
        if "page" not in changes:
            raw["page"] = 1
        return normalize_search_filters(raw)


def normalize_search_filters(raw: Mapping[str, Any], *, default_size: int = SEARCH_PAGE_SIZE_DEFAULT) -> SearchFilters:
    page = max(1, _as_int(raw.get("page"), 1))
    size = _as_int(raw.get("size"), default_size)
    size = max(1, min(SEARCH_PAGE_SIZE_MAX, size))
    return SearchFilters(
        search=_as_text(raw.get("search")),
        country=_as_text(raw.get("country")),
        variety=_as_text(raw.get("variety")),
        min_price=_as_optional_float(raw.get("min_price")),
        max_price=_as_optional_float(raw.get("max_price")),
        min_points=_as_optional_int(raw.get("min_points")),
        page=page,
        size=size,
    )


def encode_search_filters(filters: SearchFilters, *, default_size: int = SEARCH_PAGE_SIZE_DEFAULT) -> Dict[str, str]:
    """Query-string form of ``filters``; default and blank values are left out."""
    defaults = SearchFilters(size=default_size)
    out: Dict[str, str] = {}
    for f in fields(SearchFilters):
        value = getattr(filters, f.name)
        if value is None or value == "" or value == getattr(defaults, f.name):
            continue
        out[f.name] = _format_number(value) if isinstance(value, (int, float)) else str(value)
    return out


def decode_search_filters(params: Mapping[str, Any], *, default_size: int = SEARCH_PAGE_SIZE_DEFAULT) -> SearchFilters:
    raw: Dict[str, Any] = {}
    for f in fields(SearchFilters):
        if f.name not in params:
            continue
        value = params[f.name]
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        raw[f.name] = value
    return normalize_search_filters(raw, default_size=default_size)


@dataclass(frozen=True)
class ListingFilters:
    country: str = ""
    type: str = ""
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_points: Optional[int] = None
    max_points: Optional[int] = None
    page: int = 1
    limit: int = 20

    def to_params(self) -> Dict[str, Any]:
        return _drop_empty(asdict(self))


@dataclass(frozen=True)
class HeatmapFilters:
    country: str = ""
    variety: str = ""
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_points: Optional[int] = None
    max_points: Optional[int] = None
    price_bucket_size: Optional[float] = None
    points_bucket_size: Optional[float] = None

    def to_params(self) -> Dict[str, Any]:
        # zero bounds are treated as "not set", as the backend expects
        return _drop_falsy(asdict(self))


@dataclass(frozen=True)
class PriceRatingFilters:
    country: str = ""
    variety: str = ""
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_points: Optional[int] = None
    max_points: Optional[int] = None

    def to_params(self) -> Dict[str, Any]:
        return _drop_falsy(asdict(self))
