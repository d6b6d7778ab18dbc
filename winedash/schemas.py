from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class Wine(BaseModel):
    id: int
    title: str
    description: str = ""
    points: Optional[float] = None
    price: Optional[float] = None
    country: Optional[str] = None
    province: Optional[str] = None
    region_1: Optional[str] = None
    region_2: Optional[str] = None
    designation: Optional[str] = None
    taster_name: Optional[str] = None
    taster_twitter_handle: Optional[str] = None
    variety: Optional[str] = None
    winery: Optional[str] = None
    created_at: Optional[str] = None
    source: Optional[str] = None


class WineListResponse(BaseModel):
    wines: List[Wine] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20


class PriceRange(BaseModel):
    min: float = 0.0
    max: float = 0.0


class FilterOptions(BaseModel):
    countries: List[str] = Field(default_factory=list)
    types: List[str] = Field(default_factory=list)
    styles: List[str] = Field(default_factory=list)
    grapes: List[str] = Field(default_factory=list)
    regions: List[str] = Field(default_factory=list)
    price_range: Optional[PriceRange] = Field(default=None, alias="priceRange")
    vintages: List[Optional[int]] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class WineSearchRequest(BaseModel):
    search: Optional[str] = None
    country: Optional[str] = None
    variety: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_points: Optional[int] = None
    page: int = 1
    size: int = 20


class WineSearchResult(BaseModel):
    id: int
    title: str
    price: Optional[float] = None
    points: Optional[float] = None
    country: Optional[str] = None
    variety: Optional[str] = None
    winery: Optional[str] = None


class WineSearchResponse(BaseModel):
    items: List[WineSearchResult] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 20
    pages: int = 0


class WineInBucket(BaseModel):
    id: int
    name: str
    winery: Optional[str] = None
    price: Optional[float] = None
    points: Optional[float] = None
    country: Optional[str] = None
    variety: Optional[str] = None


class CursorPagination(BaseModel):
    next_cursor: Optional[str] = None
    has_next: bool = False


class BucketWinesResponse(BaseModel):
    wines: List[WineInBucket] = Field(default_factory=list)
    pagination: CursorPagination = Field(default_factory=CursorPagination)
    total: int = 0


class WinesByCountryResponse(BaseModel):
    country: str
    wines: List[WineSearchResult] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    has_next: bool = False


class VarietyShare(BaseModel):
    name: str
    count: int = 0
    percentage: float = 0.0


class CountryStats(BaseModel):
    country: str
    avg_points: float
    count: int
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    avg_price: Optional[float] = None
    top_varieties: List[VarietyShare] = Field(default_factory=list)
    original_country: Optional[str] = None


class CountryStatsResponse(BaseModel):
    items: List[CountryStats] = Field(default_factory=list)
    total_countries: int = 0


class WineExample(BaseModel):
    name: str
    price: Optional[float] = None
    points: Optional[float] = None
    winery: Optional[str] = None


class PriceRatingBucket(BaseModel):
    price_min: float
    price_max: float
    points_min: float
    points_max: float
    count: int = 0
    examples: List[WineExample] = Field(default_factory=list)


class BucketSize(BaseModel):
    price: float = 10
    points: float = 1


class AggregatedPriceRatingResponse(BaseModel):
    buckets: List[PriceRatingBucket] = Field(default_factory=list)
    total_wines: int = 0
    total_buckets: int = 0
    bucket_size: BucketSize = Field(default_factory=BucketSize)


class VarietyCount(BaseModel):
    variety: str
    count: int = 0


class HeatmapBucket(PriceRatingBucket):
    avg_price: Optional[float] = None
    price_range: Optional[str] = None
    top_varieties: List[VarietyCount] = Field(default_factory=list)


class HeatmapResponse(BaseModel):
    data: List[List[float]] = Field(default_factory=list)
    x_categories: List[float] = Field(default_factory=list)
    y_categories: List[float] = Field(default_factory=list)
    bucket_map: Dict[str, HeatmapBucket] = Field(default_factory=dict)
    max_count: int = 0
    total_wines: int = 0
    bucket_size: BucketSize = Field(default_factory=BucketSize)


class PriceRatingPoint(BaseModel):
    id: int
    price: float
    points: float
    country: Optional[str] = None
    variety: Optional[str] = None
    winery: Optional[str] = None


class PriceRatingResponse(BaseModel):
    data: List[PriceRatingPoint] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 1000


class RagSource(BaseModel):
    id: Union[int, str]
    title: str
    country: Optional[str] = None
    variety: Optional[str] = None
    description: Optional[str] = None


class RagAnswerResponse(BaseModel):
    answer: str = ""
    sources: List[RagSource] = Field(default_factory=list)
