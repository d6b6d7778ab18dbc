from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

PRICE_BUCKET_WIDTH = 10.0
POINTS_BUCKET_WIDTH = 1.0


def _trim(value: float) -> float:
    # keep 20.0 rather than 20.000000000000004 after float arithmetic
    return round(value, 6)


@dataclass(frozen=True)
class BucketRange:
    """Half-open price/points rectangle ``[min, max)`` on both axes."""

    price_min: float
    price_max: float
    points_min: float
    points_max: float

    def contains(self, price: float, points: float) -> bool:
        return self.price_min <= price < self.price_max and self.points_min <= points < self.points_max

    @property
    def label(self) -> str:
        return f"${self.price_min:g}-{self.price_max:g}, {self.points_min:g}-{self.points_max:g} points"

    def as_params(self) -> Dict[str, float]:
        return {
            "price_min": self.price_min,
            "price_max": self.price_max,
            "points_min": self.points_min,
            "points_max": self.points_max,
        }


def _floor_to(value: float, width: float) -> Tuple[float, float]:
    # decimal division so 0.3 / 0.1 floors to 3, not 2
    step = Decimal(str(width))
    index = (Decimal(str(value)) / step).to_integral_value(rounding=ROUND_FLOOR)
    return _trim(float(index * step)), _trim(float((index + 1) * step))


def bucket_for_point(
    price: float,
    points: float,
    price_width: float = PRICE_BUCKET_WIDTH,
    points_width: float = POINTS_BUCKET_WIDTH,
) -> BucketRange:
    """Bucket containing a clicked (price, points) pair.

    23.4 with a width of 10 maps to [20, 30). Re-applying this to any point
    of the returned bucket (its centre included) gives the same bucket.
    """
    if price_width <= 0 or points_width <= 0:
        raise ValueError("bucket widths must be positive")
    if not (math.isfinite(price) and math.isfinite(points)):
        raise ValueError("bucket coordinates must be finite")
    price_min, price_max = _floor_to(float(price), float(price_width))
    points_min, points_max = _floor_to(float(points), float(points_width))
    return BucketRange(price_min=price_min, price_max=price_max, points_min=points_min, points_max=points_max)


def bucket_centre(bucket: Any) -> Tuple[float, float]:
    return (
        (float(bucket.price_min) + float(bucket.price_max)) / 2,
        (float(bucket.points_min) + float(bucket.points_max)) / 2,
    )


def bucket_from_selection(
    rows: Optional[Iterable[Mapping[str, Any]]],
    *,
    price_field: str = "price_mid",
    points_field: str = "points_mid",
    price_width: float = PRICE_BUCKET_WIDTH,
    points_width: float = POINTS_BUCKET_WIDTH,
) -> Optional[BucketRange]:
    """First selected chart point as a bucket, or None when nothing usable is selected."""
    for row in rows or []:
        price = row.get(price_field)
        points = row.get(points_field)
        if price is None or points is None:
            continue
        try:
            return bucket_for_point(float(price), float(points), price_width, points_width)
        except (TypeError, ValueError):
            continue
    return None
