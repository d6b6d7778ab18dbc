"""
Tests for price/points bucket arithmetic
"""

import pytest

from winedash.buckets import BucketRange, bucket_centre, bucket_for_point, bucket_from_selection


def test_price_is_floored_to_bucket_width():
    bucket = bucket_for_point(23.4, 87)
    assert bucket == BucketRange(price_min=20, price_max=30, points_min=87, points_max=88)


def test_point_on_upper_edge_starts_next_bucket():
    bucket = bucket_for_point(30, 88)
    assert (bucket.price_min, bucket.points_min) == (30, 88)
    assert not bucket_for_point(23.4, 87).contains(30, 87.5)


@pytest.mark.parametrize("price,points", [(23.4, 87.2), (0.5, 80), (149.99, 99.9), (1000, 100)])
def test_bucket_contains_its_point_and_centre_maps_back(price, points):
    bucket = bucket_for_point(price, points)
    assert bucket.contains(price, points)
    assert bucket_for_point(*bucket_centre(bucket)) == bucket


def test_custom_widths():
    bucket = bucket_for_point(47, 91.3, price_width=25, points_width=2)
    assert bucket == BucketRange(price_min=25, price_max=50, points_min=90, points_max=92)


def test_fractional_widths_do_not_drift():
    bucket = bucket_for_point(0.75, 88.25, price_width=0.1, points_width=0.5)
    assert bucket.price_min == 0.7
    assert bucket.price_max == 0.8
    assert bucket.points_max == 88.5


@pytest.mark.parametrize("price,low,high", [(0.3, 0.3, 0.4), (0.7, 0.7, 0.8), (0.29, 0.2, 0.3)])
def test_tenth_widths_keep_edge_points_in_their_bucket(price, low, high):
    bucket = bucket_for_point(price, 88, price_width=0.1)
    assert (bucket.price_min, bucket.price_max) == (low, high)
    assert bucket.contains(price, 88)
    assert bucket_for_point(*bucket_centre(bucket), price_width=0.1) == bucket


def test_non_finite_point_rejected():
    with pytest.raises(ValueError):
        bucket_for_point(float("nan"), 88)
    assert bucket_from_selection([{"price_mid": float("inf"), "points_mid": 88}]) is None


@pytest.mark.parametrize("price_width,points_width", [(0, 1), (10, 0), (-5, 1)])
def test_non_positive_width_rejected(price_width, points_width):
    with pytest.raises(ValueError):
        bucket_for_point(20, 87, price_width, points_width)


def test_label_and_params():
    bucket = BucketRange(price_min=20, price_max=30, points_min=87, points_max=88)
    assert bucket.label == "$20-30, 87-88 points"
    assert bucket.as_params() == {"price_min": 20, "price_max": 30, "points_min": 87, "points_max": 88}


def test_selection_uses_first_usable_row():
    rows = [{"price_mid": None, "points_mid": 87.5}, {"price_mid": 25.0, "points_mid": 87.5}]
    assert bucket_from_selection(rows) == BucketRange(price_min=20, price_max=30, points_min=87, points_max=88)


def test_empty_selection():
    assert bucket_from_selection(None) is None
    assert bucket_from_selection([{"price_mid": "n/a", "points_mid": 87}]) is None
