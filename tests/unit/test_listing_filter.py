"""
Tests for the listing filter pipeline.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from bazaar.catalog.filters import (
    ListingFilter,
    ListingMode,
    apply_listing_filter,
    local_midnight,
)
from tests.conftest import at

NOW = at(2024, 5, 10, 12, 0, 0)


@dataclass
class Item:
    title: str
    price: Decimal = Decimal("10")
    description: str = ""
    category: str = "Study Material"
    is_available: bool = True
    created_at: datetime = NOW


def titles(items):
    return [item.title for item in items]


def test_default_filter_returns_everything_in_order():
    items = [Item("a"), Item("b"), Item("c")]
    result = apply_listing_filter(items, ListingFilter(), now=NOW)
    assert titles(result) == ["a", "b", "c"]
    assert result is not items


def test_text_matches_title_or_description_case_insensitively():
    items = [
        Item("Calculus Textbook"),
        Item("Bike", description="Includes a textbook rack"),
        Item("Rice cooker"),
    ]
    result = apply_listing_filter(items, ListingFilter(search_text="TEXTBOOK"), now=NOW)
    assert titles(result) == ["Calculus Textbook", "Bike"]


def test_blank_search_text_is_ignored():
    items = [Item("a"), Item("b")]
    result = apply_listing_filter(items, ListingFilter(search_text="   "), now=NOW)
    assert titles(result) == ["a", "b"]


def test_search_text_is_matched_as_typed():
    items = [Item("Study desk"), Item("Desktop stand"), Item("Lamp", description="fits any desk")]
    result = apply_listing_filter(items, ListingFilter(search_text=" desk"), now=NOW)
    assert titles(result) == ["Study desk", "Lamp"]


def test_category_filter_is_exact():
    items = [Item("room", category="Rooms"), Item("book"), Item("pan", category="Kitchen Accessories")]
    result = apply_listing_filter(items, ListingFilter(category="Rooms"), now=NOW)
    assert titles(result) == ["room"]


def test_unknown_category_is_rejected():
    with pytest.raises(ValueError):
        ListingFilter(category="Furniture")


def test_mode_accepts_string_values():
    listing_filter = ListingFilter(mode="this-week")
    assert listing_filter.mode is ListingMode.THIS_WEEK


def test_available_and_sold_modes():
    items = [Item("open"), Item("gone", is_available=False)]
    assert titles(apply_listing_filter(items, ListingFilter(mode="available"), now=NOW)) == ["open"]
    assert titles(apply_listing_filter(items, ListingFilter(mode="sold"), now=NOW)) == ["gone"]


def test_today_starts_at_local_midnight():
    items = [
        Item("midnight", created_at=at(2024, 5, 10, 0, 0, 0)),
        Item("late yesterday", created_at=at(2024, 5, 9, 23, 59, 59)),
        Item("morning", created_at=at(2024, 5, 10, 9, 30)),
    ]
    result = apply_listing_filter(items, ListingFilter(mode=ListingMode.TODAY), now=NOW)
    assert titles(result) == ["midnight", "morning"]


def test_today_uses_configured_time_zone():
    new_york = ZoneInfo("America/New_York")
    # 12:00 UTC is 08:00 EDT; the local day began at 04:00 UTC
    items = [
        Item("before local midnight", created_at=at(2024, 5, 10, 3, 59, 59)),
        Item("after local midnight", created_at=at(2024, 5, 10, 4, 0, 0)),
    ]
    result = apply_listing_filter(items, ListingFilter(mode="today"), now=NOW, tz=new_york)
    assert titles(result) == ["after local midnight"]
    assert local_midnight(NOW, new_york) == datetime(2024, 5, 10, tzinfo=new_york)


def test_this_week_boundary_is_inclusive():
    items = [
        Item("exactly a week", created_at=NOW - timedelta(days=7)),
        Item("just over a week", created_at=NOW - timedelta(days=7, seconds=1)),
        Item("yesterday", created_at=NOW - timedelta(days=1)),
    ]
    result = apply_listing_filter(items, ListingFilter(mode="this-week"), now=NOW)
    assert titles(result) == ["exactly a week", "yesterday"]


def test_naive_timestamps_are_treated_as_utc():
    items = [Item("naive", created_at=datetime(2024, 5, 10, 1, 0, 0))]
    result = apply_listing_filter(items, ListingFilter(mode="today"), now=NOW)
    assert titles(result) == ["naive"]


def test_price_sorts_are_stable():
    items = [
        Item("first ten", price=Decimal("10")),
        Item("cheap", price=Decimal("2.50")),
        Item("second ten", price=Decimal("10")),
        Item("pricey", price=Decimal("99")),
    ]
    high_low = apply_listing_filter(items, ListingFilter(mode="price-high-low"), now=NOW)
    low_high = apply_listing_filter(items, ListingFilter(mode="price-low-high"), now=NOW)

    assert titles(high_low) == ["pricey", "first ten", "second ten", "cheap"]
    assert titles(low_high) == ["cheap", "first ten", "second ten", "pricey"]


def test_filters_compose_text_then_category_then_mode():
    items = [
        Item("Desk", category="Rooms", price=Decimal("40")),
        Item("Desk lamp", price=Decimal("15")),
        Item("Standing desk", category="Rooms", price=Decimal("120")),
        Item("Desk chair", category="Rooms", is_available=False),
    ]
    listing_filter = ListingFilter(search_text="desk", category="Rooms", mode="price-high-low")
    result = apply_listing_filter(items, listing_filter, now=NOW)
    assert titles(result) == ["Standing desk", "Desk", "Desk chair"]


def test_output_is_always_a_subset_of_input():
    items = [Item(str(i), price=Decimal(i), is_available=i % 2 == 0) for i in range(10)]
    for mode in ListingMode:
        result = apply_listing_filter(items, ListingFilter(mode=mode), now=NOW)
        assert all(any(item is original for original in items) for item in result)
        assert len(result) <= len(items)
