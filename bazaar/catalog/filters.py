"""
Listing Filter Pipeline
Narrow and order a fetched product collection for display.

Second stage of the two-stage listing pipeline: the repository performs
the coarse fetch, this module the fine in-memory pass.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import List, Optional, Sequence, TypeVar

from .categories import ALL_CATEGORIES, CATEGORY_VALUES

logger = logging.getLogger(__name__)

T = TypeVar("T")

WEEK = timedelta(days=7)


class ListingMode(str, Enum):
    """
    Listing modes.

    Exactly one mode is active at a time; it composes with the text
    and category filters.
    """

    ALL = "all"
    AVAILABLE = "available"
    SOLD = "sold"
    TODAY = "today"
    THIS_WEEK = "this-week"
    PRICE_HIGH_LOW = "price-high-low"
    PRICE_LOW_HIGH = "price-low-high"


@dataclass
class ListingFilter:
    """
    Search, category and mode selection for the product listing.

    Example:
        ListingFilter(search_text="desk", category="Rooms", mode=ListingMode.AVAILABLE)
    """

    search_text: str = ""
    category: str = ALL_CATEGORIES
    mode: ListingMode = ListingMode.ALL

    def __post_init__(self):
        self.mode = ListingMode(self.mode)
        if self.category != ALL_CATEGORIES and self.category not in CATEGORY_VALUES:
            raise ValueError(f"Unknown category: {self.category}")

    @property
    def is_default(self) -> bool:
        return (
            not self.search_text.strip()
            and self.category == ALL_CATEGORIES
            and self.mode == ListingMode.ALL
        )


def _as_aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def local_midnight(now: datetime, tz: tzinfo) -> datetime:
    """Start of the current day in the given time zone."""
    local_now = _as_aware(now).astimezone(tz)
    return local_now.replace(hour=0, minute=0, second=0, microsecond=0)


def matches_text(product, search_text: str) -> bool:
    """Case-insensitive substring match against title or description."""
    needle = search_text.lower()
    title = (product.title or "").lower()
    description = (product.description or "").lower()
    return needle in title or needle in description


def apply_listing_filter(
    products: Sequence[T],
    listing_filter: ListingFilter,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> List[T]:
    """
    Apply a listing filter to a product collection.

    Passes run in order text -> category -> mode. Filtering modes narrow
    the set; price modes reorder it with a stable sort.

    Args:
        products: Products carrying title, description, category,
            is_available, created_at and price
        listing_filter: Search text, category and mode to apply
        now: Reference time for the time-window modes (defaults to now)
        tz: Time zone defining "today"

    Returns:
        New list; a subset of the input, never containing new items
    """
    filtered = list(products)

    # Blank queries are a no-op; otherwise the query is matched as typed
    search_text = listing_filter.search_text
    if search_text.strip():
        filtered = [p for p in filtered if matches_text(p, search_text)]

    if listing_filter.category != ALL_CATEGORIES:
        filtered = [p for p in filtered if p.category == listing_filter.category]

    mode = listing_filter.mode
    if mode in (ListingMode.TODAY, ListingMode.THIS_WEEK):
        reference = _as_aware(now) if now is not None else datetime.now(tz)
        if mode == ListingMode.TODAY:
            cutoff = local_midnight(reference, tz)
        else:
            cutoff = reference - WEEK
        filtered = [p for p in filtered if _as_aware(p.created_at) >= cutoff]
    elif mode == ListingMode.AVAILABLE:
        filtered = [p for p in filtered if p.is_available]
    elif mode == ListingMode.SOLD:
        filtered = [p for p in filtered if not p.is_available]
    elif mode == ListingMode.PRICE_HIGH_LOW:
        filtered = sorted(filtered, key=lambda p: p.price, reverse=True)
    elif mode == ListingMode.PRICE_LOW_HIGH:
        filtered = sorted(filtered, key=lambda p: p.price)

    logger.debug(
        f"Listing filter: {len(products)} -> {len(filtered)} "
        f"(search='{search_text}', category={listing_filter.category}, mode={mode.value})"
    )
    return filtered
