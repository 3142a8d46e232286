"""
Catalog
Product repository access and the listing filter pipeline.
"""

from .carousel import CarouselRepository
from .categories import ALL_CATEGORIES, CATEGORY_VALUES, DEFAULT_CATEGORY, ProductCategory
from .filters import ListingFilter, ListingMode, apply_listing_filter
from .repository import ProductRepository, commit_or_raise, fetch_profiles

__all__ = [
    "CarouselRepository",
    "ALL_CATEGORIES",
    "CATEGORY_VALUES",
    "DEFAULT_CATEGORY",
    "ProductCategory",
    "ListingFilter",
    "ListingMode",
    "apply_listing_filter",
    "ProductRepository",
    "commit_or_raise",
    "fetch_profiles",
]
