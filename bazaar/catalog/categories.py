"""
Product categories.
"""

from enum import Enum


class ProductCategory(str, Enum):
    """The fixed set of listing categories."""

    STUDY_MATERIAL = "Study Material"
    FOODS = "Foods"
    ROOMS = "Rooms"
    VEHICLE = "Vehicle"
    KITCHEN_ACCESSORIES = "Kitchen Accessories"


DEFAULT_CATEGORY = ProductCategory.STUDY_MATERIAL

# Sentinel accepted by the listing filter in place of a category
ALL_CATEGORIES = "all"

CATEGORY_VALUES = [category.value for category in ProductCategory]
