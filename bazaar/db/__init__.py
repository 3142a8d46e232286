"""
Database ORM Models
SQLAlchemy ORM models for database tables.
"""

from .models import (
    Base,
    CarouselItem,
    MagicLinkRedemption,
    Product,
    ProductComment,
    ProductLike,
    Profile,
    UserRole,
)

__all__ = [
    "Base",
    "Profile",
    "UserRole",
    "Product",
    "ProductLike",
    "ProductComment",
    "CarouselItem",
    "MagicLinkRedemption",
]
