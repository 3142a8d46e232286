"""
API Routers
"""

from . import admin, auth, carousel, health, products, seller

__all__ = ["admin", "auth", "carousel", "health", "products", "seller"]
