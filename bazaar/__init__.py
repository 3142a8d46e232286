"""
Bazaar
Marketplace service: listings, likes, comments, and seller/admin dashboards.
"""

__version__ = "0.1.0"
