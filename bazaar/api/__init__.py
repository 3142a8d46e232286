"""
Bazaar HTTP API
FastAPI application, routers, and request plumbing.
"""
