"""
HTTP API for the KIVO storefront.

This package provides a single FastAPI application that exposes:
- Public storefront reads (priced products, promotions)
- The authenticated caller's profile
- Admin endpoints for promotions, products, metrics and profiles
"""

from api.main import app

__all__ = ["app"]
