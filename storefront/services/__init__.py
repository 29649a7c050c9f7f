"""
Storefront services.

- PromotionAdminService: create/update/delete promotions with validation
- CatalogAdminService: product administration
- PricingService: priced listings and promotion views for the storefront
- DashboardService: admin metrics

Each service receives its repositories explicitly; none of them reads the
clock except the admin service, through an injectable clock.
"""

from storefront.services.catalog import CatalogAdminService
from storefront.services.dashboard import DashboardMetrics, DashboardService
from storefront.services.pricing import PricedProduct, PriceTag, PricingService, PromotionView
from storefront.services.promotions import PromotionAdminService

__all__ = [
    "CatalogAdminService",
    "DashboardMetrics",
    "DashboardService",
    "PricedProduct",
    "PriceTag",
    "PricingService",
    "PromotionView",
    "PromotionAdminService",
]
