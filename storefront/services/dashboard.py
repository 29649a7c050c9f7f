"""
Admin dashboard metrics.
"""

import logging
from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal

from pydantic import BaseModel

from store.repository import DEFAULT_LOW_STOCK_THRESHOLD, CatalogRepository, PromotionRepository
from storefront.evaluator import CENT, filter_active

logger = logging.getLogger("dashboard")


class DashboardMetrics(BaseModel):
    total_products: int
    total_promotions: int
    active_promotions: int
    low_stock_products: int
    total_stock: int
    average_price: Decimal


class DashboardService:
    """Aggregates catalog and promotion counts for the admin dashboard."""

    def __init__(
        self,
        catalog: CatalogRepository,
        promotions: PromotionRepository,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ):
        self.catalog = catalog
        self.promotions = promotions
        self.low_stock_threshold = low_stock_threshold

    def get_metrics(self, now: datetime) -> DashboardMetrics:
        """
        Snapshot of the store at `now`.

        average_price is rounded half-to-even to cents, and is 0.00 for an
        empty catalog.
        """
        products = self.catalog.list_products()
        promotions = self.promotions.list_promotions()

        average = Decimal("0")
        if products:
            average = sum((p.price for p in products), Decimal("0")) / len(products)

        metrics = DashboardMetrics(
            total_products=len(products),
            total_promotions=len(promotions),
            active_promotions=len(filter_active(promotions, now)),
            low_stock_products=len(self.catalog.get_low_stock_products(self.low_stock_threshold)),
            total_stock=sum(p.stock for p in products),
            average_price=average.quantize(CENT, rounding=ROUND_HALF_EVEN),
        )
        logger.debug(f"Dashboard metrics: {metrics.model_dump()}")
        return metrics
