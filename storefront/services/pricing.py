"""
Pricing presenter.

Turns products and promotions into what the storefront shows: the original
price, the price after the best active promotion, a discount badge, the
promotion countdown and a stock badge.

Design decisions:
- Labels are simple format strings with {variable} placeholders
- The module-level functions are pure and take `now` explicitly
- For lists, promotions are indexed by product_id once before the
  per-product pass
- PricingService is the thin repository-backed wrapper the API uses
"""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel

from store.errors import NotFoundError
from store.models import (
    Product,
    ProductFilter,
    Promotion,
    PromotionFilter,
    PromotionState,
    StockStatus,
    TimeLeft,
)
from store.repository import CatalogRepository, PromotionRepository
from storefront.evaluator import (
    best_discount_for,
    discounted_price,
    filter_active,
    promotion_state,
    time_remaining,
)

logger = logging.getLogger("pricing_presenter")

LOW_STOCK_LIMIT = 10

BADGE_TEMPLATE = "{discount_percent}% OFF"

STOCK_LABELS = {
    StockStatus.IN_STOCK: "In stock",
    StockStatus.LOW_STOCK: "Only {stock} left",
    StockStatus.OUT_OF_STOCK: "Out of stock",
}


# =============================================================================
# View models
# =============================================================================

class PriceTag(BaseModel):
    """Price block for one product at one instant."""
    original_price: Decimal
    final_price: Decimal
    discount_percent: Optional[int] = None
    savings: Optional[Decimal] = None
    badge: Optional[str] = None
    promotion_id: Optional[str] = None
    promotion_title: Optional[str] = None
    ends_at: Optional[datetime] = None
    time_left: Optional[TimeLeft] = None

    @property
    def on_sale(self) -> bool:
        return self.promotion_id is not None


class PricedProduct(BaseModel):
    """A product as the storefront renders it."""
    product: Product
    pricing: PriceTag
    stock_status: StockStatus
    stock_label: str
    promotions: list[Promotion] = []


class PromotionView(Promotion):
    """A promotion with its derived state and countdown."""
    state: PromotionState
    time_left: TimeLeft


# =============================================================================
# Pure presentation
# =============================================================================

def stock_status(stock: int) -> StockStatus:
    """IN_STOCK above 10 units, LOW_STOCK for 1-10, OUT_OF_STOCK at 0."""
    if stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if stock <= LOW_STOCK_LIMIT:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def stock_label(stock: int) -> str:
    return STOCK_LABELS[stock_status(stock)].format(stock=stock)


def price_tag(product: Product, promotions: Iterable[Promotion], now: datetime) -> PriceTag:
    """Price block for `product` under the best promotion active at `now`."""
    best = best_discount_for(product, promotions, now)
    if best is None:
        return PriceTag(original_price=product.price, final_price=product.price)

    final = discounted_price(product, best)
    return PriceTag(
        original_price=product.price,
        final_price=final,
        discount_percent=best.discount_percent,
        savings=product.price - final,
        badge=BADGE_TEMPLATE.format(discount_percent=best.discount_percent),
        promotion_id=best.id,
        promotion_title=best.title,
        ends_at=best.ends_at,
        time_left=time_remaining(best, now),
    )


def price_product(
    product: Product,
    promotions: Iterable[Promotion],
    now: datetime,
    include_promotions: bool = False,
) -> PricedProduct:
    """
    Present one product.

    Args:
        product: The product to price
        promotions: Candidate promotions (others' are ignored)
        now: Reference instant
        include_promotions: Attach the product's active promotions, best first
    """
    promotions = [p for p in promotions if p.product_id == product.id]
    active = []
    if include_promotions:
        active = sorted(
            filter_active(promotions, now),
            key=lambda p: (p.discount_percent, p.created_at),
            reverse=True,
        )

    return PricedProduct(
        product=product,
        pricing=price_tag(product, promotions, now),
        stock_status=stock_status(product.stock),
        stock_label=stock_label(product.stock),
        promotions=active,
    )


def price_catalog(
    products: Iterable[Product],
    promotions: Iterable[Promotion],
    now: datetime,
) -> list[PricedProduct]:
    """Present a product list, keeping its order."""
    by_product: dict[str, list[Promotion]] = defaultdict(list)
    for promotion in promotions:
        by_product[promotion.product_id].append(promotion)

    return [price_product(p, by_product.get(p.id, []), now) for p in products]


def describe_promotion(promotion: Promotion, now: datetime) -> PromotionView:
    """Attach state and countdown to a promotion."""
    return PromotionView(
        **promotion.model_dump(),
        state=promotion_state(promotion, now),
        time_left=time_remaining(promotion, now),
    )


# =============================================================================
# Repository-backed service
# =============================================================================

class PricingService:
    """
    Storefront read side: priced listings and promotion views.

    Example:
        pricing = PricingService(store, store)
        for item in pricing.list_priced_products(ProductFilter(limit=12), now):
            print(item.product.name, item.pricing.final_price, item.pricing.badge)
    """

    def __init__(self, catalog: CatalogRepository, promotions: PromotionRepository):
        self.catalog = catalog
        self.promotions = promotions

    def list_priced_products(self, filters: ProductFilter, now: datetime) -> list[PricedProduct]:
        products = self.catalog.list_products(filters)
        active = filter_active(self.promotions.list_promotions(), now)
        logger.debug(f"Pricing {len(products)} product(s) against {len(active)} active promotion(s)")
        return price_catalog(products, active, now)

    def get_priced_product(self, product_id: str, now: datetime) -> PricedProduct:
        product = self.catalog.get_product(product_id)
        if not product:
            raise NotFoundError("product")
        promotions = self.promotions.list_promotions(PromotionFilter(product_id=product_id))
        return price_product(product, promotions, now, include_promotions=True)

    def list_promotions(
        self,
        filters: PromotionFilter,
        now: datetime,
        active_only: bool = False,
    ) -> list[PromotionView]:
        """
        Promotions newest first.

        With `active_only`, the active filter runs before pagination so a page
        is never short because of inactive rows.
        """
        if not active_only:
            return [describe_promotion(p, now) for p in self.promotions.list_promotions(filters)]

        unpaged = PromotionFilter(product_id=filters.product_id)
        active = filter_active(self.promotions.list_promotions(unpaged), now)
        end = None if filters.limit is None else filters.offset + filters.limit
        return [describe_promotion(p, now) for p in active[filters.offset:end]]

    def active_promotions(self, now: datetime) -> list[PromotionView]:
        """Every active promotion, biggest discount first."""
        active = filter_active(self.promotions.list_promotions(), now)
        active.sort(key=lambda p: (p.discount_percent, p.created_at), reverse=True)
        return [describe_promotion(p, now) for p in active]

    def get_promotion(self, promotion_id: str, now: datetime) -> PromotionView:
        promotion = self.promotions.get_promotion(promotion_id)
        if not promotion:
            raise NotFoundError("promotion")
        return describe_promotion(promotion, now)
