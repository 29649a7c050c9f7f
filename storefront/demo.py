"""
Demonstration scripts for the storefront core.

These functions walk through a promotion's life in an in-memory store, moving
a simulated clock instead of waiting for real time to pass.
"""

import logging
from datetime import datetime, timedelta, timezone

from store.config import settings
from store.data_store import InMemoryStore
from store.errors import StorefrontError
from store.models import ProductCreate, ProductFilter, Profile
from storefront.evaluator import promotion_state
from storefront.services import (
    CatalogAdminService,
    DashboardService,
    PricingService,
    PromotionAdminService,
)

# Configure logging to see what's happening
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)

T0 = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)


class SimulatedClock:
    """A clock the demo can move forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> datetime:
        self.now += delta
        return self.now


def _seed_store() -> tuple[InMemoryStore, Profile]:
    store = InMemoryStore()
    admin = store.add_profile(Profile(
        id="prof-admin",
        auth_id="auth-admin",
        email="admin@kivo.shop",
        full_name="Store Admin",
        is_admin=True,
    ))
    return store, admin


def _show_listing(pricing: PricingService, now: datetime) -> None:
    for item in pricing.list_priced_products(ProductFilter(), now):
        tag = item.pricing
        line = f"  {item.product.name:<28} {tag.original_price:>9}"
        if tag.on_sale:
            left = tag.time_left
            line += (
                f" -> {tag.final_price:>9}  [{tag.badge}]"
                f"  ends in {left.days}d {left.hours:02}:{left.minutes:02}:{left.seconds:02}"
            )
        print(f"{line}  ({item.stock_label})")


def run_flash_sale_demo():
    """
    Demonstrate a flash sale from creation to expiry.

    This shows:
    1. An admin adds a product and a 24-hour 25% promotion
    2. The storefront prices the product at several instants
    3. The promotion moves Scheduled -> Active -> Expired with no writes
    """
    print("\n" + "=" * 70)
    print("STOREFRONT DEMO: Flash Sale")
    print("=" * 70 + "\n")

    clock = SimulatedClock(T0)
    store, admin = _seed_store()
    catalog = CatalogAdminService(store)
    admin_service = PromotionAdminService(store, store, clock=clock)
    pricing = PricingService(store, store)

    headphones = catalog.create_product(ProductCreate(
        name="Wireless Headphones Pro",
        description="Noise cancelling over-ear headphones",
        price="100.00",
        stock=8,
        category="electronics",
    ))
    catalog.create_product(ProductCreate(name="Espresso Machine", price="799.99", stock=30, category="home"))

    flash = admin_service.create_promotion({
        "title": "Flash",
        "product_id": headphones.id,
        "discount_percent": 25,
        "starts_at": T0 + timedelta(minutes=30),
        "ends_at": T0 + timedelta(hours=24, minutes=30),
    }, created_by=admin.id)

    for label, delta in [("T0", timedelta(0)), ("T0+1h", timedelta(hours=1)), ("T0+25h", timedelta(hours=24))]:
        now = clock.advance(delta)
        print("-" * 70)
        print(f"{label}: promotion '{flash.title}' is {promotion_state(flash, now).value}")
        print("-" * 70)
        _show_listing(pricing, now)
        print()

    return flash


def run_validation_demo():
    """
    Demonstrate how the admin service rejects bad promotions.
    """
    print("\n" + "=" * 70)
    print("STOREFRONT DEMO: Promotion Validation")
    print("=" * 70 + "\n")

    clock = SimulatedClock(T0)
    store, admin = _seed_store()
    product = CatalogAdminService(store).create_product({"name": "Smart Watch Sport", "price": "399.99", "stock": 0})
    admin_service = PromotionAdminService(store, store, clock=clock)

    window = {"starts_at": T0, "ends_at": T0 + timedelta(days=1)}
    attempts = [
        ("missing title", {"product_id": product.id, "discount_percent": 10, **window}),
        ("zero discount", {"title": "Zero", "product_id": product.id, "discount_percent": 0, **window}),
        ("unknown product", {"title": "Ghost", "product_id": "missing", "discount_percent": 10, **window}),
        ("empty window", {"title": "Blink", "product_id": product.id, "discount_percent": 10,
                          "starts_at": T0, "ends_at": T0}),
        ("already over", {"title": "Late", "product_id": product.id, "discount_percent": 10,
                          "starts_at": T0 - timedelta(days=2), "ends_at": T0}),
    ]

    rejected = []
    for label, payload in attempts:
        try:
            admin_service.create_promotion(payload, created_by=admin.id)
        except StorefrontError as e:
            rejected.append(e.code)
            print(f"  {label:<16} -> {e.status_code} {e.code}")

    metrics = DashboardService(store, store).get_metrics(clock())
    print(f"\nDashboard: {metrics.total_promotions} promotion(s), {metrics.low_stock_products} low-stock product(s)")
    return rejected


if __name__ == "__main__":
    run_flash_sale_demo()
    run_validation_demo()
