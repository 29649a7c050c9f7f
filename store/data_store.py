"""
In-memory storefront store, optionally seeded from JSON fixture files.

This is the dict-backed implementation of the repository contracts. It backs
the test suite and the demo, and can serve the API when
KIVO_STORAGE_BACKEND=memory.

Design decisions:
- Fixtures are only read when a data directory is given explicitly; an
  in-memory store without one starts empty
- Fixture files are loaded lazily, on first access to each entity
- Writes update in-memory state only
- Referential integrity is enforced here exactly as the SQL store does it:
  promotions need an existing product, and deleting a product cascades
"""

import json
import logging
from pathlib import Path
from typing import Optional
from uuid import uuid4

from store.errors import ConflictError
from store.models import (
    NewPromotion,
    Product,
    ProductCreate,
    ProductFilter,
    ProductUpdate,
    Profile,
    Promotion,
    PromotionFilter,
    utc_now,
)
from store.repository import DEFAULT_LOW_STOCK_THRESHOLD, StorefrontStore

logger = logging.getLogger("catalog_store")


def _paginate(items: list, limit: Optional[int], offset: int) -> list:
    if limit is None:
        return items[offset:]
    return items[offset:offset + limit]


class InMemoryStore(StorefrontStore):
    """
    Dict-backed store for products, promotions and profiles.

    Fixture layout (all optional) inside `data_dir`:
    - products.json
    - promotions.json
    - profiles.json
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the store.

        Args:
            data_dir: Directory containing JSON fixtures. When omitted the
                      store starts empty.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else None

        # In-memory caches - loaded lazily
        self._products: Optional[dict[str, Product]] = None
        self._promotions: Optional[dict[str, Promotion]] = None
        self._profiles: Optional[dict[str, Profile]] = None

    # =========================================================================
    # Data Loading (lazy)
    # =========================================================================

    def _load_json(self, filename: str) -> list[dict]:
        """Load a JSON fixture file."""
        if self.data_dir is None:
            return []
        filepath = self.data_dir / filename
        if not filepath.exists():
            return []
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)

    def _ensure_products_loaded(self):
        if self._products is None:
            data = self._load_json("products.json")
            self._products = {p["id"]: Product(**p) for p in data}

    def _ensure_promotions_loaded(self):
        if self._promotions is None:
            data = self._load_json("promotions.json")
            self._promotions = {p["id"]: Promotion(**p) for p in data}

    def _ensure_profiles_loaded(self):
        if self._profiles is None:
            data = self._load_json("profiles.json")
            self._profiles = {p["id"]: Profile(**p) for p in data}

    # =========================================================================
    # Product Operations
    # =========================================================================

    def get_product(self, product_id: str) -> Optional[Product]:
        self._ensure_products_loaded()
        return self._products.get(product_id)

    def list_products(self, filters: Optional[ProductFilter] = None) -> list[Product]:
        self._ensure_products_loaded()
        filters = filters or ProductFilter()

        products = list(self._products.values())
        if filters.search:
            products = [p for p in products if p.matches_search(filters.search)]
        if filters.category:
            products = [p for p in products if p.category == filters.category]

        # Newest first; among equal timestamps the latest inserted wins
        products = sorted(reversed(products), key=lambda p: p.created_at, reverse=True)
        return _paginate(products, filters.limit, filters.offset)

    def create_product(self, data: ProductCreate) -> Product:
        self._ensure_products_loaded()
        now = utc_now()
        product = Product(id=str(uuid4()), created_at=now, updated_at=now, **data.model_dump())
        self._products[product.id] = product
        logger.info(f"Created product {product.id} ({product.name})")
        return product

    def update_product(self, product_id: str, changes: ProductUpdate) -> Optional[Product]:
        self._ensure_products_loaded()
        product = self._products.get(product_id)
        if not product:
            return None

        updated = product.model_copy(update={**changes.changes(), "updated_at": utc_now()})
        self._products[product_id] = updated
        return updated

    def delete_product(self, product_id: str) -> bool:
        self._ensure_products_loaded()
        self._ensure_promotions_loaded()
        if self._products.pop(product_id, None) is None:
            return False

        # Cascade: a promotion cannot outlive its product
        orphaned = [pid for pid, p in self._promotions.items() if p.product_id == product_id]
        for promotion_id in orphaned:
            del self._promotions[promotion_id]

        logger.info(f"Deleted product {product_id} and {len(orphaned)} promotion(s)")
        return True

    def get_low_stock_products(self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> list[Product]:
        self._ensure_products_loaded()
        low = [p for p in self._products.values() if p.stock < threshold]
        return sorted(low, key=lambda p: p.stock)

    # =========================================================================
    # Promotion Operations
    # =========================================================================

    def _with_product(self, promotion: Promotion) -> Promotion:
        """Join the product summary onto a promotion."""
        product = self.get_product(promotion.product_id)
        return promotion.model_copy(update={"product": product.summary() if product else None})

    def get_promotion(self, promotion_id: str) -> Optional[Promotion]:
        self._ensure_promotions_loaded()
        promotion = self._promotions.get(promotion_id)
        return self._with_product(promotion) if promotion else None

    def list_promotions(self, filters: Optional[PromotionFilter] = None) -> list[Promotion]:
        self._ensure_promotions_loaded()
        filters = filters or PromotionFilter()

        promotions = list(self._promotions.values())
        if filters.product_id:
            promotions = [p for p in promotions if p.product_id == filters.product_id]

        promotions = sorted(reversed(promotions), key=lambda p: p.created_at, reverse=True)
        return [self._with_product(p) for p in _paginate(promotions, filters.limit, filters.offset)]

    def create_promotion(self, data: NewPromotion) -> Promotion:
        self._ensure_promotions_loaded()
        if not self.product_exists(data.product_id):
            raise ConflictError("product_deleted", f"Product {data.product_id} no longer exists")

        promotion = Promotion(id=str(uuid4()), **data.model_dump())
        self._promotions[promotion.id] = promotion
        return self._with_product(promotion)

    def update_promotion(self, promotion_id: str, changes: dict) -> Optional[Promotion]:
        self._ensure_promotions_loaded()
        promotion = self._promotions.get(promotion_id)
        if not promotion:
            return None

        product_id = changes.get("product_id")
        if product_id and not self.product_exists(product_id):
            raise ConflictError("product_deleted", f"Product {product_id} no longer exists")

        updated = promotion.model_copy(update=changes)
        self._promotions[promotion_id] = updated
        return self._with_product(updated)

    def delete_promotion(self, promotion_id: str) -> bool:
        self._ensure_promotions_loaded()
        return self._promotions.pop(promotion_id, None) is not None

    # =========================================================================
    # Profile Operations
    # =========================================================================

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        self._ensure_profiles_loaded()
        return self._profiles.get(profile_id)

    def get_profile_by_auth_id(self, auth_id: str) -> Optional[Profile]:
        self._ensure_profiles_loaded()
        return next((p for p in self._profiles.values() if p.auth_id == auth_id), None)

    def list_profiles(self) -> list[Profile]:
        self._ensure_profiles_loaded()
        return sorted(self._profiles.values(), key=lambda p: p.created_at, reverse=True)

    def add_profile(self, profile: Profile) -> Profile:
        """
        Register a profile.

        Profiles are owned by the identity provider; this exists so the demo
        and tests can stand in for it.
        """
        self._ensure_profiles_loaded()
        self._profiles[profile.id] = profile
        return profile

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def reload(self):
        """
        Drop all in-memory state so fixtures are read again on next access.

        Useful for tests that mutate the store.
        """
        self._products = None
        self._promotions = None
        self._profiles = None
