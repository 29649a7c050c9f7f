"""
Repository contracts consumed by the storefront core.

The services only ever talk to these interfaces. Two implementations exist:
- store.data_store.InMemoryStore: dict-backed, fixture-seeded (tests, demo)
- store.sql_store.SqlStore: SQLAlchemy over a relational database

Both must enforce referential integrity themselves: a promotion can only be
written for an existing product, and deleting a product deletes its
promotions. The admin service's existence pre-check is not enough on its own
because a product can disappear between the check and the write.
"""

from abc import ABC, abstractmethod
from typing import Optional

from store.models import (
    NewPromotion,
    Product,
    ProductCreate,
    ProductFilter,
    ProductUpdate,
    Profile,
    Promotion,
    PromotionFilter,
)

DEFAULT_LOW_STOCK_THRESHOLD = 10


class CatalogRepository(ABC):
    """Owns product records."""

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID, or None."""

    def product_exists(self, product_id: str) -> bool:
        """Check whether a product exists."""
        return self.get_product(product_id) is not None

    @abstractmethod
    def list_products(self, filters: Optional[ProductFilter] = None) -> list[Product]:
        """
        List products, newest first.

        `search` is a case-insensitive substring match over name OR
        description; `category` is an exact match. No ranking.
        """

    @abstractmethod
    def create_product(self, data: ProductCreate) -> Product:
        """Persist a new product; timestamps are server-assigned."""

    @abstractmethod
    def update_product(self, product_id: str, changes: ProductUpdate) -> Optional[Product]:
        """Apply the set fields of `changes`. Returns None if the product is unknown."""

    @abstractmethod
    def delete_product(self, product_id: str) -> bool:
        """Delete a product and, by cascade, its promotions. False if unknown."""

    @abstractmethod
    def get_low_stock_products(self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> list[Product]:
        """Products with stock strictly below `threshold`, lowest stock first."""


class PromotionRepository(ABC):
    """Owns promotion records. Reads return promotions joined to a product summary."""

    @abstractmethod
    def get_promotion(self, promotion_id: str) -> Optional[Promotion]:
        """Get a promotion by ID, or None."""

    @abstractmethod
    def list_promotions(self, filters: Optional[PromotionFilter] = None) -> list[Promotion]:
        """List promotions, most recently created first."""

    @abstractmethod
    def create_promotion(self, data: NewPromotion) -> Promotion:
        """
        Persist a promotion.

        Raises ConflictError if the referenced product does not exist at
        write time.
        """

    @abstractmethod
    def update_promotion(self, promotion_id: str, changes: dict) -> Optional[Promotion]:
        """Apply `changes` (field -> value). Returns None if the promotion is unknown."""

    @abstractmethod
    def delete_promotion(self, promotion_id: str) -> bool:
        """Hard delete. False if the promotion is unknown."""


class ProfileRepository(ABC):
    """Read access to user profiles."""

    @abstractmethod
    def get_profile(self, profile_id: str) -> Optional[Profile]:
        """Get a profile by ID."""

    @abstractmethod
    def get_profile_by_auth_id(self, auth_id: str) -> Optional[Profile]:
        """Get the profile linked to an external identity."""

    @abstractmethod
    def list_profiles(self) -> list[Profile]:
        """All profiles, newest first."""


class StorefrontStore(CatalogRepository, PromotionRepository, ProfileRepository):
    """A single backend implementing every repository."""
