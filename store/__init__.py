"""
Persistence layer for the KIVO storefront.

This package contains:
- Domain models (Product, Promotion, Profile, ...)
- The error taxonomy shared by every layer
- Repository contracts and their in-memory and SQLAlchemy implementations
- Settings
"""

from store.errors import (
    ConflictError,
    NotFoundError,
    RepositoryError,
    StorefrontError,
    ValidationError,
)
from store.models import (
    Principal,
    Product,
    ProductSummary,
    Profile,
    Promotion,
    PromotionState,
    StockStatus,
)
from store.repository import (
    CatalogRepository,
    ProfileRepository,
    PromotionRepository,
    StorefrontStore,
)
from store.data_store import InMemoryStore
from store.sql_store import SqlStore

__all__ = [
    "ConflictError",
    "NotFoundError",
    "RepositoryError",
    "StorefrontError",
    "ValidationError",
    "Principal",
    "Product",
    "ProductSummary",
    "Profile",
    "Promotion",
    "PromotionState",
    "StockStatus",
    "CatalogRepository",
    "ProfileRepository",
    "PromotionRepository",
    "StorefrontStore",
    "InMemoryStore",
    "SqlStore",
]
