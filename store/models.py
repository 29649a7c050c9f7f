"""
Domain models for the KIVO storefront.

These models describe the three entities the storefront manages (profiles,
products and promotions) plus the input, patch and filter shapes that the
services and repositories exchange.

Design decisions:
- Using Pydantic for validation and serialization
- Money is Decimal end to end, never float
- Every timestamp is timezone-aware UTC; naive values are read as UTC
- A promotion's "active" status is never stored; it is derived at read time
  by storefront.evaluator
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

DEFAULT_CATEGORY = "general"


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC. Naive values are assumed to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# Enums
# =============================================================================

class PromotionState(str, Enum):
    """
    Lifecycle of a promotion, derived from the clock and never persisted.

    SCHEDULED -> ACTIVE -> EXPIRED, purely as wall-clock time advances.
    """
    SCHEDULED = "scheduled"     # now < starts_at
    ACTIVE = "active"           # starts_at <= now <= ends_at
    EXPIRED = "expired"         # now > ends_at


class StockStatus(str, Enum):
    """Stock badge shown next to a product."""
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class TimeLeft(BaseModel):
    """Countdown until a promotion ends; all zeros once it has expired."""
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    @property
    def expired(self) -> bool:
        return not (self.days or self.hours or self.minutes or self.seconds)


# =============================================================================
# Products
# =============================================================================

class ProductSummary(BaseModel):
    """The slice of a product that travels with a promotion for pricing context."""
    id: str
    name: str
    price: Decimal
    image_url: Optional[str] = None


class Product(BaseModel):
    """
    A catalog product.

    Invariant: price > 0 and stock >= 0. Deleting a product removes the
    promotions that reference it.
    """
    id: str = Field(..., description="Opaque unique identifier")
    name: str = Field(..., description="Product display name")
    description: str = Field(default="")
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    category: str = Field(default=DEFAULT_CATEGORY)
    image_url: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return ensure_utc(value)

    def summary(self) -> ProductSummary:
        """Build the summary joined onto promotions."""
        return ProductSummary(
            id=self.id,
            name=self.name,
            price=self.price,
            image_url=self.image_url,
        )

    def matches_search(self, term: str) -> bool:
        """Case-insensitive substring match over name or description."""
        needle = term.lower()
        return needle in self.name.lower() or needle in (self.description or "").lower()


class ProductCreate(BaseModel):
    """Admin input for a new product. Text is trimmed, so a blank name is missing."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    category: str = Field(default=DEFAULT_CATEGORY)
    image_url: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value or DEFAULT_CATEGORY


class ProductUpdate(BaseModel):
    """Partial product update; only fields that were set are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None
    image_url: Optional[str] = None

    def changes(self) -> dict:
        """
        Fields the caller explicitly set.

        An explicit null only clears `image_url`; for every other column it
        is treated as "leave unchanged".
        """
        data = self.model_dump(exclude_unset=True)
        return {
            key: value for key, value in data.items()
            if value is not None or key == "image_url"
        }


class ProductFilter(BaseModel):
    """Explicit query parameters for product listings."""
    category: Optional[str] = None
    search: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)


# =============================================================================
# Promotions
# =============================================================================

class Promotion(BaseModel):
    """
    A time-bounded percentage discount on exactly one product.

    The window [starts_at, ends_at] is closed: a promotion is active at both
    boundary instants. `product` is the joined summary of the referenced
    product when the repository could resolve it.
    """
    id: str
    title: str
    product_id: str
    discount_percent: int = Field(..., ge=1, le=100)
    starts_at: datetime
    ends_at: datetime
    created_by: Optional[str] = Field(default=None, description="Admin profile id")
    created_at: datetime = Field(default_factory=utc_now)
    product: Optional[ProductSummary] = None

    @field_validator("starts_at", "ends_at", "created_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return ensure_utc(value)


class PromotionCreate(BaseModel):
    """
    Admin input for a new promotion.

    Every field is optional at this level so that the admin service can report
    missing fields as a single "incomplete" validation error, in order, rather
    than as a schema failure.
    """
    title: Optional[str] = None
    product_id: Optional[str] = None
    discount_percent: Optional[StrictInt] = None  # booleans are not percentages
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    @field_validator("starts_at", "ends_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return ensure_utc(value)


class PromotionUpdate(BaseModel):
    """Partial promotion update."""
    title: Optional[str] = None
    product_id: Optional[str] = None
    discount_percent: Optional[StrictInt] = None  # booleans are not percentages
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    @field_validator("starts_at", "ends_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return ensure_utc(value)


class NewPromotion(BaseModel):
    """A validated promotion ready to be persisted."""
    title: str
    product_id: str
    discount_percent: int = Field(..., ge=1, le=100)
    starts_at: datetime
    ends_at: datetime
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


class PromotionFilter(BaseModel):
    """Explicit query parameters for promotion listings."""
    product_id: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)


# =============================================================================
# Profiles and principals
# =============================================================================

class Profile(BaseModel):
    """
    A user profile linked to an external identity.

    Read-only from the core's perspective; the identity provider owns it.
    """
    id: str
    auth_id: str = Field(..., description="External identity link")
    email: str
    full_name: Optional[str] = None
    is_admin: bool = False
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return ensure_utc(value)


class Principal(BaseModel):
    """The resolved caller of a request."""
    user_id: str
    is_admin: bool = False

    model_config = ConfigDict(frozen=True)
