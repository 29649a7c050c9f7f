"""
Request dependencies for the storefront API.

Module-level instances (would use a container in a larger app). Tests swap
them with reset_api_state().
"""

from datetime import datetime
from typing import Callable, Optional

from fastapi import Depends

from api.identity import IdentityProvider, StaticTokenIdentity
from store.config import settings
from store.factory import get_store, reset_store
from store.models import utc_now
from store.repository import StorefrontStore
from storefront.services import (
    CatalogAdminService,
    DashboardService,
    PricingService,
    PromotionAdminService,
)

Clock = Callable[[], datetime]

_clock: Optional[Clock] = None
_identity: Optional[IdentityProvider] = None


def get_repository() -> StorefrontStore:
    """Get the configured store."""
    return get_store()


def get_clock() -> Clock:
    """Get the clock used for every time-dependent decision in a request."""
    return _clock or utc_now


def get_identity() -> IdentityProvider:
    """Get the identity provider."""
    global _identity
    if _identity is None:
        _identity = StaticTokenIdentity(settings.AUTH_TOKENS)
    return _identity


def reset_api_state(
    store: Optional[StorefrontStore] = None,
    clock: Optional[Clock] = None,
    identity: Optional[IdentityProvider] = None,
) -> None:
    """Reset API state (for testing)."""
    global _clock, _identity
    reset_store(store)
    _clock = clock
    _identity = identity


def get_pricing(store: StorefrontStore = Depends(get_repository)) -> PricingService:
    return PricingService(store, store)


def get_promotion_admin(
    store: StorefrontStore = Depends(get_repository),
    clock: Clock = Depends(get_clock),
) -> PromotionAdminService:
    return PromotionAdminService(store, store, clock=clock)


def get_catalog_admin(store: StorefrontStore = Depends(get_repository)) -> CatalogAdminService:
    return CatalogAdminService(store)


def get_dashboard(store: StorefrontStore = Depends(get_repository)) -> DashboardService:
    return DashboardService(store, store, low_stock_threshold=settings.LOW_STOCK_THRESHOLD)
