"""
Promotion activation and discount evaluation.

Everything here is a pure function of its arguments. The reference instant is
always passed in as `now`; nothing in this module reads the clock, so the
same (promotion, now) pair always gives the same answer and tests can check
any instant.

Rules:
- A promotion is active on the closed window [starts_at, ends_at]
- The best discount for a product is the active promotion with the highest
  percentage; ties go to the most recently created one
- Discounted prices are computed in Decimal and rounded half-to-even to cents
"""

from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Iterable, Optional, Protocol

from store.models import Promotion, PromotionState, TimeLeft, ensure_utc

CENT = Decimal("0.01")
HUNDRED = Decimal(100)


class Priced(Protocol):
    """Anything with an id and a price (Product or ProductSummary)."""
    id: str
    price: Decimal


def is_active(promotion: Promotion, now: datetime) -> bool:
    """True when starts_at <= now <= ends_at. Both boundaries are inclusive."""
    now = ensure_utc(now)
    return promotion.starts_at <= now <= promotion.ends_at


def promotion_state(promotion: Promotion, now: datetime) -> PromotionState:
    """Derive where a promotion sits in its lifecycle at `now`."""
    now = ensure_utc(now)
    if now < promotion.starts_at:
        return PromotionState.SCHEDULED
    if now > promotion.ends_at:
        return PromotionState.EXPIRED
    return PromotionState.ACTIVE


def filter_active(promotions: Iterable[Promotion], now: datetime) -> list[Promotion]:
    """
    Keep the promotions active at `now`.

    Input order is preserved; callers choose the sort order.
    """
    return [p for p in promotions if is_active(p, now)]


def best_discount_for(
    product: Priced,
    promotions: Iterable[Promotion],
    now: datetime,
) -> Optional[Promotion]:
    """
    Pick the promotion that applies to `product` at `now`.

    Only promotions for this product that are active at `now` qualify. The
    highest discount_percent wins; on a tie the most recently created
    promotion wins. Returns None when nothing qualifies.
    """
    candidates = [
        p for p in promotions
        if p.product_id == product.id and is_active(p, now)
    ]
    return max(candidates, key=lambda p: (p.discount_percent, p.created_at), default=None)


def discounted_price(product: Priced, promotion: Promotion) -> Decimal:
    """
    price * (1 - discount_percent / 100), rounded half-to-even to cents.

    Example: 100.00 at 25% -> 75.00; 0.50 at 1% -> 0.50 (0.495 rounds to even).
    """
    factor = (HUNDRED - Decimal(promotion.discount_percent)) / HUNDRED
    return (Decimal(product.price) * factor).quantize(CENT, rounding=ROUND_HALF_EVEN)


def time_remaining(promotion: Promotion, now: datetime) -> TimeLeft:
    """Countdown to ends_at, whole seconds, zero once the promotion has ended."""
    remaining = int((promotion.ends_at - ensure_utc(now)).total_seconds())
    if remaining <= 0:
        return TimeLeft()

    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)
    return TimeLeft(days=days, hours=hours, minutes=minutes, seconds=seconds)
