"""
Storefront core: promotion evaluation and the services built on it.

The evaluator is pure and clock-free; services combine it with the
repositories in the store package.
"""

from storefront.evaluator import (
    best_discount_for,
    discounted_price,
    filter_active,
    is_active,
    promotion_state,
    time_remaining,
)

__all__ = [
    "best_discount_for",
    "discounted_price",
    "filter_active",
    "is_active",
    "promotion_state",
    "time_remaining",
]
