"""
Promotion admin service.

Creates, patches and deletes promotions on behalf of an authenticated admin.
Every rule about what a well-formed promotion is lives here; the repositories
only enforce referential integrity.

Create validation runs in a fixed order and stops at the first failure:
1. missing or blank required field       -> ValidationError("incomplete")
2. discount outside [1, 100]             -> ValidationError("discount_out_of_range")
3. product does not exist                -> NotFoundError("product")
4. starts_at >= ends_at                  -> ValidationError("start_after_end")
5. ends_at <= now                        -> ValidationError("already_expired")

Unparseable dates are reported as ValidationError("invalid_date") as soon as
the payload is read.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from store.errors import NotFoundError, ValidationError
from store.models import NewPromotion, Promotion, PromotionCreate, PromotionUpdate, utc_now
from store.repository import CatalogRepository, PromotionRepository

logger = logging.getLogger("promotion_admin")

Clock = Callable[[], datetime]

REQUIRED_FIELDS = ("title", "product_id", "discount_percent", "starts_at", "ends_at")
MIN_DISCOUNT = 1
MAX_DISCOUNT = 100
DATE_FIELDS = ("starts_at", "ends_at")


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_payload(model: type[BaseModel], data: Union[BaseModel, dict]):
    """
    Read a raw payload into `model`, mapping schema failures to reason codes.

    A bad date becomes "invalid_date"; anything else is "invalid_field".
    """
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)

    try:
        return model.model_validate(data)
    except SchemaError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else "payload"
        reason = "invalid_date" if field in DATE_FIELDS else "invalid_field"
        logger.warning(f"Rejected {model.__name__}: {field} ({error['msg']})")
        raise ValidationError(reason, f"Invalid value for {field}") from e


def _check_discount(discount_percent: int):
    if not MIN_DISCOUNT <= discount_percent <= MAX_DISCOUNT:
        raise ValidationError(
            "discount_out_of_range",
            f"Discount must be between {MIN_DISCOUNT} and {MAX_DISCOUNT}",
        )


def _check_window(starts_at: datetime, ends_at: datetime):
    if starts_at >= ends_at:
        raise ValidationError("start_after_end", "Start date must be before end date")


class PromotionAdminService:
    """
    Admin operations on promotions.

    The caller has already been authorized as an admin. All failures are
    raised as StorefrontError subclasses.

    Example:
        service = PromotionAdminService(store, store)
        promo = service.create_promotion({
            "title": "Flash",
            "product_id": "prod-001",
            "discount_percent": 25,
            "starts_at": "2030-06-01T00:00:00Z",
            "ends_at": "2030-06-02T00:00:00Z",
        }, created_by="prof-admin")
    """

    def __init__(
        self,
        catalog: CatalogRepository,
        promotions: PromotionRepository,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the service.

        Args:
            catalog: Used for product existence checks
            promotions: Where promotions are stored
            clock: Returns the current instant; defaults to the wall clock
        """
        self.catalog = catalog
        self.promotions = promotions
        self.clock = clock or utc_now

    def create_promotion(self, data: Union[PromotionCreate, dict], created_by: str) -> Promotion:
        """
        Validate and persist a new promotion.

        Returns:
            The stored promotion, joined to its product summary
        """
        request = parse_payload(PromotionCreate, data)

        missing = [field for field in REQUIRED_FIELDS if _is_blank(getattr(request, field))]
        if missing:
            logger.warning(f"Rejected promotion: missing {', '.join(missing)}")
            raise ValidationError("incomplete", f"Missing required fields: {', '.join(missing)}")

        _check_discount(request.discount_percent)

        if not self.catalog.product_exists(request.product_id):
            logger.warning(f"Rejected promotion: unknown product {request.product_id}")
            raise NotFoundError("product")

        _check_window(request.starts_at, request.ends_at)

        now = self.clock()
        if request.ends_at <= now:
            raise ValidationError("already_expired", "End date must be in the future")

        promotion = self.promotions.create_promotion(NewPromotion(
            title=request.title.strip(),
            product_id=request.product_id,
            discount_percent=request.discount_percent,
            starts_at=request.starts_at,
            ends_at=request.ends_at,
            created_by=created_by,
            created_at=now,
        ))

        logger.info(
            f"Created promotion {promotion.id} '{promotion.title}' "
            f"({promotion.discount_percent}% on {promotion.product_id})"
        )
        return promotion

    def update_promotion(self, promotion_id: str, patch: Union[PromotionUpdate, dict]) -> Promotion:
        """
        Apply a partial update.

        Only fields present in the patch change. Date ordering is checked on
        the merged record, so patching only one end of the window is checked
        against the stored other end. An update may move ends_at into the
        past, which is how an admin ends a promotion early.
        """
        request = parse_payload(PromotionUpdate, patch)
        changes = request.model_dump(exclude_unset=True)

        cleared = [field for field, value in changes.items() if _is_blank(value)]
        if cleared:
            raise ValidationError("incomplete", f"Fields cannot be empty: {', '.join(cleared)}")

        if "discount_percent" in changes:
            _check_discount(changes["discount_percent"])
        if "title" in changes:
            changes["title"] = changes["title"].strip()

        existing = self.promotions.get_promotion(promotion_id)
        if not existing:
            raise NotFoundError("promotion")

        product_id = changes.get("product_id")
        if product_id and product_id != existing.product_id and not self.catalog.product_exists(product_id):
            raise NotFoundError("product")

        _check_window(
            changes.get("starts_at", existing.starts_at),
            changes.get("ends_at", existing.ends_at),
        )

        if not changes:
            return existing

        updated = self.promotions.update_promotion(promotion_id, changes)
        if not updated:
            # Deleted between the read above and the write
            raise NotFoundError("promotion")

        logger.info(f"Updated promotion {promotion_id}: {', '.join(sorted(changes))}")
        return updated

    def delete_promotion(self, promotion_id: str) -> bool:
        """Hard delete. Deleting an unknown (or already deleted) id raises NotFoundError."""
        if not self.promotions.delete_promotion(promotion_id):
            raise NotFoundError("promotion")
        logger.info(f"Deleted promotion {promotion_id}")
        return True
