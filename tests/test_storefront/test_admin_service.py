"""
Tests for the PromotionAdminService.

The service runs against the fixture store with the clock frozen at
2030-06-01T12:00Z.
"""

from datetime import datetime, timedelta

import pytest

from store.data_store import InMemoryStore
from store.errors import ConflictError, NotFoundError, ValidationError
from store.models import PromotionCreate
from storefront.services import PromotionAdminService


def payload(product_id: str, now: datetime, **overrides) -> dict:
    data = {
        "title": "Flash",
        "product_id": product_id,
        "discount_percent": 25,
        "starts_at": now.isoformat(),
        "ends_at": (now + timedelta(hours=24)).isoformat(),
    }
    data.update(overrides)
    return data


class TestCreatePromotion:
    """Tests for create_promotion."""

    def test_create_persists_and_joins_product(
        self, admin_service: PromotionAdminService, data_store: InMemoryStore,
        headphones_id: str, admin_profile_id: str, now: datetime,
    ):
        promo = admin_service.create_promotion(payload(headphones_id, now), created_by=admin_profile_id)

        assert promo.id
        assert promo.title == "Flash"
        assert promo.discount_percent == 25
        assert promo.created_by == admin_profile_id
        assert promo.created_at == now
        assert promo.product.name == "Wireless Headphones Pro"
        assert data_store.get_promotion(promo.id) is not None

    def test_accepts_typed_input(
        self, admin_service: PromotionAdminService, headphones_id: str, now: datetime,
    ):
        request = PromotionCreate(
            title="Typed",
            product_id=headphones_id,
            discount_percent=5,
            starts_at=now,
            ends_at=now + timedelta(days=2),
        )

        promo = admin_service.create_promotion(request, created_by="prof-admin")

        assert promo.title == "Typed"

    def test_title_is_trimmed(self, admin_service: PromotionAdminService, headphones_id: str, now: datetime):
        promo = admin_service.create_promotion(payload(headphones_id, now, title="  Flash  "), created_by="prof-admin")
        assert promo.title == "Flash"

    @pytest.mark.parametrize("field", ["title", "product_id", "discount_percent", "starts_at", "ends_at"])
    def test_missing_field_is_incomplete(
        self, admin_service: PromotionAdminService, headphones_id: str, now: datetime, field: str,
    ):
        data = payload(headphones_id, now)
        del data[field]

        with pytest.raises(ValidationError) as exc:
            admin_service.create_promotion(data, created_by="prof-admin")

        assert exc.value.reason == "incomplete"

    def test_blank_title_is_incomplete(self, admin_service: PromotionAdminService, headphones_id: str, now: datetime):
        with pytest.raises(ValidationError) as exc:
            admin_service.create_promotion(payload(headphones_id, now, title="   "), created_by="prof-admin")
        assert exc.value.reason == "incomplete"

    @pytest.mark.parametrize("discount", [0, -5, 101, 250])
    def test_discount_out_of_range(
        self, admin_service: PromotionAdminService, headphones_id: str, now: datetime, discount: int,
    ):
        with pytest.raises(ValidationError) as exc:
            admin_service.create_promotion(payload(headphones_id, now, discount_percent=discount), created_by="prof-admin")
        assert exc.value.reason == "discount_out_of_range"

    @pytest.mark.parametrize("discount", [1, 100])
    def test_discount_bounds_accepted(
        self, admin_service: PromotionAdminService, headphones_id: str, now: datetime, discount: int,
    ):
        promo = admin_service.create_promotion(payload(headphones_id, now, discount_percent=discount), created_by="prof-admin")
        assert promo.discount_percent == discount

    @pytest.mark.parametrize("discount", [True, "25", 12.5])
    def test_discount_must_be_an_integer(
        self, admin_service: PromotionAdminService, headphones_id: str, now: datetime, discount,
    ):
        with pytest.raises(ValidationError) as exc:
            admin_service.create_promotion(payload(headphones_id, now, discount_percent=discount), created_by="prof-admin")
        assert exc.value.reason == "invalid_field"

    def test_unknown_product(self, admin_service: PromotionAdminService, now: datetime):
        with pytest.raises(NotFoundError) as exc:
            admin_service.create_promotion(payload("missing", now), created_by="prof-admin")
        assert exc.value.resource == "product"

    def test_start_equal_to_end_rejected(self, admin_service: PromotionAdminService, headphones_id: str, now: datetime):
        data = payload(headphones_id, now, ends_at=now.isoformat())
        with pytest.raises(ValidationError) as exc:
            admin_service.create_promotion(data, created_by="prof-admin")
        assert exc.value.reason == "start_after_end"

    def test_start_after_end_rejected(self, admin_service: PromotionAdminService, headphones_id: str, now: datetime):
        data = payload(
            headphones_id, now,
            starts_at=(now + timedelta(days=2)).isoformat(),
            ends_at=(now + timedelta(days=1)).isoformat(),
        )
        with pytest.raises(ValidationError) as exc:
            admin_service.create_promotion(data, created_by="prof-admin")
        assert exc.value.reason == "start_after_end"

    def test_unparseable_date(self, admin_service: PromotionAdminService, headphones_id: str, now: datetime):
        with pytest.raises(ValidationError) as exc:
            admin_service.create_promotion(payload(headphones_id, now, ends_at="next tuesday"), created_by="prof-admin")
        assert exc.value.reason == "invalid_date"

    def test_ending_now_is_already_expired(
        self, admin_service: PromotionAdminService, headphones_id: str, now: datetime,
    ):
        data = payload(headphones_id, now, starts_at=(now - timedelta(days=1)).isoformat(), ends_at=now.isoformat())
        with pytest.raises(ValidationError) as exc:
            admin_service.create_promotion(data, created_by="prof-admin")
        assert exc.value.reason == "already_expired"

    def test_future_promotion_allowed(self, admin_service: PromotionAdminService, headphones_id: str, now: datetime):
        data = payload(
            headphones_id, now,
            starts_at=(now + timedelta(days=10)).isoformat(),
            ends_at=(now + timedelta(days=11)).isoformat(),
        )
        assert admin_service.create_promotion(data, created_by="prof-admin").id

    def test_validation_order(self, admin_service: PromotionAdminService, now: datetime):
        """With several problems at once, the earliest rule reports."""
        bad_everything = payload("missing", now, discount_percent=0, ends_at=now.isoformat())
        with pytest.raises(ValidationError) as exc:
            admin_service.create_promotion(bad_everything, created_by="prof-admin")
        assert exc.value.reason == "discount_out_of_range"

        with pytest.raises(NotFoundError):
            admin_service.create_promotion(payload("missing", now, ends_at=now.isoformat()), created_by="prof-admin")

    def test_failed_create_writes_nothing(
        self, admin_service: PromotionAdminService, data_store: InMemoryStore, headphones_id: str, now: datetime,
    ):
        before = len(data_store.list_promotions())
        with pytest.raises(ValidationError):
            admin_service.create_promotion(payload(headphones_id, now, discount_percent=0), created_by="prof-admin")
        assert len(data_store.list_promotions()) == before

    def test_product_deleted_between_check_and_write(self, data_store: InMemoryStore, clock, now: datetime):
        """The store's integrity check is the backstop for a concurrent delete."""

        class VanishingCatalog:
            def product_exists(self, product_id):
                data_store.delete_product(product_id)
                return True

        service = PromotionAdminService(VanishingCatalog(), data_store, clock=clock)

        with pytest.raises(ConflictError) as exc:
            service.create_promotion(payload("prod-003", now), created_by="prof-admin")
        assert exc.value.reason == "product_deleted"


class TestUpdatePromotion:
    """Tests for update_promotion."""

    def test_patch_only_touches_given_fields(self, admin_service: PromotionAdminService):
        updated = admin_service.update_promotion("promo-001", {"discount_percent": 40})

        assert updated.discount_percent == 40
        assert updated.title == "Headphones Flash Sale"
        assert updated.product_id == "prod-001"

    def test_unknown_promotion(self, admin_service: PromotionAdminService):
        with pytest.raises(NotFoundError) as exc:
            admin_service.update_promotion("promo-missing", {"title": "Nope"})
        assert exc.value.resource == "promotion"

    @pytest.mark.parametrize("discount", [0, 101])
    def test_discount_out_of_range(self, admin_service: PromotionAdminService, discount: int):
        with pytest.raises(ValidationError) as exc:
            admin_service.update_promotion("promo-001", {"discount_percent": discount})
        assert exc.value.reason == "discount_out_of_range"

    def test_boolean_discount_rejected(self, admin_service: PromotionAdminService):
        with pytest.raises(ValidationError) as exc:
            admin_service.update_promotion("promo-001", {"discount_percent": True})
        assert exc.value.reason == "invalid_field"
        assert admin_service.promotions.get_promotion("promo-001").discount_percent == 25

    def test_blank_title_rejected(self, admin_service: PromotionAdminService):
        with pytest.raises(ValidationError) as exc:
            admin_service.update_promotion("promo-001", {"title": ""})
        assert exc.value.reason == "incomplete"

    def test_single_date_checked_against_stored_other(self, admin_service: PromotionAdminService):
        """promo-001 ends 2030-06-02; moving only the start past it is rejected."""
        with pytest.raises(ValidationError) as exc:
            admin_service.update_promotion("promo-001", {"starts_at": "2030-06-05T00:00:00Z"})
        assert exc.value.reason == "start_after_end"

    def test_both_dates_checked(self, admin_service: PromotionAdminService):
        with pytest.raises(ValidationError) as exc:
            admin_service.update_promotion("promo-001", {
                "starts_at": "2030-07-02T00:00:00Z",
                "ends_at": "2030-07-01T00:00:00Z",
            })
        assert exc.value.reason == "start_after_end"

    def test_end_early(self, admin_service: PromotionAdminService, now: datetime):
        """Moving ends_at into the past is how an admin stops a promotion."""
        updated = admin_service.update_promotion("promo-001", {"ends_at": (now - timedelta(hours=1)).isoformat()})
        assert updated.ends_at == now - timedelta(hours=1)

    def test_retarget_to_unknown_product(self, admin_service: PromotionAdminService):
        with pytest.raises(NotFoundError) as exc:
            admin_service.update_promotion("promo-001", {"product_id": "missing"})
        assert exc.value.resource == "product"

    def test_retarget_to_existing_product(self, admin_service: PromotionAdminService, sofa_id: str):
        updated = admin_service.update_promotion("promo-001", {"product_id": sofa_id})
        assert updated.product_id == sofa_id
        assert updated.product.name == "Modular Sofa"

    def test_empty_patch_returns_existing(self, admin_service: PromotionAdminService):
        assert admin_service.update_promotion("promo-002", {}).title == "Headphones Weekend Deal"

    def test_last_write_wins(self, admin_service: PromotionAdminService):
        admin_service.update_promotion("promo-001", {"discount_percent": 30})
        admin_service.update_promotion("promo-001", {"discount_percent": 35})
        assert admin_service.promotions.get_promotion("promo-001").discount_percent == 35


class TestDeletePromotion:
    """Tests for delete_promotion."""

    def test_delete(self, admin_service: PromotionAdminService, data_store: InMemoryStore):
        assert admin_service.delete_promotion("promo-002") is True
        assert data_store.get_promotion("promo-002") is None

    def test_repeated_delete_is_not_found(self, admin_service: PromotionAdminService):
        admin_service.delete_promotion("promo-002")
        with pytest.raises(NotFoundError):
            admin_service.delete_promotion("promo-002")
