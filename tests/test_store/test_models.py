"""
Tests for the domain models.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaError

from store.errors import ConflictError, NotFoundError, RepositoryError, ValidationError
from store.models import (
    DEFAULT_CATEGORY,
    Product,
    ProductCreate,
    ProductUpdate,
    Promotion,
    PromotionCreate,
    PromotionUpdate,
    TimeLeft,
    ensure_utc,
)


class TestProduct:
    """Tests for the Product model."""

    def test_price_is_decimal(self):
        product = Product(id="p", name="Lamp", price="49.90")
        assert product.price == Decimal("49.90")

    @pytest.mark.parametrize("price", ["0", "-1.00", "12.345"])
    def test_invalid_price(self, price: str):
        with pytest.raises(SchemaError):
            Product(id="p", name="Lamp", price=price)

    def test_negative_stock(self):
        with pytest.raises(SchemaError):
            Product(id="p", name="Lamp", price="1.00", stock=-1)

    def test_search_matches_name_or_description(self):
        product = Product(id="p", name="Desk Lamp", description="Warm LED light", price="20.00")

        assert product.matches_search("lamp")
        assert product.matches_search("LED")
        assert not product.matches_search("sofa")

    def test_summary(self):
        product = Product(id="p", name="Lamp", price="20.00", image_url="http://img")
        summary = product.summary()
        assert (summary.id, summary.name, summary.price, summary.image_url) == ("p", "Lamp", Decimal("20.00"), "http://img")


class TestProductInputs:
    """Tests for ProductCreate and ProductUpdate."""

    def test_category_defaults(self):
        assert ProductCreate(name="Lamp", price="1.00").category == DEFAULT_CATEGORY
        assert ProductCreate(name="Lamp", price="1.00", category="").category == DEFAULT_CATEGORY

    def test_update_changes_only_set_fields(self):
        assert ProductUpdate(stock=3).changes() == {"stock": 3}

    def test_update_null_clears_image_only(self):
        changes = ProductUpdate.model_validate({"image_url": None, "name": None}).changes()
        assert changes == {"image_url": None}

    def test_text_is_trimmed(self):
        product = ProductCreate(name="  Lamp ", price="1.00", category="  ")
        assert product.name == "Lamp"
        assert product.category == DEFAULT_CATEGORY

    def test_blank_name_is_rejected(self):
        with pytest.raises(SchemaError):
            ProductCreate(name="   ", price="1.00")
        with pytest.raises(SchemaError):
            ProductUpdate(name=" ")


class TestPromotion:
    """Tests for the Promotion model."""

    def test_naive_dates_become_utc(self):
        promo = Promotion(
            id="x", title="t", product_id="p", discount_percent=10,
            starts_at=datetime(2030, 1, 1), ends_at=datetime(2030, 1, 2),
        )
        assert promo.starts_at.tzinfo == timezone.utc

    def test_offsets_are_normalized(self):
        promo = Promotion(
            id="x", title="t", product_id="p", discount_percent=10,
            starts_at="2030-01-01T09:00:00-03:00", ends_at="2030-01-02T00:00:00Z",
        )
        assert promo.starts_at == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("discount", [0, 101])
    def test_discount_bounds(self, discount: int):
        with pytest.raises(SchemaError):
            Promotion(
                id="x", title="t", product_id="p", discount_percent=discount,
                starts_at=datetime(2030, 1, 1), ends_at=datetime(2030, 1, 2),
            )

    @pytest.mark.parametrize("model", [PromotionCreate, PromotionUpdate])
    def test_boolean_discount_is_rejected(self, model):
        with pytest.raises(SchemaError):
            model.model_validate({"discount_percent": True})

    def test_ensure_utc_none(self):
        assert ensure_utc(None) is None


class TestTimeLeft:
    def test_expired_only_when_all_zero(self):
        assert TimeLeft().expired
        assert not TimeLeft(seconds=1).expired


class TestErrors:
    """Tests for the error taxonomy."""

    def test_status_codes(self):
        assert ValidationError("incomplete").status_code == 400
        assert NotFoundError("product").status_code == 404
        assert ConflictError("product_deleted").status_code == 409
        assert RepositoryError().status_code == 500

    def test_not_found_code_and_message(self):
        error = NotFoundError("promotion")
        assert error.code == "promotion_not_found"
        assert error.message == "Promotion not found"

    def test_validation_reason(self):
        error = ValidationError("start_after_end", "Start date must be before end date")
        assert error.reason == "start_after_end"
        assert str(error) == "Start date must be before end date"

    def test_repository_error_is_generic(self):
        error = RepositoryError()
        assert error.code == "repository_error"
        assert error.message == "Repository failure"


def test_time_arithmetic_stays_in_utc():
    start = ensure_utc(datetime(2030, 3, 10, 1, 30))
    assert (start + timedelta(hours=24)).tzinfo == timezone.utc
