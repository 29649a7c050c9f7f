"""
Catalog admin service.

Product create/update/delete for admins. Payload problems become
ValidationError reason codes instead of schema errors:
- name or price missing            -> "incomplete"
- price not positive               -> "invalid_price"
- stock negative                   -> "invalid_stock"
- anything else malformed          -> "invalid_field"
"""

import logging
from typing import Union

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from store.errors import NotFoundError, ValidationError
from store.models import Product, ProductCreate, ProductUpdate
from store.repository import CatalogRepository

logger = logging.getLogger("catalog_admin")

FIELD_REASONS = {
    "price": "invalid_price",
    "stock": "invalid_stock",
}


def _parse(model: type[BaseModel], data: Union[BaseModel, dict]):
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)

    try:
        return model.model_validate(data)
    except SchemaError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else "payload"
        if error["type"] == "missing" or (field == "name" and error["type"] == "string_too_short"):
            reason = "incomplete"
        else:
            reason = FIELD_REASONS.get(field, "invalid_field")
        logger.warning(f"Rejected {model.__name__}: {field} ({error['msg']})")
        raise ValidationError(reason, f"Invalid value for {field}") from e


class CatalogAdminService:
    """Admin operations on products."""

    def __init__(self, catalog: CatalogRepository):
        self.catalog = catalog

    def create_product(self, data: Union[ProductCreate, dict]) -> Product:
        product = self.catalog.create_product(_parse(ProductCreate, data))
        logger.info(f"Added product {product.id} '{product.name}' at {product.price}")
        return product

    def update_product(self, product_id: str, patch: Union[ProductUpdate, dict]) -> Product:
        changes = _parse(ProductUpdate, patch)
        updated = self.catalog.update_product(product_id, changes)
        if not updated:
            raise NotFoundError("product")
        logger.info(f"Updated product {product_id}: {', '.join(sorted(changes.changes())) or 'no changes'}")
        return updated

    def delete_product(self, product_id: str) -> bool:
        """Delete a product; its promotions go with it."""
        if not self.catalog.delete_product(product_id):
            raise NotFoundError("product")
        return True
