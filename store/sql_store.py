"""
Relational storefront store backed by SQLAlchemy.

One short-lived session per repository call. Referential integrity lives in
the schema (foreign key with ON DELETE CASCADE from promotions to products)
and in the ORM cascade, so a promotion can never point at a deleted product
even when the admin service's existence check races a concurrent delete.

Persistence failures are wrapped in RepositoryError; a foreign key violation
on a promotion write becomes ConflictError("product_deleted").
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from store.db import Base, create_db_engine, make_session_factory
from store.errors import ConflictError, RepositoryError, StorefrontError
from store.models import (
    NewPromotion,
    Product,
    ProductCreate,
    ProductFilter,
    ProductSummary,
    ProductUpdate,
    Profile,
    Promotion,
    PromotionFilter,
    utc_now,
)
from store.repository import DEFAULT_LOW_STOCK_THRESHOLD, StorefrontStore
from store.tables import ProductRecord, ProfileRecord, PromotionRecord

logger = logging.getLogger("sql_store")


def _to_product(record: ProductRecord) -> Product:
    return Product.model_validate(record, from_attributes=True)


def _to_profile(record: ProfileRecord) -> Profile:
    return Profile.model_validate(record, from_attributes=True)


def _to_promotion(record: PromotionRecord) -> Promotion:
    product = record.product
    return Promotion(
        id=record.id,
        title=record.title,
        product_id=record.product_id,
        discount_percent=record.discount_percent,
        starts_at=record.starts_at,
        ends_at=record.ends_at,
        created_by=record.created_by,
        created_at=record.created_at,
        product=ProductSummary(
            id=product.id,
            name=product.name,
            price=product.price,
            image_url=product.image_url,
        ) if product else None,
    )


class SqlStore(StorefrontStore):
    """
    SQLAlchemy implementation of the repository contracts.

    Example:
        store = SqlStore("sqlite:///./kivo.db")
        store.create_schema()
        product = store.create_product(ProductCreate(name="Lamp", price="49.90"))
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None and database_url is None:
            raise ValueError("SqlStore needs a database_url or an engine")
        self.engine = engine or create_db_engine(database_url)
        self.session_factory = make_session_factory(self.engine)

    def create_schema(self) -> None:
        """Create all tables (simple bootstrap; migrations are out of scope)."""
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except StorefrontError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database operation failed: {e}")
            raise RepositoryError() from e
        finally:
            session.close()

    # =========================================================================
    # Product Operations
    # =========================================================================

    def get_product(self, product_id: str) -> Optional[Product]:
        with self._session() as db:
            record = db.get(ProductRecord, product_id)
            return _to_product(record) if record else None

    def list_products(self, filters: Optional[ProductFilter] = None) -> list[Product]:
        filters = filters or ProductFilter()
        with self._session() as db:
            query = db.query(ProductRecord)
            if filters.search:
                query = query.filter(
                    ProductRecord.name.icontains(filters.search, autoescape=True)
                    | ProductRecord.description.icontains(filters.search, autoescape=True)
                )
            if filters.category:
                query = query.filter(ProductRecord.category == filters.category)

            query = query.order_by(ProductRecord.created_at.desc()).offset(filters.offset)
            if filters.limit is not None:
                query = query.limit(filters.limit)
            return [_to_product(r) for r in query.all()]

    def create_product(self, data: ProductCreate) -> Product:
        now = utc_now()
        with self._session() as db:
            record = ProductRecord(**data.model_dump(), created_at=now, updated_at=now)
            db.add(record)
            db.flush()
            logger.info(f"Created product {record.id} ({record.name})")
            return _to_product(record)

    def update_product(self, product_id: str, changes: ProductUpdate) -> Optional[Product]:
        with self._session() as db:
            record = db.get(ProductRecord, product_id)
            if not record:
                return None
            for field, value in changes.changes().items():
                setattr(record, field, value)
            record.updated_at = utc_now()
            db.flush()
            return _to_product(record)

    def delete_product(self, product_id: str) -> bool:
        with self._session() as db:
            record = db.get(ProductRecord, product_id)
            if not record:
                return False
            cascaded = len(record.promotions)
            db.delete(record)
            logger.info(f"Deleted product {product_id} and {cascaded} promotion(s)")
            return True

    def get_low_stock_products(self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> list[Product]:
        with self._session() as db:
            records = (
                db.query(ProductRecord)
                .filter(ProductRecord.stock < threshold)
                .order_by(ProductRecord.stock.asc())
                .all()
            )
            return [_to_product(r) for r in records]

    # =========================================================================
    # Promotion Operations
    # =========================================================================

    def get_promotion(self, promotion_id: str) -> Optional[Promotion]:
        with self._session() as db:
            record = db.get(PromotionRecord, promotion_id)
            return _to_promotion(record) if record else None

    def list_promotions(self, filters: Optional[PromotionFilter] = None) -> list[Promotion]:
        filters = filters or PromotionFilter()
        with self._session() as db:
            query = db.query(PromotionRecord)
            if filters.product_id:
                query = query.filter(PromotionRecord.product_id == filters.product_id)

            query = query.order_by(PromotionRecord.created_at.desc()).offset(filters.offset)
            if filters.limit is not None:
                query = query.limit(filters.limit)
            return [_to_promotion(r) for r in query.all()]

    def create_promotion(self, data: NewPromotion) -> Promotion:
        with self._session() as db:
            if db.get(ProductRecord, data.product_id) is None:
                raise ConflictError("product_deleted", f"Product {data.product_id} no longer exists")

            record = PromotionRecord(**data.model_dump())
            db.add(record)
            try:
                db.flush()
            except IntegrityError as e:
                # The product vanished between the check above and the insert
                raise ConflictError("product_deleted", f"Product {data.product_id} no longer exists") from e
            db.refresh(record)
            return _to_promotion(record)

    def update_promotion(self, promotion_id: str, changes: dict) -> Optional[Promotion]:
        with self._session() as db:
            record = db.get(PromotionRecord, promotion_id)
            if not record:
                return None

            product_id = changes.get("product_id")
            if product_id and db.get(ProductRecord, product_id) is None:
                raise ConflictError("product_deleted", f"Product {product_id} no longer exists")

            for field, value in changes.items():
                setattr(record, field, value)
            try:
                db.flush()
            except IntegrityError as e:
                if not product_id:
                    raise
                raise ConflictError("product_deleted", f"Product {product_id} no longer exists") from e
            db.refresh(record)
            return _to_promotion(record)

    def delete_promotion(self, promotion_id: str) -> bool:
        with self._session() as db:
            record = db.get(PromotionRecord, promotion_id)
            if not record:
                return False
            db.delete(record)
            return True

    # =========================================================================
    # Profile Operations
    # =========================================================================

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        with self._session() as db:
            record = db.get(ProfileRecord, profile_id)
            return _to_profile(record) if record else None

    def get_profile_by_auth_id(self, auth_id: str) -> Optional[Profile]:
        with self._session() as db:
            record = db.query(ProfileRecord).filter_by(auth_id=auth_id).first()
            return _to_profile(record) if record else None

    def list_profiles(self) -> list[Profile]:
        with self._session() as db:
            records = db.query(ProfileRecord).order_by(ProfileRecord.created_at.desc()).all()
            return [_to_profile(r) for r in records]

    def add_profile(self, profile: Profile) -> Profile:
        """Mirror a profile from the identity provider into the database."""
        with self._session() as db:
            record = db.merge(ProfileRecord(**profile.model_dump()))
            db.flush()
            return _to_profile(record)
