"""
Shared pytest fixtures for the storefront tests.

These fixtures provide consistent test data, a fixed reference instant and
fresh stores for each test.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from store.data_store import InMemoryStore
from store.models import Product, Profile, Promotion
from store.sql_store import SqlStore
from store.tables import ProductRecord, ProfileRecord, PromotionRecord
from storefront.services import PromotionAdminService

# Reference instant for the fixture data:
# - promo-001 (25%) and promo-002 (10%) on prod-001 are active
# - promo-003 on prod-002 is scheduled
# - promo-004 on prod-004 has expired
T0 = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def data_dir() -> Path:
    """Path to the test data directory."""
    return Path(__file__).parent / "data"


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant for the fixture data."""
    return T0


@pytest.fixture
def clock(now: datetime):
    """A clock frozen at the reference instant."""
    return lambda: now


@pytest.fixture
def data_store(data_dir: Path) -> InMemoryStore:
    """
    Fresh InMemoryStore seeded from the JSON fixtures.

    A new instance per test so mutations don't leak between tests.
    """
    return InMemoryStore(data_dir=data_dir)


@pytest.fixture
def empty_store() -> InMemoryStore:
    """InMemoryStore without fixtures."""
    return InMemoryStore()


@pytest.fixture
def sql_store() -> SqlStore:
    """Empty SqlStore over a private in-memory SQLite database."""
    store = SqlStore("sqlite://")
    store.create_schema()
    return store


@pytest.fixture
def seeded_sql_store(sql_store: SqlStore, data_dir: Path) -> SqlStore:
    """SqlStore holding the same rows as the JSON fixtures, ids included."""
    def load(name: str) -> list[dict]:
        with open(data_dir / name, "r", encoding="utf-8") as f:
            return json.load(f)

    with sql_store.session_factory() as db:
        for row in load("products.json"):
            db.add(ProductRecord(**Product(**row).model_dump()))
        for row in load("profiles.json"):
            db.add(ProfileRecord(**Profile(**row).model_dump()))
        db.flush()
        for row in load("promotions.json"):
            db.add(PromotionRecord(**Promotion(**row).model_dump(exclude={"product"})))
        db.commit()
    return sql_store


@pytest.fixture
def admin_service(data_store: InMemoryStore, clock) -> PromotionAdminService:
    """Admin service over the fixture store with the clock frozen at T0."""
    return PromotionAdminService(data_store, data_store, clock=clock)


# =============================================================================
# Entity IDs
# =============================================================================

@pytest.fixture
def headphones_id() -> str:
    """prod-001: 100.00, stock 25, two active promotions (25% and 10%) at T0."""
    return "prod-001"


@pytest.fixture
def espresso_id() -> str:
    """prod-002: 799.99, stock 5, one scheduled promotion at T0."""
    return "prod-002"


@pytest.fixture
def watch_id() -> str:
    """prod-003: 399.99, out of stock, no promotions."""
    return "prod-003"


@pytest.fixture
def sofa_id() -> str:
    """prod-004: 1899.99, stock 12, one expired promotion."""
    return "prod-004"


@pytest.fixture
def admin_profile_id() -> str:
    return "prof-admin"
