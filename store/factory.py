"""
Store construction from settings.

The backend is always chosen explicitly. A SQL store never falls back to
fixture data when the database is unreachable; the failure surfaces as a
RepositoryError instead.
"""

import logging
from typing import Optional

from store.config import Settings, settings as default_settings
from store.data_store import InMemoryStore
from store.repository import StorefrontStore
from store.sql_store import SqlStore

logger = logging.getLogger("store_factory")


def build_store(config: Optional[Settings] = None) -> StorefrontStore:
    """Create the store selected by KIVO_STORAGE_BACKEND."""
    config = config or default_settings

    if config.STORAGE_BACKEND == "memory":
        logger.info(f"Using in-memory store (fixtures: {config.DATA_DIR or 'none'})")
        return InMemoryStore(data_dir=config.DATA_DIR)

    logger.info("Using SQL store")
    store = SqlStore(config.DATABASE_URL)
    store.create_schema()
    return store


# Module-level singleton for convenience
# In tests, pass a store explicitly or call reset_store()
_default_store: Optional[StorefrontStore] = None


def get_store() -> StorefrontStore:
    """Get the default store singleton."""
    global _default_store
    if _default_store is None:
        _default_store = build_store()
    return _default_store


def reset_store(store: Optional[StorefrontStore] = None) -> Optional[StorefrontStore]:
    """Replace the default store (useful for testing)."""
    global _default_store
    _default_store = store
    return _default_store
