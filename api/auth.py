"""
Authentication and authorization dependencies.

- Missing or unknown bearer token -> 401
- Known token without an admin profile -> 403 on admin routes
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.deps import get_identity, get_repository
from api.identity import IdentityProvider
from store.errors import NotFoundError
from store.models import Principal, Profile
from store.repository import StorefrontStore

logger = logging.getLogger("storefront_auth")

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IdentityProvider = Depends(get_identity),
) -> str:
    """Resolve the caller's external auth id from the Authorization header."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")

    auth_id = identity.resolve(credentials.credentials)
    if auth_id is None:
        logger.warning("Rejected request with an unknown token")
        raise HTTPException(status_code=401, detail="Invalid token")
    return auth_id


def get_current_profile(
    auth_id: str = Depends(get_auth_id),
    store: StorefrontStore = Depends(get_repository),
) -> Profile:
    profile = store.get_profile_by_auth_id(auth_id)
    if not profile:
        raise NotFoundError("profile")
    return profile


def require_admin(
    auth_id: str = Depends(get_auth_id),
    store: StorefrontStore = Depends(get_repository),
) -> Principal:
    """Allow the request only for a caller whose profile is flagged admin."""
    profile = store.get_profile_by_auth_id(auth_id)
    if not profile or not profile.is_admin:
        logger.warning(f"Denied admin access to {auth_id}")
        raise HTTPException(status_code=403, detail="Admin access required")
    return Principal(user_id=profile.id, is_admin=True)
