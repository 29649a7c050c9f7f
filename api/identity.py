"""
Identity collaborators.

An IdentityProvider turns a bearer token into the external auth id of the
caller. Profiles (and the admin flag) are then looked up in the store.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger("identity")


class IdentityProvider(ABC):
    """Resolves bearer tokens to external auth ids."""

    @abstractmethod
    def resolve(self, token: str) -> Optional[str]:
        """Return the auth id for `token`, or None if the token is not valid."""


class StaticTokenIdentity(IdentityProvider):
    """
    Token table from configuration (KIVO_AUTH_TOKENS).

    Example:
        identity = StaticTokenIdentity({"admin-token": "auth-admin"})
        identity.resolve("admin-token")  # "auth-admin"
    """

    def __init__(self, tokens: Optional[dict[str, str]] = None):
        self.tokens = dict(tokens or {})
        if not self.tokens:
            logger.warning("No auth tokens configured; every authenticated request will be rejected")

    def resolve(self, token: str) -> Optional[str]:
        return self.tokens.get(token)
