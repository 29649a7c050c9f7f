"""
Error taxonomy for the storefront core.

Every failure the core can produce is one of these exceptions. They are raised
by the services and repositories and translated into HTTP responses by the API
layer, so bad input never takes the process down.

- ValidationError: malformed or out-of-range input (caller's fault)
- NotFoundError: a referenced entity does not exist
- ConflictError: a write lost a race with a concurrent change
- RepositoryError: the persistence layer failed (connectivity, constraints)
"""

from typing import Optional


class StorefrontError(Exception):
    """Base class for all storefront errors."""

    status_code: int = 500

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or code
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """
    Input failed validation.

    `reason` is a stable machine-readable code such as "incomplete",
    "discount_out_of_range", "start_after_end" or "already_expired".
    """

    status_code = 400

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(reason, message)
        self.reason = reason


class NotFoundError(StorefrontError):
    """A referenced entity ("product", "promotion", "profile") is absent."""

    status_code = 404

    def __init__(self, resource: str, message: Optional[str] = None):
        super().__init__(f"{resource}_not_found", message or f"{resource.capitalize()} not found")
        self.resource = resource


class ConflictError(StorefrontError):
    """A write conflicted with concurrent state, e.g. the product was deleted meanwhile."""

    status_code = 409

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(reason, message)
        self.reason = reason


class RepositoryError(StorefrontError):
    """Opaque persistence failure."""

    status_code = 500

    def __init__(self, message: str = "Repository failure"):
        super().__init__("repository_error", message)
