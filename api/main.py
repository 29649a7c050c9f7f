"""
FastAPI application for the KIVO storefront.

This application provides:
1. Public storefront endpoints (priced products, promotions)
2. The caller's profile
3. Admin endpoints for promotions, products, metrics and profiles

Every response uses the envelope {success, data?, count?, message?, error?}. Domain
errors are raised by the services and mapped to status codes here.

Run with:
    uvicorn api.main:app --reload

Then visit http://localhost:8000/docs for interactive API documentation.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from store.config import settings

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)

from api.auth import get_current_profile, require_admin
from api.deps import (
    Clock,
    get_catalog_admin,
    get_clock,
    get_dashboard,
    get_pricing,
    get_promotion_admin,
    get_repository,
)
from store.errors import NotFoundError, StorefrontError
from store.models import Principal, ProductFilter, Profile, PromotionFilter
from store.repository import StorefrontStore
from storefront.services import (
    CatalogAdminService,
    DashboardService,
    PricingService,
    PromotionAdminService,
)

logger = logging.getLogger("storefront_api")

HTTP_ERROR_CODES = {
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


class ApiResponse(BaseModel):
    """Response envelope shared by every endpoint."""
    success: bool
    data: Any = None
    count: Optional[int] = None
    message: Optional[str] = None
    error: Optional[str] = None


def _dump(value: Any) -> Any:
    # mode="json" keeps Decimal money as exact strings
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    """Success envelope; lists also carry their length as `count`."""
    count = len(data) if isinstance(data, list) else None
    body = ApiResponse(success=True, data=_dump(data), count=count, message=message)
    return body.model_dump(exclude_none=True)


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ApiResponse(success=False, error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# Application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info(f"Starting KIVO storefront API (backend={settings.STORAGE_BACKEND})")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="KIVO Storefront API",
    description="""
    Storefront catalog with time-bounded promotions.

    ## Endpoints

    - `/api/products`, `/api/promotions` - public, priced at request time
    - `/api/profile` - the authenticated caller
    - `/api/admin/*` - admin only (bearer token of an admin profile)
    """,
    version="1.0.0",
    lifespan=lifespan,
)


# =============================================================================
# Error Mapping
# =============================================================================

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    error = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    return _error_response(exc.status_code, error, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
    logger.info(f"{request.method} {request.url.path} -> 422 {message}")
    return _error_response(422, "invalid_request", message)


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "kivo-storefront"}


# =============================================================================
# Public Storefront
# =============================================================================

@app.get("/api/products", tags=["Storefront"])
def list_products(
    search: Optional[str] = None,
    category: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    pricing: PricingService = Depends(get_pricing),
    clock: Clock = Depends(get_clock),
):
    """Products newest first, each priced under its best active promotion."""
    filters = ProductFilter(search=search, category=category, limit=limit, offset=offset)
    return ok(pricing.list_priced_products(filters, clock()))


@app.get("/api/products/{product_id}", tags=["Storefront"])
def get_product(
    product_id: str,
    pricing: PricingService = Depends(get_pricing),
    clock: Clock = Depends(get_clock),
):
    """One priced product with its currently active promotions."""
    return ok(pricing.get_priced_product(product_id, clock()))


@app.get("/api/promotions", tags=["Storefront"])
def list_promotions(
    product_id: Optional[str] = None,
    active: bool = False,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    pricing: PricingService = Depends(get_pricing),
    clock: Clock = Depends(get_clock),
):
    filters = PromotionFilter(product_id=product_id, limit=limit, offset=offset)
    return ok(pricing.list_promotions(filters, clock(), active_only=active))


@app.get("/api/promotions/active", tags=["Storefront"])
def list_active_promotions(
    pricing: PricingService = Depends(get_pricing),
    clock: Clock = Depends(get_clock),
):
    """Active promotions, biggest discount first."""
    return ok(pricing.active_promotions(clock()))


@app.get("/api/promotions/{promotion_id}", tags=["Storefront"])
def get_promotion(
    promotion_id: str,
    pricing: PricingService = Depends(get_pricing),
    clock: Clock = Depends(get_clock),
):
    return ok(pricing.get_promotion(promotion_id, clock()))


# =============================================================================
# Profile
# =============================================================================

@app.get("/api/profile", tags=["Profile"])
def get_profile(profile: Profile = Depends(get_current_profile)):
    """The authenticated caller's profile."""
    return ok(profile)


# =============================================================================
# Admin: Promotions
# =============================================================================

@app.post("/api/admin/promotions", status_code=201, tags=["Admin"])
def create_promotion(
    payload: dict = Body(...),
    principal: Principal = Depends(require_admin),
    service: PromotionAdminService = Depends(get_promotion_admin),
):
    promotion = service.create_promotion(payload, created_by=principal.user_id)
    return ok(promotion, "Promotion created")


@app.put("/api/admin/promotions/{promotion_id}", tags=["Admin"])
def update_promotion(
    promotion_id: str,
    payload: dict = Body(...),
    principal: Principal = Depends(require_admin),
    service: PromotionAdminService = Depends(get_promotion_admin),
):
    return ok(service.update_promotion(promotion_id, payload), "Promotion updated")


@app.delete("/api/admin/promotions/{promotion_id}", tags=["Admin"])
def delete_promotion(
    promotion_id: str,
    principal: Principal = Depends(require_admin),
    service: PromotionAdminService = Depends(get_promotion_admin),
):
    service.delete_promotion(promotion_id)
    return ok(message="Promotion deleted")


# =============================================================================
# Admin: Products
# =============================================================================

@app.post("/api/admin/products", status_code=201, tags=["Admin"])
def create_product(
    payload: dict = Body(...),
    principal: Principal = Depends(require_admin),
    service: CatalogAdminService = Depends(get_catalog_admin),
):
    return ok(service.create_product(payload), "Product created")


@app.put("/api/admin/products/{product_id}", tags=["Admin"])
def update_product(
    product_id: str,
    payload: dict = Body(...),
    principal: Principal = Depends(require_admin),
    service: CatalogAdminService = Depends(get_catalog_admin),
):
    return ok(service.update_product(product_id, payload), "Product updated")


@app.delete("/api/admin/products/{product_id}", tags=["Admin"])
def delete_product(
    product_id: str,
    principal: Principal = Depends(require_admin),
    service: CatalogAdminService = Depends(get_catalog_admin),
):
    """Delete a product together with its promotions."""
    service.delete_product(product_id)
    return ok(message="Product deleted")


# =============================================================================
# Admin: Dashboard
# =============================================================================

@app.get("/api/admin/metrics", tags=["Admin"])
def get_metrics(
    principal: Principal = Depends(require_admin),
    dashboard: DashboardService = Depends(get_dashboard),
    clock: Clock = Depends(get_clock),
):
    return ok(dashboard.get_metrics(clock()))


@app.get("/api/admin/profiles", tags=["Admin"])
def list_profiles(
    principal: Principal = Depends(require_admin),
    store: StorefrontStore = Depends(get_repository),
):
    return ok(store.list_profiles())


@app.get("/api/admin/profiles/{profile_id}", tags=["Admin"])
def get_profile_by_id(
    profile_id: str,
    principal: Principal = Depends(require_admin),
    store: StorefrontStore = Depends(get_repository),
):
    profile = store.get_profile(profile_id)
    if not profile:
        raise NotFoundError("profile")
    return ok(profile)
