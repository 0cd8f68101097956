from fastapi import APIRouter

from app.api.v1.health import router as health_router
from app.api.v1.auth import router as auth_router

# CORE: pricing + payments
from app.api.v1.quotes import router as quotes_router
from app.api.v1.payments import router as payments_router

from app.api.v1.orders import router as orders_router
from app.api.v1.reviews import router as reviews_router
from app.api.v1.inquiries import router as inquiries_router
from app.api.v1.installations import router as installations_router
from app.api.v1.catalog import router as catalog_router
from app.api.v1.dashboard import router as dashboard_router
from app.api.v1.admin import router as admin_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM / AUTH
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(auth_router, tags=["auth"])

# ------------------------------------------------------------------
# QUOTES / PAYMENTS
# ------------------------------------------------------------------
v1_router.include_router(quotes_router, tags=["quotes"])
v1_router.include_router(payments_router, tags=["payments"])
v1_router.include_router(orders_router, tags=["orders"])

# ------------------------------------------------------------------
# CUSTOMER
# ------------------------------------------------------------------
v1_router.include_router(reviews_router, tags=["reviews"])
v1_router.include_router(inquiries_router, tags=["inquiries"])
v1_router.include_router(installations_router, tags=["installations"])
v1_router.include_router(dashboard_router, tags=["dashboard"])
v1_router.include_router(catalog_router, tags=["catalog"])

# ------------------------------------------------------------------
# ADMIN
# ------------------------------------------------------------------
v1_router.include_router(admin_router, tags=["admin"])
