"""
API v1 router - aggregates all endpoint routers.
"""

from fastapi import APIRouter

from scholardesk.api.v1.endpoints import (
    auth,
    quote_requests,
    admin_quote_requests,
    quotations,
    customers,
    payments,
    analytics,
)

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

api_router.include_router(
    quote_requests.router,
    prefix="/quote-requests",
    tags=["Quote requests"],
)

api_router.include_router(
    admin_quote_requests.router,
    prefix="/admin/quote-requests",
    tags=["Admin - Quote requests"],
)

api_router.include_router(
    quotations.router,
    prefix="/admin/quotations",
    tags=["Admin - Quotations"],
)

api_router.include_router(
    customers.router,
    prefix="/admin/customers",
    tags=["Admin - Customers"],
)

api_router.include_router(
    payments.router,
    prefix="/admin/payments",
    tags=["Admin - Payments"],
)

api_router.include_router(
    analytics.router,
    prefix="/admin",
    tags=["Admin - Analytics"],
)
