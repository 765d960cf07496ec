"""
Analytics endpoints.
Revenue, customer and back-office statistics.
"""

from fastapi import APIRouter, Query

from scholardesk.api.deps import CurrentAdmin, DbSession
from scholardesk.services.analytics import AnalyticsService


router = APIRouter()


@router.get(
    "/analytics/revenue",
    summary="Revenue analytics",
    description="Monthly and yearly revenue, pending amounts, top customers and payment methods",
)
async def get_revenue_analytics(
    admin: CurrentAdmin,
    db: DbSession,
    year: int | None = Query(None, ge=2000, le=2100, description="Year (defaults to current)"),
    month: int | None = Query(None, ge=1, le=12, description="Month (defaults to current)"),
) -> dict:
    return await AnalyticsService(db).get_revenue(year=year, month=month)


@router.get(
    "/analytics/customers",
    summary="Customer statistics",
)
async def get_customer_analytics(
    admin: CurrentAdmin,
    db: DbSession,
) -> dict:
    return await AnalyticsService(db).get_customer_stats()


@router.get(
    "/stats",
    summary="Back-office overview",
    description="Quote request counts, recent submissions and issued quotations",
)
async def get_stats(
    admin: CurrentAdmin,
    db: DbSession,
) -> dict:
    return await AnalyticsService(db).get_overview()
