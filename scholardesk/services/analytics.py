"""
Analytics Service.
Revenue, customer and back-office statistics.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, extract

from scholardesk.models.base import utcnow
from scholardesk.models.customer import (
    ACTIVE_PROJECT_STATUSES,
    Customer,
    CustomerProject,
    CustomerStatus,
)
from scholardesk.models.payment import Payment, PaymentStatus
from scholardesk.models.quotation import Quotation
from scholardesk.models.quote_request import QuoteRequest, QuoteRequestStatus


def _money(value) -> float:
    return float(value or Decimal("0.00"))


class AnalyticsService:
    """Service for dashboard statistics."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_revenue(self, year: int | None = None, month: int | None = None) -> Dict[str, Any]:
        """
        Get revenue analytics for a period.

        Args:
            year: Year to report (defaults to current year)
            month: Month of that year for the monthly figure (defaults to current month)

        Returns:
            Monthly total, per-month totals of the year, pending amounts,
            top customers and payment method breakdown
        """
        today = date.today()
        year = year or today.year
        month = month or today.month

        completed = Payment.status == PaymentStatus.COMPLETED
        in_year = extract('year', Payment.paid_date) == year

        # Monthly revenue
        monthly_result = await self.db.execute(
            select(func.sum(Payment.amount), func.count(Payment.id)).where(
                completed,
                in_year,
                extract('month', Payment.paid_date) == month,
            )
        )
        monthly_total, monthly_count = monthly_result.one()

        # Yearly revenue grouped by month
        month_col = extract('month', Payment.paid_date).label('month')
        yearly_result = await self.db.execute(
            select(month_col, func.sum(Payment.amount), func.count(Payment.id))
            .where(completed, in_year)
            .group_by(month_col)
            .order_by(month_col)
        )
        yearly_by_month = [
            {"month": int(row[0]), "total": _money(row[1]), "count": row[2]}
            for row in yearly_result
        ]

        # Pending payments
        pending_result = await self.db.execute(
            select(Payment.status, func.sum(Payment.amount), func.count(Payment.id))
            .where(Payment.status.in_([PaymentStatus.PENDING, PaymentStatus.OVERDUE]))
            .group_by(Payment.status)
        )
        pending = [
            {"status": row[0].value, "total": _money(row[1]), "count": row[2]}
            for row in pending_result
        ]

        # Payment methods breakdown
        methods_result = await self.db.execute(
            select(Payment.payment_method, func.sum(Payment.amount), func.count(Payment.id))
            .where(completed, in_year)
            .group_by(Payment.payment_method)
        )
        payment_methods = [
            {"method": row[0].value, "total": _money(row[1]), "count": row[2]}
            for row in methods_result
        ]

        return {
            "monthly": {"total": _money(monthly_total), "count": monthly_count or 0},
            "yearly_by_month": yearly_by_month,
            "pending": pending,
            "top_customers": await self.get_top_customers(),
            "payment_methods": payment_methods,
            "period": {"year": year, "month": month},
        }

    async def get_top_customers(self, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Get top customers by completed revenue.

        Args:
            limit: Number of customers to return
        """
        revenue = func.sum(Payment.amount).label('total_revenue')
        result = await self.db.execute(
            select(
                Customer.id,
                Customer.name,
                Customer.email,
                revenue,
                func.count(Payment.id).label('payment_count'),
            )
            .join(Payment, Payment.customer_id == Customer.id)
            .where(Payment.status == PaymentStatus.COMPLETED)
            .group_by(Customer.id, Customer.name, Customer.email)
            .order_by(revenue.desc())
            .limit(limit)
        )

        return [
            {
                "id": row.id,
                "name": row.name,
                "email": row.email,
                "total_revenue": _money(row.total_revenue),
                "payment_count": row.payment_count,
            }
            for row in result
        ]

    async def get_customer_stats(self) -> Dict[str, int]:
        """Get customer counts by status and with active projects."""
        counts = {}
        for customer_status in (CustomerStatus.ACTIVE, CustomerStatus.VIP, CustomerStatus.LEAD):
            result = await self.db.execute(
                select(func.count(Customer.id)).where(Customer.status == customer_status)
            )
            counts[customer_status] = result.scalar() or 0

        total_result = await self.db.execute(select(func.count(Customer.id)))

        active_projects_result = await self.db.execute(
            select(func.count(func.distinct(CustomerProject.customer_id))).where(
                CustomerProject.status.in_(ACTIVE_PROJECT_STATUSES)
            )
        )

        return {
            "total": total_result.scalar() or 0,
            "active": counts[CustomerStatus.ACTIVE],
            "vip": counts[CustomerStatus.VIP],
            "leads": counts[CustomerStatus.LEAD],
            "with_active_projects": active_projects_result.scalar() or 0,
        }

    async def get_overview(self) -> Dict[str, Any]:
        """
        Get back-office overview statistics.

        Returns:
            Quote request totals, recent submissions, status distribution,
            issued quotations and customer count
        """
        seven_days_ago = utcnow() - timedelta(days=7)

        total_quotes = await self.db.execute(select(func.count(QuoteRequest.id)))
        recent_quotes = await self.db.execute(
            select(func.count(QuoteRequest.id)).where(QuoteRequest.submitted_at >= seven_days_ago)
        )
        quotations = await self.db.execute(select(func.count(Quotation.id)))
        customers = await self.db.execute(select(func.count(Customer.id)))

        distribution = {}
        for quote_status in QuoteRequestStatus:
            result = await self.db.execute(
                select(func.count(QuoteRequest.id)).where(QuoteRequest.status == quote_status)
            )
            distribution[quote_status.value] = result.scalar() or 0

        return {
            "total_quote_requests": total_quotes.scalar() or 0,
            "recent_quote_requests": recent_quotes.scalar() or 0,
            "quote_requests_by_status": distribution,
            "quotations_issued": quotations.scalar() or 0,
            "customer_count": customers.scalar() or 0,
        }
