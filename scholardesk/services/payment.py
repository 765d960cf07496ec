"""
Payment service.
Handles customer payments, invoice numbering and revenue refresh.
"""

import logging
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from fastapi import HTTPException, status

from scholardesk.models.payment import Payment, PaymentMethod, PaymentStatus
from scholardesk.schemas.payment import PaymentCreate, PaymentUpdate
from scholardesk.services.customer import CustomerService


logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "created_at": Payment.created_at,
    "paid_date": Payment.paid_date,
    "due_date": Payment.due_date,
    "amount": Payment.amount,
}


class PaymentService:
    """Service for payment operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.customers = CustomerService(db)

    async def _generate_invoice_number(self, issued_on: date) -> str:
        """
        Generate invoice number.
        Format: INV{year}{sequence}, the sequence continuing from the
        highest number issued that year.
        """
        prefix = f"INV{issued_on.year}"
        result = await self.db.execute(
            select(func.max(Payment.invoice_number)).where(
                Payment.invoice_number.like(f"{prefix}%")
            )
        )
        last = result.scalar()
        sequence = int(last[len(prefix):]) + 1 if last else 1
        return f"{prefix}{str(sequence).zfill(5)}"

    async def create(self, data: PaymentCreate) -> Payment:
        """
        Record a payment for a customer.

        The invoice number is assigned automatically and the customer's
        revenue figures are refreshed.

        Raises:
            HTTPException: If the customer does not exist
        """
        await self.customers.get_or_404(data.customer_id)

        today = date.today()
        payment = Payment(
            **data.model_dump(),
            invoice_number=await self._generate_invoice_number(today),
            invoice_date=today,
        )

        self.db.add(payment)
        await self.db.flush()

        logger.info(
            f"Payment recorded ({payment.status.value})",
            extra={
                "payment_id": payment.id,
                "customer_id": payment.customer_id,
                "total": str(payment.amount),
            },
        )

        await self.customers.recalculate_revenue(payment.customer_id)
        return await self.get_or_404(payment.id)

    async def get_by_id(self, payment_id: int) -> Payment | None:
        result = await self.db.execute(
            select(Payment)
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_or_404(self, payment_id: int) -> Payment:
        """Get payment by ID or raise 404."""
        payment = await self.get_by_id(payment_id)
        if not payment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Payment not found",
            )
        return payment

    async def list_by_customer(self, customer_id: int) -> list[Payment]:
        """List all payments of a customer, newest first."""
        await self.customers.get_or_404(customer_id)

        result = await self.db.execute(
            select(Payment)
            .where(Payment.customer_id == customer_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
        )
        return list(result.scalars().all())

    async def list(
        self,
        skip: int = 0,
        limit: int = 50,
        status_filter: PaymentStatus | None = None,
        customer_id: int | None = None,
        payment_method: PaymentMethod | None = None,
        from_date: date | None = None,
        to_date: date | None = None,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> tuple[list[Payment], int]:
        """List payments with pagination, filters and sort."""
        query = select(Payment)
        count_query = select(func.count(Payment.id))

        filters = []
        if status_filter:
            filters.append(Payment.status == status_filter)
        if customer_id:
            filters.append(Payment.customer_id == customer_id)
        if payment_method:
            filters.append(Payment.payment_method == payment_method)
        if from_date:
            filters.append(Payment.paid_date >= from_date)
        if to_date:
            filters.append(Payment.paid_date <= to_date)

        if filters:
            query = query.where(*filters)
            count_query = count_query.where(*filters)

        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        sort_column = SORT_FIELDS.get(sort_by, Payment.created_at)
        order = sort_column.desc() if descending else sort_column.asc()
        query = query.order_by(order, Payment.id.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        payments = list(result.scalars().all())

        return payments, total

    async def update(self, payment: Payment, data: PaymentUpdate) -> Payment:
        """Update a payment and refresh the customer's revenue."""
        update_data = data.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            setattr(payment, field, value)

        await self.db.flush()
        logger.info("Payment updated", extra={"payment_id": payment.id})

        await self.customers.recalculate_revenue(payment.customer_id)
        return await self.get_or_404(payment.id)

    async def delete(self, payment: Payment) -> None:
        """Delete a payment and refresh the customer's revenue."""
        customer_id = payment.customer_id
        payment_id = payment.id

        await self.db.delete(payment)
        await self.db.flush()
        logger.info("Payment deleted", extra={"payment_id": payment_id})

        await self.customers.recalculate_revenue(customer_id)
