"""
Customer service.
Handles customer CRUD, their projects, and revenue figures.
"""

import logging
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status

from scholardesk.models.customer import Customer, CustomerProject, CustomerStatus
from scholardesk.models.payment import Payment, PaymentStatus
from scholardesk.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    ProjectCreate,
    ProjectUpdate,
)


logger = logging.getLogger(__name__)


class CustomerService:
    """Service for customer operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _ensure_email_available(self, email: str, exclude_id: int | None = None) -> None:
        query = select(func.count(Customer.id)).where(func.lower(Customer.email) == email.lower())
        if exclude_id is not None:
            query = query.where(Customer.id != exclude_id)
        result = await self.db.execute(query)
        if (result.scalar() or 0) > 0:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A customer with this email already exists",
            )

    async def create(self, data: CustomerCreate) -> Customer:
        """
        Create a new customer with optional initial projects.

        Raises:
            HTTPException: If the email is already used
        """
        await self._ensure_email_available(data.email)

        customer = Customer(**data.model_dump(exclude={"projects"}))
        customer.projects = [CustomerProject(**p.model_dump()) for p in data.projects]

        self.db.add(customer)
        await self.db.flush()

        logger.info("Customer created", extra={"customer_id": customer.id})
        return await self.recalculate_revenue(customer.id)

    async def get_by_id(self, customer_id: int) -> Customer | None:
        result = await self.db.execute(
            select(Customer)
            .where(Customer.id == customer_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_or_404(self, customer_id: int) -> Customer:
        """
        Get customer by ID or raise 404.

        Raises:
            HTTPException: If customer not found
        """
        customer = await self.get_by_id(customer_id)
        if not customer:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Customer not found",
            )
        return customer

    async def list(
        self,
        skip: int = 0,
        limit: int = 20,
        search: str | None = None,
        status_filter: CustomerStatus | None = None,
    ) -> tuple[list[Customer], int]:
        """
        List customers with pagination, search and status filter.

        Args:
            skip: Number of records to skip
            limit: Maximum records to return
            search: Search term for name, email, phone or university
            status_filter: Only customers with this status

        Returns:
            Tuple of (customers list, total count)
        """
        query = select(Customer)
        count_query = select(func.count(Customer.id))

        if search:
            search_filter = f"%{search}%"
            condition = (
                (Customer.name.ilike(search_filter)) |
                (Customer.email.ilike(search_filter)) |
                (Customer.phone.ilike(search_filter)) |
                (Customer.university.ilike(search_filter))
            )
            query = query.where(condition)
            count_query = count_query.where(condition)

        if status_filter:
            query = query.where(Customer.status == status_filter)
            count_query = count_query.where(Customer.status == status_filter)

        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(Customer.created_at.desc(), Customer.id.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        customers = list(result.scalars().all())

        return customers, total

    async def update(self, customer: Customer, data: CustomerUpdate) -> Customer:
        """Update customer fields that were provided."""
        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("email") and update_data["email"].lower() != customer.email.lower():
            await self._ensure_email_available(update_data["email"], exclude_id=customer.id)

        for field, value in update_data.items():
            setattr(customer, field, value)

        await self.db.flush()
        return await self.get_or_404(customer.id)

    async def delete(self, customer: Customer) -> None:
        """Delete a customer with their projects and payments."""
        customer_id = customer.id
        try:
            await self.db.delete(customer)
            await self.db.flush()
        except IntegrityError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unable to delete this customer",
            )
        logger.info("Customer deleted", extra={"customer_id": customer_id})

    # ===== Projects =====

    async def _get_project_or_404(self, customer: Customer, project_id: int) -> CustomerProject:
        for project in customer.projects:
            if project.id == project_id:
                return project
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )

    async def add_project(self, customer: Customer, data: ProjectCreate) -> Customer:
        customer.projects.append(CustomerProject(**data.model_dump()))
        await self.db.flush()
        return await self.recalculate_revenue(customer.id)

    async def update_project(
        self,
        customer: Customer,
        project_id: int,
        data: ProjectUpdate,
    ) -> Customer:
        project = await self._get_project_or_404(customer, project_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(project, field, value)
        await self.db.flush()
        return await self.recalculate_revenue(customer.id)

    async def delete_project(self, customer: Customer, project_id: int) -> Customer:
        project = await self._get_project_or_404(customer, project_id)
        customer.projects.remove(project)
        await self.db.flush()
        return await self.recalculate_revenue(customer.id)

    # ===== Revenue =====

    async def recalculate_revenue(self, customer_id: int) -> Customer:
        """
        Refresh the denormalised revenue figures of a customer.

        total_revenue is the sum of completed payments; the outstanding
        balance is what remains of the project budgets, never negative.
        """
        customer = await self.get_or_404(customer_id)

        revenue_result = await self.db.execute(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(
                Payment.customer_id == customer_id,
                Payment.status == PaymentStatus.COMPLETED,
            )
        )
        total_revenue = Decimal(str(revenue_result.scalar() or 0))

        total_budget = sum((p.budget or Decimal("0")) for p in customer.projects)
        outstanding = max(Decimal("0"), Decimal(total_budget) - total_revenue)

        customer.total_revenue = total_revenue
        customer.outstanding_balance = outstanding
        await self.db.flush()

        logger.info(
            "Customer revenue recalculated",
            extra={"customer_id": customer_id, "total": str(total_revenue)},
        )
        return customer
