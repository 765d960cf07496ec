"""
Customer management endpoints.
CRUD operations for customers, their projects and payments.
"""

from fastapi import APIRouter, Query, status

from scholardesk.api.deps import CurrentAdmin, DbSession
from scholardesk.models.customer import CustomerStatus
from scholardesk.schemas.base import MessageResponse, PaginatedResponse
from scholardesk.schemas.customer import (
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
    ProjectCreate,
    ProjectUpdate,
)
from scholardesk.schemas.payment import PaymentResponse
from scholardesk.services.customer import CustomerService
from scholardesk.services.payment import PaymentService


router = APIRouter()


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer",
)
async def create_customer(
    data: CustomerCreate,
    admin: CurrentAdmin,
    db: DbSession,
) -> CustomerResponse:
    """Create a new customer."""
    customer = await CustomerService(db).create(data)
    return CustomerResponse.model_validate(customer)


@router.get(
    "",
    response_model=CustomerListResponse,
    summary="List customers",
    description="Paginated list of customers with search and status filter",
)
async def list_customers(
    admin: CurrentAdmin,
    db: DbSession,
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(20, ge=1, le=100, description="Items per page"),
    search: str | None = Query(None, description="Search by name, email, phone or university"),
    status_filter: CustomerStatus | None = Query(None, alias="status", description="Filter by status"),
) -> CustomerListResponse:
    """List customers with pagination."""
    service = CustomerService(db)
    skip = (page - 1) * per_page

    customers, total = await service.list(
        skip=skip,
        limit=per_page,
        search=search,
        status_filter=status_filter,
    )

    return CustomerListResponse(
        items=[CustomerResponse.model_validate(c) for c in customers],
        total=total,
        page=page,
        per_page=per_page,
        pages=PaginatedResponse.page_count(total, per_page),
    )


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Customer details",
)
async def get_customer(
    customer_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> CustomerResponse:
    customer = await CustomerService(db).get_or_404(customer_id)
    return CustomerResponse.model_validate(customer)


@router.put(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Update a customer",
)
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    admin: CurrentAdmin,
    db: DbSession,
) -> CustomerResponse:
    service = CustomerService(db)
    customer = await service.get_or_404(customer_id)
    customer = await service.update(customer, data)
    return CustomerResponse.model_validate(customer)


@router.delete(
    "/{customer_id}",
    response_model=MessageResponse,
    summary="Delete a customer",
)
async def delete_customer(
    customer_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> MessageResponse:
    service = CustomerService(db)
    customer = await service.get_or_404(customer_id)
    await service.delete(customer)
    return MessageResponse(message="Customer deleted successfully")


# ===== Projects =====

@router.post(
    "/{customer_id}/projects",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a project to a customer",
)
async def add_project(
    customer_id: int,
    data: ProjectCreate,
    admin: CurrentAdmin,
    db: DbSession,
) -> CustomerResponse:
    service = CustomerService(db)
    customer = await service.get_or_404(customer_id)
    customer = await service.add_project(customer, data)
    return CustomerResponse.model_validate(customer)


@router.put(
    "/{customer_id}/projects/{project_id}",
    response_model=CustomerResponse,
    summary="Update a customer project",
)
async def update_project(
    customer_id: int,
    project_id: int,
    data: ProjectUpdate,
    admin: CurrentAdmin,
    db: DbSession,
) -> CustomerResponse:
    service = CustomerService(db)
    customer = await service.get_or_404(customer_id)
    customer = await service.update_project(customer, project_id, data)
    return CustomerResponse.model_validate(customer)


@router.delete(
    "/{customer_id}/projects/{project_id}",
    response_model=CustomerResponse,
    summary="Delete a customer project",
)
async def delete_project(
    customer_id: int,
    project_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> CustomerResponse:
    service = CustomerService(db)
    customer = await service.get_or_404(customer_id)
    customer = await service.delete_project(customer, project_id)
    return CustomerResponse.model_validate(customer)


# ===== Revenue and payments =====

@router.post(
    "/{customer_id}/calculate-revenue",
    response_model=CustomerResponse,
    summary="Recalculate customer revenue",
    description="Recompute total revenue and outstanding balance from payments and project budgets",
)
async def calculate_revenue(
    customer_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> CustomerResponse:
    customer = await CustomerService(db).recalculate_revenue(customer_id)
    return CustomerResponse.model_validate(customer)


@router.get(
    "/{customer_id}/payments",
    response_model=list[PaymentResponse],
    summary="Customer payments",
)
async def list_customer_payments(
    customer_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> list[PaymentResponse]:
    payments = await PaymentService(db).list_by_customer(customer_id)
    return [PaymentResponse.model_validate(p) for p in payments]
