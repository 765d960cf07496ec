"""
Payment endpoints.
Record and manage customer payments.
"""

from datetime import date
from fastapi import APIRouter, Query, status

from scholardesk.api.deps import CurrentAdmin, DbSession
from scholardesk.models.payment import PaymentMethod, PaymentStatus
from scholardesk.schemas.base import MessageResponse, PaginatedResponse
from scholardesk.schemas.payment import (
    PaymentCreate,
    PaymentListResponse,
    PaymentResponse,
    PaymentUpdate,
)
from scholardesk.services.payment import PaymentService


router = APIRouter()


@router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a payment",
    description="Record a payment; the invoice number is assigned automatically",
)
async def create_payment(
    data: PaymentCreate,
    admin: CurrentAdmin,
    db: DbSession,
) -> PaymentResponse:
    """Record a new payment."""
    payment = await PaymentService(db).create(data)
    return PaymentResponse.model_validate(payment)


@router.get(
    "",
    response_model=PaymentListResponse,
    summary="List payments",
)
async def list_payments(
    admin: CurrentAdmin,
    db: DbSession,
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(50, ge=1, le=200, description="Items per page"),
    status_filter: PaymentStatus | None = Query(None, alias="status", description="Filter by status"),
    customer_id: int | None = Query(None, description="Filter by customer"),
    payment_method: PaymentMethod | None = Query(None, description="Filter by payment method"),
    from_date: date | None = Query(None, description="Paid on or after"),
    to_date: date | None = Query(None, description="Paid on or before"),
    sort_by: str = Query("created_at", description="created_at, paid_date, due_date or amount"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
) -> PaymentListResponse:
    """List payments with filters."""
    service = PaymentService(db)
    skip = (page - 1) * per_page

    payments, total = await service.list(
        skip=skip,
        limit=per_page,
        status_filter=status_filter,
        customer_id=customer_id,
        payment_method=payment_method,
        from_date=from_date,
        to_date=to_date,
        sort_by=sort_by,
        descending=order == "desc",
    )

    return PaymentListResponse(
        items=[PaymentResponse.model_validate(p) for p in payments],
        total=total,
        page=page,
        per_page=per_page,
        pages=PaginatedResponse.page_count(total, per_page),
    )


@router.get(
    "/{payment_id}",
    response_model=PaymentResponse,
    summary="Payment details",
)
async def get_payment(
    payment_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> PaymentResponse:
    payment = await PaymentService(db).get_or_404(payment_id)
    return PaymentResponse.model_validate(payment)


@router.put(
    "/{payment_id}",
    response_model=PaymentResponse,
    summary="Update a payment",
)
async def update_payment(
    payment_id: int,
    data: PaymentUpdate,
    admin: CurrentAdmin,
    db: DbSession,
) -> PaymentResponse:
    service = PaymentService(db)
    payment = await service.get_or_404(payment_id)
    payment = await service.update(payment, data)
    return PaymentResponse.model_validate(payment)


@router.delete(
    "/{payment_id}",
    response_model=MessageResponse,
    summary="Delete a payment",
)
async def delete_payment(
    payment_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> MessageResponse:
    service = PaymentService(db)
    payment = await service.get_or_404(payment_id)
    await service.delete(payment)
    return MessageResponse(message="Payment deleted successfully")
