"""
Payment schemas for request/response validation.
"""

from datetime import date, datetime
from decimal import Decimal
from pydantic import Field

from scholardesk.schemas.base import BaseSchema, PaginatedResponse
from scholardesk.models.payment import PaymentMethod, PaymentStatus, PaymentType


class PaymentBase(BaseSchema):
    """Base payment schema."""

    project_name: str | None = Field(None, max_length=255)
    amount: Decimal = Field(..., gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    payment_type: PaymentType = PaymentType.FULL
    payment_method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    due_date: date | None = None
    paid_date: date | None = None
    transaction_id: str | None = Field(None, max_length=100)
    reference: str | None = Field(None, max_length=100)
    notes: str | None = None


class PaymentCreate(PaymentBase):
    """Schema for creating a payment."""

    customer_id: int


class PaymentUpdate(BaseSchema):
    """Schema for updating a payment."""

    project_name: str | None = Field(None, max_length=255)
    amount: Decimal | None = Field(None, gt=0)
    payment_type: PaymentType | None = None
    payment_method: PaymentMethod | None = None
    status: PaymentStatus | None = None
    due_date: date | None = None
    paid_date: date | None = None
    transaction_id: str | None = Field(None, max_length=100)
    reference: str | None = Field(None, max_length=100)
    notes: str | None = None


class PaymentCustomer(BaseSchema):
    id: int
    name: str
    email: str
    phone: str


class PaymentResponse(PaymentBase):
    """Payment response schema."""

    id: int
    customer_id: int
    customer: PaymentCustomer | None = None
    invoice_number: str | None
    invoice_date: date | None
    created_at: datetime
    updated_at: datetime


class PaymentListResponse(PaginatedResponse):
    """Paginated payment list response."""

    items: list[PaymentResponse]
