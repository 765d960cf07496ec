"""
Quote request schemas for request/response validation.
"""

from datetime import date, datetime
from decimal import Decimal
from pydantic import EmailStr, Field

from scholardesk.schemas.base import BaseSchema, PaginatedResponse
from scholardesk.schemas.quotation import QuotationResponse
from scholardesk.models.quote_request import ProjectType, QuoteRequestStatus


class QuoteRequestBase(BaseSchema):
    """Fields submitted from the public quote form."""

    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=5, max_length=50)
    university: str = Field(..., min_length=2, max_length=255)
    course: str = Field(..., min_length=2, max_length=255)
    project_type: ProjectType
    package_tier: str | None = Field(None, max_length=100)
    deadline: date | None = None
    budget: str | None = Field(None, max_length=100)
    description: str = Field(..., min_length=10, max_length=5000)


class QuoteRequestCreate(QuoteRequestBase):
    """Schema for submitting a quote request."""
    pass


class QuoteRequestSubmitted(BaseSchema):
    """Public acknowledgement of a submission."""

    success: bool = True
    message: str = "Quote request submitted successfully"
    id: int
    name: str
    email: str
    project_type: ProjectType


class QuoteRequestStatusUpdate(BaseSchema):
    status: QuoteRequestStatus
    notes: str | None = None


class QuoteRequestResponse(QuoteRequestBase):
    """Quote request as seen by the admin."""

    id: int
    status: QuoteRequestStatus
    quoted_price: Decimal | None
    notes: str | None
    submitted_at: datetime
    quotation: QuotationResponse | None = None
    created_at: datetime
    updated_at: datetime


class QuoteRequestListResponse(PaginatedResponse):
    """Paginated quote request list response."""

    items: list[QuoteRequestResponse]
