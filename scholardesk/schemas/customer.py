"""
Customer and customer project schemas.
"""

from datetime import date, datetime
from decimal import Decimal
from pydantic import EmailStr, Field

from scholardesk.schemas.base import BaseSchema, PaginatedResponse
from scholardesk.models.customer import (
    CustomerSource,
    CustomerStatus,
    ProjectStage,
    ProjectStatus,
)


class ProjectBase(BaseSchema):
    """Base customer project schema."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus = ProjectStatus.INQUIRY
    stage: ProjectStage = ProjectStage.REQUIREMENTS
    progress: int = Field(default=0, ge=0, le=100)
    budget: Decimal = Field(default=Decimal("0.00"), ge=0)
    actual_cost: Decimal = Field(default=Decimal("0.00"), ge=0)
    start_date: date | None = None
    end_date: date | None = None


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseSchema):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus | None = None
    stage: ProjectStage | None = None
    progress: int | None = Field(None, ge=0, le=100)
    budget: Decimal | None = Field(None, ge=0)
    actual_cost: Decimal | None = Field(None, ge=0)
    start_date: date | None = None
    end_date: date | None = None


class ProjectResponse(ProjectBase):
    id: int
    customer_id: int
    created_at: datetime
    updated_at: datetime


class CustomerBase(BaseSchema):
    """Base customer schema with common fields."""

    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=5, max_length=50)
    university: str | None = Field(None, max_length=255)
    course: str | None = Field(None, max_length=255)
    status: CustomerStatus = CustomerStatus.LEAD
    source: CustomerSource = CustomerSource.WEBSITE
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)
    last_contact_date: date | None = None


class CustomerCreate(CustomerBase):
    """Schema for creating a new customer."""

    projects: list[ProjectCreate] = Field(default_factory=list)


class CustomerUpdate(BaseSchema):
    """Schema for updating a customer."""

    name: str | None = Field(None, min_length=2, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, min_length=5, max_length=50)
    university: str | None = Field(None, max_length=255)
    course: str | None = Field(None, max_length=255)
    status: CustomerStatus | None = None
    source: CustomerSource | None = None
    notes: str | None = None
    tags: list[str] | None = None
    last_contact_date: date | None = None


class CustomerResponse(CustomerBase):
    """Customer response schema."""

    id: int
    total_revenue: Decimal
    outstanding_balance: Decimal
    project_count: int
    active_projects: int
    projects: list[ProjectResponse]
    created_at: datetime
    updated_at: datetime


class CustomerListResponse(PaginatedResponse):
    """Paginated customer list response."""

    items: list[CustomerResponse]
