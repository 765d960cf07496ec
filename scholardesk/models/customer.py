"""
Customer model for managing converted clients and their projects.
Revenue figures are denormalised and refreshed from payments.
"""

from typing import Optional, List, TYPE_CHECKING
from decimal import Decimal
from datetime import date
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, Integer, Numeric, Date, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scholardesk.models.base import BaseModel

if TYPE_CHECKING:
    from scholardesk.models.payment import Payment


class CustomerStatus(str, Enum):
    """Customer lifecycle status."""
    LEAD = "lead"
    ACTIVE = "active"
    INACTIVE = "inactive"
    VIP = "vip"


class CustomerSource(str, Enum):
    """Channel through which the customer arrived."""
    WEBSITE = "website"
    PHONE = "phone"
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    REFERRAL = "referral"
    SOCIAL_MEDIA = "social_media"
    WALK_IN = "walk_in"
    OTHER = "other"


class ProjectStatus(str, Enum):
    """Delivery status of a customer project."""
    INQUIRY = "inquiry"
    QUOTATION_SENT = "quotation-sent"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ProjectStage(str, Enum):
    """Engineering stage of a customer project."""
    REQUIREMENTS = "requirements"
    DESIGN = "design"
    DEVELOPMENT = "development"
    TESTING = "testing"
    DEPLOYMENT = "deployment"
    MAINTENANCE = "maintenance"


ACTIVE_PROJECT_STATUSES = (
    ProjectStatus.ACCEPTED,
    ProjectStatus.IN_PROGRESS,
    ProjectStatus.REVIEW,
)


class Customer(BaseModel):
    """
    Customer model.

    Attributes:
        name / email / phone: Contact details (email is unique)
        university / course: Academic context
        status: Lead, active, inactive or VIP
        source: Acquisition channel
        tags: Free labels
        total_revenue: Sum of completed payments
        outstanding_balance: Project budgets not yet paid
    """

    __tablename__ = "customers"
    __repr_fields__ = ("name", "email")

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    university: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    course: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[CustomerStatus] = mapped_column(
        SQLEnum(CustomerStatus),
        default=CustomerStatus.LEAD,
        nullable=False,
        index=True,
    )
    source: Mapped[CustomerSource] = mapped_column(
        SQLEnum(CustomerSource),
        default=CustomerSource.WEBSITE,
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    last_contact_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    total_revenue: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    outstanding_balance: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )

    projects: Mapped[List["CustomerProject"]] = relationship(
        "CustomerProject",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="CustomerProject.id",
        lazy="selectin",
    )
    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="customer",
        cascade="all, delete-orphan",
    )

    @property
    def project_count(self) -> int:
        return len(self.projects)

    @property
    def active_projects(self) -> int:
        return sum(1 for p in self.projects if p.status in ACTIVE_PROJECT_STATUSES)


class CustomerProject(BaseModel):
    """A project delivered (or being delivered) for a customer."""

    __tablename__ = "customer_projects"
    __repr_fields__ = ("title", "status")

    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ProjectStatus] = mapped_column(
        SQLEnum(ProjectStatus),
        default=ProjectStatus.INQUIRY,
        nullable=False,
    )
    stage: Mapped[ProjectStage] = mapped_column(
        SQLEnum(ProjectStage),
        default=ProjectStage.REQUIREMENTS,
        nullable=False,
    )
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    budget: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    actual_cost: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    customer: Mapped["Customer"] = relationship(
        "Customer",
        back_populates="projects",
    )
