"""
Quote request model.
A prospective client's inquiry, submitted from the public site,
against which the admin generates a quotation.
"""

from typing import Optional, TYPE_CHECKING
from decimal import Decimal
from datetime import date, datetime
from enum import Enum
from sqlalchemy import String, Text, Numeric, Date, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scholardesk.models.base import BaseModel, utcnow

if TYPE_CHECKING:
    from scholardesk.models.quotation import Quotation


class QuoteRequestStatus(str, Enum):
    """Quote request status enumeration."""
    PENDING = "pending"
    QUOTED = "quoted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class ProjectType(str, Enum):
    """Project categories offered on the public site."""
    DATA_SCIENCE = "Data Science"
    MACHINE_LEARNING = "Machine Learning"
    SOFTWARE_ENGINEERING = "Software Engineering"
    IOT = "IoT (Internet of Things)"
    MOBILE_APP = "Mobile App Development"
    WEB_DEVELOPMENT = "Web Development"
    DATABASE_SYSTEMS = "Database Systems"
    OTHER = "Other"


# Label printed in the "Status" line of the quotation document
STATUS_LABELS = {
    QuoteRequestStatus.PENDING: "Draft",
    QuoteRequestStatus.QUOTED: "Pending Acceptance",
    QuoteRequestStatus.ACCEPTED: "Accepted",
    QuoteRequestStatus.REJECTED: "Rejected",
    QuoteRequestStatus.COMPLETED: "Completed",
}


class QuoteRequest(BaseModel):
    """
    Quote request model.

    Attributes:
        name, email, phone: Contact details of the student
        university, course: Academic context
        project_type: Requested project category
        package_tier: Optional pricing tier picked on the form
        deadline: Optional delivery deadline
        budget: Free-text budget indication
        description: Project description
        status: Current processing status
        quoted_price: Total of the issued quotation, if any
        notes: Internal admin notes
    """

    __tablename__ = "quote_requests"
    __repr_fields__ = ("email", "status")

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    university: Mapped[str] = mapped_column(String(255), nullable=False)
    course: Mapped[str] = mapped_column(String(255), nullable=False)

    project_type: Mapped[ProjectType] = mapped_column(
        SQLEnum(ProjectType),
        nullable=False,
        index=True,
    )
    package_tier: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    budget: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[QuoteRequestStatus] = mapped_column(
        SQLEnum(QuoteRequestStatus),
        default=QuoteRequestStatus.PENDING,
        nullable=False,
        index=True,
    )
    quoted_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )

    quotation: Mapped[Optional["Quotation"]] = relationship(
        "Quotation",
        back_populates="quote_request",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, self.status.value.title())
