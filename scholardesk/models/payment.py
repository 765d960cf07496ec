"""
Payment model for tracking customer payments.
Drives the customer revenue figures and the revenue analytics.
"""

from typing import Optional, TYPE_CHECKING
from decimal import Decimal
from datetime import date
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, Integer, Numeric, Date, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scholardesk.models.base import BaseModel

if TYPE_CHECKING:
    from scholardesk.models.customer import Customer


class PaymentMethod(str, Enum):
    """Payment method enumeration."""
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    MOBILE_MONEY = "mobile_money"
    CASH = "cash"
    PAYPAL = "paypal"
    CRYPTO = "crypto"
    CHECK = "check"
    OTHER = "other"


class PaymentType(str, Enum):
    """What the payment settles."""
    DEPOSIT = "deposit"
    MILESTONE = "milestone"
    FINAL = "final"
    FULL = "full"
    OTHER = "other"


class PaymentStatus(str, Enum):
    """Payment status enumeration."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    OVERDUE = "overdue"


class Payment(BaseModel):
    """
    Payment model.

    Attributes:
        customer_id: Foreign key to the paying customer
        project_name: Free-text project label
        amount: Payment amount
        payment_type / payment_method / status: Classification
        due_date / paid_date: Scheduling; revenue is counted on paid_date
        transaction_id / reference: External identifiers
        invoice_number: INV{year}{sequence}, assigned on creation
    """

    __tablename__ = "payments"
    __repr_fields__ = ("amount", "status", "invoice_number")

    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    payment_type: Mapped[PaymentType] = mapped_column(
        SQLEnum(PaymentType),
        default=PaymentType.FULL,
        nullable=False,
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod),
        nullable=False,
    )
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )

    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    paid_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)

    transaction_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    invoice_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    invoice_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    customer: Mapped["Customer"] = relationship(
        "Customer",
        back_populates="payments",
        lazy="selectin",
    )
