"""
Quotation and QuotationLineItem models.
One quotation per quote request; the number is assigned once
and kept across edits, which bump the revision instead.
"""

from typing import Optional, List, TYPE_CHECKING
from decimal import Decimal
from datetime import date, datetime
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, Integer, Numeric, Date, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scholardesk.models.base import BaseModel

if TYPE_CHECKING:
    from scholardesk.models.quote_request import QuoteRequest


class DiscountType(str, Enum):
    """How a discount value is interpreted."""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Quotation(BaseModel):
    """
    Quotation model.

    Attributes:
        quote_request_id: The request this quotation answers
        quotation_number: PREFIX-YYYYMM-NNNN, immutable
        revision: 1 on generation, incremented on every edit
        date_issued / valid_until: Validity window
        discount_value / discount_type / tax_rate: Pricing inputs
        subtotal / discount_amount / tax_amount / total: Rounded breakdown
        pdf_path: Location of the rendered document
        sent_at: Last time the document was produced for the client
    """

    __tablename__ = "quotations"
    __repr_fields__ = ("quotation_number", "revision", "total")

    quote_request_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("quote_requests.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    quotation_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
    )
    revision: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    date_issued: Mapped[date] = mapped_column(Date, nullable=False)
    valid_until: Mapped[date] = mapped_column(Date, nullable=False)
    validity_days: Mapped[int] = mapped_column(Integer, default=30, nullable=False)

    discount_value: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=4),
        default=Decimal("0.00"),
        nullable=False,
    )
    discount_type: Mapped[DiscountType] = mapped_column(
        SQLEnum(DiscountType),
        default=DiscountType.PERCENTAGE,
        nullable=False,
    )
    tax_rate: Mapped[Decimal] = mapped_column(
        Numeric(precision=9, scale=4),
        default=Decimal("0.00"),
        nullable=False,
    )
    payment_terms: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)

    pdf_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    quote_request: Mapped["QuoteRequest"] = relationship(
        "QuoteRequest",
        back_populates="quotation",
    )
    line_items: Mapped[List["QuotationLineItem"]] = relationship(
        "QuotationLineItem",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationLineItem.position",
        lazy="selectin",
    )


class QuotationLineItem(BaseModel):
    """One billable row of a quotation, in display order."""

    __tablename__ = "quotation_line_items"
    __repr_fields__ = ("position", "description")

    quotation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("quotations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)

    quotation: Mapped["Quotation"] = relationship(
        "Quotation",
        back_populates="line_items",
    )

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.unit_price
