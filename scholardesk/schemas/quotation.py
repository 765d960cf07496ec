"""
Quotation schemas.

Value types consumed by the calculator and the renderer, plus the
request/response schemas of the quotation endpoints. Admin form rows
arrive as loose LineItemInput objects and are normalised into
immutable LineItem values before any pricing happens.
"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable
from pydantic import Field, computed_field

from scholardesk.schemas.base import BaseSchema, ValueObject
from scholardesk.models.quotation import DiscountType


CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    """Round a monetary amount to cents, half up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# ===== Value types =====

class LineItem(ValueObject):
    """A validated billable row."""

    description: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, decimal_places=2)

    @computed_field
    @property
    def amount(self) -> Decimal:
        return self.quantity * self.unit_price


class DiscountSpec(ValueObject):
    value: Decimal = Field(default=Decimal("0"), ge=0)
    type: DiscountType = DiscountType.PERCENTAGE


class TaxSpec(ValueObject):
    rate: Decimal = Field(default=Decimal("0"), ge=0)


class QuotationBreakdown(ValueObject):
    """
    Computed pricing of a quotation.

    Fields keep full precision; call rounded() for presentation
    and persistence.
    """

    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal

    def rounded(self) -> "QuotationBreakdown":
        return QuotationBreakdown(
            subtotal=to_money(self.subtotal),
            discount_amount=to_money(self.discount_amount),
            tax_amount=to_money(self.tax_amount),
            total=to_money(self.total),
        )


class BusinessIdentity(ValueObject):
    """Issuer details printed on every quotation."""

    company_name: str
    tagline: tuple[str, ...] = ()
    email: str
    whatsapp: str = ""
    website: str = ""
    currency_symbol: str = "$"
    terms_and_conditions: tuple[str, ...] = ()

    @property
    def thank_you_line(self) -> str:
        return f"Thank you for choosing {self.company_name.title()}!"

    @property
    def contact_line(self) -> str:
        line = f"For any queries, please contact us at {self.email}"
        if self.whatsapp:
            line += f" or WhatsApp {self.whatsapp}"
        return line


class QuotationDocument(ValueObject):
    """Everything printed on a quotation, detached from the database."""

    quotation_number: str = ""
    date_issued: date
    valid_until: date
    status_label: str = "Draft"
    revision: int = 1
    line_items: tuple[LineItem, ...] = ()
    discount: DiscountSpec = DiscountSpec()
    tax: TaxSpec = TaxSpec()
    payment_terms: str = ""
    notes: str = ""
    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""
    university: str = ""
    course: str = ""
    project_type: str = ""
    description: str = ""


# ===== Admin input =====

class LineItemInput(BaseSchema):
    """Line item row as typed in the admin form; blanks allowed."""

    description: str | None = ""
    quantity: int | None = None
    unit_price: Decimal | None = Field(None, decimal_places=2)


def normalize_line_items(rows: Iterable[LineItemInput]) -> list[LineItem]:
    """
    Keep the rows that describe a billable item.

    Rows with an empty description, a non-positive quantity or a
    non-positive unit price are dropped. Order is preserved.
    """
    items = []
    for row in rows:
        description = (row.description or "").strip()
        if not description:
            continue
        if row.quantity is None or row.quantity <= 0:
            continue
        if row.unit_price is None or row.unit_price <= 0:
            continue
        items.append(
            LineItem(
                description=description,
                quantity=row.quantity,
                unit_price=row.unit_price,
            )
        )
    return items


class QuotationCreate(BaseSchema):
    """Payload for generating or editing a quotation."""

    line_items: list[LineItemInput] = Field(default_factory=list)
    discount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=4)
    discount_type: DiscountType = DiscountType.PERCENTAGE
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=4)
    payment_terms: str | None = None
    notes: str | None = None
    validity_days: int | None = Field(default=None, ge=1, le=365)

    def discount_spec(self) -> DiscountSpec:
        return DiscountSpec(value=self.discount, type=self.discount_type)

    def tax_spec(self) -> TaxSpec:
        return TaxSpec(rate=self.tax_rate)


# ===== Responses =====

class BreakdownResponse(BaseSchema):
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    line_items: list[LineItem]


class QuotationLineItemResponse(BaseSchema):
    id: int
    position: int
    description: str
    quantity: int
    unit_price: Decimal
    amount: Decimal


class QuotationResponse(BaseSchema):
    """Quotation response schema."""

    id: int
    quote_request_id: int
    quotation_number: str
    revision: int
    date_issued: date
    valid_until: date
    validity_days: int
    discount_value: Decimal
    discount_type: DiscountType
    tax_rate: Decimal
    payment_terms: str
    notes: str | None
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    sent_at: datetime | None
    line_items: list[QuotationLineItemResponse]
    created_at: datetime
    updated_at: datetime


class QuotationResult(BaseSchema):
    """Outcome of a generate/edit action."""

    success: bool = True
    warning: bool = False
    message: str
    quotation: QuotationResponse
    email_sent: bool = False
    download_url: str
