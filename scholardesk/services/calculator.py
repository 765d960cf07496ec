"""
Quotation calculator.
Pure pricing functions: line items, discount and tax to a breakdown.
"""

import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Sequence

from scholardesk.core.exceptions import NoValidLineItemsError, NonPositiveTotalError
from scholardesk.models.quotation import DiscountType
from scholardesk.schemas.quotation import (
    DiscountSpec,
    LineItem,
    QuotationBreakdown,
    TaxSpec,
    to_money,
)


HUNDRED = Decimal("100")
ZERO = Decimal("0")


def calculate_breakdown(
    line_items: Sequence[LineItem],
    discount: DiscountSpec | None = None,
    tax: TaxSpec | None = None,
) -> QuotationBreakdown:
    """
    Price a quotation.

    The discount applies to the subtotal and never exceeds it; tax
    applies to the discounted base. Amounts keep full precision; the
    positivity check is made on the total rounded to cents.

    Raises:
        NoValidLineItemsError: If line_items is empty
        NonPositiveTotalError: If the total rounds to zero or less
    """
    if not line_items:
        raise NoValidLineItemsError()

    discount = discount or DiscountSpec()
    tax = tax or TaxSpec()

    subtotal = sum((item.amount for item in line_items), ZERO)

    if discount.type == DiscountType.PERCENTAGE:
        discount_amount = subtotal * discount.value / HUNDRED
    else:
        discount_amount = discount.value
    discount_amount = min(discount_amount, subtotal)

    taxable = subtotal - discount_amount
    tax_amount = taxable * tax.rate / HUNDRED
    total = taxable + tax_amount

    if to_money(total) <= ZERO:
        raise NonPositiveTotalError(to_money(total))

    return QuotationBreakdown(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        total=total,
    )


def generate_quotation_number(prefix: str, issued_on: date | None = None) -> str:
    """
    Generate a quotation number.
    Format: {prefix}-{YYYYMM}-{random 4 digits}
    """
    issued_on = issued_on or date.today()
    suffix = str(random.randint(0, 9999)).zfill(4)
    return f"{prefix}-{issued_on.year}{issued_on.month:02d}-{suffix}"


def validity_window(issued_on: date, validity_days: int = 30) -> tuple[date, date]:
    """Return (date_issued, valid_until)."""
    if validity_days < 1:
        raise ValueError("validity_days must be at least 1")
    return issued_on, issued_on + timedelta(days=validity_days)
