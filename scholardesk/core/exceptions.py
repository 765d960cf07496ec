"""
Domain exceptions for quotation pricing and rendering.
Translated to HTTP responses by the handlers registered in main.py.
"""


class QuotationError(Exception):
    """Base class for quotation errors."""

    code = "quotation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidQuotationError(QuotationError):
    """The inputs cannot produce a chargeable quotation."""

    code = "invalid_quotation"


class NoValidLineItemsError(InvalidQuotationError):
    """No line item survived validation."""

    code = "no_valid_line_items"

    def __init__(self, message: str = "At least one valid line item is required"):
        super().__init__(message)


class NonPositiveTotalError(InvalidQuotationError):
    """Discounts brought the total to zero or below."""

    code = "non_positive_total"

    def __init__(self, total=None):
        message = "Quotation total must be greater than zero"
        if total is not None:
            message = f"{message} (got {total})"
        super().__init__(message)
        self.total = total


class RenderError(QuotationError):
    """The quotation document could not be produced."""

    code = "render_failed"
