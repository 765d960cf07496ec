"""
Pydantic schemas for request/response validation.
"""

from scholardesk.schemas.quotation import (
    LineItem,
    LineItemInput,
    DiscountSpec,
    TaxSpec,
    QuotationBreakdown,
    QuotationDocument,
    BusinessIdentity,
    QuotationCreate,
    QuotationResponse,
)
from scholardesk.schemas.quote_request import (
    QuoteRequestCreate,
    QuoteRequestResponse,
    QuoteRequestStatusUpdate,
)
from scholardesk.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
)
from scholardesk.schemas.payment import (
    PaymentCreate,
    PaymentUpdate,
    PaymentResponse,
)
from scholardesk.schemas.auth import (
    LoginRequest,
    TokenResponse,
)

__all__ = [
    # Quotation
    "LineItem",
    "LineItemInput",
    "DiscountSpec",
    "TaxSpec",
    "QuotationBreakdown",
    "QuotationDocument",
    "BusinessIdentity",
    "QuotationCreate",
    "QuotationResponse",
    # Quote request
    "QuoteRequestCreate",
    "QuoteRequestResponse",
    "QuoteRequestStatusUpdate",
    # Customer
    "CustomerCreate",
    "CustomerUpdate",
    "CustomerResponse",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    # Payment
    "PaymentCreate",
    "PaymentUpdate",
    "PaymentResponse",
    # Auth
    "LoginRequest",
    "TokenResponse",
]
