"""
Database models module.
All SQLAlchemy models are exported from here for easy imports.
"""

from scholardesk.models.quote_request import QuoteRequest
from scholardesk.models.quotation import Quotation, QuotationLineItem
from scholardesk.models.customer import Customer, CustomerProject
from scholardesk.models.payment import Payment


__all__ = [
    "QuoteRequest",
    "Quotation",
    "QuotationLineItem",
    "Customer",
    "CustomerProject",
    "Payment",
]
