"""
Quotation endpoints.
Live pricing preview and PDF download.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from scholardesk.api.deps import CurrentAdmin, DbSession
from scholardesk.schemas.quotation import BreakdownResponse, QuotationCreate
from scholardesk.services.quotation import QuotationService


router = APIRouter()


@router.post(
    "/calculate",
    response_model=BreakdownResponse,
    summary="Calculate a quotation",
    description="Price line items with discount and tax without saving anything",
)
async def calculate_quotation(
    data: QuotationCreate,
    admin: CurrentAdmin,
    db: DbSession,
) -> BreakdownResponse:
    """Preview the breakdown of a quotation."""
    items, breakdown = QuotationService(db).calculate(data)
    rounded = breakdown.rounded()
    return BreakdownResponse(
        subtotal=rounded.subtotal,
        discount_amount=rounded.discount_amount,
        tax_amount=rounded.tax_amount,
        total=rounded.total,
        line_items=items,
    )


@router.get(
    "/{quotation_number}/pdf",
    summary="Download quotation PDF",
    response_class=FileResponse,
)
async def download_quotation_pdf(
    quotation_number: str,
    admin: CurrentAdmin,
    db: DbSession,
) -> FileResponse:
    """Stream the stored PDF of a quotation."""
    path = await QuotationService(db).get_pdf_path(quotation_number)
    return FileResponse(
        path,
        media_type="application/pdf",
        filename=f"quotation-{quotation_number}.pdf",
        content_disposition_type="inline",
    )
