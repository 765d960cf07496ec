"""
Quote request administration endpoints.
Listing, status changes and the quotation workflow of a request.
"""

from fastapi import APIRouter, Query, status

from scholardesk.api.deps import CurrentAdmin, DbSession
from scholardesk.models.quote_request import ProjectType, QuoteRequestStatus
from scholardesk.schemas.base import MessageResponse, PaginatedResponse
from scholardesk.schemas.quotation import QuotationCreate, QuotationResponse, QuotationResult
from scholardesk.schemas.quote_request import (
    QuoteRequestListResponse,
    QuoteRequestResponse,
    QuoteRequestStatusUpdate,
)
from scholardesk.services.quotation import QuotationService
from scholardesk.services.quote_request import QuoteRequestService


router = APIRouter()


def _download_url(quotation_number: str) -> str:
    return f"/api/v1/admin/quotations/{quotation_number}/pdf"


@router.get(
    "",
    response_model=QuoteRequestListResponse,
    summary="List quote requests",
    description="Paginated list of quote requests, newest first",
)
async def list_quote_requests(
    admin: CurrentAdmin,
    db: DbSession,
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(20, ge=1, le=100, description="Items per page"),
    status_filter: QuoteRequestStatus | None = Query(None, alias="status", description="Filter by status"),
    project_type: ProjectType | None = Query(None, description="Filter by project type"),
    search: str | None = Query(None, description="Search by name or email"),
) -> QuoteRequestListResponse:
    """List quote requests with pagination."""
    service = QuoteRequestService(db)
    skip = (page - 1) * per_page

    quote_requests, total = await service.list(
        skip=skip,
        limit=per_page,
        status_filter=status_filter,
        project_type=project_type,
        search=search,
    )

    return QuoteRequestListResponse(
        items=[QuoteRequestResponse.model_validate(q) for q in quote_requests],
        total=total,
        page=page,
        per_page=per_page,
        pages=PaginatedResponse.page_count(total, per_page),
    )


@router.get(
    "/{quote_request_id}",
    response_model=QuoteRequestResponse,
    summary="Quote request details",
)
async def get_quote_request(
    quote_request_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> QuoteRequestResponse:
    """Get a quote request with its quotation."""
    service = QuoteRequestService(db)
    quote_request = await service.get_or_404(quote_request_id)
    return QuoteRequestResponse.model_validate(quote_request)


@router.patch(
    "/{quote_request_id}/status",
    response_model=QuoteRequestResponse,
    summary="Update quote request status",
)
async def update_quote_request_status(
    quote_request_id: int,
    data: QuoteRequestStatusUpdate,
    admin: CurrentAdmin,
    db: DbSession,
) -> QuoteRequestResponse:
    """Change the status (and notes) of a quote request."""
    service = QuoteRequestService(db)
    quote_request = await service.get_or_404(quote_request_id)
    quote_request = await service.update_status(quote_request, data)
    return QuoteRequestResponse.model_validate(quote_request)


@router.delete(
    "/{quote_request_id}",
    response_model=MessageResponse,
    summary="Delete a quote request",
)
async def delete_quote_request(
    quote_request_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> MessageResponse:
    """Delete a quote request, its quotation and PDF."""
    service = QuoteRequestService(db)
    quote_request = await service.get_or_404(quote_request_id)
    await service.delete(quote_request)
    return MessageResponse(message="Quote request deleted successfully")


# ===== Quotation of a request =====

@router.post(
    "/{quote_request_id}/quotation",
    response_model=QuotationResult,
    status_code=status.HTTP_201_CREATED,
    summary="Generate quotation",
    description="Price the line items, render the PDF and email it to the client",
)
async def generate_quotation(
    quote_request_id: int,
    data: QuotationCreate,
    admin: CurrentAdmin,
    db: DbSession,
) -> QuotationResult:
    """Generate and send the quotation of a request."""
    quote_request = await QuoteRequestService(db).get_or_404(quote_request_id)

    service = QuotationService(db)
    quotation, email_sent = await service.generate(quote_request, data, admin_username=admin.username)

    if email_sent:
        message = "Quotation generated and sent successfully"
    else:
        message = (
            "Quotation generated successfully but email failed to send. "
            "You can download the quotation and send it manually."
        )

    return QuotationResult(
        warning=not email_sent,
        message=message,
        quotation=QuotationResponse.model_validate(quotation),
        email_sent=email_sent,
        download_url=_download_url(quotation.quotation_number),
    )


@router.put(
    "/{quote_request_id}/quotation",
    response_model=QuotationResult,
    summary="Edit quotation",
    description="Re-price and re-render the quotation, keeping its number",
)
async def update_quotation(
    quote_request_id: int,
    data: QuotationCreate,
    admin: CurrentAdmin,
    db: DbSession,
) -> QuotationResult:
    """Regenerate the quotation of a request with new inputs."""
    quote_request = await QuoteRequestService(db).get_or_404(quote_request_id)

    service = QuotationService(db)
    quotation = await service.update(quote_request, data, admin_username=admin.username)

    return QuotationResult(
        message="Quotation updated successfully",
        quotation=QuotationResponse.model_validate(quotation),
        download_url=_download_url(quotation.quotation_number),
    )


@router.delete(
    "/{quote_request_id}/quotation",
    response_model=MessageResponse,
    summary="Delete quotation",
    description="Delete the quotation and its PDF; the request goes back to pending",
)
async def delete_quotation(
    quote_request_id: int,
    admin: CurrentAdmin,
    db: DbSession,
) -> MessageResponse:
    """Delete the quotation of a request."""
    quote_request = await QuoteRequestService(db).get_or_404(quote_request_id)
    await QuotationService(db).delete(quote_request, admin_username=admin.username)
    return MessageResponse(message="Quotation deleted successfully")
