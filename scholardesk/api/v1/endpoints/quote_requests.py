"""
Public quote request endpoint.
Submissions from the public site's quote form.
"""

from fastapi import APIRouter, BackgroundTasks, status

from scholardesk.api.deps import DbSession
from scholardesk.schemas.quote_request import QuoteRequestCreate, QuoteRequestSubmitted
from scholardesk.services.email import EmailService
from scholardesk.services.quote_request import QuoteRequestService


router = APIRouter()


@router.post(
    "",
    response_model=QuoteRequestSubmitted,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a quote request",
    description="Submit a project quote request; the administrator is notified by email",
)
async def submit_quote_request(
    data: QuoteRequestCreate,
    db: DbSession,
    background_tasks: BackgroundTasks,
) -> QuoteRequestSubmitted:
    """Create a quote request from the public form."""
    service = QuoteRequestService(db)
    quote_request = await service.create(data)

    background_tasks.add_task(EmailService().send_quote_request_notification, quote_request)

    return QuoteRequestSubmitted.model_validate(quote_request)
