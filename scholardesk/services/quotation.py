"""
Quotation service.
Prices, renders, persists and sends quotations for quote requests.
"""

import logging
import os
from datetime import date
from pathlib import Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from fastapi import HTTPException, status

from scholardesk.core.config import settings
from scholardesk.core.exceptions import RenderError
from scholardesk.models.base import utcnow
from scholardesk.models.quotation import Quotation, QuotationLineItem
from scholardesk.models.quote_request import QuoteRequest, QuoteRequestStatus, STATUS_LABELS
from scholardesk.schemas.quotation import (
    LineItem,
    QuotationBreakdown,
    QuotationCreate,
    QuotationDocument,
    normalize_line_items,
)
from scholardesk.services.calculator import (
    calculate_breakdown,
    generate_quotation_number,
    validity_window,
)
from scholardesk.services.email import EmailService
from scholardesk.services.pdf import QuotationRenderer


logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 10


class QuotationService:
    """Service for quotation operations."""

    def __init__(
        self,
        db: AsyncSession,
        renderer: QuotationRenderer | None = None,
        email_service: EmailService | None = None,
    ):
        self.db = db
        self.renderer = renderer or QuotationRenderer(settings.business_identity())
        self.email_service = email_service or EmailService()
        self.storage_path = Path(settings.QUOTATION_STORAGE_PATH)

    # ===== Pricing =====

    def calculate(self, data: QuotationCreate) -> tuple[list[LineItem], QuotationBreakdown]:
        """
        Price a quotation payload without persisting anything.

        Raises:
            NoValidLineItemsError: If no row survives normalisation
            NonPositiveTotalError: If the total is zero or negative
        """
        items = normalize_line_items(data.line_items)
        breakdown = calculate_breakdown(items, data.discount_spec(), data.tax_spec())
        return items, breakdown

    # ===== Lookups =====

    async def get_by_number(self, quotation_number: str) -> Quotation | None:
        result = await self.db.execute(
            select(Quotation).where(Quotation.quotation_number == quotation_number)
        )
        return result.scalar_one_or_none()

    async def get_pdf_path(self, quotation_number: str) -> Path:
        """
        Resolve the PDF of a quotation.

        Raises:
            HTTPException: If the quotation or its file does not exist
        """
        quotation = await self.get_by_number(quotation_number)
        if not quotation or not quotation.pdf_path:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Quotation not found",
            )

        path = Path(quotation.pdf_path)
        if not path.is_file():
            logger.warning(
                "Quotation PDF missing on disk",
                extra={"quotation_number": quotation_number},
            )
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Quotation PDF file not found",
            )
        return path

    async def _number_exists(self, quotation_number: str) -> bool:
        result = await self.db.execute(
            select(func.count(Quotation.id)).where(
                Quotation.quotation_number == quotation_number,
            )
        )
        return (result.scalar() or 0) > 0

    async def _allocate_number(self, issued_on: date) -> str:
        """Draw random numbers until one is free."""
        for _ in range(MAX_NUMBER_ATTEMPTS):
            number = generate_quotation_number(settings.QUOTATION_PREFIX, issued_on)
            if not await self._number_exists(number):
                return number
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Could not allocate a unique quotation number, try again",
        )

    def _pdf_path(self, quotation_number: str) -> Path:
        return self.storage_path / f"quotation-{quotation_number}.pdf"

    def _document(
        self,
        quote_request: QuoteRequest,
        data: QuotationCreate,
        items: list[LineItem],
        quotation_number: str,
        date_issued: date,
        valid_until: date,
        revision: int,
    ) -> QuotationDocument:
        return QuotationDocument(
            quotation_number=quotation_number,
            date_issued=date_issued,
            valid_until=valid_until,
            status_label=STATUS_LABELS[QuoteRequestStatus.QUOTED],
            revision=revision,
            line_items=tuple(items),
            discount=data.discount_spec(),
            tax=data.tax_spec(),
            payment_terms=data.payment_terms or settings.QUOTATION_PAYMENT_TERMS,
            notes=data.notes or "",
            client_name=quote_request.name,
            client_email=quote_request.email,
            client_phone=quote_request.phone or "",
            university=quote_request.university or "",
            course=quote_request.course or "",
            project_type=quote_request.project_type.value,
            description=quote_request.description or "",
        )

    @staticmethod
    def _line_item_rows(items: list[LineItem]) -> list[QuotationLineItem]:
        return [
            QuotationLineItem(
                position=position,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for position, item in enumerate(items)
        ]

    # ===== Workflow =====

    async def generate(
        self,
        quote_request: QuoteRequest,
        data: QuotationCreate,
        admin_username: str | None = None,
    ) -> tuple[Quotation, bool]:
        """
        Generate, store and email the first quotation of a request.

        Args:
            quote_request: Request being quoted
            data: Pricing inputs
            admin_username: Administrator performing the action

        Returns:
            Tuple of (quotation, email_sent)

        Raises:
            HTTPException: If the request already has a quotation
            InvalidQuotationError: If the inputs cannot be priced
            RenderError: If the PDF cannot be produced
        """
        if quote_request.quotation is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A quotation already exists for this request, edit it instead",
            )

        items, breakdown = self.calculate(data)
        validity_days = data.validity_days or settings.QUOTATION_VALIDITY_DAYS
        date_issued, valid_until = validity_window(date.today(), validity_days)
        quotation_number = await self._allocate_number(date_issued)

        document = self._document(
            quote_request, data, items, quotation_number, date_issued, valid_until, revision=1,
        )
        pdf_path = self._pdf_path(quotation_number)
        self.renderer.render(document, breakdown, pdf_path)

        rounded = breakdown.rounded()
        quotation = Quotation(
            quote_request_id=quote_request.id,
            quotation_number=quotation_number,
            revision=1,
            date_issued=date_issued,
            valid_until=valid_until,
            validity_days=validity_days,
            discount_value=data.discount,
            discount_type=data.discount_type,
            tax_rate=data.tax_rate,
            payment_terms=document.payment_terms,
            notes=data.notes,
            subtotal=rounded.subtotal,
            discount_amount=rounded.discount_amount,
            tax_amount=rounded.tax_amount,
            total=rounded.total,
            pdf_path=str(pdf_path),
        )
        quotation.line_items = self._line_item_rows(items)
        quote_request.quotation = quotation
        quote_request.status = QuoteRequestStatus.QUOTED
        quote_request.quoted_price = rounded.total

        try:
            await self.db.flush()
        except Exception:
            pdf_path.unlink(missing_ok=True)
            raise

        logger.info(
            f"Quotation generated by {admin_username or 'admin'}",
            extra={
                "quotation_number": quotation_number,
                "quote_request_id": quote_request.id,
                "total": str(rounded.total),
            },
        )

        email_sent = await self.email_service.send_quotation(document, breakdown, str(pdf_path))
        if email_sent:
            quotation.sent_at = utcnow()
            await self.db.flush()
        else:
            logger.warning(
                "Quotation email not sent",
                extra={"quotation_number": quotation_number},
            )

        return await self._reload(quotation.id), email_sent

    async def update(
        self,
        quote_request: QuoteRequest,
        data: QuotationCreate,
        admin_username: str | None = None,
    ) -> Quotation:
        """
        Re-price and re-render an existing quotation.

        The quotation number is kept; the revision is incremented and the
        validity window restarts today.

        Raises:
            HTTPException: If the request has no quotation yet
            RenderError: If the new PDF cannot be produced or stored
        """
        quotation = quote_request.quotation
        if quotation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No quotation found for this request",
            )

        items, breakdown = self.calculate(data)
        validity_days = data.validity_days or quotation.validity_days
        date_issued, valid_until = validity_window(date.today(), validity_days)
        revision = quotation.revision + 1

        document = self._document(
            quote_request, data, items, quotation.quotation_number, date_issued, valid_until, revision,
        )
        pdf_path = self._pdf_path(quotation.quotation_number)
        staged_path = pdf_path.with_name(f".{pdf_path.name}.pending")
        self.renderer.render(document, breakdown, staged_path)

        rounded = breakdown.rounded()
        quotation.revision = revision
        quotation.date_issued = date_issued
        quotation.valid_until = valid_until
        quotation.validity_days = validity_days
        quotation.discount_value = data.discount
        quotation.discount_type = data.discount_type
        quotation.tax_rate = data.tax_rate
        quotation.payment_terms = document.payment_terms
        quotation.notes = data.notes
        quotation.subtotal = rounded.subtotal
        quotation.discount_amount = rounded.discount_amount
        quotation.tax_amount = rounded.tax_amount
        quotation.total = rounded.total
        quotation.pdf_path = str(pdf_path)
        quotation.line_items = self._line_item_rows(items)

        quote_request.status = QuoteRequestStatus.QUOTED
        quote_request.quoted_price = rounded.total

        # The stored PDF is replaced only once the new figures are flushed
        try:
            await self.db.flush()
        except Exception:
            staged_path.unlink(missing_ok=True)
            raise

        try:
            os.replace(staged_path, pdf_path)
        except OSError as exc:
            staged_path.unlink(missing_ok=True)
            raise RenderError(f"Could not store quotation {quotation.quotation_number}") from exc

        logger.info(
            f"Quotation revised by {admin_username or 'admin'} (revision {revision})",
            extra={
                "quotation_number": quotation.quotation_number,
                "quote_request_id": quote_request.id,
                "total": str(rounded.total),
            },
        )
        return await self._reload(quotation.id)

    async def delete(self, quote_request: QuoteRequest, admin_username: str | None = None) -> None:
        """
        Delete the quotation of a request and reset the request to pending.

        A PDF that cannot be removed is logged and left behind.
        """
        quotation = quote_request.quotation
        if quotation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No quotation found for this request",
            )

        self.remove_pdf(quotation)

        quotation_number = quotation.quotation_number
        quote_request.quotation = None
        quote_request.status = QuoteRequestStatus.PENDING
        quote_request.quoted_price = None
        await self.db.flush()

        logger.info(
            f"Quotation deleted by {admin_username or 'admin'}",
            extra={"quotation_number": quotation_number, "quote_request_id": quote_request.id},
        )

    def remove_pdf(self, quotation: Quotation) -> None:
        if not quotation.pdf_path:
            return
        try:
            Path(quotation.pdf_path).unlink(missing_ok=True)
        except OSError as e:
            logger.error(
                f"Could not delete quotation PDF {quotation.pdf_path}: {e}",
                extra={"quotation_number": quotation.quotation_number},
            )

    async def _reload(self, quotation_id: int) -> Quotation:
        result = await self.db.execute(
            select(Quotation)
            .where(Quotation.id == quotation_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
