"""
Quote request service.
Handles public submissions and their administration.
"""

import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from fastapi import HTTPException, status

from scholardesk.models.quote_request import ProjectType, QuoteRequest, QuoteRequestStatus
from scholardesk.schemas.quote_request import QuoteRequestCreate, QuoteRequestStatusUpdate
from scholardesk.services.quotation import QuotationService


logger = logging.getLogger(__name__)


class QuoteRequestService:
    """Service for quote request operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: QuoteRequestCreate) -> QuoteRequest:
        """
        Store a quote request submitted from the public site.

        Args:
            data: Validated submission

        Returns:
            Created quote request
        """
        quote_request = QuoteRequest(**data.model_dump())

        self.db.add(quote_request)
        await self.db.flush()

        logger.info(
            "Quote request submitted",
            extra={"quote_request_id": quote_request.id},
        )
        return await self.get_or_404(quote_request.id)

    async def get_by_id(self, quote_request_id: int) -> QuoteRequest | None:
        result = await self.db.execute(
            select(QuoteRequest)
            .where(QuoteRequest.id == quote_request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_or_404(self, quote_request_id: int) -> QuoteRequest:
        """
        Get quote request by ID or raise 404.

        Raises:
            HTTPException: If the quote request does not exist
        """
        quote_request = await self.get_by_id(quote_request_id)
        if not quote_request:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Quote request not found",
            )
        return quote_request

    async def list(
        self,
        skip: int = 0,
        limit: int = 20,
        status_filter: QuoteRequestStatus | None = None,
        project_type: ProjectType | None = None,
        search: str | None = None,
    ) -> tuple[list[QuoteRequest], int]:
        """
        List quote requests, newest first.

        Returns:
            Tuple of (quote requests, total count)
        """
        query = select(QuoteRequest)
        count_query = select(func.count(QuoteRequest.id))

        if status_filter:
            query = query.where(QuoteRequest.status == status_filter)
            count_query = count_query.where(QuoteRequest.status == status_filter)

        if project_type:
            query = query.where(QuoteRequest.project_type == project_type)
            count_query = count_query.where(QuoteRequest.project_type == project_type)

        if search:
            search_filter = f"%{search}%"
            condition = (
                (QuoteRequest.name.ilike(search_filter)) |
                (QuoteRequest.email.ilike(search_filter))
            )
            query = query.where(condition)
            count_query = count_query.where(condition)

        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(QuoteRequest.submitted_at.desc(), QuoteRequest.id.desc())
        query = query.offset(skip).limit(limit)
        result = await self.db.execute(query)

        return list(result.scalars().all()), total

    async def update_status(
        self,
        quote_request: QuoteRequest,
        data: QuoteRequestStatusUpdate,
    ) -> QuoteRequest:
        """Change the processing status and optionally the admin notes."""
        quote_request.status = data.status
        if data.notes is not None:
            quote_request.notes = data.notes

        await self.db.flush()
        logger.info(
            f"Quote request status changed to {data.status.value}",
            extra={"quote_request_id": quote_request.id},
        )
        return await self.get_or_404(quote_request.id)

    async def delete(self, quote_request: QuoteRequest) -> None:
        """Delete a quote request together with its quotation and PDF."""
        if quote_request.quotation is not None:
            QuotationService(self.db).remove_pdf(quote_request.quotation)

        await self.db.delete(quote_request)
        await self.db.flush()
        logger.info("Quote request deleted", extra={"quote_request_id": quote_request.id})
