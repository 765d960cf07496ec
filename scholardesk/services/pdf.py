"""
PDF Generation Service.
Renders quotation documents with ReportLab.

Blocks are laid out top-down with an explicit cursor so every block can
be measured before it is drawn: a block that does not fit below the
cursor starts on a new page. Line-item rows are placed one at a time and
the column header is repeated on continuation pages.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import Paragraph, Spacer, Table, TableStyle
from reportlab.platypus.doctemplate import LayoutError
from reportlab.platypus.flowables import Flowable, HRFlowable

from scholardesk.core.exceptions import RenderError
from scholardesk.models.quotation import DiscountType
from scholardesk.schemas.quotation import (
    BusinessIdentity,
    LineItem,
    QuotationBreakdown,
    QuotationDocument,
    to_money,
)

logger = logging.getLogger(__name__)

Sink = Union[str, os.PathLike, BinaryIO]

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

PAGE_MARGIN = 50
BLOCK_GAP = 14


@dataclass(frozen=True)
class RenderResult:
    """
    Where things landed in a rendered quotation.

    Attributes:
        page_count: Number of pages in the document
        row_pages: Page number of each line-item row, in order
        block_pages: Page on which each layout block starts
    """

    page_count: int
    row_pages: tuple[int, ...] = ()
    block_pages: dict[str, int] = field(default_factory=dict)


class _PageCursor:
    """Top-down vertical position on the current page."""

    def __init__(self, canv: pdf_canvas.Canvas, page_width: float, page_height: float, margin: float):
        self.canv = canv
        self.page_height = page_height
        self.left = margin
        self.width = page_width - 2 * margin
        self.top = margin
        self.bottom = page_height - margin
        self.page = 1
        self.y = self.top

    @property
    def remaining(self) -> float:
        return self.bottom - self.y

    @property
    def at_top(self) -> bool:
        return self.y <= self.top

    def new_page(self) -> None:
        self.canv.showPage()
        self.page += 1
        self.y = self.top

    def ensure(self, height: float) -> bool:
        """Start a new page when height does not fit below the cursor."""
        if self.y + height > self.bottom and not self.at_top:
            self.new_page()
            return True
        return False

    def skip(self, height: float) -> None:
        self.y += height

    def draw(self, flowable: Flowable, height: float) -> None:
        flowable.drawOn(self.canv, self.left, self.page_height - self.y - height)
        self.y += height


class QuotationRenderer:
    """Service for generating quotation PDFs."""

    def __init__(self, identity: BusinessIdentity):
        self.identity = identity
        self.page_width, self.page_height = A4

        # Colors
        self.primary_color = colors.HexColor("#4F46E5")  # Indigo
        self.secondary_color = colors.HexColor("#10B981")  # Green
        self.text_color = colors.HexColor("#1F2937")
        self.gray_color = colors.HexColor("#6B7280")
        self.light_gray = colors.HexColor("#F3F4F6")
        self.border_color = colors.HexColor("#E5E7EB")

        self.styles = self._get_styles()
        self.cursor = None

    def _get_styles(self):
        """Get custom paragraph styles."""
        styles = getSampleStyleSheet()

        styles.add(ParagraphStyle(
            name='CompanyName',
            parent=styles['Normal'],
            fontName='Helvetica-Bold',
            fontSize=20,
            leading=24,
            textColor=self.primary_color,
        ))

        styles.add(ParagraphStyle(
            name='Tagline',
            parent=styles['Normal'],
            fontSize=9,
            leading=12,
            textColor=self.gray_color,
        ))

        styles.add(ParagraphStyle(
            name='Contact',
            parent=styles['Normal'],
            fontSize=9,
            leading=12,
            textColor=self.text_color,
            alignment=TA_RIGHT,
        ))

        styles.add(ParagraphStyle(
            name='QuotationTitle',
            parent=styles['Normal'],
            fontName='Helvetica-Bold',
            fontSize=22,
            leading=26,
            textColor=self.primary_color,
            alignment=TA_CENTER,
        ))

        styles.add(ParagraphStyle(
            name='BoxHeading',
            parent=styles['Normal'],
            fontName='Helvetica-Bold',
            fontSize=10,
            leading=14,
            textColor=self.primary_color,
        ))

        styles.add(ParagraphStyle(
            name='BoxText',
            parent=styles['Normal'],
            fontSize=9,
            leading=13,
            textColor=self.text_color,
        ))

        styles.add(ParagraphStyle(
            name='SectionHeader',
            parent=styles['Normal'],
            fontName='Helvetica-Bold',
            fontSize=12,
            leading=15,
            textColor=self.primary_color,
            spaceAfter=6,
        ))

        styles.add(ParagraphStyle(
            name='NormalText',
            parent=styles['Normal'],
            fontSize=10,
            leading=13,
            textColor=self.text_color,
        ))

        styles.add(ParagraphStyle(
            name='ColumnHeader',
            parent=styles['Normal'],
            fontName='Helvetica-Bold',
            fontSize=10,
            leading=12,
            textColor=colors.white,
        ))

        styles.add(ParagraphStyle(
            name='ColumnHeaderRight',
            parent=styles['ColumnHeader'],
            alignment=TA_RIGHT,
        ))

        styles.add(ParagraphStyle(
            name='Cell',
            parent=styles['Normal'],
            fontSize=9,
            leading=11,
            textColor=self.text_color,
            alignment=TA_LEFT,
        ))

        styles.add(ParagraphStyle(
            name='CellRight',
            parent=styles['Cell'],
            alignment=TA_RIGHT,
        ))

        styles.add(ParagraphStyle(
            name='TermsText',
            parent=styles['Normal'],
            fontSize=8,
            leading=10,
            textColor=self.gray_color,
            spaceAfter=3,
        ))

        styles.add(ParagraphStyle(
            name='ThankYou',
            parent=styles['Normal'],
            fontName='Helvetica-Bold',
            fontSize=11,
            leading=14,
            textColor=self.secondary_color,
            alignment=TA_CENTER,
        ))

        styles.add(ParagraphStyle(
            name='FooterText',
            parent=styles['Normal'],
            fontSize=8,
            leading=11,
            textColor=self.gray_color,
            alignment=TA_CENTER,
        ))

        return styles

    def _format_currency(self, amount: Decimal) -> str:
        """Format amount as currency."""
        return f"{self.identity.currency_symbol}{to_money(amount):,.2f}"

    def _format_date(self, d: date) -> str:
        """Format date in long English form."""
        return f"{d.day:02d} {MONTHS[d.month - 1]} {d.year}"

    @staticmethod
    def _format_rate(value: Decimal) -> str:
        return f"{Decimal(value).normalize():f}"

    # ===== Public API =====

    def render(
        self,
        document: QuotationDocument,
        breakdown: QuotationBreakdown,
        sink: Sink,
    ) -> RenderResult:
        """
        Render a quotation into a sink.

        Args:
            document: Quotation content
            breakdown: Computed pricing
            sink: Target file path, or a writable binary stream (closed once rendering ends)

        Returns:
            RenderResult with page placement details

        Raises:
            RenderError: If the inputs are incomplete or the sink cannot be written
        """
        if isinstance(sink, (str, os.PathLike)):
            data, result = self.render_bytes(document, breakdown)
            self._write_file(Path(sink), data)
        else:
            try:
                data, result = self.render_bytes(document, breakdown)
                try:
                    sink.write(data)
                except (OSError, ValueError) as exc:
                    raise RenderError(f"Could not write quotation {document.quotation_number}") from exc
            finally:
                sink.close()

        logger.info(
            "Quotation rendered",
            extra={"quotation_number": document.quotation_number, "total": str(breakdown.total)},
        )
        return result

    def render_bytes(
        self,
        document: QuotationDocument,
        breakdown: QuotationBreakdown,
    ) -> tuple[bytes, RenderResult]:
        """Render a quotation in memory and return the PDF bytes."""
        self._validate(document, breakdown)

        buffer = BytesIO()
        try:
            result = self._build(document, breakdown.rounded(), buffer)
        except (LayoutError, ValueError) as exc:
            raise RenderError(f"Could not lay out quotation {document.quotation_number}") from exc
        return buffer.getvalue(), result

    # ===== Validation and output =====

    def _validate(self, document: QuotationDocument, breakdown: QuotationBreakdown) -> None:
        if to_money(breakdown.total) <= 0:
            raise RenderError("Cannot render a quotation with a non-positive total")
        if not document.quotation_number.strip():
            raise RenderError("Quotation number is required")
        if not document.client_name.strip():
            raise RenderError("Client name is required")
        if not document.client_email.strip():
            raise RenderError("Client email is required")

    def _write_file(self, target: Path, data: bytes) -> None:
        """Write next to the target, then move into place."""
        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Failed to write quotation PDF %s: %s", target, exc)
            raise RenderError(f"Could not write {target.name}") from exc

    # ===== Layout =====

    def _build(
        self,
        document: QuotationDocument,
        breakdown: QuotationBreakdown,
        buffer: BytesIO,
    ) -> RenderResult:
        canv = pdf_canvas.Canvas(buffer, pagesize=A4)
        canv.setTitle(f"Quotation {document.quotation_number}")
        canv.setAuthor(self.identity.company_name)
        canv.setSubject(f"Quotation for {document.client_name}")

        self.cursor = _PageCursor(canv, self.page_width, self.page_height, PAGE_MARGIN)
        block_pages: dict[str, int] = {}

        # ===== HEADER =====
        self._place_block("header", [self._header()], block_pages)

        # ===== TITLE + INFO BOXES =====
        self._place_block(
            "details",
            [Paragraph("QUOTATION", self.styles['QuotationTitle']), Spacer(1, 10), self._info_boxes(document)],
            block_pages,
        )

        # ===== PROJECT INFORMATION =====
        project = self._project_information(document)
        if project:
            self._place_block("project_information", project, block_pages)

        # ===== LINE ITEMS =====
        row_pages = self._place_line_items(document.line_items, block_pages)

        # ===== TOTALS =====
        self._place_block("totals", [self._totals(document, breakdown)], block_pages)

        # ===== PAYMENT TERMS =====
        if document.payment_terms.strip():
            self._place_block(
                "payment_terms",
                self._section("PAYMENT TERMS", document.payment_terms, self.styles['NormalText']),
                block_pages,
            )

        # ===== NOTES =====
        if document.notes.strip():
            self._place_block(
                "notes",
                self._section("ADDITIONAL NOTES", document.notes, self.styles['NormalText']),
                block_pages,
            )

        # ===== TERMS =====
        if self.identity.terms_and_conditions:
            terms = [Paragraph("TERMS &amp; CONDITIONS", self.styles['SectionHeader'])]
            for number, term in enumerate(self.identity.terms_and_conditions, start=1):
                terms.append(Paragraph(f"{number}. {escape(term)}", self.styles['TermsText']))
            self._place_block("terms_and_conditions", terms, block_pages)

        # ===== FOOTER =====
        self._place_block("footer", self._footer(), block_pages)

        page_count = self.cursor.page
        canv.showPage()
        canv.save()

        return RenderResult(
            page_count=page_count,
            row_pages=tuple(row_pages),
            block_pages=block_pages,
        )

    def _measure(self, flowables: list[Flowable]) -> float:
        height = 0.0
        for flowable in flowables:
            _, h = flowable.wrapOn(self.cursor.canv, self.cursor.width, self.page_height)
            height += flowable.getSpaceBefore() + h + flowable.getSpaceAfter()
        return height

    def _place_block(self, name: str, flowables: list[Flowable], block_pages: dict[str, int]) -> None:
        self.cursor.ensure(self._measure(flowables))
        block_pages[name] = self.cursor.page
        for flowable in flowables:
            self._flow(flowable)
        self.cursor.skip(BLOCK_GAP)

    def _flow(self, flowable: Flowable) -> None:
        """Draw a flowable at the cursor, splitting it across pages if needed."""
        cursor = self.cursor
        if not cursor.at_top:
            cursor.skip(flowable.getSpaceBefore())

        while True:
            _, height = flowable.wrapOn(cursor.canv, cursor.width, cursor.remaining)
            if height <= cursor.remaining:
                cursor.draw(flowable, height)
                cursor.skip(flowable.getSpaceAfter())
                return

            parts = flowable.splitOn(cursor.canv, cursor.width, cursor.remaining)
            if len(parts) >= 2:
                head, rest = parts[0], parts[1:]
                _, head_height = head.wrapOn(cursor.canv, cursor.width, cursor.remaining)
                cursor.draw(head, head_height)
                cursor.new_page()
                for part in rest[:-1]:
                    self._flow(part)
                flowable = rest[-1]
                continue

            if cursor.at_top:
                # Cannot split and taller than a page
                cursor.draw(flowable, height)
                cursor.skip(flowable.getSpaceAfter())
                return
            cursor.new_page()

    def _place_line_items(self, line_items: tuple[LineItem, ...], block_pages: dict[str, int]) -> list[int]:
        heading = Paragraph("QUOTATION BREAKDOWN", self.styles['SectionHeader'])
        column_header = self._column_header()
        rows = [self._item_row(item, index) for index, item in enumerate(line_items)]

        self.cursor.ensure(self._measure([heading, column_header] + rows[:1]))
        block_pages["line_items"] = self.cursor.page
        self._flow(heading)
        self._flow(column_header)

        row_pages = []
        for row in rows:
            _, height = row.wrapOn(self.cursor.canv, self.cursor.width, self.page_height)
            if self.cursor.ensure(height):
                self._flow(column_header)
            self.cursor.draw(row, height)
            row_pages.append(self.cursor.page)

        self.cursor.skip(BLOCK_GAP)
        return row_pages

    # ===== Blocks =====

    def _header(self) -> Table:
        identity = self.identity
        left = [Paragraph(escape(identity.company_name), self.styles['CompanyName'])]
        left += [Paragraph(escape(line), self.styles['Tagline']) for line in identity.tagline]

        right = [Paragraph(f"Email: {escape(identity.email)}", self.styles['Contact'])]
        if identity.whatsapp:
            right.append(Paragraph(f"WhatsApp: {escape(identity.whatsapp)}", self.styles['Contact']))
        if identity.website:
            right.append(Paragraph(f"Website: {escape(identity.website)}", self.styles['Contact']))

        width = self.page_width - 2 * PAGE_MARGIN
        header_table = Table([[left, right]], colWidths=[width * 0.55, width * 0.45])
        header_table.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
            ('TOPPADDING', (0, 0), (-1, -1), 0),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 10),
            ('LINEBELOW', (0, 0), (-1, 0), 2, self.primary_color),
        ]))
        return header_table

    def _info_boxes(self, document: QuotationDocument) -> Table:
        text = self.styles['BoxText']

        def line(label: str, value: str) -> Paragraph:
            return Paragraph(f"<b>{label}:</b> {escape(value)}", text)

        quotation = [
            Paragraph("QUOTATION DETAILS", self.styles['BoxHeading']),
            line("Quotation No", document.quotation_number),
            line("Date Issued", self._format_date(document.date_issued)),
            line("Valid Until", self._format_date(document.valid_until)),
            line("Status", document.status_label),
        ]
        if document.revision > 1:
            quotation.append(line("Revision", str(document.revision)))

        client = [
            Paragraph("CLIENT DETAILS", self.styles['BoxHeading']),
            line("Name", document.client_name),
            line("Email", document.client_email),
        ]
        if document.client_phone:
            client.append(line("Phone", document.client_phone))
        if document.university:
            client.append(line("University", document.university))
        if document.course:
            client.append(line("Course", document.course))

        width = self.page_width - 2 * PAGE_MARGIN
        boxes = Table([[quotation, "", client]], colWidths=[width * 0.48, width * 0.04, width * 0.48])
        boxes.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BACKGROUND', (0, 0), (0, 0), self.light_gray),
            ('BACKGROUND', (2, 0), (2, 0), self.light_gray),
            ('BOX', (0, 0), (0, 0), 0.5, self.border_color),
            ('BOX', (2, 0), (2, 0), 0.5, self.border_color),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ('LEFTPADDING', (0, 0), (-1, -1), 8),
            ('RIGHTPADDING', (0, 0), (-1, -1), 8),
        ]))
        return boxes

    def _project_information(self, document: QuotationDocument) -> list[Flowable]:
        body = []
        if document.project_type:
            body.append(Paragraph(
                f"<b>Project Type:</b> {escape(document.project_type)}",
                self.styles['NormalText'],
            ))
        if document.description:
            body.append(Paragraph(
                f"<b>Description:</b> {escape(document.description)}",
                self.styles['NormalText'],
            ))
        if not body:
            return []
        return [Paragraph("PROJECT INFORMATION", self.styles['SectionHeader'])] + body

    def _column_widths(self) -> list[float]:
        width = self.page_width - 2 * PAGE_MARGIN
        return [width - 230, 50, 90, 90]

    def _column_header(self) -> Table:
        header = [
            Paragraph("Description", self.styles['ColumnHeader']),
            Paragraph("Qty", self.styles['ColumnHeaderRight']),
            Paragraph("Unit Price", self.styles['ColumnHeaderRight']),
            Paragraph("Amount", self.styles['ColumnHeaderRight']),
        ]
        header_table = Table([header], colWidths=self._column_widths())
        header_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), self.primary_color),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('LEFTPADDING', (0, 0), (-1, -1), 6),
            ('RIGHTPADDING', (0, 0), (-1, -1), 6),
        ]))
        return header_table

    def _item_row(self, item: LineItem, index: int) -> Table:
        row = [
            Paragraph(escape(item.description), self.styles['Cell']),
            Paragraph(str(item.quantity), self.styles['CellRight']),
            Paragraph(self._format_currency(item.unit_price), self.styles['CellRight']),
            Paragraph(self._format_currency(item.amount), self.styles['CellRight']),
        ]
        row_table = Table([row], colWidths=self._column_widths())
        style = [
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('TOPPADDING', (0, 0), (-1, -1), 4),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
            ('LEFTPADDING', (0, 0), (-1, -1), 6),
            ('RIGHTPADDING', (0, 0), (-1, -1), 6),
            ('LINEBELOW', (0, 0), (-1, -1), 0.5, self.border_color),
        ]
        # Alternating row colors
        if index % 2 == 1:
            style.append(('BACKGROUND', (0, 0), (-1, -1), self.light_gray))
        row_table.setStyle(TableStyle(style))
        return row_table

    def _totals(self, document: QuotationDocument, breakdown: QuotationBreakdown) -> Table:
        totals_data = [["Subtotal:", self._format_currency(breakdown.subtotal)]]

        if breakdown.discount_amount > 0:
            label = "Discount:"
            if document.discount.type == DiscountType.PERCENTAGE:
                label = f"Discount ({self._format_rate(document.discount.value)}%):"
            totals_data.append([label, f"-{self._format_currency(breakdown.discount_amount)}"])

        if breakdown.tax_amount > 0:
            totals_data.append([
                f"Tax ({self._format_rate(document.tax.rate)}%):",
                self._format_currency(breakdown.tax_amount),
            ])

        totals_data.append(["TOTAL:", self._format_currency(breakdown.total)])

        width = self.page_width - 2 * PAGE_MARGIN
        totals_table = Table(totals_data, colWidths=[width - 140, 140])
        totals_table.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
            ('FONTNAME', (0, 0), (-1, -2), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -2), 10),
            ('TEXTCOLOR', (0, 0), (-1, -2), self.text_color),
            ('TOPPADDING', (0, 0), (-1, -2), 4),
            ('BOTTOMPADDING', (0, 0), (-1, -2), 4),
            ('RIGHTPADDING', (0, 0), (-1, -1), 8),

            # Total row
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, -1), (-1, -1), 12),
            ('TEXTCOLOR', (0, -1), (-1, -1), colors.white),
            ('BACKGROUND', (0, -1), (-1, -1), self.primary_color),
            ('TOPPADDING', (0, -1), (-1, -1), 6),
            ('BOTTOMPADDING', (0, -1), (-1, -1), 6),
        ]))
        return totals_table

    def _section(self, title: str, body: str, style: ParagraphStyle) -> list[Flowable]:
        text = escape(body.strip()).replace("\n", "<br/>")
        return [Paragraph(title, self.styles['SectionHeader']), Paragraph(text, style)]

    def _footer(self) -> list[Flowable]:
        identity = self.identity
        footer = [
            HRFlowable(width="100%", thickness=1, color=self.border_color, spaceAfter=8),
            Paragraph(escape(identity.thank_you_line), self.styles['ThankYou']),
            Paragraph(escape(identity.contact_line), self.styles['FooterText']),
        ]
        if identity.website:
            footer.append(Paragraph(escape(identity.website), self.styles['FooterText']))
        return footer

