"""
Email Service.
Sends quotation PDFs to clients and quote request notifications to the admin.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.mime.application import MIMEApplication
from pathlib import Path

from scholardesk.core.config import settings
from scholardesk.models.quote_request import QuoteRequest
from scholardesk.schemas.quotation import QuotationBreakdown, QuotationDocument, to_money
from scholardesk.services.pdf import MONTHS


logger = logging.getLogger(__name__)


def _long_date(d) -> str:
    return f"{d.day:02d} {MONTHS[d.month - 1]} {d.year}"


class EmailService:
    """Service for sending emails."""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.email_from = settings.EMAIL_FROM
        self.identity = settings.business_identity()

    def _is_configured(self) -> bool:
        """Check if email is configured."""
        return bool(self.smtp_user and self.smtp_password)

    def _create_message(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> MIMEMultipart:
        """Create email message."""
        msg = MIMEMultipart('mixed')
        msg['Subject'] = subject
        msg['From'] = self.email_from
        msg['To'] = to_email

        body = MIMEMultipart('alternative')
        if body_text:
            body.attach(MIMEText(body_text, 'plain', 'utf-8'))
        body.attach(MIMEText(body_html, 'html', 'utf-8'))
        msg.attach(body)

        return msg

    def _attach_pdf(self, msg: MIMEMultipart, pdf_path: str, filename: str) -> bool:
        """Attach PDF file to message."""
        path = Path(pdf_path)
        if not path.exists():
            logger.warning(f"PDF not found, attachment skipped: {pdf_path}")
            return False
        with open(path, 'rb') as f:
            pdf = MIMEApplication(f.read(), _subtype='pdf')
            pdf.add_header('Content-Disposition', 'attachment', filename=filename)
            msg.attach(pdf)
        return True

    def _send(self, msg: MIMEMultipart, to_email: str) -> bool:
        """Send email via SMTP."""
        if not self._is_configured():
            logger.warning("Email not configured - message not sent")
            return False

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_user, self.smtp_password)
                server.sendmail(self.email_from, to_email, msg.as_string())

            logger.info(f"Email sent to {to_email}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False

    async def send_quotation(
        self,
        document: QuotationDocument,
        breakdown: QuotationBreakdown,
        pdf_path: str,
    ) -> bool:
        """
        Send a quotation PDF to the client.

        Args:
            document: Quotation content (client details, number, dates)
            breakdown: Computed pricing
            pdf_path: Path to the rendered PDF

        Returns:
            True if sent successfully
        """
        if not document.client_email:
            logger.warning(f"Quotation {document.quotation_number} has no client email")
            return False

        identity = self.identity
        total = f"{identity.currency_symbol}{to_money(breakdown.total):,.2f}"
        valid_until = _long_date(document.valid_until)
        subject = f"Your Quotation from {identity.company_name.title()} - {document.quotation_number}"

        body_html = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <style>
                body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #1f2937; }}
                .header {{ background: #4f46e5; color: white; padding: 20px; text-align: center; }}
                .content {{ padding: 20px; }}
                .amount {{ font-size: 22px; font-weight: bold; color: #4f46e5; }}
                .notice {{ background: #fef3c7; padding: 12px; border-left: 4px solid #f59e0b; }}
                .footer {{ background: #f3f4f6; padding: 15px; text-align: center; font-size: 12px; }}
            </style>
        </head>
        <body>
            <div class="header">
                <h1>Your Professional Quotation</h1>
            </div>
            <div class="content">
                <p>Dear <strong>{document.client_name}</strong>,</p>

                <p>Thank you for your interest in our services. Please find attached our
                quotation for your <strong>{document.project_type or 'academic'}</strong> project.</p>

                <p><strong>Quotation Summary:</strong></p>
                <ul>
                    <li>Quotation Number: {document.quotation_number}</li>
                    <li>Date Issued: {_long_date(document.date_issued)}</li>
                    <li>Valid Until: {valid_until}</li>
                </ul>

                <p class="amount">Total Amount: {total}</p>

                <p class="notice">This quotation is valid until {valid_until}.</p>

                <p>To accept this quotation, simply reply to this email.</p>
            </div>
            <div class="footer">
                <p>{identity.thank_you_line}</p>
                <p>{identity.contact_line}</p>
            </div>
        </body>
        </html>
        """

        body_text = f"""
Dear {document.client_name},

Please find attached quotation {document.quotation_number}.

Date issued: {_long_date(document.date_issued)}
Valid until: {valid_until}
Total amount: {total}

To accept this quotation, simply reply to this email.

{identity.thank_you_line}
{identity.contact_line}
        """

        msg = self._create_message(document.client_email, subject, body_html, body_text)
        filename = f"{identity.company_name.title()}-Quotation-{document.quotation_number}.pdf"
        if not self._attach_pdf(msg, pdf_path, filename):
            return False

        return self._send(msg, document.client_email)

    async def send_quote_request_notification(self, quote_request: QuoteRequest) -> bool:
        """Notify the admin that a new quote request was submitted."""
        to_email = settings.ADMIN_NOTIFICATION_EMAIL or self.identity.email

        subject = f"New Quote Request - {quote_request.name}"
        deadline = _long_date(quote_request.deadline) if quote_request.deadline else "Not specified"

        body_html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; color: #1f2937;">
            <h2 style="color: #4f46e5;">New Quote Request</h2>
            <p><strong>Name:</strong> {quote_request.name}</p>
            <p><strong>Email:</strong> {quote_request.email}</p>
            <p><strong>Phone:</strong> {quote_request.phone}</p>
            <p><strong>University:</strong> {quote_request.university or '-'}</p>
            <p><strong>Course:</strong> {quote_request.course or '-'}</p>
            <p><strong>Project Type:</strong> {quote_request.project_type.value}</p>
            <p><strong>Deadline:</strong> {deadline}</p>
            <p><strong>Budget:</strong> {quote_request.budget or '-'}</p>
            <p><strong>Description:</strong></p>
            <p>{quote_request.description}</p>
        </body>
        </html>
        """

        msg = self._create_message(to_email, subject, body_html)
        return self._send(msg, to_email)
