"""Email dispatch of invoices.

A send renders the PDF (when requested), mails it through the configured
transport and moves a draft invoice to ``sent``. PDF problems only drop the
attachment; transport problems fail the send and leave the invoice untouched.
"""

import logging
import smtplib
from typing import List, Optional, Sequence

from jinja2 import Environment
from sqlalchemy.orm import Session

from invoicedesk.app.core.business_profile import BusinessProfile
from invoicedesk.app.core.currency import format_money
from invoicedesk.app.core.errors import DispatchFailure, InvoiceDeskError, NotFound, RenderFailure, ValidationFailure
from invoicedesk.app.core.time import format_long_date
from invoicedesk.app.models.client import Client
from invoicedesk.app.models.invoice import Invoice
from invoicedesk.app.schemas.invoice import BulkSendItem, DispatchResultRead, SendInvoiceRequest
from invoicedesk.app.services.documents import PdfRenderer, generate_invoice_pdf
from invoicedesk.app.services.invoices import get_invoice_or_404
from invoicedesk.app.services.lifecycle import InvoiceStatus, change_invoice_status
from invoicedesk.app.services.mail_transport import (
    DeliveryReceipt,
    MailAttachment,
    MailTransport,
    OutgoingMail,
    format_sender,
)

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (smtplib.SMTPException, OSError)

_email_environment = Environment(autoescape=True)

_INVOICE_EMAIL_HTML = _email_environment.from_string(
    """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Invoice {{ invoice_number }}</title>
    <style>
        body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
        .email-container { max-width: 600px; margin: 0 auto; padding: 20px; }
        .header { background-color: #f8f9fa; padding: 20px; border-radius: 5px; margin-bottom: 20px; }
        .invoice-summary { background-color: #e9ecef; padding: 15px; border-radius: 5px; margin: 20px 0; }
        .footer { margin-top: 30px; padding-top: 20px; border-top: 1px solid #dee2e6; color: #666; }
        ul { padding-left: 0; list-style: none; }
        li { padding: 5px 0; }
    </style>
</head>
<body>
    <div class="email-container">
        <div class="header">
            <h2>Invoice {{ invoice_number }}</h2>
            <p>From: {{ business_name }}</p>
        </div>
        <div class="content">
            {% for kind, line in lines %}
            {% if kind == "blank" %}<br>
            {% elif kind == "heading" %}<p><strong>{{ line }}</strong></p>
            {% elif kind == "bullet" %}<li>{{ line }}</li>
            {% else %}<p>{{ line }}</p>
            {% endif %}
            {% endfor %}
        </div>
        <div class="invoice-summary">
            <h3>Quick Summary</h3>
            <p><strong>Amount Due:</strong> {{ amount_due }}</p>
            <p><strong>Due Date:</strong> {{ due_date }}</p>
            <p><strong>Payment Terms:</strong> {{ payment_terms }} days</p>
        </div>
        <div class="footer">
            <p><small>This email was sent automatically from our invoice system. Please do not reply to this email.</small></p>
        </div>
    </div>
</body>
</html>
"""
)

_TEST_EMAIL_HTML = _email_environment.from_string(
    """<h2>Email Test Successful!</h2>
<p>This is a test email from your invoice system.</p>
<p>If you received this, your email configuration is working correctly!</p>
<hr>
<small>Sent from {{ business_name }} Invoice System</small>
"""
)


def default_email_text(invoice: Invoice, client: Client, profile: BusinessProfile) -> str:
    amount_due = format_money(invoice.total, invoice.currency)
    lines = [
        f"Dear {client.name},",
        "",
        f"Please find attached your invoice {invoice.invoice_number} for the amount of {amount_due}.",
        "",
        "Invoice Details:",
        f"- Invoice Number: {invoice.invoice_number}",
        f"- Issue Date: {format_long_date(invoice.issue_date)}",
        f"- Due Date: {format_long_date(invoice.due_date)}",
        f"- Amount Due: {amount_due}",
        "",
    ]
    if invoice.notes:
        lines += ["Notes:", invoice.notes, ""]
    lines += [
        "Thank you for your business!",
        "",
        "Best regards,",
        profile.name,
        profile.email,
        profile.address,
    ]
    return "\n".join(lines)


def _classify_line(line: str):
    stripped = line.strip()
    if not stripped:
        return ("blank", "")
    if stripped in ("Invoice Details:", "Notes:"):
        return ("heading", stripped)
    if stripped.startswith("- "):
        return ("bullet", stripped[2:])
    return ("text", line)


def render_email_html(invoice: Invoice, text: str, profile: BusinessProfile) -> str:
    return _INVOICE_EMAIL_HTML.render(
        invoice_number=invoice.invoice_number,
        business_name=profile.name,
        lines=[_classify_line(line) for line in text.split("\n")],
        amount_due=format_money(invoice.total, invoice.currency),
        due_date=format_long_date(invoice.due_date),
        payment_terms=invoice.payment_terms,
    )


def send_invoice(
    db: Session,
    invoice_id: int,
    options: SendInvoiceRequest,
    *,
    owner_id: Optional[str] = None,
    transport: MailTransport,
    renderer: PdfRenderer,
    profile: BusinessProfile,
    output_dir: str,
) -> DispatchResultRead:
    invoice = get_invoice_or_404(db, invoice_id, owner_id)
    client = invoice.client
    if client is None:
        raise NotFound("Client not found", details={"client_id": invoice.client_id})

    to = list(options.to) if options.to is not None else [client.email]
    if not to:
        raise ValidationFailure("At least one recipient is required")

    attachments: List[MailAttachment] = []
    document = None
    if options.attach_pdf:
        try:
            document = generate_invoice_pdf(
                db,
                invoice.id,
                options.template_id,
                owner_id=owner_id,
                renderer=renderer,
                profile=profile,
                output_dir=output_dir,
                record_path=False,
            )
        except (RenderFailure, NotFound) as exc:
            logger.warning("Sending invoice %s without PDF attachment: %s", invoice.invoice_number, exc)
        else:
            attachments.append(MailAttachment(filename=f"invoice-{invoice.invoice_number}.pdf", content=document.content))

    text = options.message or default_email_text(invoice, client, profile)
    mail = OutgoingMail(
        sender=format_sender(profile.name, profile.email),
        to=to,
        cc=list(options.cc),
        bcc=list(options.bcc),
        subject=options.subject or f"Invoice {invoice.invoice_number} from {profile.name}",
        text=text,
        html=render_email_html(invoice, text, profile),
        attachments=attachments,
    )

    try:
        receipt = transport.send(mail)
    except TRANSPORT_ERRORS as exc:
        logger.error("Mail transport failed for invoice %s: %s", invoice.invoice_number, exc)
        raise DispatchFailure(
            f"Failed to send invoice {invoice.invoice_number}: {exc}",
            details={"invoice_id": invoice.id},
        ) from exc

    if document is not None:
        invoice.pdf_path = document.filepath
    if invoice.status == InvoiceStatus.DRAFT.value:
        change_invoice_status(db, invoice, InvoiceStatus.SENT.value)
    elif document is not None:
        db.commit()

    logger.info(
        "Invoice %s sent as %s to %s with %d attachment(s)",
        invoice.invoice_number,
        receipt.message_id,
        receipt.recipients,
        len(attachments),
    )
    return DispatchResultRead(
        invoice_id=invoice.id,
        message_id=receipt.message_id,
        recipients=receipt.recipients,
        attachment_count=len(attachments),
        status=invoice.status,
    )


def send_bulk(
    db: Session,
    invoice_ids: Sequence[int],
    options: SendInvoiceRequest,
    *,
    owner_id: Optional[str] = None,
    transport: MailTransport,
    renderer: PdfRenderer,
    profile: BusinessProfile,
    output_dir: str,
) -> List[BulkSendItem]:
    results = []
    for invoice_id in invoice_ids:
        try:
            result = send_invoice(
                db,
                invoice_id,
                options,
                owner_id=owner_id,
                transport=transport,
                renderer=renderer,
                profile=profile,
                output_dir=output_dir,
            )
        except InvoiceDeskError as exc:
            logger.warning("Bulk send failed for invoice %s: %s", invoice_id, exc)
            results.append(BulkSendItem(invoice_id=invoice_id, success=False, error=exc.message))
        else:
            results.append(BulkSendItem(invoice_id=invoice_id, success=True, message_id=result.message_id))
    return results


def send_test_email(transport: MailTransport, profile: BusinessProfile, recipient: str) -> DeliveryReceipt:
    mail = OutgoingMail(
        sender=format_sender(profile.name, profile.email),
        to=[recipient],
        subject="Test Email - Invoice System",
        text=(
            "This is a test email from your invoice system. "
            "If you received this, your email configuration is working correctly!"
        ),
        html=_TEST_EMAIL_HTML.render(business_name=profile.name),
    )
    try:
        return transport.send(mail)
    except TRANSPORT_ERRORS as exc:
        logger.error("Test email to %s failed: %s", recipient, exc)
        raise DispatchFailure(f"Failed to send test email: {exc}") from exc


def verify_mail_configuration(transport: MailTransport) -> dict:
    try:
        transport.verify()
    except TRANSPORT_ERRORS as exc:
        logger.error("Mail configuration check failed: %s", exc)
        return {"success": False, "error": str(exc)}
    logger.info("Mail configuration check succeeded")
    return {"success": True, "message": "Email configuration is valid"}
