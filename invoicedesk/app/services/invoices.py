"""Invoice record service: creation, partial updates and deletion.

Totals are always recomputed from the invoice's items after a mutation; stored
amounts are never patched incrementally.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from invoicedesk.app.core.errors import (
    DuplicateInvoiceNumber,
    InvalidStateTransition,
    NotFound,
    ValidationFailure,
)
from invoicedesk.app.core.settings import get_settings
from invoicedesk.app.core.time import utc_today
from invoicedesk.app.crud.crud_invoice import invoice_crud
from invoicedesk.app.crud.crud_invoice_template import invoice_template_crud
from invoicedesk.app.models.invoice import Invoice
from invoicedesk.app.models.line_item import InvoiceLineItem
from invoicedesk.app.schemas.invoice import InvoiceCreate, InvoiceUpdate, LineItemIn
from invoicedesk.app.services.calculation import calculate_invoice_totals
from invoicedesk.app.services.clients import get_client_or_404
from invoicedesk.app.services.lifecycle import InvoiceStatus, ensure_deletable
from invoicedesk.app.services.numbering import next_invoice_number

logger = logging.getLogger(__name__)

_NON_NULLABLE_FIELDS = {
    "client_id",
    "issue_date",
    "due_date",
    "payment_terms",
    "items",
    "tax_rate",
    "discount_amount",
    "currency",
}
_SIMPLE_FIELDS = ("issue_date", "due_date", "payment_terms", "tax_rate", "discount_amount", "currency", "notes", "template_id")


def get_invoice_or_404(db: Session, invoice_id: int, owner_id: Optional[str] = None) -> Invoice:
    invoice = invoice_crud.get(db, invoice_id=invoice_id, owner_id=owner_id)
    if not invoice:
        raise NotFound("Invoice not found", details={"invoice_id": invoice_id})
    return invoice


def build_line_items(items: Iterable[LineItemIn]) -> List[InvoiceLineItem]:
    return [
        InvoiceLineItem(
            position=position,
            description=item.description,
            details=item.details or None,
            quantity=item.quantity,
            rate=item.rate,
        )
        for position, item in enumerate(items)
    ]


def apply_totals(invoice: Invoice) -> None:
    """Recompute subtotal, tax and total from the invoice's current items."""
    totals = calculate_invoice_totals(invoice.items, invoice.tax_rate, invoice.discount_amount)
    if totals.total < 0:
        raise ValidationFailure(
            "Discount exceeds the invoice amount",
            details={"subtotal": str(totals.subtotal), "discount_amount": str(totals.discount_amount)},
        )
    invoice.subtotal = totals.subtotal
    invoice.tax_amount = totals.tax_amount
    invoice.discount_amount = totals.discount_amount
    invoice.total = totals.total


def _ensure_due_after_issue(issue_date: date, due_date: date) -> None:
    if due_date < issue_date:
        raise ValidationFailure(
            "Due date cannot be before the issue date",
            details={"issue_date": issue_date.isoformat(), "due_date": due_date.isoformat()},
        )


def _ensure_template_exists(db: Session, template_id: Optional[int]) -> None:
    if template_id is not None and not invoice_template_crud.get(db, template_id=template_id):
        raise NotFound("Template not found", details={"template_id": template_id})


def create_invoice(
    db: Session,
    invoice_in: InvoiceCreate,
    owner_id: Optional[str] = None,
    today: Optional[date] = None,
) -> Invoice:
    """Create a draft invoice for an existing client.

    A supplied ``invoice_number`` must be unused; otherwise the next number for
    the current month is generated. Either way a clash surfaces as
    ``DuplicateInvoiceNumber`` and is not retried here.
    """
    settings = get_settings()
    client = get_client_or_404(db, invoice_in.client_id, owner_id)
    _ensure_template_exists(db, invoice_in.template_id)

    issue_date = invoice_in.issue_date or today or utc_today()
    payment_terms = invoice_in.payment_terms if invoice_in.payment_terms is not None else client.payment_terms
    due_date = invoice_in.due_date or issue_date + timedelta(days=payment_terms)
    _ensure_due_after_issue(issue_date, due_date)

    if invoice_in.invoice_number:
        if invoice_crud.get_by_number(db, invoice_number=invoice_in.invoice_number):
            raise DuplicateInvoiceNumber(invoice_in.invoice_number)
        invoice_number = invoice_in.invoice_number
    else:
        invoice_number = next_invoice_number(db, today or utc_today())

    invoice = Invoice(
        owner_id=owner_id,
        client_id=client.id,
        template_id=invoice_in.template_id,
        invoice_number=invoice_number,
        status=InvoiceStatus.DRAFT.value,
        issue_date=issue_date,
        due_date=due_date,
        payment_terms=payment_terms,
        tax_rate=invoice_in.tax_rate if invoice_in.tax_rate is not None else settings.default_tax_rate,
        discount_amount=invoice_in.discount_amount or Decimal("0"),
        currency=invoice_in.currency or client.currency,
        notes=invoice_in.notes,
        items=build_line_items(invoice_in.items),
    )
    apply_totals(invoice)
    invoice = invoice_crud.create(db, db_obj=invoice)
    logger.info("Created invoice %s (id=%s) for client %s", invoice.invoice_number, invoice.id, client.id)
    return invoice


def update_invoice(db: Session, invoice: Invoice, invoice_in: InvoiceUpdate) -> Invoice:
    update_data = invoice_in.model_dump(exclude_unset=True)
    nulled = sorted(field for field in _NON_NULLABLE_FIELDS if field in update_data and update_data[field] is None)
    if nulled:
        raise ValidationFailure("Required invoice fields cannot be cleared", details={"fields": nulled})

    new_client_id = update_data.get("client_id")
    if new_client_id is not None and new_client_id != invoice.client_id:
        if invoice.status == InvoiceStatus.PAID.value:
            raise InvalidStateTransition(f"Client of paid invoice {invoice.invoice_number} cannot be changed")
        client = get_client_or_404(db, new_client_id, invoice.owner_id)
        invoice.client_id = client.id
    if "template_id" in update_data:
        _ensure_template_exists(db, update_data["template_id"])

    for field in _SIMPLE_FIELDS:
        if field in update_data:
            setattr(invoice, field, update_data[field])
    if invoice_in.items is not None:
        invoice.items = build_line_items(invoice_in.items)

    _ensure_due_after_issue(invoice.issue_date, invoice.due_date)
    apply_totals(invoice)
    invoice = invoice_crud.update(db, db_obj=invoice)
    logger.info("Updated invoice %s (id=%s)", invoice.invoice_number, invoice.id)
    return invoice


def delete_invoice(db: Session, invoice: Invoice) -> Invoice:
    ensure_deletable(invoice)
    invoice_number, invoice_id = invoice.invoice_number, invoice.id
    invoice = invoice_crud.delete(db, db_obj=invoice)
    logger.info("Deleted invoice %s (id=%s)", invoice_number, invoice_id)
    return invoice
