"""Invoice status workflow.

draft -> sent -> {paid, overdue, cancelled}; overdue -> {paid, cancelled}.
paid and cancelled are terminal. Re-entering the current status is a no-op.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from invoicedesk.app.core.errors import InvalidStateTransition
from invoicedesk.app.core.time import utc_now, utc_today
from invoicedesk.app.models.invoice import Invoice


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS = {
    InvoiceStatus.DRAFT: {InvoiceStatus.SENT},
    InvoiceStatus.SENT: {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED},
    InvoiceStatus.OVERDUE: {InvoiceStatus.PAID, InvoiceStatus.CANCELLED},
    InvoiceStatus.PAID: set(),
    InvoiceStatus.CANCELLED: set(),
}


def can_transition(current: str, target: str) -> bool:
    current_status = InvoiceStatus(current)
    target_status = InvoiceStatus(target)
    return current_status == target_status or target_status in ALLOWED_TRANSITIONS[current_status]


def apply_status(invoice: Invoice, target: str, now: Optional[datetime] = None) -> bool:
    """Move ``invoice`` to ``target``; return False when it already had that status."""
    target_status = InvoiceStatus(target)
    if invoice.status == target_status.value:
        return False
    if not can_transition(invoice.status, target_status.value):
        raise InvalidStateTransition(
            f"Cannot move invoice {invoice.invoice_number} from {invoice.status} to {target_status.value}",
            details={"from": invoice.status, "to": target_status.value},
        )

    moment = now or utc_now()
    invoice.status = target_status.value
    if target_status == InvoiceStatus.SENT and invoice.sent_at is None:
        invoice.sent_at = moment
    elif target_status == InvoiceStatus.PAID and invoice.paid_at is None:
        invoice.paid_at = moment
    return True


def ensure_deletable(invoice: Invoice) -> None:
    if invoice.status == InvoiceStatus.PAID.value:
        raise InvalidStateTransition(f"Paid invoice {invoice.invoice_number} cannot be deleted")


def change_invoice_status(db: Session, invoice: Invoice, target: str, now: Optional[datetime] = None) -> Invoice:
    if apply_status(invoice, target, now=now):
        db.commit()
        db.refresh(invoice)
    return invoice


def mark_overdue_invoices(db: Session, owner_id: Optional[str] = None, today: Optional[date] = None) -> List[Invoice]:
    """Move sent invoices whose due date has passed to overdue."""
    check_date = today or utc_today()
    query = db.query(Invoice).filter(Invoice.status == InvoiceStatus.SENT.value, Invoice.due_date < check_date)
    if owner_id is not None:
        query = query.filter(Invoice.owner_id == owner_id)
    invoices = query.all()
    for invoice in invoices:
        apply_status(invoice, InvoiceStatus.OVERDUE.value)
    if invoices:
        db.commit()
        for invoice in invoices:
            db.refresh(invoice)
    return invoices
