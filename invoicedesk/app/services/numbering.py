"""Invoice numbering.

Numbers look like ``INV-202610-0007``: the sequence is one past the highest
sequence already used in that calendar month, so deleted invoices leave gaps
rather than freeing numbers. Two concurrent creations in the same month can
compute the same number; the unique constraint on
``invoices.invoice_number`` turns that into ``DuplicateInvoiceNumber`` for the
caller to retry. When the store cannot be read at all, numbering falls back to
``INV-{epochMillis}`` so invoice creation is never blocked.
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicedesk.app.core.time import epoch_millis, utc_today
from invoicedesk.app.crud.crud_invoice import invoice_crud

logger = logging.getLogger(__name__)

INVOICE_NUMBER_PREFIX = "INV"


def period_prefix(period: date) -> str:
    return f"{INVOICE_NUMBER_PREFIX}-{period.year}{period.month:02d}-"


def format_invoice_number(period: date, sequence: int) -> str:
    return f"{period_prefix(period)}{sequence:04d}"


def fallback_invoice_number(now: Optional[datetime] = None) -> str:
    return f"{INVOICE_NUMBER_PREFIX}-{epoch_millis(now)}"


def next_invoice_number(db: Session, period: Optional[date] = None) -> str:
    period = period or utc_today()
    prefix = period_prefix(period)
    try:
        highest = invoice_crud.max_sequence_for_prefix(db, prefix=prefix)
    except SQLAlchemyError:
        db.rollback()
        number = fallback_invoice_number()
        logger.warning("Invoice numbering store read failed for %s; using fallback number %s", prefix, number, exc_info=True)
        return number
    return format_invoice_number(period, highest + 1)
