"""Invoice document generation: HTML rendering, PDF output and the PDF archive on disk."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from sqlalchemy.orm import Session

from invoicedesk.app.core.business_profile import BusinessProfile
from invoicedesk.app.core.errors import InvoiceDeskError, NotFound, RenderFailure
from invoicedesk.app.core.time import epoch_millis
from invoicedesk.app.models.client import Client
from invoicedesk.app.models.invoice import Invoice
from invoicedesk.app.models.invoice_template import InvoiceTemplate
from invoicedesk.app.schemas.invoice import PdfBatchItem, PdfInfo
from invoicedesk.app.services.invoice_templates import get_default_template, get_template_or_404
from invoicedesk.app.services.invoices import get_invoice_or_404
from invoicedesk.app.services.template_rendering import render_invoice

logger = logging.getLogger(__name__)


class PdfRenderer(Protocol):
    def render(self, html: str) -> bytes:
        ...


@dataclass
class GeneratedDocument:
    content: bytes
    filename: str
    filepath: str
    size: int


def resolve_render_inputs(
    db: Session,
    invoice_id: int,
    template_id: Optional[int] = None,
    owner_id: Optional[str] = None,
) -> Tuple[Invoice, Client, InvoiceTemplate]:
    """Load the invoice, its client and the template to render it with.

    The template is the explicit one, else the invoice's own, else the default.
    """
    invoice = get_invoice_or_404(db, invoice_id, owner_id)
    client = invoice.client
    if client is None:
        raise NotFound("Client not found", details={"client_id": invoice.client_id})

    chosen_id = template_id if template_id is not None else invoice.template_id
    if chosen_id is not None:
        template = get_template_or_404(db, chosen_id)
    else:
        template = get_default_template(db)
    return invoice, client, template


def render_invoice_html(
    db: Session,
    invoice_id: int,
    template_id: Optional[int] = None,
    *,
    owner_id: Optional[str] = None,
    profile: BusinessProfile,
) -> str:
    invoice, client, template = resolve_render_inputs(db, invoice_id, template_id, owner_id)
    return render_invoice(template, invoice, client, profile)


def generate_invoice_pdf(
    db: Session,
    invoice_id: int,
    template_id: Optional[int] = None,
    *,
    owner_id: Optional[str] = None,
    renderer: PdfRenderer,
    profile: BusinessProfile,
    output_dir: str,
    record_path: bool = True,
) -> GeneratedDocument:
    """Render the invoice to PDF and write it under ``output_dir``.

    With ``record_path`` the file location is stored on the invoice and
    committed; callers that must keep the invoice unchanged until a later step
    succeeds pass ``record_path=False`` and record it themselves.
    """
    invoice, client, template = resolve_render_inputs(db, invoice_id, template_id, owner_id)
    html = render_invoice(template, invoice, client, profile)

    started = time.monotonic()
    content = renderer.render(html)

    directory = Path(output_dir)
    filename = f"invoice-{invoice.invoice_number}-{epoch_millis()}.pdf"
    filepath = directory / filename
    try:
        directory.mkdir(parents=True, exist_ok=True)
        filepath.write_bytes(content)
    except OSError as exc:
        raise RenderFailure(
            f"Could not write PDF for invoice {invoice.invoice_number}: {exc.strerror or exc}",
            details={"filename": filename},
        ) from exc

    if record_path:
        invoice.pdf_path = str(filepath)
        db.commit()

    logger.info(
        "Generated PDF for invoice %s: %s (%d bytes, %.0fms)",
        invoice.invoice_number,
        filename,
        len(content),
        (time.monotonic() - started) * 1000,
    )
    return GeneratedDocument(content=content, filename=filename, filepath=str(filepath), size=len(content))


def generate_many(
    db: Session,
    invoice_ids: Sequence[int],
    template_id: Optional[int] = None,
    *,
    owner_id: Optional[str] = None,
    renderer: PdfRenderer,
    profile: BusinessProfile,
    output_dir: str,
) -> List[PdfBatchItem]:
    """Generate PDFs one after another; a failure is recorded and the batch continues."""
    results = []
    for invoice_id in invoice_ids:
        try:
            document = generate_invoice_pdf(
                db,
                invoice_id,
                template_id,
                owner_id=owner_id,
                renderer=renderer,
                profile=profile,
                output_dir=output_dir,
            )
        except InvoiceDeskError as exc:
            logger.warning("Batch PDF generation failed for invoice %s: %s", invoice_id, exc)
            results.append(PdfBatchItem(invoice_id=invoice_id, success=False, error=str(exc)))
        else:
            results.append(
                PdfBatchItem(invoice_id=invoice_id, success=True, filename=document.filename, size=document.size)
            )
    return results


def get_pdf_info(invoice: Invoice) -> PdfInfo:
    if not invoice.pdf_path:
        return PdfInfo(exists=False)
    path = Path(invoice.pdf_path)
    if not path.is_file():
        return PdfInfo(exists=False, filepath=invoice.pdf_path, filename=path.name)
    stats = path.stat()
    return PdfInfo(
        exists=True,
        filepath=invoice.pdf_path,
        filename=path.name,
        size=stats.st_size,
        created_at=datetime.fromtimestamp(stats.st_ctime, tz=timezone.utc),
        modified_at=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
    )


def cleanup_old_pdfs(output_dir: str, max_age_hours: float = 24, now: Optional[float] = None) -> int:
    """Delete generated PDFs older than ``max_age_hours``; return how many were removed."""
    directory = Path(output_dir)
    if not directory.is_dir():
        return 0
    cutoff = (now if now is not None else time.time()) - max_age_hours * 3600
    deleted = 0
    for path in directory.glob("*.pdf"):
        if path.stat().st_mtime < cutoff:
            path.unlink()
            deleted += 1
    logger.info("PDF cleanup removed %d file(s) older than %sh from %s", deleted, max_age_hours, directory)
    return deleted
