"""Invoice routes.

Handlers that drive the headless browser or the mail transport are plain
``def`` functions so they run in the worker thread pool.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from invoicedesk.app.core.business_profile import BusinessProfile
from invoicedesk.app.crud.crud_invoice import invoice_crud
from invoicedesk.app.db.session import get_db
from invoicedesk.app.dependencies.auth import owner_scope
from invoicedesk.app.dependencies.collaborators import get_pdf_output_dir, get_pdf_renderer, get_profile, get_transport
from invoicedesk.app.schemas.invoice import (
    BulkSendItem,
    BulkSendRequest,
    DispatchResultRead,
    InvoiceCreate,
    InvoiceIdList,
    InvoiceRead,
    InvoiceStatusUpdate,
    InvoiceUpdate,
    PdfBatchItem,
    PdfInfo,
    SendInvoiceRequest,
)
from invoicedesk.app.services.dispatch import send_bulk, send_invoice
from invoicedesk.app.services.documents import (
    PdfRenderer,
    cleanup_old_pdfs,
    generate_invoice_pdf,
    generate_many,
    get_pdf_info,
    render_invoice_html,
)
from invoicedesk.app.services.invoices import create_invoice, delete_invoice, get_invoice_or_404, update_invoice
from invoicedesk.app.services.lifecycle import InvoiceStatus, change_invoice_status, mark_overdue_invoices
from invoicedesk.app.services.mail_transport import MailTransport

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post("/", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
async def create_invoice_endpoint(
    invoice_in: InvoiceCreate,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
):
    return create_invoice(db, invoice_in, owner_id)


@router.get("/", response_model=List[InvoiceRead])
async def list_invoices(
    status: Optional[InvoiceStatus] = None,
    client_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
    sort_by: str = "created_at",
    sort_order: str = "desc",
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
):
    return invoice_crud.get_multi(
        db,
        owner_id=owner_id,
        status=status.value if status else None,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.post("/mark-overdue", response_model=List[InvoiceRead])
async def mark_overdue(db: Session = Depends(get_db), owner_id: Optional[str] = Depends(owner_scope)):
    return mark_overdue_invoices(db, owner_id=owner_id)


@router.post("/pdf/batch", response_model=List[PdfBatchItem])
def generate_pdf_batch(
    payload: InvoiceIdList,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
    renderer: PdfRenderer = Depends(get_pdf_renderer),
    profile: BusinessProfile = Depends(get_profile),
    output_dir: str = Depends(get_pdf_output_dir),
):
    return generate_many(
        db,
        payload.invoice_ids,
        payload.template_id,
        owner_id=owner_id,
        renderer=renderer,
        profile=profile,
        output_dir=output_dir,
    )


@router.post("/pdf/cleanup")
def cleanup_pdfs(
    max_age_hours: float = Query(default=24, gt=0),
    output_dir: str = Depends(get_pdf_output_dir),
):
    deleted = cleanup_old_pdfs(output_dir, max_age_hours=max_age_hours)
    return {"deleted": deleted, "max_age_hours": max_age_hours}


@router.post("/send/bulk", response_model=List[BulkSendItem])
def send_invoices_bulk(
    payload: BulkSendRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
    transport: MailTransport = Depends(get_transport),
    renderer: PdfRenderer = Depends(get_pdf_renderer),
    profile: BusinessProfile = Depends(get_profile),
    output_dir: str = Depends(get_pdf_output_dir),
):
    options = SendInvoiceRequest(**payload.model_dump(exclude={"invoice_ids"}))
    return send_bulk(
        db,
        payload.invoice_ids,
        options,
        owner_id=owner_id,
        transport=transport,
        renderer=renderer,
        profile=profile,
        output_dir=output_dir,
    )


@router.get("/{invoice_id}", response_model=InvoiceRead)
async def get_invoice(invoice_id: int, db: Session = Depends(get_db), owner_id: Optional[str] = Depends(owner_scope)):
    return get_invoice_or_404(db, invoice_id, owner_id)


@router.put("/{invoice_id}", response_model=InvoiceRead)
async def update_invoice_endpoint(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
):
    invoice = get_invoice_or_404(db, invoice_id, owner_id)
    return update_invoice(db, invoice, payload)


@router.patch("/{invoice_id}/status", response_model=InvoiceRead)
async def update_invoice_status(
    invoice_id: int,
    payload: InvoiceStatusUpdate,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
):
    invoice = get_invoice_or_404(db, invoice_id, owner_id)
    return change_invoice_status(db, invoice, payload.status)


@router.delete("/{invoice_id}")
async def delete_invoice_endpoint(invoice_id: int, db: Session = Depends(get_db), owner_id: Optional[str] = Depends(owner_scope)):
    invoice = get_invoice_or_404(db, invoice_id, owner_id)
    invoice_number = invoice.invoice_number
    delete_invoice(db, invoice)
    return {"id": invoice_id, "invoice_number": invoice_number, "deleted": True}


@router.get("/{invoice_id}/pdf")
def download_invoice_pdf(
    invoice_id: int,
    template_id: Optional[int] = None,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
    renderer: PdfRenderer = Depends(get_pdf_renderer),
    profile: BusinessProfile = Depends(get_profile),
    output_dir: str = Depends(get_pdf_output_dir),
):
    document = generate_invoice_pdf(
        db,
        invoice_id,
        template_id,
        owner_id=owner_id,
        renderer=renderer,
        profile=profile,
        output_dir=output_dir,
    )
    headers = {"Content-Disposition": f'attachment; filename="{document.filename}"'}
    return Response(content=document.content, media_type="application/pdf", headers=headers)


@router.get("/{invoice_id}/pdf-info", response_model=PdfInfo)
async def invoice_pdf_info(invoice_id: int, db: Session = Depends(get_db), owner_id: Optional[str] = Depends(owner_scope)):
    invoice = get_invoice_or_404(db, invoice_id, owner_id)
    return get_pdf_info(invoice)


@router.get("/{invoice_id}/preview", response_class=HTMLResponse)
async def preview_invoice(
    invoice_id: int,
    template_id: Optional[int] = None,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
    profile: BusinessProfile = Depends(get_profile),
):
    html = render_invoice_html(db, invoice_id, template_id, owner_id=owner_id, profile=profile)
    return HTMLResponse(content=html)


@router.post("/{invoice_id}/send", response_model=DispatchResultRead)
def send_invoice_endpoint(
    invoice_id: int,
    payload: SendInvoiceRequest,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
    transport: MailTransport = Depends(get_transport),
    renderer: PdfRenderer = Depends(get_pdf_renderer),
    profile: BusinessProfile = Depends(get_profile),
    output_dir: str = Depends(get_pdf_output_dir),
):
    return send_invoice(
        db,
        invoice_id,
        payload,
        owner_id=owner_id,
        transport=transport,
        renderer=renderer,
        profile=profile,
        output_dir=output_dir,
    )
