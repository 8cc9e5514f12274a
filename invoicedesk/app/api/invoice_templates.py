"""Invoice template endpoints."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from invoicedesk.app.core.business_profile import BusinessProfile
from invoicedesk.app.crud.crud_invoice_template import invoice_template_crud
from invoicedesk.app.db.session import get_db
from invoicedesk.app.dependencies.collaborators import get_profile
from invoicedesk.app.schemas.invoice_template import (
    InvoiceTemplateCreate,
    InvoiceTemplateRead,
    InvoiceTemplateUpdate,
)
from invoicedesk.app.services.invoice_templates import (
    create_template,
    delete_template,
    get_default_template,
    get_template_or_404,
    preview_template,
    update_template,
)

router = APIRouter(prefix="/invoice-templates", tags=["invoice_templates"])


@router.post("/", response_model=InvoiceTemplateRead, status_code=status.HTTP_201_CREATED)
async def create_invoice_template(template_in: InvoiceTemplateCreate, db: Session = Depends(get_db)):
    return create_template(db, template_in)


@router.get("/", response_model=list[InvoiceTemplateRead])
async def list_invoice_templates(db: Session = Depends(get_db)):
    return invoice_template_crud.get_multi(db)


@router.get("/default", response_model=InvoiceTemplateRead)
async def get_default_invoice_template(db: Session = Depends(get_db)):
    return get_default_template(db)


@router.get("/{template_id}", response_model=InvoiceTemplateRead)
async def get_invoice_template(template_id: int, db: Session = Depends(get_db)):
    return get_template_or_404(db, template_id)


@router.get("/{template_id}/preview", response_class=HTMLResponse)
async def preview_invoice_template(
    template_id: int,
    db: Session = Depends(get_db),
    profile: BusinessProfile = Depends(get_profile),
):
    template = get_template_or_404(db, template_id)
    return HTMLResponse(content=preview_template(template, profile))


@router.put("/{template_id}", response_model=InvoiceTemplateRead)
async def update_invoice_template(
    template_id: int,
    template_in: InvoiceTemplateUpdate,
    db: Session = Depends(get_db),
):
    template = get_template_or_404(db, template_id)
    return update_template(db, template, template_in)


@router.delete("/{template_id}", response_model=InvoiceTemplateRead)
async def delete_invoice_template(template_id: int, db: Session = Depends(get_db)):
    template = get_template_or_404(db, template_id)
    return delete_template(db, template)
