"""Invoice template management rules on top of the template repository."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from invoicedesk.app.core.business_profile import BusinessProfile
from invoicedesk.app.core.errors import NotFound, ReferentialConflict, ValidationFailure
from invoicedesk.app.crud.crud_invoice import invoice_crud
from invoicedesk.app.crud.crud_invoice_template import invoice_template_crud
from invoicedesk.app.models.invoice_template import InvoiceTemplate
from invoicedesk.app.schemas.invoice_template import InvoiceTemplateCreate, InvoiceTemplateUpdate
from invoicedesk.app.services.template_rendering import check_template_syntax, render_template_preview

logger = logging.getLogger(__name__)


def get_template_or_404(db: Session, template_id: int) -> InvoiceTemplate:
    template = invoice_template_crud.get(db, template_id=template_id)
    if not template:
        raise NotFound("Invoice template not found", details={"template_id": template_id})
    return template


def get_default_template(db: Session) -> InvoiceTemplate:
    template = invoice_template_crud.get_default(db)
    if not template:
        raise NotFound("No default invoice template is configured")
    return template


def _ensure_name_available(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    existing = invoice_template_crud.get_by_name(db, name=name)
    if existing and existing.id != exclude_id:
        raise ReferentialConflict("A template with this name already exists", details={"name": name})


def create_template(db: Session, template_in: InvoiceTemplateCreate) -> InvoiceTemplate:
    _ensure_name_available(db, template_in.name)
    check_template_syntax(template_in.html_content)
    template = invoice_template_crud.create(db, obj_in=template_in)
    logger.info("Created invoice template %r (id=%s, default=%s)", template.name, template.id, template.is_default)
    return template


def update_template(db: Session, template: InvoiceTemplate, template_in: InvoiceTemplateUpdate) -> InvoiceTemplate:
    update_data = template_in.model_dump(exclude_unset=True)
    for field in ("name", "html_content", "is_default"):
        if field in update_data and update_data[field] is None:
            raise ValidationFailure(f"Template field {field} cannot be cleared", details={"fields": [field]})
    if update_data.get("is_default") is False and template.is_default:
        raise ValidationFailure("Mark another template as default instead of clearing the current default")
    if "name" in update_data and update_data["name"] != template.name:
        _ensure_name_available(db, update_data["name"], exclude_id=template.id)
    if "html_content" in update_data:
        check_template_syntax(update_data["html_content"])

    template = invoice_template_crud.update(db, db_obj=template, obj_in=template_in)
    logger.info("Updated invoice template %r (id=%s)", template.name, template.id)
    return template


def delete_template(db: Session, template: InvoiceTemplate) -> InvoiceTemplate:
    usage = invoice_crud.count_for_template(db, template_id=template.id)
    if usage:
        raise ReferentialConflict(
            f"Cannot delete template used by {usage} invoice(s)",
            details={"invoice_count": usage},
        )
    if invoice_template_crud.count(db) == 1:
        raise ReferentialConflict("Cannot delete the only invoice template")

    template_name, template_id = template.name, template.id
    template = invoice_template_crud.delete(db, db_obj=template)
    logger.info("Deleted invoice template %r (id=%s)", template_name, template_id)
    return template


def preview_template(template: InvoiceTemplate, profile: BusinessProfile) -> str:
    return render_template_preview(template, profile)
