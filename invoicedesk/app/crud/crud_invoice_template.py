"""CRUD operations for invoice templates.

The default flag is kept on exactly one row: the clearing UPDATE and the write
of the new default are issued in one transaction, and the partial unique index
on ``is_default`` rejects a concurrent writer instead of letting two defaults
coexist.
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoicedesk.app.core.errors import ReferentialConflict
from invoicedesk.app.models.invoice_template import InvoiceTemplate
from invoicedesk.app.schemas.invoice_template import InvoiceTemplateCreate, InvoiceTemplateUpdate


class CRUDInvoiceTemplate:
    def create(self, db: Session, *, obj_in: InvoiceTemplateCreate) -> InvoiceTemplate:
        data = obj_in.model_dump()
        make_default = bool(data.pop("is_default", False)) or self.count(db) == 0
        obj = InvoiceTemplate(**data, is_default=False)
        db.add(obj)
        if make_default:
            db.flush()
            self._clear_default(db, keep_id=obj.id)
            obj.is_default = True
        self._commit(db)
        db.refresh(obj)
        return obj

    def get(self, db: Session, *, template_id: int) -> Optional[InvoiceTemplate]:
        return db.query(InvoiceTemplate).filter(InvoiceTemplate.id == template_id).first()

    def get_by_name(self, db: Session, *, name: str) -> Optional[InvoiceTemplate]:
        return db.query(InvoiceTemplate).filter(InvoiceTemplate.name == name).first()

    def get_default(self, db: Session) -> Optional[InvoiceTemplate]:
        return db.query(InvoiceTemplate).filter(InvoiceTemplate.is_default.is_(True)).first()

    def get_multi(self, db: Session) -> List[InvoiceTemplate]:
        return db.query(InvoiceTemplate).order_by(InvoiceTemplate.created_at.asc(), InvoiceTemplate.id.asc()).all()

    def count(self, db: Session) -> int:
        return db.query(InvoiceTemplate).count()

    def update(self, db: Session, *, db_obj: InvoiceTemplate, obj_in: InvoiceTemplateUpdate) -> InvoiceTemplate:
        update_data = obj_in.model_dump(exclude_unset=True)
        make_default = update_data.pop("is_default", None)
        if make_default:
            self._clear_default(db, keep_id=db_obj.id)
            db_obj.is_default = True
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        self._commit(db)
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: InvoiceTemplate) -> InvoiceTemplate:
        was_default = db_obj.is_default
        db.delete(db_obj)
        db.flush()
        if was_default:
            successor = (
                db.query(InvoiceTemplate)
                .order_by(InvoiceTemplate.created_at.asc(), InvoiceTemplate.id.asc())
                .first()
            )
            if successor is not None:
                successor.is_default = True
        self._commit(db)
        return db_obj

    def _clear_default(self, db: Session, *, keep_id: int) -> None:
        (
            db.query(InvoiceTemplate)
            .filter(InvoiceTemplate.is_default.is_(True), InvoiceTemplate.id != keep_id)
            .update({InvoiceTemplate.is_default: False}, synchronize_session=False)
        )

    def _commit(self, db: Session) -> None:
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ReferentialConflict(
                "Template conflicts with an existing template (name or default flag)",
                details={"reason": str(exc.orig)},
            ) from exc


invoice_template_crud = CRUDInvoiceTemplate()
