"""CRUD operations for invoices."""

from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoicedesk.app.core.errors import DuplicateInvoiceNumber, ReferentialConflict, ValidationFailure
from invoicedesk.app.models.invoice import Invoice

SORTABLE_FIELDS = {
    "created_at": Invoice.created_at,
    "issue_date": Invoice.issue_date,
    "due_date": Invoice.due_date,
    "total": Invoice.total,
    "status": Invoice.status,
}


class CRUDInvoice:
    def _scoped(self, db: Session, owner_id: Optional[str]):
        query = db.query(Invoice)
        if owner_id is not None:
            query = query.filter(Invoice.owner_id == owner_id)
        return query

    def get(self, db: Session, *, invoice_id: int, owner_id: Optional[str] = None) -> Optional[Invoice]:
        return self._scoped(db, owner_id).filter(Invoice.id == invoice_id).first()

    def get_multi(
        self,
        db: Session,
        *,
        owner_id: Optional[str] = None,
        status: Optional[str] = None,
        client_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 50,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> List[Invoice]:
        query = self._scoped(db, owner_id)
        if status:
            query = query.filter(Invoice.status == status)
        if client_id:
            query = query.filter(Invoice.client_id == client_id)
        if start_date:
            query = query.filter(Invoice.issue_date >= start_date)
        if end_date:
            query = query.filter(Invoice.issue_date <= end_date)

        if sort_by not in SORTABLE_FIELDS:
            raise ValidationFailure(f"Invalid sort_by value: {sort_by}", details={"allowed": sorted(SORTABLE_FIELDS)})
        sort_order_normalized = (sort_order or "desc").lower()
        if sort_order_normalized not in {"asc", "desc"}:
            raise ValidationFailure(f"Invalid sort_order value: {sort_order}")
        sort_column = SORTABLE_FIELDS[sort_by]
        if sort_order_normalized == "asc":
            order_by_clause = [sort_column.asc(), Invoice.id.asc()]
        else:
            order_by_clause = [sort_column.desc(), Invoice.id.desc()]

        return query.order_by(*order_by_clause).offset(skip).limit(limit).all()

    def get_by_number(self, db: Session, *, invoice_number: str) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.invoice_number == invoice_number).first()

    def max_sequence_for_prefix(self, db: Session, *, prefix: str) -> int:
        """Highest numeric suffix among invoice numbers under ``prefix``, 0 when none."""
        rows = db.query(Invoice.invoice_number).filter(Invoice.invoice_number.startswith(prefix)).all()
        suffixes = [number[len(prefix):] for (number,) in rows]
        return max((int(suffix) for suffix in suffixes if suffix.isdigit()), default=0)

    def count_for_client(self, db: Session, *, client_id: int) -> int:
        return db.query(func.count(Invoice.id)).filter(Invoice.client_id == client_id).scalar() or 0

    def count_for_template(self, db: Session, *, template_id: int) -> int:
        return db.query(func.count(Invoice.id)).filter(Invoice.template_id == template_id).scalar() or 0

    def create(self, db: Session, *, db_obj: Invoice) -> Invoice:
        db.add(db_obj)
        self._commit(db, db_obj)
        db.refresh(db_obj)
        return db_obj

    def update(self, db: Session, *, db_obj: Invoice) -> Invoice:
        self._commit(db, db_obj)
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: Invoice) -> Invoice:
        db.delete(db_obj)
        db.commit()
        return db_obj

    def _commit(self, db: Session, db_obj: Invoice) -> None:
        invoice_number = db_obj.invoice_number
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if "invoice_number" in str(exc.orig):
                raise DuplicateInvoiceNumber(invoice_number) from exc
            raise ReferentialConflict("Invoice violates a store constraint", details={"reason": str(exc.orig)}) from exc


invoice_crud = CRUDInvoice()
