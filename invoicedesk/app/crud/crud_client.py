"""CRUD operations for clients."""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from invoicedesk.app.models.client import Client
from invoicedesk.app.models.invoice import Invoice
from invoicedesk.app.schemas.client import ClientCreate, ClientUpdate


class CRUDClient:
    def _scoped(self, db: Session, owner_id: Optional[str]):
        query = db.query(Client)
        if owner_id is not None:
            query = query.filter(Client.owner_id == owner_id)
        return query

    def create(self, db: Session, *, obj_in: ClientCreate, owner_id: Optional[str] = None) -> Client:
        obj = Client(owner_id=owner_id, **obj_in.model_dump())
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def get(self, db: Session, *, client_id: int, owner_id: Optional[str] = None) -> Optional[Client]:
        return self._scoped(db, owner_id).filter(Client.id == client_id).first()

    def get_by_email(self, db: Session, *, email: str, owner_id: Optional[str] = None) -> Optional[Client]:
        return self._scoped(db, owner_id).filter(func.lower(Client.email) == email.lower()).first()

    def get_multi(self, db: Session, *, owner_id: Optional[str] = None) -> List[Client]:
        return self._scoped(db, owner_id).order_by(Client.name.asc(), Client.id.asc()).all()

    def get_invoice_stats(self, db: Session, *, client_ids: List[int]) -> dict[int, tuple]:
        """Map client id -> (invoice count, total amount, last issue date)."""
        if not client_ids:
            return {}
        rows = (
            db.query(
                Invoice.client_id,
                func.count(Invoice.id),
                func.coalesce(func.sum(Invoice.total), 0),
                func.max(Invoice.issue_date),
            )
            .filter(Invoice.client_id.in_(client_ids))
            .group_by(Invoice.client_id)
            .all()
        )
        return {row[0]: (row[1], row[2], row[3]) for row in rows}

    def update(self, db: Session, *, db_obj: Client, obj_in: ClientUpdate) -> Client:
        update_data = obj_in.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: Client) -> Client:
        db.delete(db_obj)
        db.commit()
        return db_obj


client_crud = CRUDClient()
