"""Client management rules on top of the client repository."""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from invoicedesk.app.core.errors import NotFound, ReferentialConflict, ValidationFailure
from invoicedesk.app.crud.crud_client import client_crud
from invoicedesk.app.crud.crud_invoice import invoice_crud
from invoicedesk.app.models.client import Client
from invoicedesk.app.schemas.client import ClientCreate, ClientUpdate, ClientWithStats

_REQUIRED_FIELDS = {"name", "email", "address", "payment_terms", "currency"}


def get_client_or_404(db: Session, client_id: int, owner_id: Optional[str] = None) -> Client:
    client = client_crud.get(db, client_id=client_id, owner_id=owner_id)
    if not client:
        raise NotFound("Client not found", details={"client_id": client_id})
    return client


def _ensure_email_available(db: Session, email: str, owner_id: Optional[str], exclude_id: Optional[int] = None) -> None:
    existing = client_crud.get_by_email(db, email=email, owner_id=owner_id)
    if existing and existing.id != exclude_id:
        raise ReferentialConflict("A client with this email already exists", details={"email": email})


def create_client(db: Session, client_in: ClientCreate, owner_id: Optional[str] = None) -> Client:
    _ensure_email_available(db, client_in.email, owner_id)
    return client_crud.create(db, obj_in=client_in, owner_id=owner_id)


def update_client(db: Session, client: Client, client_in: ClientUpdate) -> Client:
    update_data = client_in.model_dump(exclude_unset=True)
    nulled = sorted(field for field in _REQUIRED_FIELDS if field in update_data and update_data[field] is None)
    if nulled:
        raise ValidationFailure("Required client fields cannot be cleared", details={"fields": nulled})
    if client_in.email and client_in.email.lower() != client.email.lower():
        _ensure_email_available(db, client_in.email, client.owner_id, exclude_id=client.id)
    return client_crud.update(db, db_obj=client, obj_in=client_in)


def delete_client(db: Session, client: Client) -> Client:
    invoice_count = invoice_crud.count_for_client(db, client_id=client.id)
    if invoice_count:
        raise ReferentialConflict(
            f"Cannot delete client with {invoice_count} existing invoice(s)",
            details={"invoice_count": invoice_count},
        )
    return client_crud.delete(db, db_obj=client)


def list_clients_with_stats(db: Session, owner_id: Optional[str] = None) -> List[ClientWithStats]:
    clients = client_crud.get_multi(db, owner_id=owner_id)
    stats = client_crud.get_invoice_stats(db, client_ids=[client.id for client in clients])
    results = []
    for client in clients:
        count, total_amount, last_issue = stats.get(client.id, (0, Decimal("0.00"), None))
        results.append(
            ClientWithStats.model_validate(client).model_copy(
                update={
                    "total_invoices": count,
                    "total_amount": Decimal(str(total_amount or 0)).quantize(Decimal("0.01")),
                    "last_invoice_date": last_issue,
                }
            )
        )
    return results
