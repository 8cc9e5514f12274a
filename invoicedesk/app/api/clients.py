"""Client endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from invoicedesk.app.crud.crud_invoice import invoice_crud
from invoicedesk.app.db.session import get_db
from invoicedesk.app.dependencies.auth import owner_scope
from invoicedesk.app.schemas.client import ClientCreate, ClientRead, ClientUpdate, ClientWithStats
from invoicedesk.app.schemas.invoice import InvoiceRead
from invoicedesk.app.services.clients import (
    create_client,
    delete_client,
    get_client_or_404,
    list_clients_with_stats,
    update_client,
)

router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("/", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client_endpoint(
    client_in: ClientCreate,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
):
    return create_client(db, client_in, owner_id)


@router.get("/", response_model=List[ClientWithStats])
async def list_clients(db: Session = Depends(get_db), owner_id: Optional[str] = Depends(owner_scope)):
    return list_clients_with_stats(db, owner_id)


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(client_id: int, db: Session = Depends(get_db), owner_id: Optional[str] = Depends(owner_scope)):
    return get_client_or_404(db, client_id, owner_id)


@router.get("/{client_id}/invoices", response_model=List[InvoiceRead])
async def list_client_invoices(
    client_id: int,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
):
    client = get_client_or_404(db, client_id, owner_id)
    return invoice_crud.get_multi(db, owner_id=owner_id, client_id=client.id, skip=skip, limit=limit)


@router.put("/{client_id}", response_model=ClientRead)
async def update_client_endpoint(
    client_id: int,
    client_in: ClientUpdate,
    db: Session = Depends(get_db),
    owner_id: Optional[str] = Depends(owner_scope),
):
    client = get_client_or_404(db, client_id, owner_id)
    return update_client(db, client, client_in)


@router.delete("/{client_id}", response_model=ClientRead)
async def delete_client_endpoint(client_id: int, db: Session = Depends(get_db), owner_id: Optional[str] = Depends(owner_scope)):
    client = get_client_or_404(db, client_id, owner_id)
    return delete_client(db, client)
