import re
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from invoicedesk.app.crud.crud_invoice import invoice_crud
from invoicedesk.app.db.base import Base
from invoicedesk.app.db.session import SessionLocal, engine
from invoicedesk.app.models.client import Client
from invoicedesk.app.schemas.invoice import InvoiceCreate, LineItemIn
from invoicedesk.app.services.invoices import create_invoice, delete_invoice
from invoicedesk.app.services.numbering import (
    fallback_invoice_number,
    format_invoice_number,
    next_invoice_number,
    period_prefix,
)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def _create_client(db):
    client = Client(name="Acme", email="billing@acme.example.com", address={}, payment_terms=30, currency="USD")
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


def _invoice_in(client_id, **overrides):
    data = {
        "client_id": client_id,
        "items": [LineItemIn(description="Work", quantity=Decimal("1"), rate=Decimal("10.00"))],
    }
    data.update(overrides)
    return InvoiceCreate(**data)


def test_format_invoice_number_zero_pads_sequence():
    assert period_prefix(date(2026, 3, 9)) == "INV-202603-"
    assert format_invoice_number(date(2026, 10, 1), 7) == "INV-202610-0007"
    assert format_invoice_number(date(2026, 10, 1), 1234) == "INV-202610-1234"


def test_first_number_of_a_month_is_0001():
    db = SessionLocal()
    try:
        assert next_invoice_number(db, date(2026, 10, 16)) == "INV-202610-0001"
    finally:
        db.close()


def test_sequential_creation_yields_unique_increasing_numbers():
    db = SessionLocal()
    try:
        client = _create_client(db)
        numbers = [
            create_invoice(db, _invoice_in(client.id), today=date(2026, 10, 16)).invoice_number
            for _ in range(3)
        ]
    finally:
        db.close()
    assert numbers == ["INV-202610-0001", "INV-202610-0002", "INV-202610-0003"]
    assert all(re.fullmatch(r"INV-\d{6}-\d{4}", number) for number in numbers)


def test_sequence_restarts_in_a_new_month():
    db = SessionLocal()
    try:
        client = _create_client(db)
        create_invoice(db, _invoice_in(client.id), today=date(2026, 10, 31))
        november = create_invoice(db, _invoice_in(client.id), today=date(2026, 11, 1))
    finally:
        db.close()
    assert november.invoice_number == "INV-202611-0001"


def test_deleted_invoice_does_not_free_its_number():
    db = SessionLocal()
    try:
        client = _create_client(db)
        first = create_invoice(db, _invoice_in(client.id), today=date(2026, 10, 16))
        create_invoice(db, _invoice_in(client.id), today=date(2026, 10, 16))
        delete_invoice(db, first)
        numbers = [
            create_invoice(db, _invoice_in(client.id), today=date(2026, 10, 16)).invoice_number
            for _ in range(2)
        ]
    finally:
        db.close()
    assert numbers == ["INV-202610-0003", "INV-202610-0004"]


def test_sequence_ignores_non_numeric_suffixes():
    db = SessionLocal()
    try:
        client = _create_client(db)
        create_invoice(db, _invoice_in(client.id, invoice_number="INV-202610-0005"), today=date(2026, 10, 16))
        create_invoice(db, _invoice_in(client.id, invoice_number="INV-202610-RUSH"), today=date(2026, 10, 16))
        number = next_invoice_number(db, date(2026, 10, 16))
    finally:
        db.close()
    assert number == "INV-202610-0006"


def test_store_failure_falls_back_to_epoch_number(monkeypatch):
    def broken_lookup(db, *, prefix):
        raise OperationalError("SELECT invoice_number", {}, Exception("database is locked"))

    monkeypatch.setattr(invoice_crud, "max_sequence_for_prefix", broken_lookup)
    db = SessionLocal()
    try:
        number = next_invoice_number(db, date(2026, 10, 16))
    finally:
        db.close()
    assert re.fullmatch(r"INV-\d{13}", number)


def test_fallback_number_uses_epoch_millis():
    moment = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert fallback_invoice_number(moment) == f"INV-{int(moment.timestamp() * 1000)}"
