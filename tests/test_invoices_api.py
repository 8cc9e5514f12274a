from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

import pytest
from fastapi.testclient import TestClient

from invoicedesk.app.core.time import utc_today
from invoicedesk.app.db.base import Base
from invoicedesk.app.db.session import engine
from invoicedesk.app.main import app
from invoicedesk.app.services import invoices as invoice_service


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_client_record(client: TestClient, **overrides):
    payload = {"name": "Acme", "email": "billing@acme.example.com", "payment_terms": 14, "currency": "USD"}
    payload.update(overrides)
    resp = client.post("/clients/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_invoice(client: TestClient, client_id: int, **overrides):
    payload = {
        "client_id": client_id,
        "items": [
            {"description": "A", "quantity": 2, "rate": 50},
            {"description": "B", "quantity": 1, "rate": 100},
        ],
    }
    payload.update(overrides)
    resp = client.post("/invoices/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_invoice_applies_defaults_and_totals():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(client, customer["id"])

    assert invoice["status"] == "draft"
    assert invoice["invoice_number"].startswith("INV-")
    assert Decimal(invoice["subtotal"]) == Decimal("200.00")
    assert Decimal(invoice["tax_rate"]) == Decimal("0.08")
    assert Decimal(invoice["tax_amount"]) == Decimal("16.00")
    assert Decimal(invoice["total"]) == Decimal("216.00")
    assert invoice["payment_terms"] == 14
    assert invoice["currency"] == "USD"
    issue = date.fromisoformat(invoice["issue_date"])
    assert issue == utc_today()
    assert date.fromisoformat(invoice["due_date"]) == issue + timedelta(days=14)
    assert [item["description"] for item in invoice["items"]] == ["A", "B"]
    assert Decimal(invoice["items"][0]["total"]) == Decimal("100")


def test_create_invoice_for_missing_client_is_not_found():
    client = TestClient(app)
    resp = client.post("/invoices/", json={"client_id": 42, "items": [{"description": "A", "quantity": 1, "rate": 1}]})
    assert resp.status_code == 404
    assert resp.json()["error"]["kind"] == "not_found"


def test_create_invoice_rejects_empty_items_and_bad_rates():
    client = TestClient(app)
    customer = create_client_record(client)
    resp = client.post("/invoices/", json={"client_id": customer["id"], "items": []})
    assert resp.status_code == 422
    resp = client.post(
        "/invoices/",
        json={"client_id": customer["id"], "items": [{"description": "A", "quantity": 1, "rate": 10.123}]},
    )
    assert resp.status_code == 422


def test_due_date_before_issue_date_is_rejected():
    client = TestClient(app)
    customer = create_client_record(client)
    resp = client.post(
        "/invoices/",
        json={
            "client_id": customer["id"],
            "issue_date": "2026-10-10",
            "due_date": "2026-10-01",
            "items": [{"description": "A", "quantity": 1, "rate": 10}],
        },
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["kind"] == "validation_failure"


def test_discount_larger_than_total_is_rejected():
    client = TestClient(app)
    customer = create_client_record(client)
    resp = client.post(
        "/invoices/",
        json={
            "client_id": customer["id"],
            "discount_amount": 500,
            "items": [{"description": "A", "quantity": 1, "rate": 10}],
        },
    )
    assert resp.status_code == 422


def test_update_items_recomputes_totals_from_new_items():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(client, customer["id"])

    resp = client.put(
        f"/invoices/{invoice['id']}",
        json={"items": [{"description": "C", "quantity": 3, "rate": 10}], "discount_amount": 2},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert Decimal(data["subtotal"]) == Decimal("30.00")
    assert Decimal(data["tax_amount"]) == Decimal("2.40")
    assert Decimal(data["total"]) == Decimal("30.40")
    assert [item["description"] for item in data["items"]] == ["C"]
    assert data["invoice_number"] == invoice["invoice_number"]


def test_update_tax_rate_recomputes_totals():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(client, customer["id"])
    resp = client.put(f"/invoices/{invoice['id']}", json={"tax_rate": 0})
    assert Decimal(resp.json()["total"]) == Decimal("200.00")


def test_update_rejects_clearing_required_fields():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(client, customer["id"])
    resp = client.put(f"/invoices/{invoice['id']}", json={"items": None})
    assert resp.status_code == 422
    assert resp.json()["error"]["details"]["fields"] == ["items"]


def test_status_workflow_sets_timestamps_once():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(client, customer["id"])

    sent = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "sent"}).json()
    assert sent["status"] == "sent"
    assert sent["sent_at"] is not None

    again = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "sent"}).json()
    assert again["sent_at"] == sent["sent_at"]

    paid = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"}).json()
    assert paid["status"] == "paid"
    assert paid["paid_at"] is not None
    assert paid["sent_at"] == sent["sent_at"]


def test_invalid_status_transition_is_rejected():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(client, customer["id"])
    resp = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"})
    assert resp.status_code == 409
    assert resp.json()["error"]["kind"] == "invalid_state_transition"


def test_paid_invoice_cannot_be_deleted():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(client, customer["id"])
    client.patch(f"/invoices/{invoice['id']}/status", json={"status": "sent"})
    client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"})

    resp = client.delete(f"/invoices/{invoice['id']}")
    assert resp.status_code == 409
    assert client.get(f"/invoices/{invoice['id']}").status_code == 200


def test_draft_invoice_can_be_deleted():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(client, customer["id"])
    resp = client.delete(f"/invoices/{invoice['id']}")
    assert resp.status_code == 200
    assert resp.json()["deleted"] is True
    assert client.get(f"/invoices/{invoice['id']}").status_code == 404


def test_generated_numbers_keep_working_after_a_deletion():
    client = TestClient(app)
    customer = create_client_record(client)
    first = create_invoice(client, customer["id"])
    second = create_invoice(client, customer["id"])
    assert client.delete(f"/invoices/{first['id']}").status_code == 200

    created = [create_invoice(client, customer["id"])["invoice_number"] for _ in range(3)]
    prefix, sequence = second["invoice_number"].rsplit("-", 1)
    assert created == [f"{prefix}-{int(sequence) + step:04d}" for step in (1, 2, 3)]


def test_subtotal_matches_persisted_line_items():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(
        client,
        customer["id"],
        items=[
            {"description": "A", "quantity": "1.0005", "rate": "1000"},
            {"description": "B", "quantity": "2.5", "rate": "19.99"},
        ],
    )

    stored = client.get(f"/invoices/{invoice['id']}").json()
    cents = Decimal("0.01")
    persisted = sum(
        (Decimal(item["quantity"]) * Decimal(item["rate"])).quantize(cents, rounding=ROUND_HALF_UP)
        for item in stored["items"]
    )
    assert Decimal(stored["subtotal"]) == persisted == Decimal("1050.48")


def test_quantity_with_more_than_four_decimals_is_rejected():
    client = TestClient(app)
    customer = create_client_record(client)
    resp = client.post(
        "/invoices/",
        json={"client_id": customer["id"], "items": [{"description": "A", "quantity": "1.00005", "rate": "1000"}]},
    )
    assert resp.status_code == 422


def test_supplied_number_with_path_characters_is_rejected():
    client = TestClient(app)
    customer = create_client_record(client)
    resp = client.post(
        "/invoices/",
        json={
            "client_id": customer["id"],
            "invoice_number": "2026/10/001",
            "items": [{"description": "A", "quantity": 1, "rate": 1}],
        },
    )
    assert resp.status_code == 422
    assert client.get("/invoices/").json() == []


def test_changing_client_of_paid_invoice_is_rejected():
    client = TestClient(app)
    customer = create_client_record(client)
    other = create_client_record(client, name="Globex", email="ap@globex.example.com")
    invoice = create_invoice(client, customer["id"])
    client.patch(f"/invoices/{invoice['id']}/status", json={"status": "sent"})
    client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"})

    resp = client.put(f"/invoices/{invoice['id']}", json={"client_id": other["id"]})
    assert resp.status_code == 409


def test_supplied_duplicate_number_is_rejected():
    client = TestClient(app)
    customer = create_client_record(client)
    create_invoice(client, customer["id"], invoice_number="CUSTOM-1")
    resp = client.post(
        "/invoices/",
        json={
            "client_id": customer["id"],
            "invoice_number": "CUSTOM-1",
            "items": [{"description": "A", "quantity": 1, "rate": 1}],
        },
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "duplicate_invoice_number"


def test_generated_number_collision_surfaces_to_caller(monkeypatch):
    client = TestClient(app)
    customer = create_client_record(client)
    existing = create_invoice(client, customer["id"])

    monkeypatch.setattr(invoice_service, "next_invoice_number", lambda db, period=None: existing["invoice_number"])
    resp = client.post(
        "/invoices/",
        json={"client_id": customer["id"], "items": [{"description": "A", "quantity": 1, "rate": 1}]},
    )
    assert resp.status_code == 409
    error = resp.json()["error"]
    assert error["kind"] == "referential_conflict"
    assert error["code"] == "duplicate_invoice_number"
    assert len(client.get("/invoices/").json()) == 1


def test_list_invoices_filters_and_sorts():
    client = TestClient(app)
    customer = create_client_record(client)
    other = create_client_record(client, name="Globex", email="ap@globex.example.com")
    small = create_invoice(client, customer["id"], issue_date="2026-09-01", items=[{"description": "S", "quantity": 1, "rate": 10}])
    large = create_invoice(client, customer["id"], issue_date="2026-10-01", items=[{"description": "L", "quantity": 1, "rate": 500}])
    create_invoice(client, other["id"], issue_date="2026-10-02")
    client.patch(f"/invoices/{large['id']}/status", json={"status": "sent"})

    by_client = client.get(f"/invoices/?client_id={customer['id']}&sort_by=total&sort_order=asc").json()
    assert [item["id"] for item in by_client] == [small["id"], large["id"]]

    sent = client.get("/invoices/?status=sent").json()
    assert [item["id"] for item in sent] == [large["id"]]

    september = client.get("/invoices/?start_date=2026-09-01&end_date=2026-09-30").json()
    assert [item["id"] for item in september] == [small["id"]]

    paged = client.get("/invoices/?limit=1&skip=1&sort_by=issue_date&sort_order=desc").json()
    assert [item["id"] for item in paged] == [large["id"]]


def test_list_invoices_rejects_unknown_sort_field():
    client = TestClient(app)
    resp = client.get("/invoices/?sort_by=client_name")
    assert resp.status_code == 422
    assert resp.json()["error"]["kind"] == "validation_failure"


def test_mark_overdue_endpoint():
    client = TestClient(app)
    customer = create_client_record(client)
    invoice = create_invoice(client, customer["id"], issue_date="2020-01-01", due_date="2020-01-31")
    client.patch(f"/invoices/{invoice['id']}/status", json={"status": "sent"})

    resp = client.post("/invoices/mark-overdue")
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()] == [invoice["id"]]
    assert client.get(f"/invoices/{invoice['id']}").json()["status"] == "overdue"
