import pytest
from fastapi.testclient import TestClient

from invoicedesk.app.core.settings import get_settings
from invoicedesk.app.db.base import Base
from invoicedesk.app.db.session import engine
from invoicedesk.app.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_client_record(client: TestClient, **overrides):
    payload = {
        "name": "Acme",
        "email": "billing@acme.example.com",
        "company": "Acme Holdings",
        "address": {"street": "5 Market St", "city": "Springfield"},
        "payment_terms": 15,
        "currency": "EUR",
    }
    payload.update(overrides)
    resp = client.post("/clients/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_client_defaults_come_from_settings(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "default_payment_terms", 45)
    monkeypatch.setattr(settings, "default_currency", "gbp")
    client = TestClient(app)
    resp = client.post("/clients/", json={"name": "Initech", "email": "ap@initech.example.com"})
    assert resp.status_code == 201, resp.text
    assert resp.json()["payment_terms"] == 45
    assert resp.json()["currency"] == "GBP"

    invoice = client.post(
        "/invoices/",
        json={"client_id": resp.json()["id"], "items": [{"description": "A", "quantity": 1, "rate": 10}]},
    ).json()
    assert invoice["payment_terms"] == 45
    assert invoice["currency"] == "GBP"


def test_create_and_get_client():
    client = TestClient(app)
    created = create_client_record(client)
    assert created["currency"] == "EUR"
    assert created["address"]["city"] == "Springfield"
    assert created["owner_id"] is None

    resp = client.get(f"/clients/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["email"] == "billing@acme.example.com"


def test_duplicate_email_is_a_conflict():
    client = TestClient(app)
    create_client_record(client)
    resp = client.post("/clients/", json={"name": "Other", "email": "BILLING@acme.example.com"})
    assert resp.status_code == 409
    assert resp.json()["error"]["kind"] == "referential_conflict"


def test_invalid_payload_uses_error_envelope():
    client = TestClient(app)
    resp = client.post("/clients/", json={"name": "", "email": "not-an-email", "currency": "JPY"})
    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["kind"] == "validation_failure"
    assert error["path"] == "/clients/"
    assert error["method"] == "POST"
    assert error["details"]["errors"]


def test_update_client():
    client = TestClient(app)
    created = create_client_record(client)
    resp = client.put(f"/clients/{created['id']}", json={"phone": "555-0100", "payment_terms": 45})
    assert resp.status_code == 200
    data = resp.json()
    assert data["phone"] == "555-0100"
    assert data["payment_terms"] == 45
    assert data["name"] == "Acme"


def test_update_rejects_clearing_required_fields():
    client = TestClient(app)
    created = create_client_record(client)
    resp = client.put(f"/clients/{created['id']}", json={"name": None})
    assert resp.status_code == 422
    assert resp.json()["error"]["details"]["fields"] == ["name"]


def test_update_to_taken_email_is_a_conflict():
    client = TestClient(app)
    create_client_record(client)
    other = create_client_record(client, name="Globex", email="ap@globex.example.com")
    resp = client.put(f"/clients/{other['id']}", json={"email": "billing@acme.example.com"})
    assert resp.status_code == 409


def test_client_with_invoices_cannot_be_deleted():
    client = TestClient(app)
    created = create_client_record(client)
    resp = client.post(
        "/invoices/",
        json={"client_id": created["id"], "items": [{"description": "Work", "quantity": 1, "rate": 10}]},
    )
    assert resp.status_code == 201

    resp = client.delete(f"/clients/{created['id']}")
    assert resp.status_code == 409
    assert resp.json()["error"]["details"]["invoice_count"] == 1
    assert client.get(f"/clients/{created['id']}").status_code == 200


def test_delete_client_without_invoices():
    client = TestClient(app)
    created = create_client_record(client)
    assert client.delete(f"/clients/{created['id']}").status_code == 200
    assert client.get(f"/clients/{created['id']}").status_code == 404


def test_list_clients_includes_invoice_stats():
    client = TestClient(app)
    acme = create_client_record(client, currency="USD")
    create_client_record(client, name="Globex", email="ap@globex.example.com")
    for rate in (100, 50):
        client.post(
            "/invoices/",
            json={
                "client_id": acme["id"],
                "issue_date": "2026-10-01",
                "tax_rate": 0,
                "items": [{"description": "Work", "quantity": 1, "rate": rate}],
            },
        )

    resp = client.get("/clients/")
    assert resp.status_code == 200
    stats = {item["name"]: item for item in resp.json()}
    assert stats["Acme"]["total_invoices"] == 2
    assert float(stats["Acme"]["total_amount"]) == 150.0
    assert stats["Acme"]["last_invoice_date"] == "2026-10-01"
    assert stats["Globex"]["total_invoices"] == 0
    assert stats["Globex"]["last_invoice_date"] is None


def test_list_client_invoices():
    client = TestClient(app)
    created = create_client_record(client)
    client.post(
        "/invoices/",
        json={"client_id": created["id"], "items": [{"description": "Work", "quantity": 1, "rate": 10}]},
    )
    resp = client.get(f"/clients/{created['id']}/invoices")
    assert resp.status_code == 200
    assert len(resp.json()) == 1
