import pytest
from fastapi.testclient import TestClient

from invoicedesk.app.core.errors import (
    DispatchFailure,
    DuplicateInvoiceNumber,
    InvalidStateTransition,
    NotFound,
    ReferentialConflict,
    RenderFailure,
    RenderTimeout,
    TemplateSyntaxFailure,
    ValidationFailure,
)
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


@pytest.mark.parametrize(
    "error_cls, kind, status_code",
    [
        (ValidationFailure, "validation_failure", 422),
        (NotFound, "not_found", 404),
        (ReferentialConflict, "referential_conflict", 409),
        (InvalidStateTransition, "invalid_state_transition", 409),
        (RenderFailure, "render_failure", 500),
        (TemplateSyntaxFailure, "render_failure", 422),
        (RenderTimeout, "render_failure", 504),
        (DispatchFailure, "dispatch_failure", 502),
    ],
)
def test_error_kinds_and_statuses(error_cls, kind, status_code):
    error = error_cls("boom")
    assert error.kind == kind
    assert error.status_code == status_code
    assert error.message == "boom"


def test_duplicate_invoice_number_is_a_referential_conflict():
    error = DuplicateInvoiceNumber("INV-202610-0001")
    assert isinstance(error, ReferentialConflict)
    assert error.code == "duplicate_invoice_number"
    assert error.details == {"invoice_number": "INV-202610-0001"}


def test_stack_is_included_only_in_development(monkeypatch):
    client = TestClient(app)
    resp = client.get("/clients/999")
    assert resp.status_code == 404
    assert "stack" in resp.json()["error"]

    monkeypatch.setattr(get_settings(), "environment", "production")
    resp = client.get("/clients/999")
    assert "stack" not in resp.json()["error"]
    assert resp.json()["error"]["details"] == {"client_id": 999}
