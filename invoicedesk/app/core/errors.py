"""Typed failures raised by the invoice engine.

Each error carries a stable ``kind`` tag (one per failure family), a more
specific ``code`` and the HTTP status the API layer answers with. Services raise
these; ``register_exception_handlers`` turns them into the JSON error envelope.
"""

import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from invoicedesk.app.core.settings import get_settings
from invoicedesk.app.core.time import utc_now

logger = logging.getLogger(__name__)


class InvoiceDeskError(Exception):
    kind = "internal_error"
    code = "internal_error"
    status_code = 500

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailure(InvoiceDeskError):
    kind = "validation_failure"
    code = "validation_failure"
    status_code = 422


class NotFound(InvoiceDeskError):
    kind = "not_found"
    code = "not_found"
    status_code = 404


class ReferentialConflict(InvoiceDeskError):
    kind = "referential_conflict"
    code = "referential_conflict"
    status_code = 409


class DuplicateInvoiceNumber(ReferentialConflict):
    """Raised when an invoice number is already taken.

    Not retried automatically: the caller resubmits and a fresh number is generated.
    """

    code = "duplicate_invoice_number"

    def __init__(self, invoice_number: str):
        super().__init__(
            f"Invoice number {invoice_number} is already in use; retry to generate a new number",
            details={"invoice_number": invoice_number},
        )
        self.invoice_number = invoice_number


class InvalidStateTransition(InvoiceDeskError):
    kind = "invalid_state_transition"
    code = "invalid_state_transition"
    status_code = 409


class RenderFailure(InvoiceDeskError):
    kind = "render_failure"
    code = "render_failure"
    status_code = 500


class TemplateSyntaxFailure(RenderFailure):
    code = "template_syntax_error"
    status_code = 422


class RenderTimeout(RenderFailure):
    code = "render_timeout"
    status_code = 504


class DispatchFailure(InvoiceDeskError):
    kind = "dispatch_failure"
    code = "dispatch_failure"
    status_code = 502


_HTTP_KINDS = {401: "unauthorized", 403: "forbidden", 404: "not_found"}


def _error_body(request: Request, *, kind: str, code: str, message: str, status: int, details=None, exc=None) -> dict:
    body = {
        "kind": kind,
        "code": code,
        "message": message,
        "status": status,
        "timestamp": utc_now().isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    if details is not None:
        body["details"] = details
    if exc is not None and get_settings().is_development:
        body["stack"] = "".join(traceback.format_exception(exc))
    return {"error": body}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvoiceDeskError)
    async def handle_invoicedesk_error(request: Request, exc: InvoiceDeskError):
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(level, "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code)
        content = _error_body(
            request,
            kind=exc.kind,
            code=exc.code,
            message=exc.message,
            status=exc.status_code,
            details=exc.details,
            exc=exc,
        )
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        content = _error_body(
            request,
            kind=ValidationFailure.kind,
            code=ValidationFailure.code,
            message="Request validation failed",
            status=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )
        return JSONResponse(status_code=422, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        kind = _HTTP_KINDS.get(exc.status_code, "http_error")
        content = _error_body(
            request,
            kind=kind,
            code=kind,
            message=str(exc.detail),
            status=exc.status_code,
        )
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))
