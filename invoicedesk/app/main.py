# InvoiceDesk backend entrypoint: invoice lifecycle API.

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from invoicedesk.app.api import clients
from invoicedesk.app.api import email_config
from invoicedesk.app.api import invoice_templates
from invoicedesk.app.api import invoices
from invoicedesk.app.core.errors import register_exception_handlers
from invoicedesk.app.core.logging_config import configure_logging
from invoicedesk.app.core.seed import ensure_default_template
from invoicedesk.app.core.settings import get_settings
from invoicedesk.app.db.base import Base
from invoicedesk.app.db.session import SessionLocal, engine

settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(clients.router)
app.include_router(invoices.router)
app.include_router(invoice_templates.router)
app.include_router(email_config.router)


@app.get("/")
def read_root():
    return {"app": "InvoiceDesk backend", "status": "ok", "version": settings.api_version}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def prepare_storage():
    configure_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_default_template(db)
    finally:
        db.close()
