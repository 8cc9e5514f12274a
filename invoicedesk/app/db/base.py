from invoicedesk.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from invoicedesk.app.models.client import Client  # noqa: F401
from invoicedesk.app.models.invoice_template import InvoiceTemplate  # noqa: F401
from invoicedesk.app.models.invoice import Invoice  # noqa: F401
from invoicedesk.app.models.line_item import InvoiceLineItem  # noqa: F401
