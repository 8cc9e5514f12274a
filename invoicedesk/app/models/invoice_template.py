"""Invoice template model: HTML skeleton + stylesheet used to render documents."""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text, func, text
from sqlalchemy.orm import relationship

from invoicedesk.app.db.base_class import Base


class InvoiceTemplate(Base):
    __tablename__ = "invoice_templates"
    __table_args__ = (
        # At most one row may carry the default flag
        Index(
            "uq_invoice_templates_single_default",
            "is_default",
            unique=True,
            sqlite_where=text("is_default = 1"),
            postgresql_where=text("is_default"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(500), nullable=True)
    html_content = Column(Text, nullable=False)
    css_content = Column(Text, nullable=False, default="")
    preview_image = Column(String(500), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    invoices = relationship("Invoice", back_populates="template")
