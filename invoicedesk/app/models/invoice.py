"""Invoice model: numbered, totalled billing record with a status workflow."""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from invoicedesk.app.db.base_class import Base


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),)

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    template_id = Column(Integer, ForeignKey("invoice_templates.id", ondelete="RESTRICT"), nullable=True, index=True)

    invoice_number = Column(String(50), nullable=False, index=True)
    status = Column(String(20), default="draft", nullable=False, index=True)

    issue_date = Column(Date, nullable=False, index=True)
    due_date = Column(Date, nullable=False)
    payment_terms = Column(Integer, nullable=False, default=30)

    subtotal = Column(Numeric(12, 2), default=0.00, nullable=False)
    tax_rate = Column(Numeric(5, 4), default=0.00, nullable=False)
    tax_amount = Column(Numeric(12, 2), default=0.00, nullable=False)
    discount_amount = Column(Numeric(12, 2), default=0.00, nullable=False)
    total = Column(Numeric(12, 2), default=0.00, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    notes = Column(Text, nullable=True)
    pdf_path = Column(String(500), nullable=True)

    sent_at = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    client = relationship("Client", back_populates="invoices")
    template = relationship("InvoiceTemplate", back_populates="invoices")
    items = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.position",
    )
