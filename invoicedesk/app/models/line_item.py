"""Line items embedded in an invoice; replaced wholesale on edit."""

from decimal import Decimal

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from invoicedesk.app.db.base_class import Base
from invoicedesk.app.services.calculation import line_total


class InvoiceLineItem(Base):
    __tablename__ = "invoice_line_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    description = Column(String(255), nullable=False)
    details = Column(String(500), nullable=True)
    quantity = Column(Numeric(12, 4), nullable=False)
    rate = Column(Numeric(12, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items")

    @property
    def total(self) -> Decimal:
        return line_total(self.quantity, self.rate)
