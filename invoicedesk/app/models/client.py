"""Client model: the billed party of an invoice."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from invoicedesk.app.db.base_class import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=True, index=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    # street / city / state / zip / country, all optional
    address = Column(JSON, nullable=False, default=dict)
    tax_id = Column(String(100), nullable=True)
    payment_terms = Column(Integer, nullable=False, default=30)
    currency = Column(String(3), nullable=False, default="USD")
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    invoices = relationship("Invoice", back_populates="client")
