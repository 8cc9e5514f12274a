"""Client schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from invoicedesk.app.core.currency import Currency
from invoicedesk.app.core.settings import get_settings


class Address(BaseModel):
    street: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    zip: Optional[str] = Field(default=None, max_length=20)
    country: Optional[str] = Field(default=None, max_length=100)


class ClientBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    company: Optional[str] = Field(default=None, max_length=255)
    address: Address = Field(default_factory=Address)
    tax_id: Optional[str] = Field(default=None, max_length=100)
    payment_terms: int = Field(default_factory=lambda: get_settings().default_payment_terms, ge=0, le=365)
    currency: Currency = Field(default_factory=lambda: Currency(get_settings().default_currency.upper()).value)
    notes: Optional[str] = Field(default=None, max_length=1000)


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    company: Optional[str] = Field(default=None, max_length=255)
    address: Optional[Address] = None
    tax_id: Optional[str] = Field(default=None, max_length=100)
    payment_terms: Optional[int] = Field(default=None, ge=0, le=365)
    currency: Optional[Currency] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class ClientRead(ClientBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: Optional[str] = None
    email: str
    currency: str
    created_at: datetime
    updated_at: datetime


class ClientWithStats(ClientRead):
    total_invoices: int = 0
    total_amount: Decimal = Decimal("0.00")
    last_invoice_date: Optional[date] = None
