"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from invoicedesk.app.core.currency import Currency
from invoicedesk.app.services.lifecycle import InvoiceStatus


class LineItemIn(BaseModel):
    description: str = Field(min_length=1, max_length=255)
    details: Optional[str] = Field(default=None, max_length=500)
    quantity: Decimal = Field(gt=0, decimal_places=4)
    rate: Decimal = Field(gt=0, decimal_places=2)


class LineItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    description: str
    details: Optional[str] = None
    quantity: Decimal
    rate: Decimal
    total: Decimal


class InvoiceCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    client_id: int
    invoice_number: Optional[str] = Field(default=None, min_length=1, max_length=50, pattern=r"^[A-Za-z0-9._-]+$")
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: Optional[int] = Field(default=None, ge=0, le=365)
    items: List[LineItemIn] = Field(min_length=1)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=1, decimal_places=4)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Optional[Currency] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    template_id: Optional[int] = None


class InvoiceUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    client_id: Optional[int] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: Optional[int] = Field(default=None, ge=0, le=365)
    items: Optional[List[LineItemIn]] = Field(default=None, min_length=1)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=1, decimal_places=4)
    discount_amount: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[Currency] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    template_id: Optional[int] = None


class InvoiceStatusUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: InvoiceStatus


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: Optional[str] = None
    client_id: int
    template_id: Optional[int] = None

    invoice_number: str
    status: str
    issue_date: date
    due_date: date
    payment_terms: int

    items: List[LineItemRead]
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal
    currency: str

    notes: Optional[str] = None
    pdf_path: Optional[str] = None
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class InvoiceIdList(BaseModel):
    invoice_ids: List[int] = Field(min_length=1)
    template_id: Optional[int] = None


class PdfBatchItem(BaseModel):
    invoice_id: int
    success: bool
    filename: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None


class PdfInfo(BaseModel):
    exists: bool
    filepath: Optional[str] = None
    filename: Optional[str] = None
    size: Optional[int] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None


class SendInvoiceRequest(BaseModel):
    to: Optional[List[EmailStr]] = None
    cc: List[EmailStr] = Field(default_factory=list)
    bcc: List[EmailStr] = Field(default_factory=list)
    subject: Optional[str] = Field(default=None, max_length=255)
    message: Optional[str] = Field(default=None, max_length=5000)
    attach_pdf: bool = True
    template_id: Optional[int] = None


class BulkSendRequest(SendInvoiceRequest):
    invoice_ids: List[int] = Field(min_length=1)


class DispatchResultRead(BaseModel):
    invoice_id: int
    message_id: str
    recipients: List[str]
    attachment_count: int
    status: str


class BulkSendItem(BaseModel):
    invoice_id: int
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class EmailTestRequest(BaseModel):
    recipient: EmailStr
