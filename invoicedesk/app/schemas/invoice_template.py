"""Invoice template schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InvoiceTemplateBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    html_content: str = Field(min_length=1)
    css_content: str = Field(default="", max_length=50000)
    preview_image: Optional[str] = Field(default=None, max_length=500)
    is_default: bool = False


class InvoiceTemplateCreate(InvoiceTemplateBase):
    pass


class InvoiceTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    html_content: Optional[str] = Field(default=None, min_length=1)
    css_content: Optional[str] = Field(default=None, max_length=50000)
    preview_image: Optional[str] = Field(default=None, max_length=500)
    is_default: Optional[bool] = None


class InvoiceTemplateRead(InvoiceTemplateBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
