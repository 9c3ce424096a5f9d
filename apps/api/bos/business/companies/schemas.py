from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 500


class CompanyCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    customer_number: str | None = Field(default=None, min_length=1, max_length=64)
    external_id: str | None = None
    name: str | None = None
    name2: str | None = None
    tax_id: str | None = None
    vat_id: str | None = None


class CompanyUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    customer_number: str | None = Field(default=None, min_length=1, max_length=64)
    external_id: str | None = None
    name: str | None = None
    name2: str | None = None
    tax_id: str | None = None
    vat_id: str | None = None


class CompanyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_number: str
    external_id: str | None
    name: str | None
    name2: str | None
    tax_id: str | None
    vat_id: str | None
    created_at: datetime
    updated_at: datetime
