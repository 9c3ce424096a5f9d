from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


QuoteStatus = Literal["DRAFT", "SENT", "ACCEPTED", "REJECTED"]
QuoteSortField = Literal["created_at", "updated_at", "quote_date", "quote_number", "total"]
SortOrder = Literal["asc", "desc"]

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 500

# quantity, price and tax_rate columns are stored with six decimal places
COLUMN_SCALE = Decimal("0.000001")


class QuoteItemCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    quote_position: int = Field(ge=0)
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    quantity: Decimal = Field(ge=Decimal("0"))
    unit: str | None = Field(default=None, max_length=32)
    price: Decimal
    tax_rate: Decimal = Field(ge=Decimal("0"), le=Decimal("1"))

    @field_validator("quantity", "price", "tax_rate")
    @classmethod
    def _round_to_column_scale(cls, value: Decimal) -> Decimal:
        return value.quantize(COLUMN_SCALE, rounding=ROUND_HALF_UP)


class QuoteCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    status: QuoteStatus = "DRAFT"
    company_id: UUID
    quote_date: date
    quote_valid_until: date | None = None
    title: str | None = None
    intro_text: str | None = None
    outro_text: str | None = None
    owner_id: str | None = None
    quote_items: list[QuoteItemCreate] = Field(min_length=1)


class QuoteUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    status: QuoteStatus | None = None
    quote_date: date | None = None
    quote_valid_until: date | None = None
    title: str | None = None
    intro_text: str | None = None
    outro_text: str | None = None
    company_id: UUID | None = None
    owner_id: str | None = None
    quote_items: list[QuoteItemCreate] | None = Field(default=None, min_length=1)


class QuoteItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    quote_id: UUID
    quote_position: int
    title: str
    description: str | None
    quantity: Decimal
    unit: str | None
    price: Decimal
    tax_rate: Decimal
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    created_at: datetime
    updated_at: datetime


class QuoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    quote_number: str
    status: QuoteStatus | str
    quote_date: date
    quote_valid_until: date | None
    title: str | None
    intro_text: str | None
    outro_text: str | None
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    company_id: UUID
    owner_id: str | None
    created_at: datetime
    updated_at: datetime
    items: list[QuoteItemRead] = Field(default_factory=list)
