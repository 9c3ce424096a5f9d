from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class OptionKey(StrEnum):
    CUSTOMER_ID_COUNTER = "CUSTOMER_ID_COUNTER"
    CUSTOMER_ID_SCHEMA = "CUSTOMER_ID_SCHEMA"
    QUOTE_ID_COUNTER = "QUOTE_ID_COUNTER"
    QUOTE_ID_SCHEMA = "QUOTE_ID_SCHEMA"


class OptionSet(BaseModel):
    key: OptionKey
    value: Any


class OptionUpdate(BaseModel):
    value: Any


class OptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: OptionKey
    value: Any
    updated_at: datetime
