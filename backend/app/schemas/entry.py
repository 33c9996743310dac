from pydantic import BaseModel, StrictFloat, StrictInt, field_validator
from typing import Optional, Union
from datetime import datetime


class EntryCreate(BaseModel):
    # Kept as a raw string; the ledger service owns the debit/credit check
    type: str = ""
    # JSON numbers only; "10" as a string is rejected
    amount: Union[StrictInt, StrictFloat] = 0
    note: Optional[str] = None


class EntryResponse(BaseModel):
    id: int
    customer_id: int
    type: str
    amount: float
    note: str = ""
    created_at: datetime

    @field_validator("note", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return "" if value is None else value

    class Config:
        from_attributes = True
