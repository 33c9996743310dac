from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime


class CustomerCreate(BaseModel):
    name: str = ""
    phone: Optional[str] = None
    email: Optional[str] = None


class CustomerResponse(BaseModel):
    id: int
    name: str
    phone: str = ""
    email: str = ""
    created_at: datetime

    @field_validator("phone", "email", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return "" if value is None else value

    class Config:
        from_attributes = True
