from pydantic import BaseModel
from typing import List

from app.schemas.customer import CustomerResponse
from app.schemas.entry import EntryResponse


class PortalLookupRequest(BaseModel):
    email: str = ""
    phone: str = ""


class TotalsResponse(BaseModel):
    debit: float
    credit: float
    balance: float


class PortalKhataResponse(BaseModel):
    customer: CustomerResponse
    totals: TotalsResponse
    entries: List[EntryResponse]
