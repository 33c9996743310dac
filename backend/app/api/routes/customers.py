"""Admin panel: customers, their entries, and emailing the khata PDF."""
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, parse_customer_id
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.schemas.customer import CustomerCreate, CustomerResponse
from app.schemas.entry import EntryCreate, EntryResponse
from app.services import email_service, ledger_service
from app.services.ledger_service import SortOrder
from app.services.pdf_service import build_statement, format_email_body, pdf_filename, render_khata_pdf

router = APIRouter()

EMAIL_SUBJECT = "Your Khata Details"


@router.get("", response_model=List[CustomerResponse])
def list_customers(db: Session = Depends(get_db)):
    """All customers, newest first."""
    return ledger_service.list_customers(db)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, db: Session = Depends(get_db)):
    return ledger_service.create_customer(db, data.name, data.phone, data.email)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int = Depends(parse_customer_id), db: Session = Depends(get_db)):
    return ledger_service.get_customer(db, customer_id)


@router.get("/{customer_id}/entries", response_model=List[EntryResponse])
def list_entries(
    customer_id: int = Depends(parse_customer_id),
    order: SortOrder = Query(SortOrder.DESC),
    db: Session = Depends(get_db),
):
    """Ledger entries for the detail view. Newest first unless ``?order=asc``."""
    return ledger_service.list_entries(db, customer_id, order)


@router.post(
    "/{customer_id}/entries",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_entry(
    data: EntryCreate,
    customer_id: int = Depends(parse_customer_id),
    db: Session = Depends(get_db),
):
    entry_type = ledger_service.parse_entry_type(data.type)
    return ledger_service.create_entry(db, customer_id, entry_type, data.amount, data.note)


@router.post("/{customer_id}/send-email")
def send_customer_email(customer_id: int = Depends(parse_customer_id), db: Session = Depends(get_db)):
    """
    Email the customer their khata as a PDF attachment.

    Blocks until the relay answers. Send failures are returned with the
    relay's own error text.
    """
    customer = ledger_service.get_customer(db, customer_id)
    if not customer.email:
        raise ValidationError("customer has no email")

    entries = ledger_service.list_entries(db, customer.id, SortOrder.ASC)
    statement = build_statement(customer, entries)
    pdf_data = render_khata_pdf(statement)

    email_service.send_ledger_document(
        customer.email,
        EMAIL_SUBJECT,
        format_email_body(statement, settings.FROM_NAME),
        pdf_data,
        pdf_filename(customer.id),
    )
    return {"message": "email sent"}
