"""Customer portal: self-service khata lookup and PDF download. No auth."""
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.deps import get_db, parse_customer_id
from app.core.exceptions import ValidationError
from app.schemas.portal import PortalKhataResponse, PortalLookupRequest
from app.services import ledger_service
from app.services.ledger_service import SortOrder
from app.services.pdf_service import build_statement, pdf_filename, render_khata_pdf

router = APIRouter()


@router.post("/khata-lookup", response_model=PortalKhataResponse)
def khata_lookup(data: PortalLookupRequest, db: Session = Depends(get_db)):
    """Find a khata by the customer's own email and phone (exact match)."""
    if not data.email or not data.phone:
        raise ValidationError("email and phone are required")

    customer = ledger_service.find_customer_by_identity(db, data.email, data.phone)
    entries = ledger_service.list_entries(db, customer.id, SortOrder.ASC)
    totals = ledger_service.compute_totals(entries)
    return {
        "customer": customer,
        "totals": {
            "debit": float(totals.debit),
            "credit": float(totals.credit),
            "balance": float(totals.balance),
        },
        "entries": entries,
    }


@router.get("/customers/{customer_id}/pdf")
def customer_pdf(customer_id: int = Depends(parse_customer_id), db: Session = Depends(get_db)):
    customer, entries = ledger_service.get_customer_ledger(db, customer_id, SortOrder.ASC)
    pdf_data = render_khata_pdf(build_statement(customer, entries))
    return Response(
        content=pdf_data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(customer.id)}"'},
    )
