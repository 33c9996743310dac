"""
Ledger service: customers, entries and the debit/credit/balance aggregation.

Every function takes the request's ``Session`` as its first argument.
Input is validated here before any query runs; SQLAlchemy failures are
logged and re-raised as ``StoreError`` so routes only deal with domain errors.
"""
import enum
import logging
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, StoreError, ValidationError
from app.models.customer import Customer
from app.models.entry import Entry, EntryType

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
# Largest value a NUMERIC(12,2) column holds
MAX_AMOUNT = Decimal("9999999999.99")
ZERO = Decimal("0.00")


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class LedgerTotals:
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    balance: Decimal = ZERO


def _store_failure(db: Session, action: str, error: Exception) -> StoreError:
    db.rollback()
    logger.error(f"[LedgerService] {action} failed: {type(error).__name__}: {error}")
    return StoreError(f"failed to {action}")


# ==============================================================================
# CUSTOMERS
# ==============================================================================

def list_customers(db: Session) -> List[Customer]:
    """All customers, newest first. Empty list when there are none."""
    try:
        return (
            db.query(Customer)
            .order_by(Customer.created_at.desc(), Customer.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise _store_failure(db, "query customers", e)


def create_customer(
    db: Session,
    name: Optional[str],
    phone: Optional[str] = None,
    email: Optional[str] = None,
) -> Customer:
    if name is None or not name.strip():
        raise ValidationError("name is required")

    customer = Customer(name=name.strip(), phone=phone or "", email=email or "")
    try:
        db.add(customer)
        db.commit()
        db.refresh(customer)
    except SQLAlchemyError as e:
        raise _store_failure(db, "insert customer", e)

    logger.info(f"[LedgerService] Created customer id={customer.id}")
    return customer


def get_customer(db: Session, customer_id: int) -> Customer:
    try:
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
    except SQLAlchemyError as e:
        raise _store_failure(db, "get customer", e)
    if customer is None:
        raise NotFound("customer not found")
    return customer


def find_customer_by_identity(db: Session, email: str, phone: str) -> Customer:
    """
    Portal lookup: exact, case-sensitive match on both email and phone.

    No normalization is applied. When several customers share the pair,
    the earliest created one wins.
    """
    try:
        customer = (
            db.query(Customer)
            .filter(Customer.email == email, Customer.phone == phone)
            .order_by(Customer.created_at.asc(), Customer.id.asc())
            .first()
        )
    except SQLAlchemyError as e:
        raise _store_failure(db, "find customer", e)
    if customer is None:
        raise NotFound("no khata found for this email and phone")
    return customer


# ==============================================================================
# ENTRIES
# ==============================================================================

def parse_entry_type(raw: Optional[str]) -> EntryType:
    """Single conversion point from raw input to ``EntryType``."""
    for kind in EntryType:
        if raw == kind.value:
            return kind
    raise ValidationError("type must be 'debit' or 'credit'")


def parse_amount(raw) -> Decimal:
    """Positive amount rounded to two places. Zero after rounding is rejected."""
    if isinstance(raw, bool) or raw is None:
        raise ValidationError("amount must be > 0")
    try:
        if isinstance(raw, float):
            if not math.isfinite(raw):
                raise ValidationError("amount must be > 0")
            raw = str(raw)
        amount = Decimal(raw)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("amount must be a number")
    if not amount.is_finite():
        raise ValidationError("amount must be > 0")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"amount must not exceed {MAX_AMOUNT}")

    try:
        amount = amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError("amount must be a number")
    if amount <= 0:
        raise ValidationError("amount must be > 0")
    # 9999999999.995 rounds up past the column limit
    if amount > MAX_AMOUNT:
        raise ValidationError(f"amount must not exceed {MAX_AMOUNT}")
    return amount


def list_entries(
    db: Session,
    customer_id: int,
    order: SortOrder = SortOrder.DESC,
) -> List[Entry]:
    """Entries of one customer by creation time, ties broken by id."""
    if order == SortOrder.ASC:
        ordering = (Entry.created_at.asc(), Entry.id.asc())
    else:
        ordering = (Entry.created_at.desc(), Entry.id.desc())
    try:
        return (
            db.query(Entry)
            .filter(Entry.customer_id == customer_id)
            .order_by(*ordering)
            .all()
        )
    except SQLAlchemyError as e:
        raise _store_failure(db, "query entries", e)


def create_entry(
    db: Session,
    customer_id: int,
    kind,
    amount,
    note: Optional[str] = None,
) -> Entry:
    """
    Record a debit or credit against a customer.

    ``kind`` may be an ``EntryType`` or its raw string value. The customer's
    existence is left to the foreign key; a violation becomes ``NotFound``.
    """
    entry_type = kind if isinstance(kind, EntryType) else parse_entry_type(kind)
    value = parse_amount(amount)

    entry = Entry(
        customer_id=customer_id,
        type=entry_type.value,
        amount=value,
        note=note or "",
    )
    try:
        db.add(entry)
        db.commit()
        db.refresh(entry)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[LedgerService] Entry rejected for customer_id={customer_id}: {e.orig}")
        raise NotFound("customer not found")
    except SQLAlchemyError as e:
        raise _store_failure(db, "insert entry", e)

    logger.info(
        f"[LedgerService] Created {entry.type} entry id={entry.id} "
        f"customer_id={customer_id} amount={entry.amount}"
    )
    return entry


def get_customer_ledger(
    db: Session,
    customer_id: int,
    order: SortOrder = SortOrder.ASC,
) -> Tuple[Customer, List[Entry]]:
    """Customer plus its entries, oldest first by default (export order)."""
    customer = get_customer(db, customer_id)
    return customer, list_entries(db, customer.id, order)


# ==============================================================================
# AGGREGATION
# ==============================================================================

def compute_totals(entries: Iterable[Entry]) -> LedgerTotals:
    """Sum debits and credits. Balance is what the customer still owes."""
    debit = ZERO
    credit = ZERO
    for entry in entries:
        amount = Decimal(str(entry.amount))
        if entry.kind == EntryType.DEBIT:
            debit += amount
        else:
            credit += amount

    debit = debit.quantize(TWO_PLACES)
    credit = credit.quantize(TWO_PLACES)
    return LedgerTotals(debit=debit, credit=credit, balance=debit - credit)
