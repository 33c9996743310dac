"""FastAPI dependencies: DB session and path parameter parsing."""
import re
from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError

_INTEGER_RE = re.compile(r"[+-]?\d+")
# SERIAL primary keys are 32-bit
MAX_CUSTOMER_ID = 2**31 - 1


def get_db(request: Request) -> Generator[Session, None, None]:
    """Session from the factory created at startup."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def parse_customer_id(customer_id: str) -> int:
    """Path ids are parsed here so a bad id is a 400, not FastAPI's 422."""
    if not _INTEGER_RE.fullmatch(customer_id):
        raise ValidationError("invalid customer id")
    value = int(customer_id)
    if not 1 <= value <= MAX_CUSTOMER_ID:
        raise ValidationError("invalid customer id")
    return value
