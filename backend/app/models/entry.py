import enum

from sqlalchemy import CheckConstraint, Column, Integer, ForeignKey, Numeric, DateTime, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class EntryType(str, enum.Enum):
    """Direction of a ledger movement. Debit raises the balance, credit lowers it."""

    DEBIT = "debit"
    CREDIT = "credit"


class Entry(Base):
    __tablename__ = "entries"
    __table_args__ = (
        CheckConstraint("type IN ('debit', 'credit')", name="ck_entries_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(
        Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Stored as the enum's value so the CHECK constraint and raw SQL agree
    type = Column(String(16), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    note = Column(Text, nullable=True, default="")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    customer = relationship("Customer", back_populates="entries")

    @property
    def kind(self) -> EntryType:
        return EntryType(self.type)
