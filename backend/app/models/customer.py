from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    phone = Column(String(64), nullable=True, default="")
    email = Column(String(255), nullable=True, default="")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    entries = relationship(
        "Entry",
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
