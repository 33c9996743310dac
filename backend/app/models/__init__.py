from app.models.customer import Customer
from app.models.entry import Entry, EntryType

__all__ = ["Customer", "Entry", "EntryType"]
