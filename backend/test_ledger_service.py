"""Ledger service against an in-memory SQLite store."""
from decimal import Decimal

import pytest

from app.core.exceptions import NotFound, ValidationError
from app.models.entry import Entry, EntryType
from app.services import ledger_service
from app.services.ledger_service import LedgerTotals, SortOrder


def make_entry(kind, amount):
    return Entry(customer_id=1, type=kind, amount=Decimal(str(amount)))


class TestComputeTotals:

    def test_empty_sequence_is_all_zeros(self):
        totals = ledger_service.compute_totals([])
        assert totals == LedgerTotals(Decimal("0"), Decimal("0"), Decimal("0"))

    def test_balance_is_debit_minus_credit(self):
        entries = [
            make_entry("debit", "500"),
            make_entry("credit", "200"),
            make_entry("debit", "12.50"),
            make_entry("credit", "0.25"),
        ]
        totals = ledger_service.compute_totals(entries)
        assert totals.debit == Decimal("512.50")
        assert totals.credit == Decimal("200.25")
        assert totals.balance == totals.debit - totals.credit == Decimal("312.25")

    @pytest.mark.parametrize("entries", [
        [make_entry("credit", "10")],
        [make_entry("debit", "0.01"), make_entry("credit", "99.99")],
        [make_entry("debit", "1000000")],
    ])
    def test_totals_are_never_negative(self, entries):
        totals = ledger_service.compute_totals(entries)
        assert totals.debit >= 0
        assert totals.credit >= 0
        assert totals.balance == totals.debit - totals.credit

    def test_accepts_a_generator(self):
        totals = ledger_service.compute_totals(make_entry("debit", n) for n in (1, 2, 3))
        assert totals.debit == Decimal("6.00")


class TestParsing:

    @pytest.mark.parametrize("raw,expected", [("debit", EntryType.DEBIT), ("credit", EntryType.CREDIT)])
    def test_entry_type_literals(self, raw, expected):
        assert ledger_service.parse_entry_type(raw) is expected

    @pytest.mark.parametrize("raw", ["refund", "Debit", "CREDIT", "", None, " debit"])
    def test_entry_type_rejects_everything_else(self, raw):
        with pytest.raises(ValidationError):
            ledger_service.parse_entry_type(raw)

    @pytest.mark.parametrize("raw", [0, -1, "-0.01", Decimal("0"), 0.004, float("nan"), float("inf"), None, True])
    def test_amount_must_be_positive(self, raw):
        with pytest.raises(ValidationError):
            ledger_service.parse_amount(raw)

    def test_amount_rounds_to_two_places(self):
        assert ledger_service.parse_amount(0.01) == Decimal("0.01")
        assert ledger_service.parse_amount("10.005") == Decimal("10.01")
        assert ledger_service.parse_amount(500) == Decimal("500.00")

    @pytest.mark.parametrize("raw", [1e30, 1e12, Decimal("10000000000"), "9999999999.995", "1E+40"])
    def test_amount_above_column_limit_rejected(self, raw):
        with pytest.raises(ValidationError, match="must not exceed 9999999999.99"):
            ledger_service.parse_amount(raw)

    def test_largest_storable_amount_accepted(self):
        assert ledger_service.parse_amount("9999999999.99") == Decimal("9999999999.99")

    def test_amount_rejects_text(self):
        with pytest.raises(ValidationError, match="number"):
            ledger_service.parse_amount("five")


class TestCustomers:

    def test_list_empty_store(self, db):
        assert ledger_service.list_customers(db) == []

    def test_create_assigns_id_and_timestamp(self, db):
        customer = ledger_service.create_customer(db, "Ali", "0300", "ali@x.com")
        assert customer.id is not None
        assert customer.created_at is not None
        assert (customer.name, customer.phone, customer.email) == ("Ali", "0300", "ali@x.com")

    def test_optional_fields_default_to_empty(self, db):
        customer = ledger_service.create_customer(db, "Bilal")
        assert customer.phone == ""
        assert customer.email == ""

    @pytest.mark.parametrize("name", ["", "   ", "\t\n", None])
    def test_blank_name_rejected(self, db, name):
        with pytest.raises(ValidationError):
            ledger_service.create_customer(db, name, "0300", "a@b.c")
        assert ledger_service.list_customers(db) == []

    def test_list_is_newest_first(self, db):
        first = ledger_service.create_customer(db, "First")
        second = ledger_service.create_customer(db, "Second")
        assert [c.id for c in ledger_service.list_customers(db)] == [second.id, first.id]

    def test_get_missing_customer(self, db):
        with pytest.raises(NotFound):
            ledger_service.get_customer(db, 9999)


class TestEntries:

    @pytest.fixture
    def customer(self, db):
        return ledger_service.create_customer(db, "Ali", "0300", "ali@x.com")

    def test_list_entries_empty(self, db, customer):
        assert ledger_service.list_entries(db, customer.id) == []
        assert ledger_service.list_entries(db, 4242) == []

    def test_smallest_amount_accepted(self, db, customer):
        entry = ledger_service.create_entry(db, customer.id, "debit", 0.01, None)
        assert entry.amount == Decimal("0.01")
        assert entry.note == ""

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount_rejected(self, db, customer, amount):
        with pytest.raises(ValidationError):
            ledger_service.create_entry(db, customer.id, "credit", amount)
        assert ledger_service.list_entries(db, customer.id) == []

    def test_unknown_type_rejected(self, db, customer):
        with pytest.raises(ValidationError):
            ledger_service.create_entry(db, customer.id, "refund", 10)

    @pytest.mark.parametrize("kind", ["debit", "credit", EntryType.CREDIT])
    def test_both_kinds_accepted(self, db, customer, kind):
        entry = ledger_service.create_entry(db, customer.id, kind, 10, "x")
        assert entry.type in ("debit", "credit")

    def test_unknown_customer_is_not_found(self, db):
        with pytest.raises(NotFound):
            ledger_service.create_entry(db, 777, "debit", 10)

    def test_order_is_explicit(self, db, customer):
        ids = [ledger_service.create_entry(db, customer.id, "debit", n).id for n in (1, 2, 3)]
        asc = ledger_service.list_entries(db, customer.id, SortOrder.ASC)
        desc = ledger_service.list_entries(db, customer.id, SortOrder.DESC)
        assert [e.id for e in asc] == ids
        assert [e.id for e in desc] == list(reversed(ids))

    def test_entries_are_scoped_to_customer(self, db, customer):
        other = ledger_service.create_customer(db, "Other")
        ledger_service.create_entry(db, customer.id, "debit", 10)
        ledger_service.create_entry(db, other.id, "credit", 20)
        entries = ledger_service.list_entries(db, customer.id)
        assert [e.customer_id for e in entries] == [customer.id]

    def test_deleting_customer_cascades(self, db, customer):
        from app.models.entry import Entry as EntryModel

        ledger_service.create_entry(db, customer.id, "debit", 10)
        db.delete(customer)
        db.commit()
        assert db.query(EntryModel).count() == 0


class TestIdentityLookup:

    @pytest.fixture(autouse=True)
    def customers(self, db):
        ledger_service.create_customer(db, "Ali", "0300", "ali@x.com")
        ledger_service.create_customer(db, "Sara", "0311", "sara@x.com")

    def test_exact_match(self, db):
        assert ledger_service.find_customer_by_identity(db, "ali@x.com", "0300").name == "Ali"

    @pytest.mark.parametrize("email,phone", [
        ("ali@x.com", "0311"),
        ("sara@x.com", "0300"),
        ("ALI@x.com", "0300"),
        (" ali@x.com", "0300"),
        ("nobody@x.com", "0000"),
    ])
    def test_any_mismatch_is_not_found(self, db, email, phone):
        with pytest.raises(NotFound):
            ledger_service.find_customer_by_identity(db, email, phone)

    def test_duplicate_identity_returns_earliest(self, db):
        ledger_service.create_customer(db, "Ali Again", "0300", "ali@x.com")
        assert ledger_service.find_customer_by_identity(db, "ali@x.com", "0300").name == "Ali"


def test_ali_scenario(db):
    """Debit 500, credit 200: balance 300."""
    ali = ledger_service.create_customer(db, "Ali", "0300", "ali@x.com")
    ledger_service.create_entry(db, ali.id, "debit", 500, "grocery")
    ledger_service.create_entry(db, ali.id, "credit", 200, "payment")

    customer, entries = ledger_service.get_customer_ledger(db, ali.id)
    assert customer.id == ali.id
    assert [(e.type, e.note) for e in entries] == [("debit", "grocery"), ("credit", "payment")]

    totals = ledger_service.compute_totals(entries)
    assert (totals.debit, totals.credit, totals.balance) == (
        Decimal("500.00"), Decimal("200.00"), Decimal("300.00"),
    )
