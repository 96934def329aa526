"""
Unit tests for expense_writer.py.

Tests:
- SQLAlchemy store insert and read-back (in-memory SQLite)
- StorageError wrapping with rollback
- In-memory fallback store
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from saypay.errors import StorageError
from saypay.schemas.extraction import ExpenseCategory, ExtractedExpenseDraft
from saypay.storage.expense_writer import InMemoryExpenseStore, SqlExpenseStore


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def draft() -> ExtractedExpenseDraft:
    return ExtractedExpenseDraft(
        amount=Decimal("25.50"),
        currency="USD",
        description="Lunch at Chipotle",
        category=ExpenseCategory.FOOD,
        date=date(2025, 1, 15),
        confidence=0.75,
    )


# ─────────────────────────────────────────────────────────────────────────────
# SQL Store Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSqlExpenseStore:
    """Tests for the SQLAlchemy-backed store."""

    def test_add_expense(self, session_factory, draft):
        """Should persist the draft and return a record with id and timestamp."""
        store = SqlExpenseStore(session_factory)

        record = store.add_expense("user-1", draft, source="fallback")

        assert record.id is not None
        assert record.created_at is not None
        assert record.user_id == "user-1"
        assert record.amount == Decimal("25.50")
        assert record.category is ExpenseCategory.FOOD
        assert record.date == date(2025, 1, 15)
        assert record.source == "fallback"

    def test_round_trip_through_database(self, session_factory, draft):
        store = SqlExpenseStore(session_factory)
        record = store.add_expense("user-1", draft)

        loaded = store.get_expense(record.id)

        assert loaded.amount == Decimal("25.50")
        assert loaded.description == "Lunch at Chipotle"
        assert loaded.currency == "USD"

    def test_list_scoped_to_user(self, session_factory, draft):
        store = SqlExpenseStore(session_factory)
        store.add_expense("user-1", draft)
        store.add_expense("user-2", draft)

        assert len(store.list_expenses("user-1")) == 1

    def test_database_error_raises_storage_error(self, draft):
        """Should roll back and wrap database errors."""
        session = MagicMock()
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("db down"))
        store = SqlExpenseStore(lambda: session)

        with pytest.raises(StorageError) as exc_info:
            store.add_expense("user-1", draft)

        assert isinstance(exc_info.value.__cause__, OperationalError)
        session.rollback.assert_called_once()
        session.close.assert_called_once()


# ─────────────────────────────────────────────────────────────────────────────
# In-Memory Store Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestInMemoryExpenseStore:
    """Tests for the fallback store."""

    def test_add_and_get(self, draft):
        store = InMemoryExpenseStore()

        record = store.add_expense("user-1", draft)

        assert store.get_expense(record.id) == record
        assert len(store) == 1
        assert record.amount == Decimal("25.50")

    def test_list_scoped_to_user(self, draft):
        store = InMemoryExpenseStore()
        store.add_expense("user-1", draft)
        store.add_expense("user-2", draft)

        assert [r.user_id for r in store.list_expenses("user-2")] == ["user-2"]
