"""
Unit tests for the Expense model.

Tests:
- Defaults applied on insert
- Portable column types on SQLite
"""

from datetime import date
from decimal import Decimal

from saypay.models import Expense


class TestExpenseModel:
    """Tests for the expense table."""

    def test_insert_applies_defaults(self, session_factory):
        """Should generate id and created_at on insert."""
        session = session_factory()
        expense = Expense(
            user_id="user-1",
            amount=Decimal("12.30"),
            currency="EUR",
            description="Metro ticket",
            category="Transport",
            occurred_on=date(2025, 1, 15),
            source="primary",
            confidence=0.9,
        )
        session.add(expense)
        session.commit()

        loaded = session.get(Expense, expense.id)

        assert loaded.id is not None
        assert loaded.created_at is not None
        assert loaded.amount == Decimal("12.30")
        assert loaded.occurred_on == date(2025, 1, 15)
        session.close()

    def test_repr(self):
        expense = Expense(amount=Decimal("5"), currency="USD", description="Coffee at the corner cafe")

        assert "5 USD" in repr(expense)
