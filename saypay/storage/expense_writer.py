"""
Expense writer module for persisting confirmed expense drafts.

The pipeline depends only on ExpenseStore.add_expense. SqlExpenseStore is
the durable implementation; InMemoryExpenseStore keeps a voice session
from being lost when the database is unreachable.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from saypay.errors import StorageError
from saypay.logging_config import get_logger
from saypay.models.expense import Expense
from saypay.schemas.extraction import ExpenseCategory, ExtractedExpenseDraft

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoredExpense:
    """Record returned by a store after a successful insert."""

    id: uuid.UUID
    user_id: str
    amount: Decimal
    currency: str
    description: str
    category: ExpenseCategory
    date: date
    created_at: datetime
    source: str  # primary or fallback


class ExpenseStore(Protocol):
    """Storage collaborator for finalized expenses."""

    def add_expense(
        self,
        user_id: str,
        draft: ExtractedExpenseDraft,
        source: str = "primary",
    ) -> StoredExpense:
        ...


def _to_stored(expense: Expense) -> StoredExpense:
    return StoredExpense(
        id=expense.id,
        user_id=expense.user_id,
        amount=Decimal(expense.amount),
        currency=expense.currency,
        description=expense.description,
        category=ExpenseCategory.from_label(expense.category),
        date=expense.occurred_on,
        created_at=expense.created_at,
        source=expense.source,
    )


class SqlExpenseStore:
    """
    SQLAlchemy-backed expense store.

    Each insert runs in its own session and commits on success.
    Any database error is rolled back and raised as StorageError.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None):
        if session_factory is None:
            from saypay.database import get_session_local

            session_factory = get_session_local()
        self._session_factory = session_factory

    def add_expense(
        self,
        user_id: str,
        draft: ExtractedExpenseDraft,
        source: str = "primary",
    ) -> StoredExpense:
        """
        Persist a draft for a user.

        Args:
            user_id: Authenticated user ID
            draft: Reviewed expense draft
            source: Provenance of the draft (primary or fallback)

        Returns:
            StoredExpense with generated id and creation timestamp

        Raises:
            StorageError: If the insert fails
        """
        logger.debug(
            "creating_expense",
            user_id=str(user_id),
            amount=float(draft.amount),
            currency=draft.currency,
            source=source,
        )

        session = self._session_factory()
        try:
            expense = Expense(
                user_id=str(user_id),
                amount=draft.amount,
                currency=draft.currency,
                description=draft.description,
                category=draft.category.value,
                occurred_on=draft.date,
                source=source,
                confidence=draft.confidence,
            )
            session.add(expense)
            session.commit()
            record = _to_stored(expense)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(
                "expense_store_failed",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise StorageError(f"Failed to store expense: {e}") from e
        finally:
            session.close()

        logger.info(
            "expense_created",
            expense_id=str(record.id),
            user_id=record.user_id,
            amount=float(record.amount),
            currency=record.currency,
            category=record.category.value,
            source=source,
        )
        return record

    def get_expense(self, expense_id: uuid.UUID) -> StoredExpense | None:
        session = self._session_factory()
        try:
            expense = session.get(Expense, expense_id)
            return _to_stored(expense) if expense else None
        finally:
            session.close()

    def list_expenses(self, user_id: str) -> list[StoredExpense]:
        """Expenses for a user, newest first."""
        session = self._session_factory()
        try:
            rows = (
                session.query(Expense)
                .filter(Expense.user_id == str(user_id))
                .order_by(Expense.created_at.desc())
                .all()
            )
            return [_to_stored(row) for row in rows]
        finally:
            session.close()


class InMemoryExpenseStore:
    """Process-local store used when the database cannot be reached."""

    def __init__(self):
        self._records: dict[uuid.UUID, StoredExpense] = {}

    def __len__(self) -> int:
        return len(self._records)

    def add_expense(
        self,
        user_id: str,
        draft: ExtractedExpenseDraft,
        source: str = "primary",
    ) -> StoredExpense:
        record = StoredExpense(
            id=uuid.uuid4(),
            user_id=str(user_id),
            amount=draft.amount,
            currency=draft.currency,
            description=draft.description,
            category=draft.category,
            date=draft.date,
            created_at=datetime.now(timezone.utc),
            source=source,
        )
        self._records[record.id] = record
        logger.info(
            "expense_created_in_memory",
            expense_id=str(record.id),
            user_id=record.user_id,
            amount=float(record.amount),
        )
        return record

    def get_expense(self, expense_id: uuid.UUID) -> StoredExpense | None:
        return self._records.get(expense_id)

    def list_expenses(self, user_id: str) -> list[StoredExpense]:
        rows = [r for r in self._records.values() if r.user_id == str(user_id)]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)
