"""
SQLAlchemy ORM models.
All models must be imported here so init_db creates their tables.
"""

from saypay.models.expense import Expense

__all__ = ["Expense"]
