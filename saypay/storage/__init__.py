"""
Storage layer for results and expenses.

This module provides:
- In-process result caches with TTL and oldest-first eviction
- Expense stores (SQLAlchemy and in-memory fallback)
"""
