"""
Pydantic schemas for expense extraction from spoken input.
Used by the extraction client and the fallback parser to return
structured, validated drafts.
"""

import math
from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator


class ExpenseCategory(str, Enum):
    """Expense categories in declaration order (used for tie-breaks)."""

    FOOD = "Food"
    TRANSPORT = "Transport"
    RENT = "Rent"
    SHOPPING = "Shopping"
    HEALTH = "Health"
    ENTERTAINMENT = "Entertainment"
    UTILITIES = "Utilities"
    MISC = "Misc"

    @classmethod
    def from_label(cls, label: str) -> "ExpenseCategory":
        """Resolve a free-form label, defaulting to Misc."""
        normalized = label.strip().lower()
        if normalized == "healthcare":
            return cls.HEALTH
        for category in cls:
            if category.value.lower() == normalized:
                return category
        return cls.MISC


class ExtractedExpenseDraft(BaseModel):
    """
    Structured expense data extracted from a transcript.

    Produced by either the model-backed extractor or the fallback parser;
    same shape, different provenance.
    """

    amount: Decimal = Field(
        ...,
        description="Expense amount",
        ge=0,
        examples=[25, 12.50, 120],
    )
    currency: str = Field(
        default="USD",
        description="ISO 4217 currency code (3 letters uppercase)",
        min_length=3,
        max_length=3,
        examples=["USD", "EUR", "GBP", "INR"],
    )
    description: str = Field(
        default="",
        description="Brief description of the expense, in the speaker's language",
        max_length=500,
    )
    category: ExpenseCategory = Field(default=ExpenseCategory.MISC)
    date: date_type = Field(
        default_factory=date_type.today,
        description="Day the expense occurred (YYYY-MM-DD)",
    )
    confidence: float = Field(
        ...,
        description="Confidence score for the extraction (0.0 to 1.0)",
        ge=0.0,
        le=1.0,
    )

    @field_validator("currency")
    @classmethod
    def currency_uppercase(cls, v: str) -> str:
        """Ensure currency code is uppercase."""
        return v.upper()

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> ExpenseCategory:
        """Unknown categories fall back to Misc."""
        if isinstance(v, ExpenseCategory):
            return v
        return ExpenseCategory.from_label(str(v))

    @field_serializer("date")
    def serialize_date(self, v: date_type) -> str:
        return v.isoformat()

    @field_serializer("amount")
    def serialize_amount(self, v: Decimal) -> float:
        return float(v)

    class Config:
        json_schema_extra = {
            "example": {
                "amount": 25,
                "currency": "USD",
                "description": "Lunch at McDonald's",
                "category": "Food",
                "date": "2025-01-15",
                "confidence": 0.95,
            }
        }


class ModelExpensePayload(BaseModel):
    """
    Untrusted JSON object returned by the language model.

    Every field is type-checked before defaults are applied; any mismatch
    is a validation error and the caller falls back to the heuristic parser.
    """

    amount: float
    currency: str | None = None
    description: str | None = None
    category: str | None = None
    date: str | None = None
    confidence: float | None = None

    @field_validator("amount", "confidence", mode="before")
    @classmethod
    def reject_non_numbers(cls, v: Any) -> Any:
        """Only real JSON numbers are accepted (no strings, no booleans)."""
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"expected a number, got {type(v).__name__}")
        if not math.isfinite(v):
            raise ValueError(f"expected a finite number, got {v}")
        return v

    @field_validator("currency", "description", "category", "date", mode="before")
    @classmethod
    def reject_non_strings(cls, v: Any) -> Any:
        if v is not None and not isinstance(v, str):
            raise ValueError(f"expected a string, got {type(v).__name__}")
        return v

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"amount must be positive, got {v}")
        return v

    @field_validator("currency")
    @classmethod
    def currency_code(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if len(v) != 3 or not v.isalpha():
            raise ValueError(f"invalid currency code: {v!r}")
        return v.upper()

    @field_validator("date")
    @classmethod
    def iso_date(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        date_type.fromisoformat(v.strip())
        return v.strip()

    @field_validator("confidence")
    @classmethod
    def confidence_range(cls, v: float | None) -> float | None:
        if v is not None and not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence out of range: {v}")
        return v


class Provenance(str, Enum):
    """Which path produced a draft."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ExtractionOutcome:
    """Draft plus where it came from."""

    draft: ExtractedExpenseDraft
    provenance: Provenance
    cached: bool = False
    failure_reason: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.provenance is Provenance.FALLBACK
