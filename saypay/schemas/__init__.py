"""Data schemas for recordings, transcripts and expense drafts."""

from saypay.schemas.audio import RecordedAudio, TranscriptionResult
from saypay.schemas.extraction import (
    ExpenseCategory,
    ExtractedExpenseDraft,
    ExtractionOutcome,
    ModelExpensePayload,
    Provenance,
)

__all__ = [
    "RecordedAudio",
    "TranscriptionResult",
    "ExpenseCategory",
    "ExtractedExpenseDraft",
    "ExtractionOutcome",
    "ModelExpensePayload",
    "Provenance",
]
