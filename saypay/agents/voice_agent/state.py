"""
Voice session state.

One VoiceSession follows a single utterance from recording to a saved
expense. Manual edits live apart from the draft so they survive retries.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from saypay.errors import VoicePipelineError
from saypay.schemas.audio import TranscriptionResult
from saypay.schemas.extraction import ExtractedExpenseDraft, ExtractionOutcome
from saypay.storage.expense_writer import StoredExpense


class PipelineStage(str, Enum):
    """Stages of the voice pipeline."""

    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    EXTRACTING = "extracting"
    READY_FOR_REVIEW = "ready_for_review"
    SAVED = "saved"
    ERRORED = "errored"


class LowConfidencePolicy(str, Enum):
    """What to do with a transcript below the confidence threshold."""

    WARN = "warn"  # flag it and continue to extraction
    BLOCK = "block"  # stop and ask for a new recording


@dataclass(frozen=True)
class PipelineWarning:
    """Advisory message shown next to the draft; never blocks."""

    code: str
    message: str


@dataclass
class VoiceSession:
    """
    Mutable state for one voice expense.

    Usage:
        session = VoiceSession()
        session.stage  # PipelineStage.IDLE
    """

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    stage: PipelineStage = PipelineStage.IDLE

    # =========================================================================
    # Intermediate Results
    # =========================================================================
    transcription: TranscriptionResult | None = None
    outcome: ExtractionOutcome | None = None
    draft: ExtractedExpenseDraft | None = None  # working copy, edits applied

    # =========================================================================
    # User Input (kept across retries)
    # =========================================================================
    manual_edits: dict[str, Any] = field(default_factory=dict)

    # =========================================================================
    # Feedback
    # =========================================================================
    warnings: list[PipelineWarning] = field(default_factory=list)
    error: VoicePipelineError | None = None
    validation_errors: list[str] = field(default_factory=list)

    # =========================================================================
    # Output
    # =========================================================================
    saved_record: StoredExpense | None = None

    @property
    def user_message(self) -> str | None:
        """Message for the current error, if any."""
        return self.error.user_message if self.error else None

    @property
    def warning_codes(self) -> list[str]:
        return [w.code for w in self.warnings]

    def clear_run(self) -> None:
        """Forget everything produced by the last attempt except manual edits."""
        self.transcription = None
        self.outcome = None
        self.draft = None
        self.warnings = []
        self.error = None
        self.validation_errors = []
        self.saved_record = None
