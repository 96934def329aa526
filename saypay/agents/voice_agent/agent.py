"""
Voice Expense Pipeline - Main Entry Point.

Sequences capture -> transcription -> extraction (with fallback) for one
utterance, applies the confidence policy and hands the reviewed draft to
storage.

Usage:
    from saypay.agents.voice_agent import build_voice_pipeline

    pipeline = build_voice_pipeline(recorder=recorder)
    session = await pipeline.capture(stop_signal=stop_event)

    if session.stage is PipelineStage.READY_FOR_REVIEW:
        pipeline.edit(amount="25.50")
        record = pipeline.save(user_id="user-123")
"""

import asyncio
from typing import Any

from pydantic import ValidationError

from saypay.agents.voice_agent.state import (
    LowConfidencePolicy,
    PipelineStage,
    PipelineWarning,
    VoiceSession,
)
from saypay.agents.voice_agent.validator import validate_draft
from saypay.config import settings
from saypay.errors import (
    DeviceError,
    ExpenseValidationError,
    LowConfidenceTranscriptError,
    PermissionDeniedError,
    StorageError,
    TranscriptionError,
    VoicePipelineError,
    VoiceUnavailableError,
)
from saypay.integrations.audio.recorder import AudioRecorder, RecordingHandle
from saypay.logging_config import bind_log_context, get_logger
from saypay.schemas.audio import RecordedAudio
from saypay.schemas.extraction import ExtractedExpenseDraft
from saypay.storage.expense_writer import (
    ExpenseStore,
    InMemoryExpenseStore,
    SqlExpenseStore,
    StoredExpense,
)
from saypay.storage.result_cache import PipelineCaches
from saypay.tools.extraction.audio_extractor import TranscriptionClient
from saypay.tools.extraction.text_extractor import ExpenseExtractor

logger = get_logger(__name__)

EDITABLE_FIELDS = frozenset({"amount", "currency", "description", "category", "date"})


def _merge_fields(
    draft: ExtractedExpenseDraft,
    fields: dict[str, Any],
) -> ExtractedExpenseDraft:
    """Validated copy of `draft` with `fields` overridden."""
    values = {name: getattr(draft, name) for name in ExtractedExpenseDraft.model_fields}
    values.update(fields)
    return ExtractedExpenseDraft.model_validate(values)


def _format_validation_errors(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in error.errors()
    ]


class VoiceExpensePipeline:
    """
    Orchestrator for one voice expense session.

    States: IDLE -> RECORDING -> TRANSCRIBING -> EXTRACTING ->
    READY_FOR_REVIEW -> SAVED, with ERRORED reachable from the three
    middle stages. Every failure leaves the user an edit or retry path.
    """

    def __init__(
        self,
        transcriber: TranscriptionClient,
        extractor: ExpenseExtractor,
        store: ExpenseStore,
        recorder: AudioRecorder | None = None,
        fallback_store: ExpenseStore | None = None,
        policy: LowConfidencePolicy | None = None,
        language: str | None = None,
        max_recording_ms: int | None = None,
        transcription_threshold: float | None = None,
        extraction_threshold: float | None = None,
    ):
        self.transcriber = transcriber
        self.extractor = extractor
        self.store = store
        self.recorder = recorder
        self.fallback_store = fallback_store
        self.policy = policy or LowConfidencePolicy(settings.low_confidence_policy)
        self.language = language or settings.default_language
        self.max_recording_ms = max_recording_ms or settings.max_recording_ms
        self.transcription_threshold = (
            transcription_threshold
            if transcription_threshold is not None
            else settings.transcription_confidence_threshold
        )
        self.extraction_threshold = (
            extraction_threshold
            if extraction_threshold is not None
            else settings.extraction_confidence_threshold
        )
        self.session = VoiceSession()

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def stage(self) -> PipelineStage:
        return self.session.stage

    @property
    def voice_enabled(self) -> bool:
        """Recording is offered only with a recorder and a transcription credential."""
        return self.recorder is not None and self.transcriber.is_available

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _log(self):
        return logger.bind(session_id=self.session.session_id)

    def _transition(self, stage: PipelineStage) -> None:
        self._log().debug(
            "voice_stage_changed",
            from_stage=self.session.stage.value,
            to_stage=stage.value,
        )
        self.session.stage = stage

    def _require_stage(self, *stages: PipelineStage) -> None:
        if self.session.stage not in stages:
            allowed = ", ".join(s.value for s in stages)
            raise RuntimeError(
                f"Operation not allowed in stage {self.session.stage.value} "
                f"(expected one of: {allowed})"
            )

    def _warn(self, code: str, message: str) -> None:
        self.session.warnings.append(PipelineWarning(code=code, message=message))
        self._log().info("voice_pipeline_warning", code=code)

    def _fail(self, error: VoicePipelineError) -> VoiceSession:
        failed_stage = self.session.stage
        self.session.error = error
        self._transition(PipelineStage.ERRORED)
        self._log().warning(
            "voice_pipeline_errored",
            stage=failed_stage.value,
            error=str(error),
            error_type=type(error).__name__,
        )
        return self.session

    def _cancelled(self) -> None:
        self._log().info("voice_pipeline_cancelled", stage=self.session.stage.value)
        self.session.clear_run()
        self.session.stage = PipelineStage.IDLE

    async def _abandon_recording(self, handle: RecordingHandle) -> None:
        """Stop a recording nobody will process and drop its audio."""
        try:
            audio = await self.recorder.stop_recording(handle)
        except VoicePipelineError as e:
            self._log().debug(
                "recording_abandon_failed",
                recording_id=handle.recording_id,
                error=str(e),
            )
            return
        audio.release()

    def _start_run(self) -> None:
        if self.session.stage is PipelineStage.SAVED:
            self.reset()
        self.session.clear_run()

    async def _wait_for_stop(self, stop_signal: asyncio.Event | None) -> bool:
        """Wait for the user to stop. Returns True when the duration cap hit first."""
        timeout = self.max_recording_ms / 1000
        if stop_signal is None:
            await asyncio.sleep(timeout)
            return True
        try:
            await asyncio.wait_for(stop_signal.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return True
        return False

    # =========================================================================
    # Operations
    # =========================================================================

    async def capture(
        self,
        stop_signal: asyncio.Event | None = None,
        language_hint: str | None = None,
    ) -> VoiceSession:
        """
        Record one utterance and run it through the pipeline.

        Args:
            stop_signal: Set by the caller when the user stops speaking;
                recording auto-stops at max_recording_ms otherwise
            language_hint: Language code for transcription and extraction

        Returns:
            The session, in READY_FOR_REVIEW or ERRORED
        """
        self._require_stage(PipelineStage.IDLE, PipelineStage.SAVED)
        self._start_run()

        if not self.voice_enabled:
            return self._fail(VoiceUnavailableError("Voice capture is not configured"))

        self._transition(PipelineStage.RECORDING)
        handle = None
        try:
            with bind_log_context(session_id=self.session.session_id):
                handle = await self.recorder.start_recording()
                auto_stopped = await self._wait_for_stop(stop_signal)
                audio = await self.recorder.stop_recording(handle)
        except (PermissionDeniedError, DeviceError) as e:
            return self._fail(e)
        except asyncio.CancelledError:
            if handle is not None:
                await self._abandon_recording(handle)
            self._cancelled()
            raise

        if auto_stopped:
            self._warn(
                "recording_auto_stopped",
                f"Recording stopped after {self.max_recording_ms // 1000} seconds.",
            )

        return await self.process_recording(audio, language_hint=language_hint)

    async def process_recording(
        self,
        audio: RecordedAudio,
        language_hint: str | None = None,
    ) -> VoiceSession:
        """
        Transcribe and extract a finished recording.

        The audio is released once transcription completes or fails.

        Returns:
            The session, in READY_FOR_REVIEW or ERRORED
        """
        if self.session.stage is not PipelineStage.RECORDING:
            self._require_stage(PipelineStage.IDLE, PipelineStage.SAVED)
            self._start_run()

        with bind_log_context(session_id=self.session.session_id):
            return await self._transcribe_and_extract(
                audio, language_hint or self.language
            )

    async def _transcribe_and_extract(
        self, audio: RecordedAudio, language: str | None
    ) -> VoiceSession:
        self._transition(PipelineStage.TRANSCRIBING)

        try:
            try:
                transcription = await self.transcriber.transcribe(
                    audio,
                    language_hint=language,
                    session_id=self.session.session_id,
                )
            finally:
                audio.release()
        except TranscriptionError as e:
            return self._fail(e)
        except asyncio.CancelledError:
            self._cancelled()
            raise

        self.session.transcription = transcription

        if not transcription.text:
            return self._fail(
                TranscriptionError(
                    "Transcription returned no text",
                    user_message="No speech detected. Please try again.",
                )
            )

        if transcription.confidence < self.transcription_threshold:
            low_confidence = LowConfidenceTranscriptError(
                transcription.confidence, self.transcription_threshold
            )
            if self.policy is LowConfidencePolicy.BLOCK:
                return self._fail(low_confidence)
            self._warn("low_transcription_confidence", low_confidence.user_message)

        self._transition(PipelineStage.EXTRACTING)
        try:
            outcome = await self.extractor.extract(
                transcription.text,
                language_hint=language,
                session_id=self.session.session_id,
            )
        except asyncio.CancelledError:
            self._cancelled()
            raise

        self._log().info(
            "voice_extraction_completed",
            provenance=outcome.provenance.value,
            cached=outcome.cached,
            failure_reason=outcome.failure_reason,
            confidence=outcome.draft.confidence,
        )

        if outcome.is_fallback:
            self._warn(
                "fallback_extraction",
                "We could not fully understand this expense. Please check the details.",
            )
        if outcome.draft.confidence < self.extraction_threshold:
            self._warn(
                "low_extraction_confidence",
                f"Low confidence ({outcome.draft.confidence * 100:.0f}%). "
                "Please review before saving.",
            )

        try:
            draft = outcome.draft
            if self.session.manual_edits:
                draft = _merge_fields(draft, self.session.manual_edits)
        except ValidationError as e:
            return self._fail(ExpenseValidationError(_format_validation_errors(e)))

        self.session.outcome = outcome
        self.session.draft = draft
        self._transition(PipelineStage.READY_FOR_REVIEW)
        return self.session

    def edit(self, **fields: Any) -> ExtractedExpenseDraft:
        """
        Apply user corrections to the draft under review.

        Edited fields are remembered and win over any later extraction.

        Raises:
            ValueError: If a field is not editable
            ExpenseValidationError: If a value is invalid (draft unchanged)
        """
        self._require_stage(PipelineStage.READY_FOR_REVIEW)

        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")

        try:
            draft = _merge_fields(self.session.draft, fields)
        except ValidationError as e:
            errors = _format_validation_errors(e)
            self.session.validation_errors = errors
            raise ExpenseValidationError(errors) from e

        self.session.draft = draft
        self.session.manual_edits.update({name: getattr(draft, name) for name in fields})
        self.session.validation_errors = []
        self._log().info("voice_draft_edited", fields=sorted(fields))
        return draft

    def save(self, user_id: str) -> StoredExpense | None:
        """
        Hand the reviewed draft to storage.

        Returns:
            The stored record, or None when the draft fails validation or
            storage fails with no fallback (the session stays in review)
        """
        self._require_stage(PipelineStage.READY_FOR_REVIEW)
        draft = self.session.draft

        errors = validate_draft(draft)
        if errors:
            self.session.validation_errors = errors
            self.session.error = ExpenseValidationError(errors)
            self._log().info("voice_save_rejected", validation_errors=errors)
            return None

        source = self.session.outcome.provenance.value if self.session.outcome else "primary"
        try:
            record = self.store.add_expense(user_id, draft, source=source)
        except StorageError as e:
            if self.fallback_store is None:
                self.session.error = e
                self._log().warning(
                    "voice_save_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return None

            self._log().warning(
                "expense_store_fallback_used",
                error=str(e),
                error_type=type(e).__name__,
            )
            record = self.fallback_store.add_expense(user_id, draft, source=source)
            self._warn(
                "stored_in_memory",
                "Saved on this device only. It will sync when storage is available.",
            )

        self.session.saved_record = record
        self.session.error = None
        self.session.validation_errors = []
        self._transition(PipelineStage.SAVED)
        self._log().info(
            "voice_expense_saved",
            expense_id=str(record.id),
            provenance=source,
            amount=float(record.amount),
        )
        return record

    def retry(self) -> VoiceSession:
        """Return to IDLE for a new recording, keeping manual edits."""
        self._require_stage(PipelineStage.ERRORED, PipelineStage.READY_FOR_REVIEW)
        self.session.clear_run()
        self._transition(PipelineStage.IDLE)
        return self.session

    def reset(self) -> VoiceSession:
        """Start over with a fresh session."""
        self._log().debug("voice_session_reset")
        self.session = VoiceSession()
        return self.session


def build_voice_pipeline(
    recorder: AudioRecorder | None = None,
    caches: PipelineCaches | None = None,
    store: ExpenseStore | None = None,
    fallback_store: ExpenseStore | None = None,
) -> VoiceExpensePipeline:
    """
    Compose a pipeline from settings.

    Caches are owned by the caller when passed in, so several pipelines
    can share them. The fallback store defaults to an in-memory store.
    """
    caches = caches or PipelineCaches()
    return VoiceExpensePipeline(
        transcriber=TranscriptionClient(cache=caches.transcripts),
        extractor=ExpenseExtractor(cache=caches.extractions),
        store=store or SqlExpenseStore(),
        recorder=recorder,
        fallback_store=fallback_store or InMemoryExpenseStore(),
    )
