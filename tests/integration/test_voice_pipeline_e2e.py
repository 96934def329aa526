"""
End-to-end tests for the voice expense pipeline.

Tests:
- Record -> transcript -> extraction service down -> fallback -> edit -> save
- Multilingual primary extraction through the real prompt and chain
- build_voice_pipeline wiring with the SQL store
"""

import asyncio
from decimal import Decimal
from unittest.mock import patch

import pytest

from saypay.agents.voice_agent import (
    LowConfidencePolicy,
    PipelineStage,
    VoiceExpensePipeline,
    build_voice_pipeline,
)
from saypay.database import init_db
from saypay.integrations.audio import PrerecordedAudioRecorder
from saypay.schemas.extraction import ExpenseCategory, Provenance
from saypay.storage.expense_writer import InMemoryExpenseStore, SqlExpenseStore
from saypay.tools.extraction.audio_extractor import TranscriptionClient
from saypay.tools.extraction.text_extractor import ExpenseExtractor

pytestmark = pytest.mark.integration


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def stop_signal() -> asyncio.Event:
    event = asyncio.Event()
    event.set()
    return event


@pytest.fixture
def recorder() -> PrerecordedAudioRecorder:
    return PrerecordedAudioRecorder(b"\x1aE\xdf\xa3voice-note", duration_ms=3200)


# ─────────────────────────────────────────────────────────────────────────────
# Scenarios
# ─────────────────────────────────────────────────────────────────────────────


class TestFallbackToSavedExpense:
    """The extraction service is down; the user still saves a correct expense."""

    @pytest.mark.asyncio
    async def test_chipotle_lunch(
        self,
        caches,
        today,
        recorder,
        stop_signal,
        session_factory,
        whisper_client_factory,
        scripted_llm,
    ):
        whisper = whisper_client_factory(text="Lunch at Chipotle twenty five fifty")
        llm = scripted_llm(ConnectionError("extraction service unavailable"))
        store = SqlExpenseStore(session_factory)
        pipeline = VoiceExpensePipeline(
            transcriber=TranscriptionClient(cache=caches.transcripts, client=whisper),
            extractor=ExpenseExtractor(
                llm=llm.runnable, cache=caches.extractions, today=lambda: today
            ),
            store=store,
            recorder=recorder,
            fallback_store=InMemoryExpenseStore(),
        )

        # Record and process
        session = await pipeline.capture(stop_signal=stop_signal)

        assert session.stage is PipelineStage.READY_FOR_REVIEW
        assert session.outcome.provenance is Provenance.FALLBACK
        assert session.draft.category is ExpenseCategory.FOOD
        assert isinstance(session.draft.amount, Decimal)
        assert session.draft.confidence <= 0.75
        assert session.draft.description == "Lunch at Chipotle twenty five fifty"
        assert session.draft.date == today

        # User corrects the amount and saves
        pipeline.edit(amount="25.50")
        record = pipeline.save("user-123")

        assert pipeline.stage is PipelineStage.SAVED
        assert record.amount == Decimal("25.50")
        assert record.source == "fallback"

        stored = store.get_expense(record.id)
        assert stored.amount == Decimal("25.50")
        assert stored.category is ExpenseCategory.FOOD
        assert stored.user_id == "user-123"

        # Nothing from the fallback path was cached
        assert len(caches.extractions) == 0
        assert len(caches.transcripts) == 1


class TestMultilingualPrimaryExtraction:
    """The model answers; the draft comes from the primary path."""

    @pytest.mark.asyncio
    async def test_spanish_gas(
        self,
        caches,
        today,
        recorder,
        stop_signal,
        whisper_client_factory,
        scripted_llm,
    ):
        whisper = whisper_client_factory(
            text="Pagué cincuenta dólares por gasolina", confidence=0.97
        )
        llm = scripted_llm(
            {
                "amount": 50,
                "currency": "USD",
                "description": "Gasolina",
                "category": "Transport",
                "date": today.isoformat(),
                "confidence": 0.92,
            }
        )
        pipeline = VoiceExpensePipeline(
            transcriber=TranscriptionClient(cache=caches.transcripts, client=whisper),
            extractor=ExpenseExtractor(
                llm=llm.runnable, cache=caches.extractions, today=lambda: today
            ),
            store=InMemoryExpenseStore(),
            recorder=recorder,
            policy=LowConfidencePolicy.BLOCK,
            language="es",
        )

        session = await pipeline.capture(stop_signal=stop_signal)

        assert session.stage is PipelineStage.READY_FOR_REVIEW
        assert session.outcome.provenance is Provenance.PRIMARY
        assert session.draft.amount == Decimal("50")
        assert session.draft.category is ExpenseCategory.TRANSPORT
        assert session.warnings == []
        assert whisper.audio.transcriptions.create.await_args.kwargs["language"] == "es"
        assert "Spanish" in llm.prompts[0].to_messages()[1].content


class TestBuildVoicePipeline:
    """Wiring from settings."""

    @pytest.mark.asyncio
    async def test_default_wiring_saves_to_database(
        self,
        caches,
        recorder,
        stop_signal,
        whisper_client_factory,
        scripted_llm,
    ):
        whisper = whisper_client_factory(text="Taxi to the airport forty dollars")
        llm = scripted_llm(
            {"amount": 40, "description": "Taxi to the airport", "category": "Transport"}
        )

        with patch(
            "saypay.tools.extraction.audio_extractor.AsyncOpenAI", return_value=whisper
        ), patch(
            "saypay.tools.extraction.text_extractor.get_llm_for_extraction",
            return_value=llm.runnable,
        ):
            init_db()
            pipeline = build_voice_pipeline(recorder=recorder, caches=caches)

            assert pipeline.voice_enabled is True
            session = await pipeline.capture(stop_signal=stop_signal)
            record = pipeline.save("user-9")

        assert session.draft.category is ExpenseCategory.TRANSPORT
        assert isinstance(pipeline.store, SqlExpenseStore)
        assert pipeline.store.get_expense(record.id).amount == Decimal("40")
