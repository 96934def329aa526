"""
Pytest configuration and fixtures for the SayPay test suite.

Provides:
- Deterministic clock and caches
- Whisper client and chat model stand-ins
- In-memory SQLite session factory
"""

import json
import os
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing saypay modules
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOW_CONFIDENCE_POLICY"] = "warn"

from saypay.database import Base
from saypay.models import Expense  # noqa: F401
from saypay.storage.result_cache import PipelineCaches

FIXED_TODAY = date(2025, 1, 15)
CLOCK_START_MS = 1_736_899_200_000  # 2025-01-15T00:00:00Z


class FakeClock:
    """Epoch-millisecond clock advanced by hand."""

    def __init__(self, start: int = CLOCK_START_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class ScriptedLLM:
    """
    Chat model stand-in answering every prompt with the same reply.

    `reply` may be a dict (sent as JSON), a raw string or an exception
    to raise. `runnable` plugs into the extraction chain.
    """

    def __init__(self, reply):
        self.reply = reply
        self.calls = 0
        self.prompts = []
        self.runnable = RunnableLambda(self._respond)

    def _respond(self, prompt_value):
        self.calls += 1
        self.prompts.append(prompt_value)
        if isinstance(self.reply, Exception):
            raise self.reply
        content = self.reply if isinstance(self.reply, str) else json.dumps(self.reply)
        return AIMessage(content=content)


def make_whisper_client(text="I spent twenty five dollars on lunch", confidence=None, error=None):
    """MagicMock shaped like AsyncOpenAI with a scripted transcription."""
    response = SimpleNamespace(text=text, language="english")
    if confidence is not None:
        response.confidence = confidence

    client = MagicMock()
    client.audio.transcriptions.create = AsyncMock(return_value=response, side_effect=error)
    return client


# ─────────────────────────────────────────────────────────────────────────────
# Clock & Cache Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def caches(fake_clock) -> PipelineCaches:
    """Fresh caches on the fake clock for every test."""
    return PipelineCaches.with_clock(fake_clock)


@pytest.fixture
def today() -> date:
    return FIXED_TODAY


# ─────────────────────────────────────────────────────────────────────────────
# Service Stand-ins
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def scripted_llm():
    """Factory: scripted_llm(reply) -> ScriptedLLM."""
    return ScriptedLLM


@pytest.fixture
def whisper_client_factory():
    """Factory: whisper_client_factory(text=..., confidence=..., error=...)."""
    return make_whisper_client


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
