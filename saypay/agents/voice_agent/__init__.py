"""
Voice Agent - spoken expense capture.

Records an utterance, transcribes it, extracts a structured draft (with an
offline fallback) and saves it after the user reviews it.

Usage:
    from saypay.agents.voice_agent import build_voice_pipeline

    pipeline = build_voice_pipeline(recorder=recorder)
    session = await pipeline.capture(stop_signal=stop_event)
"""

from saypay.agents.voice_agent.agent import (
    VoiceExpensePipeline,
    build_voice_pipeline,
)
from saypay.agents.voice_agent.state import (
    LowConfidencePolicy,
    PipelineStage,
    PipelineWarning,
    VoiceSession,
)
from saypay.agents.voice_agent.validator import ensure_valid, validate_draft

__all__ = [
    # Main entry points
    "VoiceExpensePipeline",
    "build_voice_pipeline",
    # State
    "VoiceSession",
    "PipelineStage",
    "PipelineWarning",
    "LowConfidencePolicy",
    # Validation
    "validate_draft",
    "ensure_valid",
]
