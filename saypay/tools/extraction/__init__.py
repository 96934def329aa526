"""
Extraction tools for voice expense capture.
Provides the transcription client, the model-backed extractor and the
offline fallback parser.
"""

from saypay.tools.extraction.audio_extractor import TranscriptionClient
from saypay.tools.extraction.fallback_parser import parse_fallback
from saypay.tools.extraction.text_extractor import (
    ExpenseExtractor,
    get_llm_for_extraction,
)

__all__ = [
    "TranscriptionClient",
    "ExpenseExtractor",
    "get_llm_for_extraction",
    "parse_fallback",
]
