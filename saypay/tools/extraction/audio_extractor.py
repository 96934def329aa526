"""
Audio transcription client using the OpenAI Whisper API.
Transcribes recordings to text, caching results by audio fingerprint.
"""

from typing import Any

import openai
from openai import AsyncOpenAI

from saypay.config import settings
from saypay.errors import TranscriptionError
from saypay.logging_config import get_logger
from saypay.schemas.audio import RecordedAudio, TranscriptionResult
from saypay.storage.result_cache import ResultCache

logger = get_logger(__name__)

# Whisper does not report a confidence; assume it is accurate
DEFAULT_TRANSCRIPTION_CONFIDENCE = 0.95


def _read_field(response: Any, name: str) -> Any:
    """Read a field from an SDK object or a plain dict response."""
    if isinstance(response, dict):
        return response.get(name)
    return getattr(response, name, None)


def _coerce_confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_TRANSCRIPTION_CONFIDENCE
    if not 0.0 <= value <= 1.0:
        return DEFAULT_TRANSCRIPTION_CONFIDENCE
    return float(value)


class TranscriptionClient:
    """
    Speech-to-text client with a content-addressed cache.

    A given recording (by SHA-256 of its bytes) reaches the network at
    most once per cache TTL; repeats are answered from the cache.

    Example:
        >>> client = TranscriptionClient(cache=caches.transcripts)
        >>> result = await client.transcribe(audio, language_hint="es")
        >>> result.text
        'Pagué cincuenta dólares por gasolina'
    """

    def __init__(
        self,
        cache: ResultCache[TranscriptionResult] | None = None,
        client: AsyncOpenAI | None = None,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
    ):
        self.cache = cache if cache is not None else ResultCache("transcripts")
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.model = model or settings.whisper_model
        self.temperature = (
            temperature if temperature is not None else settings.transcription_temperature
        )
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._client = client

    @property
    def is_available(self) -> bool:
        """Whether a transcription credential (or injected client) is present."""
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise TranscriptionError("OPENAI_API_KEY not configured")
            logger.debug("initializing_whisper_client", model=self.model)
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def transcribe(
        self,
        audio: RecordedAudio,
        language_hint: str | None = None,
        **kwargs: Any,
    ) -> TranscriptionResult:
        """
        Transcribe a finished recording.

        Args:
            audio: Recording to transcribe
            language_hint: ISO 639-1 code (e.g., 'en', 'hi', 'es', 'fr')
            **kwargs: Additional context for logging

        Returns:
            TranscriptionResult with text, confidence and detected language

        Raises:
            TranscriptionError: If credentials are missing, the audio cannot
                be read, or the service call fails
        """
        language = (language_hint or settings.default_language)[:2].lower()

        try:
            fingerprint = audio.fingerprint()
        except (OSError, ValueError) as e:
            raise TranscriptionError(f"Audio could not be read: {e}") from e

        cached = self.cache.get(fingerprint)
        if cached is not None:
            logger.info(
                "transcription_cache_hit",
                fingerprint=fingerprint[:16],
                **kwargs,
            )
            return cached

        client = self._get_client()

        try:
            payload = audio.read_bytes()
        except (OSError, ValueError) as e:
            raise TranscriptionError(f"Audio could not be read: {e}") from e

        logger.info(
            "transcribing_audio",
            fingerprint=fingerprint[:16],
            size=len(payload),
            duration_ms=audio.duration_ms,
            mime_type=audio.mime_type,
            language=language,
            **kwargs,
        )

        try:
            response = await client.audio.transcriptions.create(
                model=self.model,
                file=(audio.filename, payload, audio.mime_type),
                language=language,
                response_format="verbose_json",
                temperature=self.temperature,
                timeout=self.timeout,
            )
        except openai.APITimeoutError as e:
            logger.error("audio_transcription_timeout", timeout=self.timeout, **kwargs)
            raise TranscriptionError(f"Transcription timed out after {self.timeout}s") from e
        except openai.APIStatusError as e:
            logger.error(
                "audio_transcription_failed",
                status_code=e.status_code,
                error=str(e),
                error_type=type(e).__name__,
                **kwargs,
            )
            raise TranscriptionError(
                f"Transcription service error: {e.status_code}"
            ) from e
        except openai.APIError as e:
            logger.error(
                "audio_transcription_failed",
                error=str(e),
                error_type=type(e).__name__,
                **kwargs,
                exc_info=True,
            )
            raise TranscriptionError(f"Transcription request failed: {e}") from e

        result = TranscriptionResult(
            text=(_read_field(response, "text") or "").strip(),
            confidence=_coerce_confidence(_read_field(response, "confidence")),
            language=_read_field(response, "language") or None,
        )

        # Empty transcripts are not worth remembering
        if result.text:
            self.cache.set(fingerprint, result)

        logger.info(
            "audio_transcribed_successfully",
            text_length=len(result.text),
            confidence=result.confidence,
            language=result.language,
            **kwargs,
        )
        return result
