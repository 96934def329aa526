"""
Text expense extractor using LangChain with JSON output.
Extracts expense information from transcripts with a language model and
falls back to the heuristic parser whenever the model step fails.
"""

import asyncio
import random
from datetime import date
from decimal import Decimal
from typing import Any, Callable

from langchain_anthropic import ChatAnthropic
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.runnables import Runnable
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from saypay.config import settings
from saypay.errors import ExtractionServiceError
from saypay.logging_config import get_logger
from saypay.prompts.expense_extraction import (
    EXPENSE_EXTRACTION_PROMPT,
    build_prompt_inputs,
)
from saypay.schemas.extraction import (
    ExpenseCategory,
    ExtractedExpenseDraft,
    ExtractionOutcome,
    ModelExpensePayload,
    Provenance,
)
from saypay.storage.result_cache import ResultCache
from saypay.tools.extraction.fallback_parser import parse_fallback
from saypay.tools.extraction.lexicon import language_name

logger = get_logger(__name__)

# Used when the model omits its own estimate
DEFAULT_MODEL_CONFIDENCE = 0.85
MAX_DESCRIPTION_LENGTH = 500


def get_llm_for_extraction() -> Runnable:
    """
    Get configured LLM for expense extraction based on settings.

    Returns:
        Configured LangChain chat model (JSON mode where the provider supports it)

    Raises:
        ValueError: If provider is not supported or API key missing
    """
    provider = settings.llm_provider.lower()

    if provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY not configured")

        logger.debug("initializing_openai_llm", model=settings.extraction_model)
        llm = ChatOpenAI(
            model=settings.extraction_model,
            api_key=settings.openai_api_key,
            temperature=settings.extraction_temperature,
            max_tokens=settings.extraction_max_tokens,
            timeout=settings.request_timeout_seconds,
        )
        return llm.bind(response_format={"type": "json_object"})

    elif provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not configured")

        logger.debug("initializing_anthropic_llm", model="claude-3-5-sonnet-20241022")
        return ChatAnthropic(
            model="claude-3-5-sonnet-20241022",
            api_key=settings.anthropic_api_key,
            temperature=settings.extraction_temperature,
            max_tokens=settings.extraction_max_tokens,
            timeout=settings.request_timeout_seconds,
        )

    elif provider == "google":
        if not settings.google_api_key:
            raise ValueError("GOOGLE_API_KEY not configured")

        logger.debug("initializing_google_llm", model="gemini-2.0-flash")
        return ChatGoogleGenerativeAI(
            model="gemini-2.0-flash",
            google_api_key=settings.google_api_key,
            temperature=settings.extraction_temperature,
            max_output_tokens=settings.extraction_max_tokens,
            response_mime_type="application/json",
        )

    else:
        raise ValueError(
            f"Unsupported LLM provider: {provider}. "
            f"Supported: openai, anthropic, google"
        )


def normalize_cache_key(text: str) -> str:
    """Extraction cache key: lowercased, trimmed transcript."""
    return text.lower().strip()


class ExpenseExtractor:
    """
    Structured extraction client.

    `extract` never raises for extraction problems: any failure of the
    model step (missing credentials, provider error, timeout, malformed or
    schema-violating JSON) is logged and answered by the fallback parser.
    The returned ExtractionOutcome records which path produced the draft.

    Example:
        >>> extractor = ExpenseExtractor(cache=caches.extractions)
        >>> outcome = await extractor.extract("Paid fifty dollars for gas", "en")
        >>> outcome.draft.amount, outcome.provenance.value
        (Decimal('50'), 'primary')
    """

    def __init__(
        self,
        llm: Runnable | None = None,
        cache: ResultCache[ExtractedExpenseDraft] | None = None,
        today: Callable[[], date] = date.today,
        rng: random.Random | None = None,
        timeout: float | None = None,
    ):
        self._llm = llm
        self.cache = cache if cache is not None else ResultCache("extractions")
        self._today = today
        self._rng = rng
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds

    def _get_llm(self) -> Runnable:
        if self._llm is None:
            self._llm = get_llm_for_extraction()
        return self._llm

    async def extract(
        self,
        text: str,
        language_hint: str | None = None,
        **kwargs: Any,
    ) -> ExtractionOutcome:
        """
        Extract an expense draft from a transcript.

        Args:
            text: Transcript of the spoken expense
            language_hint: Language code of the transcript ('en', 'hi', 'es', 'fr')
            **kwargs: Additional context for logging

        Returns:
            ExtractionOutcome with a primary (model) or fallback draft
        """
        key = normalize_cache_key(text or "")

        cached = self.cache.get(key) if key else None
        if cached is not None:
            logger.info("extraction_cache_hit", text_length=len(key), **kwargs)
            return ExtractionOutcome(draft=cached, provenance=Provenance.PRIMARY, cached=True)

        try:
            if not key:
                raise ExtractionServiceError("Transcript is empty")
            draft = await self._extract_with_model(text.strip(), language_hint, **kwargs)
        except ExtractionServiceError as e:
            logger.warning(
                "extraction_fallback_used",
                reason=str(e),
                cause_type=type(e.__cause__).__name__ if e.__cause__ else None,
                text_preview=(text or "")[:100],
                **kwargs,
            )
            draft = parse_fallback(text or "", today=self._today(), rng=self._rng)
            return ExtractionOutcome(
                draft=draft,
                provenance=Provenance.FALLBACK,
                failure_reason=str(e),
            )

        self.cache.set(key, draft)
        return ExtractionOutcome(draft=draft, provenance=Provenance.PRIMARY)

    async def _extract_with_model(
        self,
        text: str,
        language_hint: str | None,
        **kwargs: Any,
    ) -> ExtractedExpenseDraft:
        """
        Run the model step and validate its payload.

        Raises:
            ExtractionServiceError: On any failure of the model step
        """
        today = self._today()
        language = language_name(language_hint or settings.default_language)

        logger.info(
            "extracting_expense_from_text",
            text_length=len(text),
            language=language,
            provider=settings.llm_provider,
            **kwargs,
        )

        try:
            chain = EXPENSE_EXTRACTION_PROMPT | self._get_llm() | JsonOutputParser()
            logger.debug("invoking_llm_chain", text_preview=text[:100])
            parsed = await asyncio.wait_for(
                chain.ainvoke(build_prompt_inputs(text, language, today)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ExtractionServiceError(
                f"Extraction timed out after {self.timeout}s"
            ) from e
        except Exception as e:
            logger.error(
                "expense_extraction_failed",
                error=str(e),
                error_type=type(e).__name__,
                text_preview=text[:100],
                **kwargs,
                exc_info=True,
            )
            raise ExtractionServiceError(f"Extraction service error: {e}") from e

        if not isinstance(parsed, dict):
            raise ExtractionServiceError(
                f"Expected a JSON object, got {type(parsed).__name__}"
            )

        try:
            payload = ModelExpensePayload.model_validate(parsed)
        except ValidationError as e:
            raise ExtractionServiceError(f"Invalid extraction payload: {e}") from e

        description = (payload.description or "").strip() or text
        try:
            draft = ExtractedExpenseDraft(
                amount=Decimal(str(payload.amount)),
                currency=payload.currency or settings.default_currency,
                description=description[:MAX_DESCRIPTION_LENGTH],
                category=(
                    ExpenseCategory.from_label(payload.category)
                    if payload.category
                    else ExpenseCategory.MISC
                ),
                date=date.fromisoformat(payload.date) if payload.date else today,
                confidence=(
                    payload.confidence
                    if payload.confidence is not None
                    else DEFAULT_MODEL_CONFIDENCE
                ),
            )
        except (ValidationError, ValueError) as e:
            raise ExtractionServiceError(f"Invalid extraction payload: {e}") from e

        logger.info(
            "expense_extracted_successfully",
            amount=float(draft.amount),
            currency=draft.currency,
            category=draft.category.value,
            confidence=draft.confidence,
            **kwargs,
        )
        return draft
