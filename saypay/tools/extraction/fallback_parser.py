"""
Heuristic expense parser used when the language model is unavailable.

Deterministic (apart from the placeholder amount), offline and
dependency-free. Trades accuracy for availability: the draft it returns
is always usable and always flagged with a lower confidence than the
model path, so the user reviews it before saving.
"""

import random
import re
from datetime import date
from decimal import Decimal

from saypay.logging_config import get_logger
from saypay.schemas.extraction import ExpenseCategory, ExtractedExpenseDraft
from saypay.tools.extraction.lexicon import (
    CURRENCY_PRECEDENCE,
    CURRENCY_SYMBOLS,
    merged_category_keywords,
    merged_connectors,
    merged_currency_hints,
    merged_number_words,
)

logger = get_logger(__name__)

KEYWORD_CONFIDENCE = 0.75
NO_KEYWORD_CONFIDENCE = 0.60
DEFAULT_CURRENCY = "USD"

# Placeholder amount range when nothing numeric is spoken: [5, 105)
PLACEHOLDER_AMOUNT_RANGE = (5, 105)

# Letters, digits and Devanagari (vowel signs are not \w)
_WORD_CHARS = r"\w\u0900-\u097F"
_START = rf"(?<![{_WORD_CHARS}])"
_END = rf"(?![{_WORD_CHARS}])"

_NUMBER_WORDS = merged_number_words()
_NUMBER_WORD_PATTERN = re.compile(
    _START
    + "(?:"
    + "|".join(re.escape(w) for w in sorted(_NUMBER_WORDS, key=len, reverse=True))
    + ")"
    + _END
)
_NUMBER_GAP_PATTERN = re.compile(
    r"[\s\-]*(?:(?:" + "|".join(merged_connectors()) + r")[\s\-]+)?"
)

_AMOUNT_PATTERN = re.compile(
    r"[$€£₹]?\s?(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?(?:,\d{1,2}(?!\d))?)"
)
_THOUSANDS_PATTERN = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?")

# Keywords match at a word start so plurals and inflections count
_CATEGORY_PATTERNS: dict[ExpenseCategory, tuple[re.Pattern, ...]] = {
    category: tuple(re.compile(_START + re.escape(k)) for k in keywords)
    for category, keywords in merged_category_keywords().items()
}
_CURRENCY_HINT_PATTERNS: dict[str, tuple[re.Pattern, ...]] = {
    code: tuple(re.compile(_START + re.escape(h)) for h in hints)
    for code, hints in merged_currency_hints().items()
}
_SYMBOL_BY_CURRENCY = {code: symbol for symbol, code in CURRENCY_SYMBOLS.items()}


def _continues(current: int, value: int) -> bool:
    """Whether `value` extends the number being built ("twenty" + "five")."""
    if current == 0:
        return False
    if value == 100:
        return current < 100
    below_hundred = current % 100
    if below_hundred == 0:
        return value < 100
    # French 71-79 and 91-99: "soixante-quinze", "quatre-vingt-treize"
    if below_hundred in (60, 80) and 10 <= value < 20:
        return True
    return below_hundred >= 20 and below_hundred % 10 == 0 and value < 10


def _compose(values: list[int]) -> list[tuple[int, int, int]]:
    """
    Fold a run of number-word values into numbers.

    Returns (value, first_index, last_index) per composed number.
    """
    numbers: list[tuple[int, int, int]] = []
    current, first = values[0], 0
    for index, value in enumerate(values[1:], start=1):
        if _continues(current, value):
            current = current * 100 if value == 100 else current + value
        else:
            numbers.append((current, first, index - 1))
            current, first = value, index
    numbers.append((current, first, len(values) - 1))
    return numbers


def replace_number_words(text: str) -> str:
    """
    Replace spoken numbers with digits in lowercased text.

    Only whole words are replaced. Adjacent number words (optionally joined
    by a connector such as "and", "y" or "et") are combined:
    "twenty five" -> "25", "treinta y cinco" -> "35", "two hundred" -> "200".

    Example:
        >>> replace_number_words("lunch twenty five fifty")
        'lunch 25 50'
    """
    matches = list(_NUMBER_WORD_PATTERN.finditer(text))
    if not matches:
        return text

    # Group matches separated only by whitespace, hyphens or a connector
    runs: list[list[re.Match]] = [[matches[0]]]
    for match in matches[1:]:
        gap = text[runs[-1][-1].end():match.start()]
        if _NUMBER_GAP_PATTERN.fullmatch(gap):
            runs[-1].append(match)
        else:
            runs.append([match])

    pieces: list[str] = []
    cursor = 0
    for run in runs:
        values = [_NUMBER_WORDS[m.group(0)] for m in run]
        for value, first, last in _compose(values):
            pieces.append(text[cursor:run[first].start()])
            pieces.append(str(value))
            cursor = run[last].end()
    pieces.append(text[cursor:])
    return "".join(pieces)


def find_amount(text: str) -> Decimal | None:
    """First decimal number in the text, optionally prefixed by a currency symbol."""
    match = _AMOUNT_PATTERN.search(text)
    if not match:
        return None

    token = match.group(1)
    if _THOUSANDS_PATTERN.fullmatch(token):
        token = token.replace(",", "")
    else:
        token = token.replace(",", ".")
    return Decimal(token)


def score_categories(text: str) -> dict[ExpenseCategory, int]:
    """Number of distinct keywords per category found in lowercased text."""
    return {
        category: sum(1 for pattern in patterns if pattern.search(text))
        for category, patterns in _CATEGORY_PATTERNS.items()
    }


def pick_category(scores: dict[ExpenseCategory, int]) -> ExpenseCategory:
    """Strict maximum wins; ties keep declaration order; no matches is Misc."""
    best, best_score = ExpenseCategory.MISC, 0
    for category, score in scores.items():
        if score > best_score:
            best, best_score = category, score
    return best


def detect_currency(text: str) -> str:
    """Currency from symbols or spoken hints, defaulting to USD."""
    lowered = text.lower()
    for code in CURRENCY_PRECEDENCE:
        symbol = _SYMBOL_BY_CURRENCY.get(code)
        if symbol and symbol in text:
            return code
        if any(p.search(lowered) for p in _CURRENCY_HINT_PATTERNS.get(code, ())):
            return code
    return DEFAULT_CURRENCY


def parse_fallback(
    text: str,
    today: date | None = None,
    rng: random.Random | None = None,
) -> ExtractedExpenseDraft:
    """
    Extract an expense draft from a transcript without any network access.

    Never raises. When no amount is spoken a placeholder amount in [5, 105)
    is used; the low confidence tells the user to check it.

    Args:
        text: Raw transcript
        today: Date to stamp on the draft (defaults to the current date)
        rng: Random source for the placeholder amount

    Returns:
        ExtractedExpenseDraft with confidence 0.75 (keyword match) or 0.60

    Example:
        >>> draft = parse_fallback("I spent twenty five dollars on lunch")
        >>> draft.amount, draft.category.value, draft.currency
        (Decimal('25'), 'Food', 'USD')
    """
    raw = text or ""
    processed = replace_number_words(raw.lower())

    amount = find_amount(processed)
    amount_guessed = amount is None
    if amount is None:
        amount = Decimal((rng or random).randrange(*PLACEHOLDER_AMOUNT_RANGE))

    scores = score_categories(processed)
    category = pick_category(scores)
    matched = scores.get(category, 0) > 0

    draft = ExtractedExpenseDraft(
        amount=amount,
        currency=detect_currency(raw),
        description=raw.strip()[:500],
        category=category,
        date=today or date.today(),
        confidence=KEYWORD_CONFIDENCE if matched else NO_KEYWORD_CONFIDENCE,
    )

    logger.debug(
        "fallback_parse_complete",
        amount=float(draft.amount),
        amount_guessed=amount_guessed,
        currency=draft.currency,
        category=draft.category.value,
        keyword_matches=scores.get(category, 0),
        confidence=draft.confidence,
    )
    return draft
