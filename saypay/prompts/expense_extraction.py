"""
Prompts for expense extraction from spoken input.
Uses LangChain prompt templates; the model answers with a single JSON object.
"""

import json
from datetime import date, timedelta

from langchain_core.prompts import ChatPromptTemplate

from saypay.schemas.extraction import ExpenseCategory

# Few-shot examples grouped by language. "days_ago" is resolved against
# the current date when the prompt is rendered.
FEW_SHOT_EXAMPLES: dict[str, list[dict]] = {
    "English": [
        {
            "input": "I spent $25 on lunch at McDonald's today",
            "output": {"amount": 25, "currency": "USD", "description": "Lunch at McDonald's", "category": "Food", "confidence": 0.95},
        },
        {
            "input": "Paid fifty dollars for gas at the station",
            "output": {"amount": 50, "currency": "USD", "description": "Gas at station", "category": "Transport", "confidence": 0.92},
        },
        {
            "input": "Movie tickets cost thirty bucks last night",
            "output": {"amount": 30, "currency": "USD", "description": "Movie tickets", "category": "Entertainment", "confidence": 0.94},
            "days_ago": 1,
        },
        {
            "input": "Grocery shopping at Walmart for eighty five dollars",
            "output": {"amount": 85, "currency": "USD", "description": "Grocery shopping at Walmart", "category": "Shopping", "confidence": 0.96},
        },
        {
            "input": "Electric bill payment of one hundred twenty dollars",
            "output": {"amount": 120, "currency": "USD", "description": "Electric bill payment", "category": "Utilities", "confidence": 0.93},
        },
    ],
    "Hindi": [
        {
            "input": "मैंने आज मैकडॉनल्ड्स में लंच पर 25 डॉलर खर्च किए",
            "output": {"amount": 25, "currency": "USD", "description": "McDonald's में लंच", "category": "Food", "confidence": 0.95},
        },
        {
            "input": "पेट्रोल स्टेशन पर पचास डॉलर का पेट्रोल भरवाया",
            "output": {"amount": 50, "currency": "USD", "description": "पेट्रोल स्टेशन पर पेट्रोल", "category": "Transport", "confidence": 0.92},
        },
    ],
    "Spanish": [
        {
            "input": "Gasté 25 dólares en almuerzo en McDonald's hoy",
            "output": {"amount": 25, "currency": "USD", "description": "Almuerzo en McDonald's", "category": "Food", "confidence": 0.95},
        },
        {
            "input": "Pagué cincuenta dólares por gasolina en la estación",
            "output": {"amount": 50, "currency": "USD", "description": "Gasolina en la estación", "category": "Transport", "confidence": 0.92},
        },
    ],
    "French": [
        {
            "input": "J'ai dépensé 25 dollars pour le déjeuner chez McDonald's aujourd'hui",
            "output": {"amount": 25, "currency": "USD", "description": "Déjeuner chez McDonald's", "category": "Food", "confidence": 0.95},
        },
        {
            "input": "J'ai payé cinquante dollars pour l'essence à la station",
            "output": {"amount": 50, "currency": "USD", "description": "Essence à la station", "category": "Transport", "confidence": 0.92},
        },
    ],
}


EXPENSE_EXTRACTION_SYSTEM = """You are an expense tracking assistant. You turn short spoken expense notes into structured data.

Examples of expense extraction:
{examples}

**Categories**: {categories}

**Rules**:
1. Convert word numbers to digits in any language (e.g., "twenty five" → 25, "पच्चीस" → 25, "veinticinco" → 25, "vingt-cinq" → 25)
2. Default currency is USD if not specified; always return a 3-letter ISO 4217 code in UPPERCASE
3. Use today's date if no date is mentioned: {today}
4. Choose the most appropriate category from the list above
5. Keep the description concise but descriptive, in the original language
6. Provide a confidence score between 0.0 and 1.0 for your extraction
7. Understand cultural context and local expressions

Return ONLY a valid JSON object:
{{"amount": number, "currency": "string", "description": "string", "category": "string", "date": "YYYY-MM-DD", "confidence": number}}"""

EXPENSE_EXTRACTION_USER = 'Extract expense information from this {language} text: "{text}"'

EXPENSE_EXTRACTION_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", EXPENSE_EXTRACTION_SYSTEM),
        ("user", EXPENSE_EXTRACTION_USER),
    ]
)


def render_few_shot_examples(today: date) -> str:
    """Render the few-shot block with dates relative to `today`."""
    lines: list[str] = []
    for language, examples in FEW_SHOT_EXAMPLES.items():
        lines.append(f"\n{language} Examples:")
        for example in examples:
            expense_date = today - timedelta(days=example.get("days_ago", 0))
            output = {**example["output"], "date": expense_date.isoformat()}
            lines.append(f'Input: "{example["input"]}"')
            lines.append(f"Output: {json.dumps(output, ensure_ascii=False)}")
    return "\n".join(lines)


def build_prompt_inputs(text: str, language: str, today: date) -> dict[str, str]:
    """Template variables for EXPENSE_EXTRACTION_PROMPT."""
    return {
        "examples": render_few_shot_examples(today),
        "categories": ", ".join(c.value for c in ExpenseCategory),
        "today": today.isoformat(),
        "language": language,
        "text": text,
    }
