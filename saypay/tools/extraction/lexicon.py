"""
Per-language lexicons for the heuristic expense parser.

Each supported language is one LanguageLexicon: number words, category
keywords and currency hints. Adding a language means adding one table
and registering it in LEXICONS.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from saypay.schemas.extraction import ExpenseCategory

Food = ExpenseCategory.FOOD
Transport = ExpenseCategory.TRANSPORT
Rent = ExpenseCategory.RENT
Shopping = ExpenseCategory.SHOPPING
Health = ExpenseCategory.HEALTH
Entertainment = ExpenseCategory.ENTERTAINMENT
Utilities = ExpenseCategory.UTILITIES


@dataclass(frozen=True)
class LanguageLexicon:
    """Read-only word tables for one language."""

    code: str
    name: str
    number_words: Mapping[str, int]
    category_keywords: Mapping[ExpenseCategory, tuple[str, ...]]
    # Currency code -> spoken hints (symbols live in CURRENCY_SYMBOLS)
    currency_hints: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    # Words that join number words ("thirty and five", "treinta y cinco")
    number_connectors: tuple[str, ...] = ()


ENGLISH = LanguageLexicon(
    code="en",
    name="English",
    number_words=MappingProxyType({
        "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
        "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
        "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14,
        "fifteen": 15, "sixteen": 16, "seventeen": 17, "eighteen": 18,
        "nineteen": 19, "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
        "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
        "hundred": 100,
    }),
    category_keywords=MappingProxyType({
        Food: (
            "lunch", "dinner", "breakfast", "coffee", "restaurant", "food",
            "eating", "meal", "pizza", "burger", "mcdonald", "starbucks",
            "cafe", "snack", "drink",
        ),
        Transport: (
            "uber", "taxi", "gas", "fuel", "parking", "bus", "train", "ride",
            "metro", "subway", "station", "car", "vehicle", "transport",
        ),
        Rent: ("rent", "mortgage", "housing", "apartment", "lease", "property"),
        Shopping: (
            "shopping", "store", "buy", "bought", "purchase", "groceries",
            "walmart", "target", "amazon", "clothes", "shoes",
        ),
        Health: (
            "doctor", "medicine", "pharmacy", "hospital", "medical",
            "prescription", "dentist", "clinic",
        ),
        Entertainment: (
            "movie", "cinema", "game", "concert", "show", "entertainment",
            "tickets", "theater", "music",
        ),
        Utilities: (
            "electric", "water", "internet", "phone", "utility", "bill",
            "payment", "cable", "wifi",
        ),
    }),
    currency_hints=MappingProxyType({
        "EUR": ("euro",),
        "GBP": ("pound",),
        "INR": ("rupee",),
    }),
    number_connectors=("and",),
)

HINDI = LanguageLexicon(
    code="hi",
    name="Hindi",
    number_words=MappingProxyType({
        "शून्य": 0, "एक": 1, "दो": 2, "तीन": 3, "चार": 4, "पांच": 5,
        "पाँच": 5, "छह": 6, "सात": 7, "आठ": 8, "नौ": 9, "दस": 10,
        "बीस": 20, "पच्चीस": 25, "तीस": 30, "चालीस": 40, "पचास": 50,
        "साठ": 60, "सत्तर": 70, "अस्सी": 80, "नब्बे": 90, "सौ": 100,
    }),
    category_keywords=MappingProxyType({
        Food: (
            "खाना", "भोजन", "लंच", "डिनर", "नाश्ता", "कॉफी", "रेस्टोरेंट",
            "खाने", "पिज्जा", "बर्गर", "चाय",
        ),
        Transport: (
            "उबर", "टैक्सी", "पेट्रोल", "ईंधन", "पार्किंग", "बस", "ट्रेन",
            "मेट्रो", "स्टेशन", "कार", "वाहन", "परिवहन",
        ),
        Rent: ("किराया", "घर", "अपार्टमेंट", "मकान", "संपत्ति"),
        Shopping: (
            "खरीदारी", "दुकान", "खरीदना", "खरीदा", "किराना", "कपड़े", "जूते",
            "सामान",
        ),
        Health: (
            "डॉक्टर", "दवा", "फार्मेसी", "अस्पताल", "चिकित्सा", "दंत चिकित्सक",
            "क्लिनिक",
        ),
        Entertainment: (
            "फिल्म", "सिनेमा", "खेल", "कॉन्सर्ट", "शो", "मनोरंजन", "टिकट",
            "थिएटर", "संगीत",
        ),
        Utilities: (
            "बिजली", "पानी", "इंटरनेट", "फोन", "उपयोगिता", "बिल", "भुगतान",
            "केबल", "वाईफाई",
        ),
    }),
    currency_hints=MappingProxyType({
        "INR": ("रुपए", "रुपये", "रुपया"),
    }),
)

SPANISH = LanguageLexicon(
    code="es",
    name="Spanish",
    number_words=MappingProxyType({
        "cero": 0, "uno": 1, "una": 1, "dos": 2, "tres": 3, "cuatro": 4,
        "cinco": 5, "seis": 6, "siete": 7, "ocho": 8, "nueve": 9, "diez": 10,
        "doce": 12, "quince": 15, "veinte": 20,
        "veinticinco": 25, "treinta": 30, "cuarenta": 40, "cincuenta": 50,
        "sesenta": 60, "setenta": 70, "ochenta": 80, "noventa": 90,
        "cien": 100, "ciento": 100,
    }),
    category_keywords=MappingProxyType({
        Food: (
            "almuerzo", "cena", "desayuno", "café", "restaurante", "comida",
            "comer", "pizza", "hamburguesa", "bebida",
        ),
        Transport: (
            "taxi", "gasolina", "combustible", "estacionamiento", "autobús",
            "tren", "metro", "estación", "coche", "vehículo", "transporte",
        ),
        Rent: ("alquiler", "hipoteca", "vivienda", "apartamento", "propiedad"),
        Shopping: (
            "compras", "tienda", "comprar", "compré", "supermercado", "ropa",
            "zapatos", "mercancía",
        ),
        Health: (
            "doctor", "medicina", "farmacia", "hospital", "médico", "receta",
            "dentista", "clínica",
        ),
        Entertainment: (
            "película", "cine", "juego", "concierto", "espectáculo",
            "entretenimiento", "entradas", "teatro", "música",
        ),
        Utilities: (
            "electricidad", "agua", "internet", "teléfono", "servicio",
            "factura", "pago", "cable", "wifi",
        ),
    }),
    currency_hints=MappingProxyType({
        "EUR": ("euro",),
        "GBP": ("libra",),
        "INR": ("rupia",),
    }),
    number_connectors=("y",),
)

FRENCH = LanguageLexicon(
    code="fr",
    name="French",
    number_words=MappingProxyType({
        "zéro": 0, "un": 1, "une": 1, "deux": 2, "trois": 3, "quatre": 4,
        "cinq": 5, "six": 6, "sept": 7, "huit": 8, "neuf": 9, "dix": 10,
        "onze": 11, "douze": 12, "treize": 13, "quatorze": 14, "quinze": 15,
        "seize": 16, "vingt": 20,
        "vingt-cinq": 25, "trente": 30, "quarante": 40, "cinquante": 50,
        "soixante": 60, "soixante-dix": 70, "quatre-vingts": 80,
        "quatre-vingt": 80, "quatre-vingt-dix": 90, "cent": 100,
    }),
    category_keywords=MappingProxyType({
        Food: (
            "déjeuner", "dîner", "petit-déjeuner", "café", "restaurant",
            "nourriture", "manger", "pizza", "hamburger", "boisson",
        ),
        Transport: (
            "taxi", "essence", "carburant", "parking", "bus", "train", "métro",
            "station", "voiture", "véhicule", "transport",
        ),
        Rent: ("loyer", "hypothèque", "logement", "appartement", "propriété"),
        Shopping: (
            "achats", "magasin", "acheter", "acheté", "épicerie", "vêtements",
            "chaussures", "marchandise",
        ),
        Health: (
            "docteur", "médecine", "pharmacie", "hôpital", "médical",
            "ordonnance", "dentiste", "clinique",
        ),
        Entertainment: (
            "film", "cinéma", "jeu", "concert", "spectacle", "divertissement",
            "billets", "théâtre", "musique",
        ),
        Utilities: (
            "électricité", "eau", "internet", "téléphone", "service",
            "facture", "paiement", "câble", "wifi",
        ),
    }),
    currency_hints=MappingProxyType({
        "EUR": ("euro",),
        "INR": ("roupie",),
    }),
    number_connectors=("et",),
)

LEXICONS: Mapping[str, LanguageLexicon] = MappingProxyType({
    lexicon.code: lexicon for lexicon in (ENGLISH, HINDI, SPANISH, FRENCH)
})

# Symbol checks run before spoken hints; order is precedence
CURRENCY_SYMBOLS: Mapping[str, str] = MappingProxyType({
    "€": "EUR",
    "£": "GBP",
    "₹": "INR",
})

CURRENCY_PRECEDENCE = ("EUR", "GBP", "INR")


def language_name(code: str | None) -> str:
    """Human-readable language name for prompts ("English" if unknown)."""
    lexicon = LEXICONS.get((code or "").lower()[:2])
    return lexicon.name if lexicon else ENGLISH.name


def merged_number_words() -> dict[str, int]:
    """Number words from every language (identical spellings agree)."""
    merged: dict[str, int] = {}
    for lexicon in LEXICONS.values():
        merged.update(lexicon.number_words)
    return merged


def merged_connectors() -> tuple[str, ...]:
    connectors: list[str] = []
    for lexicon in LEXICONS.values():
        connectors.extend(c for c in lexicon.number_connectors if c not in connectors)
    return tuple(connectors)


def merged_category_keywords() -> dict[ExpenseCategory, tuple[str, ...]]:
    """
    Keywords per category across every language, deduplicated.

    Categories keep enum declaration order; Misc has no keywords.
    """
    merged: dict[ExpenseCategory, tuple[str, ...]] = {}
    for category in ExpenseCategory:
        if category is ExpenseCategory.MISC:
            continue
        seen: dict[str, None] = {}
        for lexicon in LEXICONS.values():
            for keyword in lexicon.category_keywords.get(category, ()):
                seen.setdefault(keyword.lower(), None)
        merged[category] = tuple(seen)
    return merged


def merged_currency_hints() -> dict[str, tuple[str, ...]]:
    """Spoken currency hints across every language, in precedence order."""
    merged: dict[str, tuple[str, ...]] = {}
    for code in CURRENCY_PRECEDENCE:
        hints: dict[str, None] = {}
        for lexicon in LEXICONS.values():
            for hint in lexicon.currency_hints.get(code, ()):
                hints.setdefault(hint.lower(), None)
        merged[code] = tuple(hints)
    return merged
