from __future__ import annotations

import re

from mevzuat_search.core.text import ALPHA_RUN_RE, STOP_WORDS, extract_meaningful_terms, turkish_lower
from mevzuat_search.core.utils import unique

LEGAL_PHRASE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(\w+)\s+(hukuku|kanunu|yönetmeliği)"),
    re.compile(r"(\w+)\s+(tazminatı|cezası|vergisi)"),
    re.compile(r"(işten\s+çıkarma|kıdem\s+tazminatı|boşanma\s+davası)"),
    re.compile(r"(\w+)\s+(davası|sözleşmesi|başvurusu)"),
)

PRIMARY_STOP_WORDS = frozenset(
    {"için", "ile", "ve", "bir", "bu", "şu", "olan", "olur", "nasıl", "nedir", "ne", "hangi"}
)

MAX_IMPORTANT_WORDS = 5
MAX_SEARCH_TERMS = 4


def extract_keywords(message: str) -> list[str]:
    """Legal phrases first, then up to five content words not already covered."""
    lowered = turkish_lower(message)
    keywords: list[str] = []
    for pattern in LEGAL_PHRASE_PATTERNS:
        keywords.extend(match.group(0) for match in pattern.finditer(lowered))

    important = [
        word
        for word in ALPHA_RUN_RE.findall(lowered)
        if len(word) > 3 and word not in STOP_WORDS and not any(word in k for k in keywords)
    ]
    keywords.extend(important[:MAX_IMPORTANT_WORDS])
    return unique(keywords)


def generate_search_terms(message: str, keywords: list[str]) -> list[str]:
    lowered = turkish_lower(message)
    terms: list[str] = []

    primary = " ".join(token for token in lowered.split() if token not in PRIMARY_STOP_WORDS).strip()
    if len(primary) > 3:
        terms.append(primary)

    words = extract_meaningful_terms(message)
    for size in (2, 3):
        for i in range(len(words) - size + 1):
            terms.append(" ".join(words[i : i + size]))

    for keyword in keywords:
        if len(keyword) > 2 and not any(keyword in term for term in terms):
            terms.append(keyword)

    ranked = sorted(unique(terms), key=len, reverse=True)
    return ranked[:MAX_SEARCH_TERMS]
