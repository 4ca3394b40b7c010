from __future__ import annotations

import re

from selectolax.parser import HTMLParser

STOP_WORDS: frozenset[str] = frozenset(
    {
        "bir",
        "bu",
        "şu",
        "ve",
        "ile",
        "için",
        "gibi",
        "kadar",
        "daha",
        "çok",
        "az",
        "olan",
        "olur",
        "nasıl",
        "nedir",
        "ne",
        "hangi",
        "ancak",
        "veya",
        "ama",
        "yani",
    }
)

TURKISH_LETTERS = "çğıöşüâîû"
TURKISH_CHAR_RE = re.compile(f"[{TURKISH_LETTERS}]")
ALPHA_RUN_RE = re.compile(f"[a-z{TURKISH_LETTERS}]+")
PUNCT_RE = re.compile(r"[^\w\s]")
WHITESPACE_RE = re.compile(r"\s+")
ARTICLE_RE = re.compile(r"madde\s+\d+", re.IGNORECASE)
HTML_TAG_RE = re.compile(r"<[a-zA-Z][^>]*>")


def turkish_lower(text: str) -> str:
    return text.replace("İ", "i").replace("I", "ı").lower()


def normalize(text: str) -> str:
    return WHITESPACE_RE.sub(" ", turkish_lower(text)).strip()


def normalize_for_embedding(text: str) -> str:
    # no transliteration: the multilingual models expect native Turkish
    return normalize(text)


def strip_punctuation(text: str) -> str:
    return WHITESPACE_RE.sub(" ", PUNCT_RE.sub(" ", normalize(text))).strip()


def has_turkish_letter(text: str) -> bool:
    return bool(TURKISH_CHAR_RE.search(text))


def extract_meaningful_terms(text: str) -> list[str]:
    return [
        token
        for token in ALPHA_RUN_RE.findall(turkish_lower(text))
        if len(token) > 2 and token not in STOP_WORDS
    ]


def count_articles(text: str) -> int:
    return len(ARTICLE_RE.findall(text))


def looks_like_html(text: str) -> bool:
    return bool(HTML_TAG_RE.search(text))


def clean_html(html: str) -> str:
    tree = HTMLParser(html)
    for node in tree.css("script,style,noscript"):
        node.decompose()
    text = tree.text(separator="\n")
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())
