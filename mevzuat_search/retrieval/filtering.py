from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable

import structlog

from mevzuat_search.core.legal import DEFAULT_DOMAIN_BOOST, DEFAULT_PENALTY_TERMS, FILTER_DOMAIN_KEYWORDS
from mevzuat_search.core.schema import MevzuatDocument
from mevzuat_search.core.text import strip_punctuation, turkish_lower
from mevzuat_search.core.utils import clamp, unique

from .schema import FilteredSearchResult, FilteringStats, SemanticFilterConfig

logger = structlog.get_logger()

DIRECT_MATCH_WEIGHT = 0.3
DOMAIN_KEYWORD_WEIGHT = 0.25
LEGAL_PATTERN_WEIGHT = 0.1
PENALTY_WEIGHT = 0.4
LONG_TITLE_CHARS = 120
LONG_TITLE_PENALTY = 0.1
MULTI_MATCH_BONUS = 0.2

LEGAL_TITLE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (name, re.compile(name)) for name in ("kanun", "yönetmelik", "tebliğ", "karar", "genelge")
)


def default_config(**overrides: Any) -> SemanticFilterConfig:
    values: dict[str, Any] = {
        "domain_boost": dict(DEFAULT_DOMAIN_BOOST),
        "penalty_terms": list(DEFAULT_PENALTY_TERMS),
    }
    values.update(overrides)
    return SemanticFilterConfig(**values)


def _as_document(raw: MevzuatDocument | dict[str, Any]) -> MevzuatDocument:
    if isinstance(raw, MevzuatDocument):
        return raw
    return MevzuatDocument.model_validate(raw)


@dataclass
class SemanticFilter:
    config: SemanticFilterConfig = field(default_factory=default_config)

    def score(self, document: MevzuatDocument, query: str, domain: str) -> FilteredSearchResult:
        title = turkish_lower(document.mevzuat_adi or "")
        score = 0.0
        matching: list[str] = []
        reasons: list[str] = []

        direct = 0
        for word in unique(w for w in strip_punctuation(query).split() if len(w) > 2):
            if word in title:
                direct += 1
                score += DIRECT_MATCH_WEIGHT
                matching.append(word)
                reasons.append(f"direct:{word}")

        for keyword in FILTER_DOMAIN_KEYWORDS.get(domain, ()):
            if keyword in title:
                score += DOMAIN_KEYWORD_WEIGHT
                matching.append(keyword)
                reasons.append(f"domain:{keyword}")

        for name, pattern in LEGAL_TITLE_PATTERNS:
            if pattern.search(title):
                score += LEGAL_PATTERN_WEIGHT
                reasons.append(f"legal:{name}")

        boost = self.config.domain_boost.get(domain, 1.0)
        score *= boost
        if boost > 1.0:
            reasons.append(f"boost:{boost}")

        for term in self.config.penalty_terms:
            if turkish_lower(term) in title:
                score -= PENALTY_WEIGHT
                reasons.append(f"penalty:{term}")

        if len(title) > LONG_TITLE_CHARS:
            score -= LONG_TITLE_PENALTY
            reasons.append("penalty:long_title")

        if direct > 1:
            score += MULTI_MATCH_BONUS
            reasons.append(f"bonus:multi_match({direct})")

        return FilteredSearchResult.model_validate(
            {
                **document.model_dump(),
                "relevance_score": clamp(score),
                "matching_keywords": unique(matching),
                "filter_reason": ", ".join(reasons),
            }
        )

    def filter_results(
        self,
        raw_results: Iterable[MevzuatDocument | dict[str, Any]],
        query: str,
        domain: str,
    ) -> list[FilteredSearchResult]:
        scored = [self.score(_as_document(raw), query, domain) for raw in raw_results]
        kept = [r for r in scored if r.relevance_score >= self.config.min_relevance_score]
        kept.sort(key=lambda r: r.relevance_score, reverse=True)
        results = kept[: self.config.max_results]
        logger.info(
            "filter.done",
            domain=domain,
            raw=len(scored),
            kept=len(results),
            average=round(average_relevance(results), 3),
        )
        return results


def average_relevance(results: list[FilteredSearchResult]) -> float:
    if not results:
        return 0.0
    return sum(r.relevance_score for r in results) / len(results)


def filtering_stats(original_count: int, filtered: list[FilteredSearchResult]) -> FilteringStats:
    return FilteringStats(
        original_count=original_count,
        filtered_count=len(filtered),
        average_relevance=average_relevance(filtered),
        improvement_ratio=len(filtered) / original_count if original_count else 0.0,
        top_score=filtered[0].relevance_score if filtered else 0.0,
        bottom_score=filtered[-1].relevance_score if filtered else 0.0,
    )


def filter_results(
    raw_results: Iterable[MevzuatDocument | dict[str, Any]],
    query: str,
    domain: str,
    config: SemanticFilterConfig | None = None,
) -> list[FilteredSearchResult]:
    return SemanticFilter(config or default_config()).filter_results(raw_results, query, domain)
