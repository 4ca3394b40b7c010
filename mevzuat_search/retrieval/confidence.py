from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from mevzuat_search.core.legal import (
    CONFIDENCE_DOMAIN_KEYWORDS,
    DOMAIN_MODIFIERS,
    GENERAL_DOMAIN,
    GENERIC_LEGAL_WORDS,
    LEGAL_TERM_MARKERS,
    DomainModifier,
)
from mevzuat_search.core.text import turkish_lower
from mevzuat_search.core.utils import clamp

from .schema import (
    NEUTRAL_SCORE,
    ConfidenceContext,
    ConfidenceFactors,
    ConfidenceResult,
    confidence_level_for,
)

FACTOR_WEIGHTS: dict[str, float] = {
    "domain_match_confidence": 0.25,
    "term_coverage_confidence": 0.20,
    "semantic_similarity_confidence": 0.20,
    "query_complexity_confidence": 0.15,
    "result_relevance_confidence": 0.15,
    "historical_accuracy_confidence": 0.05,
}

FACTOR_DISPLAY_NAMES: dict[str, str] = {
    "domain_match_confidence": "Alan eşleşmesi",
    "term_coverage_confidence": "Terim kapsamı",
    "semantic_similarity_confidence": "Anlamsal benzerlik",
    "query_complexity_confidence": "Sorgu karmaşıklığı",
    "result_relevance_confidence": "Sonuç relevansı",
    "historical_accuracy_confidence": "Geçmiş doğruluk",
}

QUESTION_WORD_RE = re.compile(r"nasıl|nedir|ne|hangi|kim|nerede|ne zaman")
RECENT_CUTOFF = date(2020, 1, 1)
SHORT_QUERY_CHARS = 10
BASE_THRESHOLD = 0.6

SHORT_QUERY = "Çok kısa sorgu"


def _modifier(domain: str) -> DomainModifier:
    return DOMAIN_MODIFIERS.get(domain, DOMAIN_MODIFIERS[GENERAL_DOMAIN])


def domain_match_confidence(context: ConfidenceContext) -> float:
    words = turkish_lower(context.user_query).split()
    keywords = CONFIDENCE_DOMAIN_KEYWORDS.get(context.detected_domain, ())
    matched = [w for w in words if any(k in w or w in k for k in keywords)]

    confidence = _modifier(context.detected_domain).base
    confidence += len(matched) / max(len(words), 1) * 0.2
    if not matched and any(w in GENERIC_LEGAL_WORDS for w in words):
        confidence -= 0.3
    return clamp(confidence)


def term_coverage_confidence(context: ConfidenceContext) -> float:
    words = [w for w in turkish_lower(context.user_query).split() if len(w) > 2]
    coverage = 0.7
    if any(marker in w or w in marker for w in words for marker in LEGAL_TERM_MARKERS):
        coverage += 0.2
    if len(words) < 2:
        coverage -= 0.3
    elif len(words) > 10:
        coverage -= 0.1
    return clamp(coverage)


def semantic_similarity_confidence(context: ConfidenceContext) -> float:
    results = context.search_results
    if not results:
        return 0.1
    confidence = 0.5
    if len(results) >= 3:
        confidence += 0.2
    if any(r.relevance_score > 0.7 for r in results):
        confidence += 0.3
    return clamp(confidence)


def query_complexity_confidence(context: ConfidenceContext) -> float:
    confidence = 1 - context.query_complexity / 10
    if QUESTION_WORD_RE.search(turkish_lower(context.user_query)):
        confidence += 0.1
    if len(context.user_query.split()) > 5:
        confidence -= 0.2
    return clamp(confidence)


def result_relevance_confidence(context: ConfidenceContext) -> float:
    results = context.search_results
    if not results:
        return 0.0
    confidence = 0.3
    if len(results) >= 3:
        confidence += 0.2
    if len(results) >= 5:
        confidence += 0.1
    if any(r.content and len(r.content) > 100 for r in results):
        confidence += 0.2
    if any(r.publication_date and r.publication_date > RECENT_CUTOFF for r in results):
        confidence += 0.1
    if len(results) > 20:
        confidence -= 0.2
    return clamp(confidence)


def historical_accuracy_confidence(context: ConfidenceContext) -> float:
    history = context.historical_data
    if history is None:
        return NEUTRAL_SCORE
    confidence = history.average_accuracy or NEUTRAL_SCORE
    if history.similar_queries > 10:
        confidence += 0.1
    if history.similar_queries > 50:
        confidence += 0.1
    if history.user_feedback > 0.8:
        confidence += 0.2
    elif history.user_feedback < 0.4:
        confidence -= 0.2
    return clamp(confidence)


def uncertainty_indicators(factors: ConfidenceFactors, context: ConfidenceContext) -> list[str]:
    indicators: list[str] = []
    if factors.domain_match_confidence < 0.6:
        indicators.append("Belirsiz hukuk alanı")
    if factors.term_coverage_confidence < 0.5:
        indicators.append("Eksik terim kapsamı")
    if factors.semantic_similarity_confidence < 0.4:
        indicators.append("Düşük anlamsal benzerlik")
    if factors.query_complexity_confidence < 0.5:
        indicators.append("Karmaşık sorgu yapısı")
    if factors.result_relevance_confidence < 0.3:
        indicators.append("Yetersiz arama sonuçları")
    if not context.search_results:
        indicators.append("Sonuç bulunamadı")
    if len(context.user_query) < SHORT_QUERY_CHARS:
        indicators.append(SHORT_QUERY)
    return indicators


def recommended_actions(overall: float, factors: ConfidenceFactors, indicators: list[str]) -> list[str]:
    actions: list[str] = []
    if overall < 0.4:
        actions.extend(["Soruyu daha spesifik hale getirin", "Hukuk alanını belirtin"])
    if factors.domain_match_confidence < 0.6:
        actions.append("Hangi hukuk dalıyla ilgili olduğunu belirtin")
    if factors.term_coverage_confidence < 0.5:
        actions.append("Daha fazla anahtar kelime ekleyin")
    if factors.result_relevance_confidence < 0.3:
        actions.extend(["Farklı terimler deneyiniz", "Daha genel bir sorgu deneyin"])
    if SHORT_QUERY in indicators:
        actions.append("Sorunuzu detaylandırın")
    if overall > 0.8:
        actions.append("Sonuçlar güvenilir görünüyor")
    return actions


def dynamic_threshold(context: ConfidenceContext) -> float:
    threshold = BASE_THRESHOLD
    modifier = DOMAIN_MODIFIERS.get(context.detected_domain)
    if modifier is not None:
        threshold *= modifier.base
    if context.query_complexity > 7:
        threshold -= 0.1
    if len(context.search_results) < 3:
        threshold -= 0.15
    return clamp(threshold, 0.3, 0.9)


@dataclass
class ConfidenceScorer:
    weights: dict[str, float] | None = None

    def factors(self, context: ConfidenceContext) -> ConfidenceFactors:
        return ConfidenceFactors(
            domain_match_confidence=domain_match_confidence(context),
            term_coverage_confidence=term_coverage_confidence(context),
            semantic_similarity_confidence=semantic_similarity_confidence(context),
            query_complexity_confidence=query_complexity_confidence(context),
            result_relevance_confidence=result_relevance_confidence(context),
            historical_accuracy_confidence=historical_accuracy_confidence(context),
        )

    def weighted(self, factors: ConfidenceFactors, domain: str) -> float:
        values = factors.model_dump()
        weighted_sum = 0.0
        total_weight = 0.0
        for name, weight in (self.weights or FACTOR_WEIGHTS).items():
            value = values.get(name)
            if value is not None and value >= 0:
                weighted_sum += value * weight
                total_weight += weight
        base = weighted_sum / total_weight if total_weight else NEUTRAL_SCORE
        return clamp(base * _modifier(domain).complexity)

    def calculate(self, context: ConfidenceContext) -> ConfidenceResult:
        factors = self.factors(context)
        overall = self.weighted(factors, context.detected_domain)
        indicators = uncertainty_indicators(factors, context)

        values = factors.model_dump()
        strongest = max(values, key=values.get)
        reasoning = (
            f"Güven skoru: {round(overall * 100)}% ({confidence_level_for(overall)}). "
            f"En güçlü faktör: {FACTOR_DISPLAY_NAMES[strongest]} ({round(values[strongest] * 100)}%). "
            f"Tespit edilen alan: {context.detected_domain}. "
            f"{len(context.search_results)} sonuç bulundu."
        )
        return ConfidenceResult(
            overall_confidence=overall,
            factors=factors,
            uncertainty_indicators=indicators,
            recommended_actions=recommended_actions(overall, factors, indicators),
            threshold=dynamic_threshold(context),
            reasoning=reasoning,
        )


def calculate_confidence(context: ConfidenceContext) -> ConfidenceResult:
    return ConfidenceScorer().calculate(context)
