from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from typing import Sequence

import structlog

from mevzuat_search.core.legal import (
    AUTHORITY_SCORES,
    OFFICIAL_AUTHORITY_MARKERS,
    RANKING_DOMAIN_KEYWORDS,
    RELATED_DOMAINS,
    infer_document_domain,
    infer_document_type,
)
from mevzuat_search.core.text import count_articles, strip_punctuation, turkish_lower
from mevzuat_search.core.utils import clamp, today

from .intent import EXPANSION_INTENTS
from .schema import (
    NEUTRAL_SCORE,
    DocumentMetadata,
    DocumentPerformance,
    FilteredSearchResult,
    RankedDocument,
    RankingContext,
    RankingFactors,
    RankingMetrics,
    RankingResult,
    ScoreDistribution,
)

logger = structlog.get_logger()

CATEGORY_WEIGHTS: dict[str, float] = {
    "content_relevance": 0.40,
    "document_quality": 0.25,
    "user_context": 0.20,
    "historical_performance": 0.15,
}

# category -> ((factor, weight), ...)
FACTOR_WEIGHTS: dict[str, tuple[tuple[str, float], ...]] = {
    "content_relevance": (
        ("semantic_relevance", 0.5),
        ("keyword_match", 0.3),
        ("domain_specificity", 0.2),
    ),
    "document_quality": (
        ("authority_score", 0.4),
        ("freshness_score", 0.35),
        ("completeness_score", 0.25),
    ),
    "user_context": (
        ("intent_alignment", 0.5),
        ("complexity_match", 0.3),
        ("urgency_alignment", 0.2),
    ),
    "historical_performance": (
        ("user_feedback_score", 0.5),
        ("click_through_rate", 0.3),
        ("success_rate", 0.2),
    ),
}

INTENT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "definition": ("tanım", "nedir", "anlamı"),
    "procedure": ("nasıl", "işlem", "başvuru", "süreç"),
    "rights": ("hak", "yetki", "koruma"),
    "obligations": ("yükümlülük", "görev", "sorumluluk"),
    "penalty": ("ceza", "yaptırım", "para cezası"),
}

# (max age in days, score)
FRESHNESS_STEPS: tuple[tuple[int, float], ...] = ((365, 1.0), (1825, 0.8), (3650, 0.6))
STALE_SCORE = 0.4

COMPLEX_LEGAL_PHRASES = ("atıfta bulunarak", "saklı kalmak kaydıyla", "bu kanun kapsamında")
PRACTICAL_TYPES = frozenset({"guidance", "circular"})
URGENT_LEVELS = frozenset({"critical", "high"})

RELATED_DOMAIN_SCORE = 0.7
UNRELATED_DOMAIN_SCORE = 0.3
NEUTRAL_URGENCY_SCORE = 0.7


def _text(document: FilteredSearchResult) -> str:
    return turkish_lower(document.content or document.mevzuat_adi or "")


def semantic_relevance(document: FilteredSearchResult, query: str) -> float:
    content = _text(document)
    phrase = strip_punctuation(query)
    terms = phrase.split()
    matched = [term for term in terms if len(term) > 2 and term in content]
    score = len(matched) / max(len(terms), 1)
    if phrase and phrase in strip_punctuation(content):
        return min(1.0, score + 0.3)
    return score


def keyword_match(document: FilteredSearchResult, domain: str) -> float:
    keywords = RANKING_DOMAIN_KEYWORDS.get(domain, ())
    content = _text(document)
    return sum(1 for keyword in keywords if keyword in content) / max(len(keywords), 1)


def domain_specificity(document_domain: str, domain: str) -> float:
    if document_domain == domain:
        return 1.0
    if document_domain in RELATED_DOMAINS.get(domain, ()):
        return RELATED_DOMAIN_SCORE
    return UNRELATED_DOMAIN_SCORE


def authority_score(document: FilteredSearchResult, document_type: str) -> float:
    score = AUTHORITY_SCORES.get(document_type, NEUTRAL_SCORE)
    source = turkish_lower(document.authority or "")
    if any(marker in source for marker in OFFICIAL_AUTHORITY_MARKERS):
        return min(1.0, score + 0.2)
    return score


def freshness_score(published: date | None, as_of: date) -> float:
    if published is None:
        return NEUTRAL_SCORE
    age = (as_of - published).days
    for limit, score in FRESHNESS_STEPS:
        if age < limit:
            return score
    return STALE_SCORE


def completeness_score(document: FilteredSearchResult) -> float:
    content = document.content or ""
    score = 0.5
    if len(content) > 100:
        score += 0.2
    if len(content) > 500:
        score += 0.2
    if "Madde" in content or "Fıkra" in content:
        score += 0.1
    return min(1.0, score)


def intent_alignment(document: FilteredSearchResult, user_intent: str) -> float:
    intent = EXPANSION_INTENTS.get(user_intent, user_intent)
    keywords = INTENT_KEYWORDS.get(intent, ())
    content = _text(document)
    return sum(1 for keyword in keywords if keyword in content) / max(len(keywords), 1)


def document_complexity(document: FilteredSearchResult) -> float:
    content = document.content or ""
    complexity = 5.0
    if len(content) > 1000:
        complexity += 1
    if len(content) > 5000:
        complexity += 1
    articles = count_articles(content)
    if articles > 10:
        complexity += 1
    if articles > 50:
        complexity += 1
    complexity += sum(1 for phrase in COMPLEX_LEGAL_PHRASES if phrase in content)
    return min(10.0, complexity)


def urgency_alignment(urgency: str, document_type: str) -> float:
    if urgency in URGENT_LEVELS and document_type in PRACTICAL_TYPES:
        return 1.0
    return NEUTRAL_URGENCY_SCORE


def relevance_reasons(factors: RankingFactors) -> list[str]:
    reasons: list[str] = []
    if factors.semantic_relevance > 0.8:
        reasons.append("Sorguyla yüksek anlamsal benzerlik")
    if factors.keyword_match > 0.7:
        reasons.append("Alan-spesifik anahtar kelimeleri içeriyor")
    if factors.domain_specificity > 0.9:
        reasons.append("Tespit edilen hukuk alanına tam uygun")
    if factors.authority_score > 0.8:
        reasons.append("Yüksek otoriteli kaynak")
    if factors.freshness_score > 0.8:
        reasons.append("Güncel mevzuat")
    return reasons


def final_score(factors: RankingFactors) -> float:
    values = factors.model_dump()
    total = 0.0
    for category, weight in CATEGORY_WEIGHTS.items():
        total += weight * sum(values[name] * w for name, w in FACTOR_WEIGHTS[category])
    return clamp(total)


def ranking_metrics(ranked: Sequence[RankedDocument]) -> RankingMetrics:
    if not ranked:
        return RankingMetrics()
    scores = [doc.final_score for doc in ranked]
    average = sum(scores) / len(scores)
    distribution = ScoreDistribution(
        excellent=sum(1 for s in scores if s >= 0.8),
        good=sum(1 for s in scores if 0.6 <= s < 0.8),
        fair=sum(1 for s in scores if 0.4 <= s < 0.6),
        poor=sum(1 for s in scores if 0.2 <= s < 0.4),
        very_poor=sum(1 for s in scores if s < 0.2),
    )
    return RankingMetrics(
        total_documents=len(ranked),
        average_score=average,
        score_distribution=distribution,
        diversity_score=len({doc.document_type for doc in ranked}) / len(AUTHORITY_SCORES),
        coverage_score=min(1.0, average * 1.2),
    )


def ranking_explanation(ranked: Sequence[RankedDocument], metrics: RankingMetrics, domain: str) -> str:
    if not ranked:
        return (
            f'"{domain}" alanında sıralama yapılacak sonuç bulunamadı. '
            "Anlamsal filtre tüm sonuçları eledi."
        )
    return (
        f'{len(ranked)} sonuç "{domain}" alanında sıralandı. '
        f"En yüksek skor: {round(ranked[0].final_score * 100)}%. "
        f"Ortalama skor: {round(metrics.average_score * 100)}%. "
        "Sıralama faktörleri: içerik relevansı (%40), doküman kalitesi (%25), "
        "kullanıcı bağlamı (%20), geçmiş performans (%15)."
    )


def ranking_confidence(ranked: Sequence[RankedDocument], metrics: RankingMetrics) -> float:
    confidence = 0.5
    if ranked and ranked[0].final_score > 0.8:
        confidence += 0.2
    if metrics.average_score > 0.6:
        confidence += 0.2
    confidence += metrics.diversity_score * 0.1
    return min(1.0, confidence)


@dataclass
class ResultRanker:
    def _performance(self, document_id: str, context: RankingContext) -> DocumentPerformance | None:
        if context.historical_data is None:
            return None
        return context.historical_data.document_performance.get(document_id)

    def factors(self, document: FilteredSearchResult, context: RankingContext) -> RankedDocument:
        title = document.mevzuat_adi or ""
        service_type = document.mevzuat_tur.name if document.mevzuat_tur else None
        document_type = infer_document_type(title, service_type)
        document_domain = infer_document_domain(document.content or title)
        performance = self._performance(document.mevzuat_id, context)
        as_of = context.as_of or today()

        factors = RankingFactors(
            semantic_relevance=semantic_relevance(document, context.user_query),
            keyword_match=keyword_match(document, context.detected_domain),
            domain_specificity=domain_specificity(document_domain, context.detected_domain),
            authority_score=authority_score(document, document_type),
            freshness_score=freshness_score(document.publication_date, as_of),
            completeness_score=completeness_score(document),
            intent_alignment=intent_alignment(document, context.user_intent),
            complexity_match=max(0.0, 1 - abs(document_complexity(document) - context.query_complexity) / 10),
            urgency_alignment=urgency_alignment(context.urgency_level, document_type),
            user_feedback_score=min(1.0, performance.average_rating / 5) if performance else NEUTRAL_SCORE,
            click_through_rate=min(1.0, performance.click_through_rate) if performance else NEUTRAL_SCORE,
            success_rate=min(1.0, performance.completion_rate) if performance else NEUTRAL_SCORE,
        )
        published = document.publication_date
        return RankedDocument(
            id=document.mevzuat_id,
            title=title,
            content=document.content or "",
            original_score=document.relevance_score,
            final_score=final_score(factors),
            ranking_factors=factors,
            relevance_reasons=relevance_reasons(factors),
            document_type=document_type,
            metadata=DocumentMetadata(
                publication_date=published,
                last_modified=published,
                authority=document.authority or "Bilinmiyor",
                official_number=document.mevzuat_no,
                legal_domain=document_domain,
                document_length=len(document.content or ""),
            ),
            source=document,
        )

    def rank(self, documents: Sequence[FilteredSearchResult], context: RankingContext) -> RankingResult:
        started = time.perf_counter()
        scored = [self.factors(document, context) for document in documents]
        # stable: equal scores keep their input order
        scored.sort(key=lambda doc: doc.final_score, reverse=True)
        ranked = [doc.model_copy(update={"rank": index}) for index, doc in enumerate(scored, start=1)]

        metrics = ranking_metrics(ranked)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "ranking.done",
            domain=context.detected_domain,
            documents=len(ranked),
            average=round(metrics.average_score, 3),
        )
        return RankingResult(
            ranked_results=ranked,
            ranking_metrics=metrics,
            ranking_explanation=ranking_explanation(ranked, metrics, context.detected_domain),
            confidence_score=ranking_confidence(ranked, metrics),
            processing_time=elapsed_ms,
        )


def rank_results(documents: Sequence[FilteredSearchResult], context: RankingContext) -> RankingResult:
    return ResultRanker().rank(documents, context)
