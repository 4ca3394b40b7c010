from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence

import structlog

from mevzuat_search.core.embed import Embedder, EmbeddingError, cosine_similarity
from mevzuat_search.core.legal import (
    DOMAIN_CONTEXT_RULES,
    GENERAL_DOMAIN,
    LEGAL_DOMAINS,
    ContextRule,
    LegalDomain,
)
from mevzuat_search.core.text import extract_meaningful_terms, normalize, turkish_lower
from mevzuat_search.core.utils import clamp

from .keywords import extract_keywords, generate_search_terms
from .llm import LLMClient, classify_with_llm
from .schema import DomainScore, IntentAnalysis, LegalIntentResult

logger = structlog.get_logger()

NEGATIVE_WEIGHT = 1.0
PHRASE_WEIGHT = 2.5
COMPLETE_PHRASE_BONUS = 1.0
PHRASE_MATCH_RATIO = 0.7
EXACT_WEIGHT = 2.0
TERM_OVERLAP_WEIGHT = 0.8
DESCRIPTION_WEIGHT = 0.2
DIVERSITY_MIN_MATCHES = 2
DIVERSITY_BONUS = 1.2

FALLBACK_CONFIDENCE = 0.3
KEYWORD_AUTHORITY_THRESHOLD = 0.4
BLEND_MIN_CONFIDENCE = 0.3
KEYWORD_WEIGHT = 0.7
EMBEDDING_WEIGHT = 0.3
AGREEMENT_BOOST = 1.2
AGREEMENT_CAP = 0.95
LLM_VALIDATION_THRESHOLD = 0.7
LEGAL_RESEARCH_THRESHOLD = 0.5

# raw cosine similarity -> confidence; multilingual models report high baselines
SIMILARITY_BUCKETS: tuple[tuple[float, float], ...] = ((0.8, 0.95), (0.6, 0.85), (0.4, 0.7))
SIMILARITY_FLOOR = 0.4

CLASSIFICATION_FAILED_REASON = (
    "Otomatik sınıflandırma başarısız, genel hukuk kategorisine yönlendirildi"
)


def remap_similarity(similarity: float) -> float:
    for bound, confidence in SIMILARITY_BUCKETS:
        if similarity > bound:
            return confidence
    return SIMILARITY_FLOOR


def score_domain(
    domain: LegalDomain,
    query: str,
    terms: Sequence[str],
    rules: Sequence[ContextRule] = DOMAIN_CONTEXT_RULES,
) -> DomainScore:
    """Score one domain against an already normalized query."""
    score = 0.0
    matches: list[str] = []

    for negative in domain.negative_terms:
        if negative in query:
            score -= NEGATIVE_WEIGHT
            matches.append(f"NEGATIVE:{negative}")

    for example in domain.positive_examples:
        phrase = turkish_lower(example)
        if " " in phrase:
            words = phrase.split()
            found = [word for word in words if len(word) > 2 and word in query]
            if len(found) >= len(words) * PHRASE_MATCH_RATIO:
                score += PHRASE_WEIGHT
                matches.append(f"PHRASE:{phrase}")
                if len(found) == len(words):
                    score += COMPLETE_PHRASE_BONUS
                    matches.append(f"COMPLETE_PHRASE:{phrase}")
        elif phrase in query:
            score += EXACT_WEIGHT
            matches.append(f"EXACT:{phrase}")

        for term in terms:
            if len(term) > 3 and (term in phrase or phrase in term):
                score += TERM_OVERLAP_WEIGHT
                matches.append(f"TERM:{term}~{phrase}")

    for rule in rules:
        if rule.domain != domain.name:
            continue
        delta = rule.score(query)
        if delta:
            score += delta
            matches.append(f"CONTEXT:{rule.label}")

    term_set = set(terms)
    for word in turkish_lower(domain.description).split():
        if len(word) > 3 and word in term_set:
            score += DESCRIPTION_WEIGHT
            matches.append(f"DESC:{word}")

    if len(matches) > DIVERSITY_MIN_MATCHES:
        score *= DIVERSITY_BONUS

    return DomainScore(
        domain=domain.name,
        confidence=clamp(score),
        raw_score=score,
        matches=matches,
        method="keyword",
    )


def disambiguation_bonus(
    domain_name: str, query: str, rules: Sequence[ContextRule] = DOMAIN_CONTEXT_RULES
) -> float:
    """Positive delta from fixed-weight context rules; per-hit keyword counters are ignored."""
    return sum(
        max(rule.score(query), 0.0) for rule in rules if rule.domain == domain_name and not rule.per_hit
    )


@dataclass
class DomainClassifier:
    embedder: Embedder | None = None
    domains: tuple[LegalDomain, ...] = field(default=LEGAL_DOMAINS)

    def keyword_scores(self, query: str) -> list[DomainScore]:
        normalized = normalize(query)
        terms = extract_meaningful_terms(normalized)
        scores = [score_domain(domain, normalized, terms) for domain in self.domains]
        # clamped confidence saturates at 1.0; a fired disambiguation rule wins the tie,
        # otherwise catalogue order holds (sorted is stable under reverse)
        return sorted(
            scores,
            key=lambda s: (s.confidence, disambiguation_bonus(s.domain, normalized)),
            reverse=True,
        )

    def classify_with_keywords(self, query: str) -> DomainScore:
        scores = self.keyword_scores(query)
        best = scores[0] if scores else None
        if best is None or best.confidence <= 0:
            return DomainScore(
                domain=GENERAL_DOMAIN,
                confidence=FALLBACK_CONFIDENCE,
                method="fallback",
            )
        return best

    def classify_with_embeddings(self, query: str) -> DomainScore:
        if self.embedder is None:
            raise EmbeddingError("embedding provider not configured")

        missing = [domain for domain in self.domains if domain.embedding is None]
        texts = [normalize(query)] + [domain.context_text() for domain in missing]
        vectors = self.embedder.embed_many(texts, task="similarity")
        query_vector = vectors[0]
        computed = dict(zip((d.name for d in missing), vectors[1:]))

        best_domain = GENERAL_DOMAIN
        best_similarity = -1.0
        for domain in self.domains:
            vector = domain.embedding if domain.embedding is not None else computed[domain.name]
            similarity = cosine_similarity(query_vector, vector)
            if similarity > best_similarity:
                best_domain, best_similarity = domain.name, similarity

        logger.debug("classifier.embedding", domain=best_domain, similarity=round(best_similarity, 4))
        return DomainScore(
            domain=best_domain,
            confidence=remap_similarity(best_similarity),
            raw_score=best_similarity,
            method="embedding",
        )

    def classify(self, query: str) -> DomainScore:
        keyword = self.classify_with_keywords(query)
        if keyword.confidence > KEYWORD_AUTHORITY_THRESHOLD or self.embedder is None:
            return keyword

        try:
            embedding = self.classify_with_embeddings(query)
        except (EmbeddingError, ValueError) as exc:
            logger.warning("classifier.embedding_failed", error=str(exc))
            return keyword

        return combine_scores(keyword, embedding)

    def with_precomputed_embeddings(self) -> DomainClassifier:
        if self.embedder is None:
            raise EmbeddingError("embedding provider not configured")
        vectors = self.embedder.embed_many(
            [domain.context_text() for domain in self.domains], task="similarity"
        )
        domains = tuple(domain.with_embedding(v) for domain, v in zip(self.domains, vectors))
        return replace(self, domains=domains)


def combine_scores(keyword: DomainScore, embedding: DomainScore) -> DomainScore:
    if keyword.confidence > BLEND_MIN_CONFIDENCE and embedding.confidence > BLEND_MIN_CONFIDENCE:
        if keyword.domain == embedding.domain:
            weighted = keyword.confidence * KEYWORD_WEIGHT + embedding.confidence * EMBEDDING_WEIGHT
            return keyword.model_copy(
                update={
                    "confidence": min(weighted * AGREEMENT_BOOST, AGREEMENT_CAP),
                    "method": "combined",
                }
            )
        winner = keyword if keyword.confidence > embedding.confidence else embedding
        return winner.model_copy(update={"method": "combined"})
    return keyword if keyword.confidence > embedding.confidence else embedding


def _combine_with_llm(semantic: DomainScore, llm: IntentAnalysis, message: str) -> IntentAnalysis:
    if semantic.domain == llm.domain:
        return llm.model_copy(
            update={"confidence": max(semantic.confidence, llm.confidence), "method": "hybrid"}
        )
    if llm.confidence > semantic.confidence:
        return llm.model_copy(update={"method": "hybrid"})
    keywords = extract_keywords(message)
    return IntentAnalysis(
        domain=semantic.domain,
        confidence=semantic.confidence,
        keywords=keywords,
        search_terms=generate_search_terms(message, keywords),
        method="hybrid",
    )


def detect_legal_intent_hybrid(
    message: str,
    classifier: DomainClassifier | None = None,
    llm_client: LLMClient | None = None,
) -> IntentAnalysis:
    classifier = classifier or DomainClassifier()
    try:
        semantic = classifier.classify(message)
        if semantic.confidence < LLM_VALIDATION_THRESHOLD:
            return _combine_with_llm(semantic, classify_with_llm(message, llm_client), message)

        keywords = extract_keywords(message)
        return IntentAnalysis(
            domain=semantic.domain,
            confidence=semantic.confidence,
            keywords=keywords,
            search_terms=generate_search_terms(message, keywords),
            method="semantic",
        )
    except Exception as exc:  # noqa: BLE001
        logger.error("classifier.hybrid_failed", error=str(exc))
        return IntentAnalysis(
            domain=GENERAL_DOMAIN,
            confidence=FALLBACK_CONFIDENCE,
            keywords=[],
            search_terms=[message] if message.strip() else [],
            method="semantic",
            reasoning=CLASSIFICATION_FAILED_REASON,
        )


def detect_legal_intent(
    message: str,
    classifier: DomainClassifier | None = None,
    llm_client: LLMClient | None = None,
) -> LegalIntentResult:
    analysis = detect_legal_intent_hybrid(message, classifier, llm_client)
    return LegalIntentResult(
        needs_legal_research=analysis.confidence > LEGAL_RESEARCH_THRESHOLD,
        main_legislation=analysis.domain.replace(" Hukuku", ""),
        search_term=analysis.search_terms[0] if analysis.search_terms else message,
        confidence=analysis.confidence,
        reasoning=analysis.reasoning
        or f"{analysis.method} yöntemiyle {analysis.domain} olarak sınıflandırıldı",
    )
