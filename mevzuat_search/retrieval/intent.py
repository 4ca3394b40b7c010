from __future__ import annotations

import re
import time
from dataclasses import dataclass, field

import structlog

from mevzuat_search.core.embed import Embedder
from mevzuat_search.core.legal import GENERAL_DOMAIN
from mevzuat_search.core.text import turkish_lower
from mevzuat_search.core.utils import clamp

from .confidence import ConfidenceScorer
from .domain import DomainClassifier
from .expansion import QueryExpander
from .keywords import extract_keywords
from .schema import (
    NEUTRAL_SCORE,
    ConfidenceContext,
    ConfidenceFactors,
    ConfidenceResult,
    EnhancedIntentResult,
    ExpansionContext,
    ExpansionIntent,
    LegalIntent,
    ProcessingRecommendation,
    QueryExpansionResult,
    QueryType,
    SearchStrategy,
    UrgencyLevel,
    UserGoal,
)

logger = structlog.get_logger()

FALLBACK_CONFIDENCE = 0.3

INTENT_PATTERNS: dict[LegalIntent, tuple[re.Pattern[str], ...]] = {
    "definition_request": (
        re.compile(r"(.+)\s+(nedir|ne demek|tanımı|anlamı)", re.I),
        re.compile(r"(nedir|ne demek)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(nasıl tanımlanır)", re.I),
    ),
    "procedure_inquiry": (
        re.compile(r"(nasıl|ne şekilde)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(nasıl yapılır|nasıl olur|prosedürü)", re.I),
        re.compile(r"(hangi adımlar|işlem süreci|başvuru)", re.I),
    ),
    "rights_question": (
        re.compile(r"(hak|haklar|haklarım)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(hakkım|haklarım|yetkilerim)", re.I),
        re.compile(r"(ne gibi haklar|hangi haklar|alabilir miyim|hakkım var mı)", re.I),
    ),
    "obligation_inquiry": (
        re.compile(r"(yükümlülük|görev|sorumluluk)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(yükümlülüğü|görevi|sorumluluğu)", re.I),
        re.compile(r"(ne yapmak zorunda|hangi yükümlülükler)", re.I),
    ),
    "penalty_question": (
        re.compile(r"(ceza|cezası|yaptırım)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(cezası nedir|yaptırımı|para cezası)", re.I),
        re.compile(r"(hangi ceza|ne kadar ceza)", re.I),
    ),
    "document_request": (
        re.compile(r"(belge|evrak|doküman)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(için hangi belge|belgeler gerekli)", re.I),
        re.compile(r"(hangi evraklar|gerekli belgeler)", re.I),
    ),
    "timeline_question": (
        re.compile(r"(ne kadar sürer|süre|zaman)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(ne kadar sürer|süresi|zamanı)", re.I),
        re.compile(r"(kaç gün|kaç ay|ne zaman)", re.I),
    ),
    "cost_inquiry": (
        re.compile(r"(maliyet|ücret|harç|masraf)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(maliyeti|ücreti|harcı|masrafı)", re.I),
        re.compile(r"(ne kadar tutar|kaça mal olur)", re.I),
    ),
    "legal_advice": (
        re.compile(r"(ne yapmalı|ne yapabilirim|tavsiye)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(durumunda ne yapmalı|önerisi)", re.I),
        re.compile(r"(nasıl hareket etmeli|hangi yolu izlemeli)", re.I),
    ),
    "case_analysis": (
        re.compile(r"(durumum|halim|vaziyetim)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(açısından durumum|konusunda halim)", re.I),
        re.compile(r"(bu durumda|böyle bir durumda)", re.I),
    ),
    "precedent_search": (
        re.compile(r"(emsal|benzer karar|içtihat)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(hakkında emsal|benzer kararlar)", re.I),
        re.compile(r"(mahkeme kararları|yargı kararları)", re.I),
    ),
    "legislation_lookup": (
        re.compile(r"(hangi kanun|kanun|mevzuat)\s+(.+)", re.I),
        re.compile(r"(.+)\s+(hangi kanunda|kanunu|mevzuatı)", re.I),
        re.compile(r"(yasal düzenleme|hukuki düzenleme)", re.I),
    ),
}

QUERY_TYPE_PATTERNS: dict[QueryType, tuple[re.Pattern[str], ...]] = {
    "simple_factual": (
        re.compile(r"(nedir|ne demek|tanımı|anlamı)", re.I),
        re.compile(r"(kaç|ne kadar|hangi)", re.I),
    ),
    "complex_analytical": (
        re.compile(r"(karşılaştır|analiz|değerlendir|incele)", re.I),
        re.compile(r"(avantaj|dezavantaj|fark|benzerlik)", re.I),
    ),
    "procedural": (
        re.compile(r"(nasıl|ne şekilde|adım|prosedür|işlem)", re.I),
        re.compile(r"(başvuru|süreç|yöntem)", re.I),
    ),
    "comparative": (
        re.compile(r"(fark|karşılaştır|hangisi|seçenek)", re.I),
        re.compile(r"(arasında|ile|veya)", re.I),
    ),
    "hypothetical": (
        re.compile(r"(eğer|varsayalım|diyelim|olursa)", re.I),
        re.compile(r"(durumunda|halinde|takdirde)", re.I),
    ),
    "urgent_practical": (
        re.compile(r"(acil|hemen|ivedi|derhal)", re.I),
        re.compile(r"(ne yapmalı|nasıl hareket|acilen)", re.I),
    ),
}

# checked in order, first hit wins
URGENCY_INDICATORS: tuple[tuple[UrgencyLevel, tuple[str, ...]], ...] = (
    ("critical", ("acil", "hemen", "derhal", "ivedi", "kritik")),
    ("high", ("bugün", "yarın", "çabuk", "süratle")),
    ("medium", ("bu hafta", "yakında", "en kısa zamanda")),
    ("low", ("zamanında", "uygun zamanda", "müsait olduğumda")),
    ("research", ("araştırma", "inceleme", "öğrenmek", "merak")),
)

GOAL_KEYWORDS: tuple[tuple[UserGoal, tuple[str, ...]], ...] = (
    ("learn_understand", ("nedir", "anlamı", "öğrenmek", "bilmek")),
    ("solve_problem", ("problem", "sorun", "ne yapmalı", "çözüm")),
    ("prepare_action", ("hazırlık", "başvuru", "işlem", "adım")),
    ("verify_compliance", ("uygun", "doğru", "geçerli", "yasal")),
    ("assess_risk", ("risk", "tehlike", "sorumluluk", "ceza")),
    ("find_precedent", ("emsal", "benzer", "örnek", "karar")),
)

GOAL_BY_QUERY_TYPE: dict[QueryType, UserGoal] = {
    "procedural": "prepare_action",
    "complex_analytical": "assess_risk",
    "urgent_practical": "solve_problem",
}

STRATEGY_BY_INTENT: dict[LegalIntent, tuple[SearchStrategy, tuple[SearchStrategy, ...]]] = {
    "definition_request": ("precise_match", ("semantic_broad",)),
    "procedure_inquiry": ("hierarchical_drill", ("contextual_expansion",)),
}
COMPARATIVE_STRATEGY: tuple[SearchStrategy, tuple[SearchStrategy, ...]] = (
    "comparative_analysis",
    ("semantic_broad",),
)
DEFAULT_STRATEGY: tuple[SearchStrategy, tuple[SearchStrategy, ...]] = (
    "semantic_broad",
    ("precise_match", "contextual_expansion"),
)

EXPANSION_INTENTS: dict[LegalIntent, ExpansionIntent] = {
    "definition_request": "definition",
    "procedure_inquiry": "procedure",
    "rights_question": "rights",
    "obligation_inquiry": "obligations",
    "penalty_question": "penalty",
    "document_request": "procedure",
    "timeline_question": "procedure",
    "cost_inquiry": "general",
    "legal_advice": "general",
    "case_analysis": "general",
    "precedent_search": "general",
    "legislation_lookup": "general",
}

CONCEPT_CONNECTORS = ("ve", "veya", "aynı zamanda", "ayrıca")
QUESTION_WORD_RE = re.compile(r"(nasıl|neden|ne zaman|nerede|kim)", re.I)
ANALYSIS_TERMS = ("karşılaştır", "analiz", "değerlendir", "emsal")
COMPLEX_QUERY_THRESHOLD = 7


def score_intents(query: str) -> tuple[LegalIntent, list[LegalIntent], float]:
    scores = [
        (intent, sum(1 for pattern in patterns if pattern.search(query)))
        for intent, patterns in INTENT_PATTERNS.items()
    ]
    ranked = [item for item in sorted(scores, key=lambda item: item[1], reverse=True) if item[1] > 0]
    if not ranked:
        return "definition_request", [], FALLBACK_CONFIDENCE
    return ranked[0][0], [intent for intent, _ in ranked[1:3]], min(1.0, ranked[0][1] / 3)


def detect_query_type(query: str) -> QueryType:
    best: QueryType = "simple_factual"
    best_score = 0
    for query_type, patterns in QUERY_TYPE_PATTERNS.items():
        score = sum(1 for pattern in patterns if pattern.search(query))
        if score > best_score:
            best, best_score = query_type, score
    return best


def infer_user_goal(query: str, query_type: QueryType) -> UserGoal:
    lowered = turkish_lower(query)
    for goal, keywords in GOAL_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return goal
    return GOAL_BY_QUERY_TYPE.get(query_type, "learn_understand")


def detect_urgency(query: str) -> UrgencyLevel:
    lowered = turkish_lower(query)
    for level, indicators in URGENCY_INDICATORS:
        if any(indicator in lowered for indicator in indicators):
            return level
    return "medium"


def complexity_score(query: str) -> float:
    lowered = turkish_lower(query)
    score = 3 * min(1.0, len(query) / 50) + 2 * min(1.0, len(query.split()) / 10)
    if any(connector in lowered for connector in CONCEPT_CONNECTORS):
        score += 2
    if len(QUESTION_WORD_RE.findall(query)) > 1:
        score += 1
    if any(term in lowered for term in ANALYSIS_TERMS):
        score += 2
    return clamp(score, 0.0, 10.0)


def choose_strategy(
    intent: LegalIntent, query_type: QueryType, complexity: float
) -> tuple[SearchStrategy, list[SearchStrategy]]:
    if intent in STRATEGY_BY_INTENT:
        strategy, fallbacks = STRATEGY_BY_INTENT[intent]
    elif query_type == "comparative":
        strategy, fallbacks = COMPARATIVE_STRATEGY
    else:
        strategy, fallbacks = DEFAULT_STRATEGY
    if complexity > COMPLEX_QUERY_THRESHOLD:
        strategy = "contextual_expansion"
    return strategy, list(fallbacks)


def map_to_expansion_intent(intent: LegalIntent) -> ExpansionIntent:
    return EXPANSION_INTENTS.get(intent, "general")


def processing_recommendations(overall_confidence: float, complexity: float) -> list[ProcessingRecommendation]:
    recommendations: list[ProcessingRecommendation] = []
    if overall_confidence < 0.6:
        recommendations.append(
            ProcessingRecommendation(
                type="search_strategy",
                priority=1,
                action="Daha geniş arama stratejisi kullan",
                reasoning="Düşük güven skoru nedeniyle",
            )
        )
    if complexity > COMPLEX_QUERY_THRESHOLD:
        recommendations.append(
            ProcessingRecommendation(
                type="user_guidance",
                priority=2,
                action="Kullanıcıya sorguyu basitleştirmesini öner",
                reasoning="Yüksek karmaşıklık skoru",
            )
        )
    return recommendations


def user_guidance(overall_confidence: float, urgency: UrgencyLevel) -> list[str]:
    guidance: list[str] = []
    if overall_confidence < 0.5:
        guidance.append("Sorunuzu daha spesifik hale getirmeyi deneyin")
    if urgency == "critical":
        guidance.append("Acil durumlar için hukuki danışman ile iletişime geçin")
    return guidance


@dataclass
class EnhancedIntentClassifier:
    domain_classifier: DomainClassifier = field(default_factory=DomainClassifier)
    expander: QueryExpander = field(default_factory=QueryExpander)
    scorer: ConfidenceScorer = field(default_factory=ConfidenceScorer)

    def classify(self, query: str) -> EnhancedIntentResult:
        started = time.perf_counter()
        try:
            return self._classify(query, started)
        except Exception as exc:  # noqa: BLE001
            logger.error("intent.classify_failed", error=str(exc))
            return self.fallback(query, started)

    def _classify(self, query: str, started: float) -> EnhancedIntentResult:
        domain = self.domain_classifier.classify(query)
        primary, secondary, intent_confidence = score_intents(query)
        query_type = detect_query_type(query)
        urgency = detect_urgency(query)
        complexity = complexity_score(query)
        strategy, fallbacks = choose_strategy(primary, query_type, complexity)
        keywords = extract_keywords(query)

        expansion = self.expander.expand(
            query,
            ExpansionContext(
                legal_domain=domain.domain,
                detected_keywords=keywords,
                user_intent=map_to_expansion_intent(primary),
            ),
        )
        confidence = self.scorer.calculate(
            ConfidenceContext(
                user_query=query,
                detected_domain=domain.domain,
                query_complexity=complexity,
            )
        )
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        logger.info(
            "intent.classified",
            domain=domain.domain,
            intent=primary,
            query_type=query_type,
            method=domain.method,
        )
        return EnhancedIntentResult(
            original_query=query,
            legal_domain=domain.domain,
            domain_confidence=domain.confidence,
            primary_intent=primary,
            secondary_intents=secondary,
            intent_confidence=intent_confidence,
            query_type=query_type,
            user_goal=infer_user_goal(query, query_type),
            urgency_level=urgency,
            complexity_score=complexity,
            search_strategy=strategy,
            fallback_strategies=fallbacks,
            prioritized_terms=keywords,
            query_expansion=expansion,
            confidence_result=confidence,
            processing_recommendations=processing_recommendations(confidence.overall_confidence, complexity),
            user_guidance=user_guidance(confidence.overall_confidence, urgency),
            reasoning=(
                f"Alan: {domain.domain} ({round(domain.confidence * 100)}%). "
                f"Amaç: {primary} ({round(intent_confidence * 100)}%). "
                f"Sorgu tipi: {query_type}. "
                f"Karmaşıklık: {complexity:.1f}/10. "
                f"İşlem süresi: {elapsed_ms}ms."
            ),
            processing_time=elapsed_ms,
        )

    def fallback(self, query: str, started: float | None = None) -> EnhancedIntentResult:
        confidence = ConfidenceResult(
            overall_confidence=FALLBACK_CONFIDENCE,
            factors=ConfidenceFactors(
                domain_match_confidence=FALLBACK_CONFIDENCE,
                term_coverage_confidence=FALLBACK_CONFIDENCE,
                semantic_similarity_confidence=FALLBACK_CONFIDENCE,
                query_complexity_confidence=FALLBACK_CONFIDENCE,
                result_relevance_confidence=FALLBACK_CONFIDENCE,
                historical_accuracy_confidence=NEUTRAL_SCORE,
            ),
            uncertainty_indicators=["Belirsiz hukuk alanı"],
            recommended_actions=["Hukuk alanını belirtin"],
            threshold=FALLBACK_CONFIDENCE,
            reasoning="Güven analizi yapılamadı.",
        )
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2) if started else 0.0
        return EnhancedIntentResult(
            original_query=query,
            legal_domain=GENERAL_DOMAIN,
            domain_confidence=FALLBACK_CONFIDENCE,
            primary_intent="definition_request",
            intent_confidence=FALLBACK_CONFIDENCE,
            query_type="simple_factual",
            user_goal="learn_understand",
            urgency_level="medium",
            complexity_score=5.0,
            search_strategy="semantic_broad",
            fallback_strategies=["precise_match", "contextual_expansion"],
            query_expansion=QueryExpansionResult(original_query=query, confidence=NEUTRAL_SCORE),
            confidence_result=confidence,
            user_guidance=["Sorunuzu daha spesifik hale getirmeyi deneyin"],
            reasoning="Sınıflandırma başarısız oldu, genel hukuk varsayıldı.",
            processing_time=elapsed_ms,
        )


def classify_intent(query: str, embedder: Embedder | None = None) -> EnhancedIntentResult:
    classifier = EnhancedIntentClassifier(domain_classifier=DomainClassifier(embedder=embedder))
    return classifier.classify(query)
