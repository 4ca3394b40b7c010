from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import Field, computed_field

from mevzuat_search.core.legal import DocumentType
from mevzuat_search.core.schema import CamelModel, MevzuatDocument

# Absence of evidence is scored as neither good nor bad.
NEUTRAL_SCORE = 0.5

LegalIntent = Literal[
    "definition_request",
    "procedure_inquiry",
    "rights_question",
    "obligation_inquiry",
    "penalty_question",
    "document_request",
    "timeline_question",
    "cost_inquiry",
    "legal_advice",
    "case_analysis",
    "precedent_search",
    "legislation_lookup",
]
QueryType = Literal[
    "simple_factual",
    "complex_analytical",
    "procedural",
    "comparative",
    "hypothetical",
    "urgent_practical",
]
UserGoal = Literal[
    "learn_understand",
    "solve_problem",
    "prepare_action",
    "verify_compliance",
    "assess_risk",
    "find_precedent",
]
UrgencyLevel = Literal["critical", "high", "medium", "low", "research"]
SearchStrategy = Literal[
    "precise_match",
    "semantic_broad",
    "hierarchical_drill",
    "comparative_analysis",
    "contextual_expansion",
]
ExpansionIntent = Literal["definition", "procedure", "rights", "obligations", "penalty", "general"]
FormalityLevel = Literal["formal", "informal", "mixed"]
ConfidenceLevel = Literal["very_low", "low", "medium", "high", "very_high"]
ClassificationMethod = Literal["keyword", "embedding", "combined", "fallback"]
IntentMethod = Literal["semantic", "llm", "hybrid"]

CONFIDENCE_THRESHOLDS: tuple[tuple[float, ConfidenceLevel], ...] = (
    (0.9, "very_high"),
    (0.75, "high"),
    (0.6, "medium"),
    (0.4, "low"),
)


def confidence_level_for(score: float) -> ConfidenceLevel:
    for threshold, level in CONFIDENCE_THRESHOLDS:
        if score >= threshold:
            return level
    return "very_low"


class DomainScore(CamelModel):
    domain: str
    confidence: float
    raw_score: float = 0.0
    matches: list[str] = Field(default_factory=list)
    method: ClassificationMethod = "keyword"


class IntentAnalysis(CamelModel):
    domain: str
    confidence: float
    keywords: list[str] = Field(default_factory=list)
    search_terms: list[str] = Field(default_factory=list)
    method: IntentMethod = "semantic"
    reasoning: str | None = None


class LegalIntentResult(CamelModel):
    needs_legal_research: bool
    main_legislation: str
    search_term: str
    confidence: float
    reasoning: str


class ExpansionContext(CamelModel):
    legal_domain: str
    detected_keywords: list[str] = Field(default_factory=list)
    user_intent: ExpansionIntent = "general"
    formality_level: FormalityLevel = "mixed"


class QueryExpansionResult(CamelModel):
    original_query: str
    expanded_terms: list[str] = Field(default_factory=list)
    synonyms: list[str] = Field(default_factory=list)
    related_concepts: list[str] = Field(default_factory=list)
    contextual_terms: list[str] = Field(default_factory=list)
    legal_variations: list[str] = Field(default_factory=list)
    morphological_variations: list[str] = Field(default_factory=list)
    confidence: float = 0.0
    expansion_reasoning: str = ""


class QueryHistory(CamelModel):
    similar_queries: int = 0
    average_accuracy: float = NEUTRAL_SCORE
    user_feedback: float = NEUTRAL_SCORE


class FilteredSearchResult(MevzuatDocument):
    relevance_score: float
    matching_keywords: list[str] = Field(default_factory=list)
    filter_reason: str = ""


class ConfidenceContext(CamelModel):
    user_query: str
    detected_domain: str
    search_results: list[FilteredSearchResult] = Field(default_factory=list)
    query_complexity: float = 5.0
    historical_data: QueryHistory | None = None


class ConfidenceFactors(CamelModel):
    domain_match_confidence: float
    term_coverage_confidence: float
    semantic_similarity_confidence: float
    query_complexity_confidence: float
    result_relevance_confidence: float
    historical_accuracy_confidence: float


class ConfidenceResult(CamelModel):
    overall_confidence: float
    factors: ConfidenceFactors
    uncertainty_indicators: list[str] = Field(default_factory=list)
    recommended_actions: list[str] = Field(default_factory=list)
    threshold: float = 0.6
    reasoning: str = ""

    @computed_field(alias="confidenceLevel")
    @property
    def confidence_level(self) -> ConfidenceLevel:
        return confidence_level_for(self.overall_confidence)


class ProcessingRecommendation(CamelModel):
    type: Literal["search_strategy", "user_guidance"]
    priority: int
    action: str
    reasoning: str


class EnhancedIntentResult(CamelModel):
    original_query: str
    legal_domain: str
    domain_confidence: float
    primary_intent: LegalIntent
    secondary_intents: list[LegalIntent] = Field(default_factory=list)
    intent_confidence: float
    query_type: QueryType
    user_goal: UserGoal
    urgency_level: UrgencyLevel
    complexity_score: float
    search_strategy: SearchStrategy
    fallback_strategies: list[SearchStrategy] = Field(default_factory=list)
    prioritized_terms: list[str] = Field(default_factory=list)
    query_expansion: QueryExpansionResult
    confidence_result: ConfidenceResult
    processing_recommendations: list[ProcessingRecommendation] = Field(default_factory=list)
    user_guidance: list[str] = Field(default_factory=list)
    reasoning: str = ""
    processing_time: float = 0.0


class SemanticFilterConfig(CamelModel):
    min_relevance_score: float = 0.15
    max_results: int = 10
    domain_boost: dict[str, float] = Field(default_factory=dict)
    penalty_terms: list[str] = Field(default_factory=list)


class FilteringStats(CamelModel):
    original_count: int
    filtered_count: int
    average_relevance: float
    improvement_ratio: float
    top_score: float
    bottom_score: float


class DocumentMetadata(CamelModel):
    publication_date: date | None = None
    last_modified: date | None = None
    authority: str = ""
    official_number: str | None = None
    legal_domain: str
    document_length: int = 0
    language: str = "tr"
    is_active: bool = True


class RankingFactors(CamelModel):
    semantic_relevance: float
    keyword_match: float
    domain_specificity: float
    authority_score: float
    freshness_score: float
    completeness_score: float
    intent_alignment: float
    complexity_match: float
    urgency_alignment: float
    user_feedback_score: float
    click_through_rate: float
    success_rate: float


class RankedDocument(CamelModel):
    id: str
    title: str
    content: str
    original_score: float
    final_score: float
    ranking_factors: RankingFactors
    relevance_reasons: list[str] = Field(default_factory=list)
    rank: int = 0
    document_type: DocumentType
    metadata: DocumentMetadata
    source: FilteredSearchResult | None = Field(default=None, exclude=True)


class UserProfile(CamelModel):
    expertise_level: Literal["beginner", "intermediate", "expert"] = "intermediate"
    preferred_document_types: list[DocumentType] = Field(default_factory=list)
    previous_queries: list[str] = Field(default_factory=list)


class DocumentPerformance(CamelModel):
    document_id: str
    total_views: int = 0
    average_rating: float = 2.5
    click_through_rate: float = NEUTRAL_SCORE
    completion_rate: float = NEUTRAL_SCORE


class RankingHistory(CamelModel):
    document_performance: dict[str, DocumentPerformance] = Field(default_factory=dict)


class RankingContext(CamelModel):
    user_query: str
    detected_domain: str
    user_intent: str = "general"
    urgency_level: UrgencyLevel = "medium"
    query_complexity: float = 5.0
    user_profile: UserProfile | None = None
    historical_data: RankingHistory | None = None
    as_of: date | None = None


class ScoreDistribution(CamelModel):
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0
    very_poor: int = 0


class RankingMetrics(CamelModel):
    total_documents: int = 0
    average_score: float = 0.0
    score_distribution: ScoreDistribution = Field(default_factory=ScoreDistribution)
    diversity_score: float = 0.0
    coverage_score: float = 0.0


class RankingResult(CamelModel):
    ranked_results: list[RankedDocument] = Field(default_factory=list)
    ranking_metrics: RankingMetrics = Field(default_factory=RankingMetrics)
    ranking_explanation: str = ""
    confidence_score: float = 0.0
    processing_time: float = 0.0


class LegalContext(CamelModel):
    domain: str
    legislation: str = ""
    keywords: list[str] = Field(default_factory=list)
    user_query: str = ""
    confidence: float = 0.0


class SemanticChunk(CamelModel):
    text: str
    start_index: int
    end_index: int
    score: float = 0.0
    legal_relevance: float = 0.0
    reasoning: str = ""


class SemanticMatchResult(CamelModel):
    chunks: list[SemanticChunk] = Field(default_factory=list)
    total_chunks: int = 0
    average_score: float = 0.0
    best_match: SemanticChunk | None = None
    processing_time: float = 0.0


class DocumentContent(CamelModel):
    mevzuat_id: str
    content: str
    article_count: int = 0
    total_articles: int = 0
    article_titles: list[str] = Field(default_factory=list)
    fallback: bool = False


class Sprint4Details(CamelModel):
    intent_result: EnhancedIntentResult | None = None
    query_expansion: QueryExpansionResult | None = None
    confidence_analysis: ConfidenceResult | None = None
    ranking_metrics: RankingMetrics | None = None


class SearchStats(CamelModel):
    original_count: int = 0
    filtered_count: int = 0
    final_count: int = 0
    average_relevance: float = 0.0
    top_score: float = 0.0
    bottom_score: float = 0.0
    query_expansion_applied: bool = False
    confidence_score_calculated: bool = False
    intent_classified: bool = False
    result_ranking_applied: bool = False
    domain_filter_applied: str | None = None
    ranking_explanation: str | None = None
    error: str | None = None
    sprint4_details: Sprint4Details | None = None


class SearchResponse(CamelModel):
    results: list[FilteredSearchResult] = Field(default_factory=list)
    stats: SearchStats = Field(default_factory=SearchStats)
    raw_count: int = 0

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=False)
