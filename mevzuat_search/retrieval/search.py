from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import structlog

from mevzuat_search.connectors.base import LegislationConnector
from mevzuat_search.core.embed import Embedder
from mevzuat_search.core.schema import MevzuatDocument, SearchRequest, SearchType

from .domain import DomainClassifier
from .filtering import SemanticFilter, average_relevance, default_config
from .intent import EnhancedIntentClassifier
from .ranking import ResultRanker
from .schema import (
    EnhancedIntentResult,
    FilteredSearchResult,
    RankedDocument,
    RankingContext,
    RankingHistory,
    SearchResponse,
    SearchStats,
    Sprint4Details,
)

logger = structlog.get_logger()

MAX_SEARCH_CALLS = 2
MAX_PAGE_SIZE = 25
SEARCH_UNAVAILABLE = "Mevzuat arama servisine ulaşılamadı"


def dedupe_documents(documents: Sequence[MevzuatDocument]) -> list[MevzuatDocument]:
    seen: set[str] = set()
    unique_docs: list[MevzuatDocument] = []
    for doc in documents:
        if doc.mevzuat_id in seen:
            continue
        seen.add(doc.mevzuat_id)
        unique_docs.append(doc)
    return unique_docs


def to_final_result(ranked: RankedDocument) -> FilteredSearchResult:
    source = ranked.source
    ranking_note = f"Advanced Ranking Applied | Score: {ranked.final_score:.2f} | Rank: {ranked.rank}"
    if source is None:
        return FilteredSearchResult(
            mevzuat_id=ranked.id,
            mevzuat_adi=ranked.title,
            relevance_score=ranked.final_score,
            filter_reason=ranking_note,
        )
    reason = f"{source.filter_reason} | {ranking_note}" if source.filter_reason else ranking_note
    return source.model_copy(update={"relevance_score": ranked.final_score, "filter_reason": reason})


def error_response(message: str) -> SearchResponse:
    return SearchResponse(stats=SearchStats(error=message))


@dataclass
class MevzuatSearcher:
    """
    Runs one query through classify, expand, search, filter and rank.

    `search` never raises. Per-term service failures count as zero results; a failure of
    every search call, or any exception escaping a stage, becomes `stats.error`.
    """

    connector: LegislationConnector
    intent_classifier: EnhancedIntentClassifier = field(default_factory=EnhancedIntentClassifier)
    ranker: ResultRanker = field(default_factory=ResultRanker)

    def run_searches(
        self, terms: Sequence[str], search_type: SearchType, page_size: int
    ) -> tuple[list[MevzuatDocument], int]:
        documents: list[MevzuatDocument] = []
        failures = 0
        for term in terms:
            request = SearchRequest.for_term(term, search_type, page_size)
            try:
                result = self.connector.search(request)
            except Exception as exc:  # noqa: BLE001
                failures += 1
                logger.warning("search.term_failed", term=term, error=str(exc))
                continue
            documents.extend(result.documents)
            logger.info("search.term", term=term, count=len(result.documents))
        return documents, failures

    def search(
        self,
        query: str,
        domain: str | None = None,
        search_type: SearchType = "fulltext",
        max_results: int = 10,
        ranking_history: RankingHistory | None = None,
    ) -> SearchResponse:
        try:
            return self._search(query, domain, search_type, max(1, max_results), ranking_history)
        except Exception as exc:  # noqa: BLE001
            logger.error("search.failed", query=query, error=str(exc))
            return error_response(str(exc) or exc.__class__.__name__)

    def _search(
        self,
        query: str,
        domain: str | None,
        search_type: SearchType,
        max_results: int,
        ranking_history: RankingHistory | None,
    ) -> SearchResponse:
        intent: EnhancedIntentResult = self.intent_classifier.classify(query)
        expansion = intent.query_expansion
        confidence = intent.confidence_result

        terms = [query, *expansion.expanded_terms[:3]][:MAX_SEARCH_CALLS]
        raw, failures = self.run_searches(terms, search_type, min(MAX_PAGE_SIZE, max_results * 2))
        if failures == len(terms):
            logger.error("search.all_failed", query=query, calls=failures)
            return error_response(SEARCH_UNAVAILABLE)

        unique_docs = dedupe_documents(raw)
        filter_domain = domain or intent.legal_domain
        semantic_filter = SemanticFilter(default_config(max_results=max_results * 2))
        filtered = semantic_filter.filter_results(unique_docs, query, filter_domain)

        ranking = self.ranker.rank(
            filtered,
            RankingContext(
                user_query=query,
                detected_domain=intent.legal_domain,
                user_intent=intent.primary_intent,
                urgency_level=intent.urgency_level,
                query_complexity=intent.complexity_score,
                historical_data=ranking_history,
            ),
        )
        final = [to_final_result(doc) for doc in ranking.ranked_results[:max_results]]

        logger.info(
            "search.done",
            query=query,
            domain=intent.legal_domain,
            raw=len(raw),
            unique=len(unique_docs),
            filtered=len(filtered),
            final=len(final),
        )
        stats = SearchStats(
            original_count=len(raw),
            filtered_count=len(filtered),
            final_count=len(final),
            average_relevance=average_relevance(final),
            top_score=final[0].relevance_score if final else 0.0,
            bottom_score=final[-1].relevance_score if final else 0.0,
            query_expansion_applied=True,
            confidence_score_calculated=True,
            intent_classified=True,
            result_ranking_applied=True,
            domain_filter_applied=domain,
            ranking_explanation=ranking.ranking_explanation,
            sprint4_details=Sprint4Details(
                intent_result=intent,
                query_expansion=expansion,
                confidence_analysis=confidence,
                ranking_metrics=ranking.ranking_metrics,
            ),
        )
        return SearchResponse(results=final, stats=stats, raw_count=len(raw))


def enhanced_mevzuat_search(
    query: str,
    domain: str | None = None,
    search_type: SearchType = "fulltext",
    max_results: int = 10,
    *,
    connector: LegislationConnector | None = None,
    embedder: Embedder | None = None,
    ranking_history: RankingHistory | None = None,
) -> SearchResponse:
    owns_connector = connector is None
    if connector is None:
        from mevzuat_search.connectors.mevzuat_mbs import MevzuatMBSConnector

        connector = MevzuatMBSConnector()
    searcher = MevzuatSearcher(
        connector=connector,
        intent_classifier=EnhancedIntentClassifier(domain_classifier=DomainClassifier(embedder=embedder)),
    )
    try:
        return searcher.search(query, domain, search_type, max_results, ranking_history)
    finally:
        if owns_connector:
            connector.close()
