from datetime import date

import pytest

from mevzuat_search.core.schema import MevzuatTur
from mevzuat_search.retrieval.ranking import (
    ResultRanker,
    authority_score,
    completeness_score,
    domain_specificity,
    freshness_score,
    intent_alignment,
    rank_results,
    urgency_alignment,
)
from mevzuat_search.retrieval.schema import (
    DocumentPerformance,
    FilteredSearchResult,
    RankingContext,
    RankingHistory,
)

AS_OF = date(2025, 1, 1)


def _doc(doc_id: str, title: str, content: str = "", tur: str | None = None, **extra) -> FilteredSearchResult:
    return FilteredSearchResult(
        mevzuat_id=doc_id,
        mevzuat_adi=title,
        content=content,
        mevzuat_tur=MevzuatTur(name=tur) if tur else None,
        relevance_score=extra.pop("relevance_score", 0.5),
        **extra,
    )


DOCS = [
    _doc("6356", "Sendikalar ve Toplu İş Sözleşmesi Kanunu", "İşçi sendikaları.", "KANUN", resmi_gazete_tarihi="18.11.2012"),
    _doc(
        "4857",
        "İş Kanunu",
        "Kıdem tazminatı ve işten çıkarma. Madde 17 fesih. " * 15,
        "KANUN",
        resmi_gazete_tarihi="10.06.2003",
        authority="Resmi Gazete",
    ),
    _doc("900", "Çalışma Rehberi", "kısa", None, resmi_gazete_tarihi="2024-06-01"),
]

CONTEXT = RankingContext(
    user_query="kıdem tazminatı",
    detected_domain="İş Hukuku",
    user_intent="rights_question",
    as_of=AS_OF,
)


def test_empty_ranking():
    result = rank_results([], CONTEXT)
    assert result.ranked_results == []
    assert result.ranking_metrics.total_documents == 0
    assert "İş Hukuku" in result.ranking_explanation


def test_ranks_are_sequential_and_scores_non_increasing():
    result = rank_results(DOCS, CONTEXT)
    ranked = result.ranked_results
    assert [doc.rank for doc in ranked] == [1, 2, 3]
    scores = [doc.final_score for doc in ranked]
    assert scores == sorted(scores, reverse=True)
    assert all(0.0 <= s <= 1.0 for s in scores)
    by_id = {doc.id: doc for doc in ranked}
    assert set(by_id) == {"6356", "4857", "900"}
    assert by_id["4857"].source is DOCS[1]
    assert by_id["4857"].metadata.authority == "Resmi Gazete"
    assert by_id["900"].metadata.authority == "Bilinmiyor"

    metrics = result.ranking_metrics
    assert metrics.total_documents == 3
    distribution = metrics.score_distribution
    assert distribution.excellent + distribution.good + distribution.fair + distribution.poor + distribution.very_poor == 3
    assert 0.0 <= result.confidence_score <= 1.0
    assert "3 sonuç" in result.ranking_explanation


def test_ranking_is_deterministic():
    first = rank_results(DOCS, CONTEXT).model_dump()
    second = rank_results(DOCS, CONTEXT).model_dump()
    first.pop("processing_time")
    second.pop("processing_time")
    assert first == second


def test_history_feeds_performance_factors():
    history = RankingHistory(
        document_performance={"900": DocumentPerformance(document_id="900", average_rating=5.0, click_through_rate=1.0, completion_rate=1.0)}
    )
    context = CONTEXT.model_copy(update={"historical_data": history})
    ranked = ResultRanker().factors(DOCS[2], context)
    assert ranked.ranking_factors.user_feedback_score == 1.0
    assert ranked.ranking_factors.click_through_rate == 1.0

    without = ResultRanker().factors(DOCS[2], CONTEXT)
    assert without.ranking_factors.user_feedback_score == 0.5
    assert ranked.final_score > without.final_score


def test_factor_helpers():
    assert freshness_score(date(2024, 6, 1), AS_OF) == 1.0
    assert freshness_score(date(2021, 6, 1), AS_OF) == 0.8
    assert freshness_score(date(2017, 6, 1), AS_OF) == 0.6
    assert freshness_score(date(2003, 6, 10), AS_OF) == 0.4
    assert freshness_score(None, AS_OF) == 0.5

    assert domain_specificity("İş Hukuku", "İş Hukuku") == 1.0
    assert domain_specificity("Sigorta Hukuku", "İş Hukuku") == 0.7
    assert domain_specificity("Ceza Hukuku", "İş Hukuku") == 0.3

    assert authority_score(DOCS[1], "law") == 1.0
    assert authority_score(DOCS[2], "guidance") == 0.5

    assert completeness_score(_doc("1", "x")) == 0.5
    assert completeness_score(_doc("2", "x", "Madde 1 " + "a" * 600)) == pytest.approx(1.0)

    assert urgency_alignment("critical", "guidance") == 1.0
    assert urgency_alignment("medium", "law") == 0.7

    procedure_doc = _doc("3", "Başvuru", "başvuru işlem süreci nasıl yürür")
    assert intent_alignment(procedure_doc, "procedure_inquiry") == pytest.approx(0.75)
    assert intent_alignment(procedure_doc, "general") == 0.0
