import pytest

from mevzuat_search.retrieval.confidence import (
    ConfidenceScorer,
    calculate_confidence,
    dynamic_threshold,
    historical_accuracy_confidence,
    query_complexity_confidence,
    result_relevance_confidence,
    semantic_similarity_confidence,
    term_coverage_confidence,
)
from mevzuat_search.retrieval.schema import ConfidenceContext, FilteredSearchResult, QueryHistory


def _result(idx: int, score: float = 0.5, content: str = "", date: str | None = None) -> FilteredSearchResult:
    return FilteredSearchResult(
        mevzuat_id=str(idx),
        mevzuat_adi=f"Belge {idx}",
        relevance_score=score,
        content=content,
        resmi_gazete_tarihi=date,
    )


def test_short_query_is_flagged():
    result = calculate_confidence(ConfidenceContext(user_query="ab", detected_domain="Genel Hukuk"))
    assert result.confidence_level in {"very_low", "low"}
    assert "Çok kısa sorgu" in result.uncertainty_indicators
    assert "Sorunuzu detaylandırın" in result.recommended_actions
    assert "Sonuç bulunamadı" in result.uncertainty_indicators


def test_overall_confidence_is_bounded_and_level_is_derived():
    context = ConfidenceContext(
        user_query="kıdem tazminatı nasıl hesaplanır",
        detected_domain="İş Hukuku",
        search_results=[_result(i, 0.8, "x" * 200, "2023-01-01") for i in range(5)],
        query_complexity=3.0,
        historical_data=QueryHistory(similar_queries=60, average_accuracy=0.9, user_feedback=0.9),
    )
    result = ConfidenceScorer().calculate(context)
    assert 0.0 <= result.overall_confidence <= 1.0
    payload = result.model_dump(by_alias=True)
    assert payload["confidenceLevel"] == result.confidence_level
    assert "İş Hukuku" in result.reasoning


def test_factor_functions():
    empty = ConfidenceContext(user_query="vergi", detected_domain="Vergi Hukuku")
    assert semantic_similarity_confidence(empty) == pytest.approx(0.1)
    assert result_relevance_confidence(empty) == 0.0
    assert historical_accuracy_confidence(empty) == 0.5
    assert term_coverage_confidence(empty) == pytest.approx(0.6)

    many = empty.model_copy(update={"search_results": [_result(i, 0.9, "x" * 200, "2021-05-01") for i in range(5)]})
    assert semantic_similarity_confidence(many) == pytest.approx(1.0)
    assert result_relevance_confidence(many) == pytest.approx(0.9)

    question = ConfidenceContext(user_query="vergi nedir", detected_domain="Vergi Hukuku", query_complexity=5.0)
    assert query_complexity_confidence(question) == pytest.approx(0.6)


def test_history_adjusts_confidence():
    poor = ConfidenceContext(
        user_query="vergi",
        detected_domain="Vergi Hukuku",
        historical_data=QueryHistory(similar_queries=0, average_accuracy=0.6, user_feedback=0.2),
    )
    assert historical_accuracy_confidence(poor) == pytest.approx(0.4)


def test_dynamic_threshold_is_clamped():
    context = ConfidenceContext(user_query="vergi", detected_domain="Vergi Hukuku", query_complexity=9.0)
    assert dynamic_threshold(context) == pytest.approx(0.3)
    unknown = ConfidenceContext(
        user_query="vergi",
        detected_domain="Bilinmeyen",
        search_results=[_result(i) for i in range(3)],
    )
    assert dynamic_threshold(unknown) == pytest.approx(0.6)


def test_custom_weights_are_used():
    scorer = ConfidenceScorer(weights={"historical_accuracy_confidence": 1.0})
    context = ConfidenceContext(user_query="kira", detected_domain="Genel Hukuk")
    # neutral history scaled by the general-domain complexity modifier
    assert scorer.calculate(context).overall_confidence == pytest.approx(0.5 * 0.6)
