import pytest

from mevzuat_search.core.schema import MevzuatDocument
from mevzuat_search.retrieval.filtering import (
    SemanticFilter,
    default_config,
    filter_results,
    filtering_stats,
)

QUERY = "kıdem tazminatı"
DOMAIN = "İş Hukuku"

RAW = [
    {"mevzuatId": "6446", "mevzuatAdi": "Enerji Piyasası Kanunu"},
    {"mevzuatId": "21360", "mevzuatAdi": "Kıdem Tazminatı Fonu Hakkında Yönetmelik"},
    {"mevzuatId": "6098", "mevzuatAdi": "Türk Borçlar Kanunu"},
    {"mevzuatId": "6356", "mevzuatAdi": "Sendikalar ve Toplu İş Sözleşmesi Kanunu"},
]


def test_filter_scores_and_orders_results():
    results = filter_results(RAW, QUERY, DOMAIN)
    assert [r.mevzuat_id for r in results] == ["21360", "6356"]

    top = results[0]
    assert top.relevance_score == pytest.approx(1.0)
    assert "direct:kıdem" in top.filter_reason
    assert "bonus:multi_match(2)" in top.filter_reason
    assert {"kıdem", "tazminatı"} <= set(top.matching_keywords)

    second = results[1]
    # iş, sendika and sözleşme saturate the boosted score
    assert second.relevance_score == pytest.approx(1.0)
    assert {"domain:iş", "domain:sendika", "domain:sözleşme", "boost:1.3"} <= set(second.filter_reason.split(", "))
    assert all(r.relevance_score >= 0.15 for r in results)


def test_domain_boost_multiplies_unclamped_score():
    scored = SemanticFilter().score(MevzuatDocument(mevzuat_id="1", mevzuat_adi="İş Kanunu"), QUERY, DOMAIN)
    assert scored.relevance_score == pytest.approx((0.25 + 0.1) * 1.3)
    assert scored.filter_reason == "domain:iş, legal:kanun, boost:1.3"


def test_penalty_terms_push_results_out():
    scored = SemanticFilter().score(MevzuatDocument.model_validate(RAW[0]), QUERY, DOMAIN)
    assert scored.relevance_score == 0.0
    assert "penalty:enerji" in scored.filter_reason


def test_filtering_is_deterministic_and_idempotent():
    first = filter_results(RAW, QUERY, DOMAIN)
    second = filter_results(RAW, QUERY, DOMAIN)
    assert [r.model_dump() for r in first] == [r.model_dump() for r in second]

    refiltered = filter_results(first, QUERY, DOMAIN)
    assert [r.model_dump() for r in refiltered] == [r.model_dump() for r in first]

    below = [RAW[0], RAW[2]]
    assert filter_results(below, QUERY, DOMAIN) == []


def test_max_results_truncates():
    results = SemanticFilter(default_config(max_results=1)).filter_results(RAW, QUERY, DOMAIN)
    assert [r.mevzuat_id for r in results] == ["21360"]


def test_long_titles_are_penalised():
    long_title = "İş Kanunu " + "ek hükümler " * 12
    short = SemanticFilter().score(MevzuatDocument(mevzuat_id="1", mevzuat_adi="İş Kanunu"), QUERY, DOMAIN)
    long = SemanticFilter().score(MevzuatDocument(mevzuat_id="2", mevzuat_adi=long_title), QUERY, DOMAIN)
    assert "penalty:long_title" in long.filter_reason
    assert long.relevance_score == pytest.approx(short.relevance_score - 0.1)


def test_filtering_stats():
    results = filter_results(RAW, QUERY, DOMAIN)
    stats = filtering_stats(len(RAW), results)
    assert stats.original_count == 4
    assert stats.filtered_count == 2
    assert stats.improvement_ratio == pytest.approx(0.5)
    assert stats.top_score == results[0].relevance_score
    assert stats.bottom_score == results[-1].relevance_score

    empty = filtering_stats(0, [])
    assert empty.average_relevance == 0.0
    assert empty.improvement_ratio == 0.0
