import pytest

from mevzuat_search.connectors.fixture import FixtureConnector
from mevzuat_search.core.embed import EmbeddingError, StaticEmbedder
from mevzuat_search.retrieval.matching import (
    TREE_EMPTY,
    TREE_UNAVAILABLE,
    fetch_document_content,
    legal_domain_relevance,
    relevance_reasoning,
    semantic_content_matching,
    split_into_semantic_chunks,
)
from mevzuat_search.retrieval.schema import LegalContext

CONTENT = (
    "Genel hükümler bu kanunda yer alır ve uygulanır.\n"
    "Madde 1 Bu kanunun amacı işçi ve işveren haklarını düzenlemektir.\n"
    "Madde 2 Kısa.\n"
    "Madde 3 Tanımlar bu maddede sayılmıştır ve geçerlidir."
)

FESIH_CONTENT = (
    "Madde 17 Belirsiz süreli sözleşmenin fesih bildirimi yazılı yapılır.\n"
    "Madde 18 İşçinin çalışma süresi haftada kırk beş saattir.\n"
    "Madde 25 İşveren haklı nedenle derhal fesih hakkını kullanabilir.\n"
    "Madde 41 Fazla çalışma ücreti yüzde elli zamlı ödenir."
)


def _fesih_lookup(text: str) -> list[float]:
    return [1.0, 0.0] if "fesih" in text else [0.0, 1.0]


class QueryOnlyEmbedder:
    def embed(self, text, task="similarity"):
        return [1.0, 0.0]

    def embed_many(self, texts, task="similarity"):
        raise EmbeddingError("servis kapalı")


class BrokenEmbedder(QueryOnlyEmbedder):
    def embed(self, text, task="similarity"):
        raise EmbeddingError("servis kapalı")


def test_chunks_split_at_article_boundaries():
    chunks = split_into_semantic_chunks(CONTENT)
    assert [chunk.text.split(" ")[0] for chunk in chunks] == ["Genel", "Madde", "Madde"]
    assert chunks[1].text.startswith("Madde 1")
    assert chunks[2].text.startswith("Madde 3")
    for chunk in chunks:
        assert len(chunk.text) > 20
        assert CONTENT[chunk.start_index : chunk.end_index].strip() == chunk.text


def test_large_sections_are_split_by_sentence():
    section = "Madde 9 " + " ".join(f"Cümle numarası {i} burada biter." for i in range(20))
    chunks = split_into_semantic_chunks(section, max_chunk_size=120, overlap=3)
    assert len(chunks) > 1
    assert all(len(chunk.text) > 20 for chunk in chunks)
    assert split_into_semantic_chunks("") == []


def test_legal_domain_relevance_is_capped():
    text = "İşçi ve işveren arasında iş sözleşmesi, kıdem ve ihbar. Madde 5"
    assert legal_domain_relevance(text, "iş hukuku", []) == pytest.approx(0.5)
    assert legal_domain_relevance("kıdem tazminatı", "İş Hukuku", ["tazminat"]) == pytest.approx(0.25)
    assert legal_domain_relevance("madde 3 uyarınca", "Vergi Hukuku", []) == pytest.approx(0.05)


def test_semantic_matching_batches_and_keeps_relevant_chunks():
    embedder = StaticEmbedder(lookup=_fesih_lookup)
    delays: list[float] = []
    result = semantic_content_matching(
        "fesih",
        FESIH_CONTENT,
        LegalContext(domain="Vergi Hukuku"),
        embedder,
        batch_size=2,
        batch_delay=0.25,
        sleep=delays.append,
    )
    assert result.total_chunks == 4
    assert delays == [0.25]
    assert [len(call) for call in embedder.calls] == [1, 2, 2]

    assert len(result.chunks) == 2
    assert all("fesih" in chunk.text for chunk in result.chunks)
    assert result.best_match == result.chunks[0]
    assert result.chunks[0].score == pytest.approx(1.05)
    assert result.chunks[0].reasoning == "Semantic: 1.000, Legal: 0.050"
    assert result.average_score == pytest.approx(1.05)


def test_batch_failure_scores_zero():
    result = semantic_content_matching(
        "fesih", FESIH_CONTENT, LegalContext(domain="İş Hukuku"), QueryOnlyEmbedder(), sleep=lambda _: None
    )
    assert result.total_chunks == 4
    assert result.chunks == []
    assert result.best_match is None


def test_query_embedding_failure_returns_empty_result():
    result = semantic_content_matching("fesih", FESIH_CONTENT, LegalContext(domain="İş Hukuku"), BrokenEmbedder())
    assert result.chunks == []
    assert result.total_chunks == 0


def test_relevance_reasoning():
    reasoning = relevance_reasoning("Madde 17 uyarınca fesih bildirimi", "fesih bildirimi", 0.85)
    assert reasoning == (
        "Çok yüksek semantic benzerlik; Anahtar kelime eşleşmesi: fesih, bildirimi; Madde referansı içeriyor"
    )
    assert relevance_reasoning("xx", "ab", 0.1) == "Genel içerik uyumu"
    assert relevance_reasoning("kira", "kira", 0.5).startswith("Orta düzey")


def test_fetch_document_content_selects_keyword_articles():
    document = fetch_document_content(FixtureConnector(), "4857", ["fesih"])
    assert document.article_titles == ["Süreli fesih", "İşverenin haklı nedenle derhal fesih hakkı"]
    assert document.article_count == 2
    assert document.total_articles == 4
    assert not document.fallback
    assert "## Süreli fesih" in document.content
    assert "sözleşmeyi feshedebilir" in document.content
    assert "<p>" not in document.content
    assert "track()" not in document.content


def test_fetch_document_content_skips_missing_articles():
    first_three = fetch_document_content(FixtureConnector(), "4857")
    assert first_three.article_count == 3

    # "Çalışma süresi" has no stored content
    partial = fetch_document_content(FixtureConnector(), "4857", ["süre"])
    assert partial.article_titles == ["Süreli fesih"]
    assert partial.total_articles == 4


def test_fetch_document_content_fallbacks():
    missing = fetch_document_content(FixtureConnector(), "9999")
    assert missing.fallback
    assert missing.content == TREE_UNAVAILABLE.format(mevzuat_id="9999")

    empty = fetch_document_content(FixtureConnector(), "6570")
    assert not empty.fallback
    assert empty.content == TREE_EMPTY
    assert empty.article_count == 0
