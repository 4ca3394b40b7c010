from mevzuat_search.core.text import (
    clean_html,
    count_articles,
    extract_meaningful_terms,
    has_turkish_letter,
    looks_like_html,
    normalize,
    strip_punctuation,
    turkish_lower,
)
from mevzuat_search.core.utils import chunked, clamp, parse_date, unique
from mevzuat_search.retrieval.keywords import extract_keywords, generate_search_terms


def test_turkish_lower_handles_dotted_and_dotless_i():
    assert turkish_lower("İSTANBUL IĞDIR") == "istanbul ığdır"
    assert turkish_lower("İş Kanunu") == "iş kanunu"


def test_normalize_collapses_whitespace():
    assert normalize("  Kıdem   Tazminatı \n") == "kıdem tazminatı"
    assert strip_punctuation("Kıdem, tazminatı?") == "kıdem tazminatı"


def test_meaningful_terms_drop_stop_words_and_short_tokens():
    assert extract_meaningful_terms("Bu bir kıdem ve tazminat meselesi") == ["kıdem", "tazminat", "meselesi"]
    assert extract_meaningful_terms("ve ile bu") == []


def test_article_and_html_helpers():
    assert count_articles("Madde 1 ... MADDE 2 ve madde 3") == 3
    assert looks_like_html("<p>Metin</p>")
    assert not looks_like_html("a < b ve b > c")
    assert clean_html("<div><p>Merhaba</p><script>x()</script><p>Dünya</p></div>") == "Merhaba\nDünya"
    assert has_turkish_letter("işçi")
    assert not has_turkish_letter("kanun")


def test_utils():
    assert clamp(1.4) == 1.0
    assert clamp(-0.2) == 0.0
    assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]
    assert unique(["a", "b", "a"]) == ["a", "b"]
    assert parse_date("10.06.2003").isoformat() == "2003-06-10"
    assert parse_date("2024-03-15T10:00:00").isoformat() == "2024-03-15"
    assert parse_date("belirsiz") is None


def test_keywords_keep_legal_phrases():
    keywords = extract_keywords("İşten haksız yere çıkarıldım, kıdem tazminatı alabilir miyim?")
    assert "kıdem tazminatı" in keywords
    assert len(keywords) == len(set(keywords))

    terms = generate_search_terms("kıdem tazminatı nasıl hesaplanır", keywords)
    assert 0 < len(terms) <= 4
    assert terms == sorted(terms, key=len, reverse=True)
