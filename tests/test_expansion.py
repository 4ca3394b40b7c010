import pytest

from mevzuat_search.retrieval.expansion import (
    QueryExpander,
    expand_query,
    extract_base_terms,
    generate_contextual_terms,
    generate_legal_variations,
    generate_morphological_variations,
    generate_related_concepts,
    generate_synonyms,
    term_relevance,
)
from mevzuat_search.retrieval.schema import ExpansionContext

QUERIES = [
    ("İşten haksız yere çıkarıldım, kıdem tazminatı alabilir miyim?", "İş Hukuku", "rights"),
    ("bu bir ve şu boşanma davası nasıl açılır", "Medeni Hukuk", "procedure"),
    ("otel işletme belgesi nasıl alınır", "Turizm Hukuku", "procedure"),
    ("vergi cezası nedir", "Vergi Hukuku", "definition"),
    ("ab", "Genel Hukuk", "general"),
]


@pytest.mark.parametrize(("query", "domain", "intent"), QUERIES)
def test_expanded_terms_are_bounded_unique_and_clean(query, domain, intent):
    result = expand_query(query, ExpansionContext(legal_domain=domain, user_intent=intent))
    terms = result.expanded_terms
    assert len(terms) <= 20
    assert len(terms) == len(set(terms))
    assert not {"bir", "bu", "şu", "ve"} & set(terms)
    assert 0.0 <= result.confidence <= 1.0
    assert result.original_query == query


def test_labour_query_expands_to_tazminat_variants():
    result = expand_query(
        "İşten haksız yere çıkarıldım, kıdem tazminatı alabilir miyim?",
        ExpansionContext(legal_domain="İş Hukuku", user_intent="rights"),
    )
    assert "kıdem tazminatı" in result.expanded_terms
    assert "hizmet tazminatı" in result.synonyms
    assert "haklar" in result.contextual_terms


def test_base_terms_skip_stop_words_and_question_particles():
    assert extract_base_terms("kıdem tazminatı alabilir miyim mi ve") == [
        "kıdem",
        "tazminatı",
        "alabilir",
        "miyim",
    ]


def test_generators():
    assert "hizmet tazminatı" in generate_synonyms(["kıdem"])
    assert "kıdem tazminatı" in generate_related_concepts(["tazminatı"], "İş Hukuku")
    assert generate_related_concepts(["tazminatı"], "Genel Hukuk") == []

    procedure = generate_contextual_terms("nasıl başvurulur", "procedure")
    assert "prosedür" in procedure
    assert "başvuru" in procedure
    assert "süre" in generate_contextual_terms("ne zaman biter", "general")

    assert generate_legal_variations(["miras"], "definition") == [
        "miras kanunu",
        "miras mevzuatı",
        "miras yönetmeliği",
        "miras tanımı",
        "miras nedir",
    ]
    morphological = generate_morphological_variations(["tazminat"])
    assert morphological[0] == "tazminatı"
    assert "tazminatlar" in morphological


def test_term_relevance_prefers_domain_terms():
    assert term_relevance("kıdem tazminatı", "İş Hukuku") == pytest.approx(3.0)
    assert term_relevance("madde kanunu", "İş Hukuku") == pytest.approx(0.5)


def test_empty_expansion_has_neutral_confidence():
    result = expand_query("", ExpansionContext(legal_domain="Genel Hukuk"))
    assert result.expanded_terms == []
    assert result.confidence == 0.5


def test_expander_respects_max_terms():
    result = QueryExpander(max_terms=5).expand(
        "kıdem tazminatı ve ihbar tazminatı", ExpansionContext(legal_domain="İş Hukuku")
    )
    assert len(result.expanded_terms) <= 5
