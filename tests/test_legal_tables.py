from typing import get_args

from mevzuat_search.core.legal import (
    AUTHORITY_SCORES,
    CHUNK_DOMAIN_TERMS,
    CONFIDENCE_DOMAIN_KEYWORDS,
    DEFAULT_DOMAIN_BOOST,
    DOCUMENT_DOMAIN_RULES,
    DOCUMENT_TYPE_RULES,
    DOMAIN_CONTEXT_RULES,
    DOMAIN_MODIFIERS,
    DOMAIN_NAMES,
    FILTER_DOMAIN_KEYWORDS,
    GENERAL_DOMAIN,
    LEGAL_DOMAINS,
    RANKING_DOMAIN_KEYWORDS,
    RELATED_DOMAINS,
    SERVICE_TYPE_MAP,
    DocumentType,
    get_domain,
    infer_document_domain,
    infer_document_type,
)
from mevzuat_search.core.schema import MEVZUAT_TURLERI
from mevzuat_search.retrieval.confidence import FACTOR_WEIGHTS as CONFIDENCE_WEIGHTS
from mevzuat_search.retrieval.expansion import DOMAIN_CONTEXTUAL_TERMS, LEGAL_SYNONYMS
from mevzuat_search.retrieval.intent import (
    EXPANSION_INTENTS,
    INTENT_PATTERNS,
    QUERY_TYPE_PATTERNS,
    URGENCY_INDICATORS,
)
from mevzuat_search.retrieval.ranking import CATEGORY_WEIGHTS, FACTOR_WEIGHTS, INTENT_KEYWORDS
from mevzuat_search.retrieval.schema import (
    ExpansionIntent,
    LegalIntent,
    QueryType,
    RankingFactors,
    UrgencyLevel,
)

KNOWN_DOMAINS = set(DOMAIN_NAMES)


def test_catalogue_names_are_unique():
    assert len(DOMAIN_NAMES) == len(set(DOMAIN_NAMES)) == len(LEGAL_DOMAINS)
    assert len(LEGAL_DOMAINS) == 12
    assert GENERAL_DOMAIN in DOMAIN_NAMES
    for domain in LEGAL_DOMAINS:
        assert domain.positive_examples
        assert get_domain(domain.name) is domain


def test_domain_keyed_tables_reference_catalogue():
    tables = (
        DEFAULT_DOMAIN_BOOST,
        DOMAIN_MODIFIERS,
        CONFIDENCE_DOMAIN_KEYWORDS,
        FILTER_DOMAIN_KEYWORDS,
        RANKING_DOMAIN_KEYWORDS,
        RELATED_DOMAINS,
        CHUNK_DOMAIN_TERMS,
        DOMAIN_CONTEXTUAL_TERMS,
    )
    for table in tables:
        assert set(table) <= KNOWN_DOMAINS, table
    for related in RELATED_DOMAINS.values():
        assert set(related) <= KNOWN_DOMAINS
    for rule in DOMAIN_CONTEXT_RULES:
        assert rule.domain in KNOWN_DOMAINS
    for domain, _ in DOCUMENT_DOMAIN_RULES:
        assert domain in KNOWN_DOMAINS
    assert set(DOMAIN_MODIFIERS) == KNOWN_DOMAINS


def test_document_type_tables():
    doc_types = set(get_args(DocumentType))
    assert set(AUTHORITY_SCORES) == doc_types
    assert {doc_type for _, doc_type in DOCUMENT_TYPE_RULES} <= doc_types
    assert set(SERVICE_TYPE_MAP) <= set(MEVZUAT_TURLERI)
    assert infer_document_type("4857 sayılı İş Kanunu") == "law"
    assert infer_document_type("Çalışma Usulleri", "YONETMELIK") == "regulation"
    assert infer_document_type("Açıklama notu") == "interpretation"
    assert infer_document_domain("Kıdem tazminatı fonu") == "İş Hukuku"
    assert infer_document_domain("Genel hükümler") == GENERAL_DOMAIN


def test_intent_tables_are_exhaustive():
    assert set(INTENT_PATTERNS) == set(get_args(LegalIntent))
    assert all(len(patterns) == 3 for patterns in INTENT_PATTERNS.values())
    assert set(QUERY_TYPE_PATTERNS) == set(get_args(QueryType))
    assert set(EXPANSION_INTENTS) == set(get_args(LegalIntent))
    assert set(EXPANSION_INTENTS.values()) <= set(get_args(ExpansionIntent))
    assert {level for level, _ in URGENCY_INDICATORS} == set(get_args(UrgencyLevel))
    assert set(INTENT_KEYWORDS) <= set(get_args(ExpansionIntent))


def test_weights_sum_to_one():
    assert abs(sum(CONFIDENCE_WEIGHTS.values()) - 1.0) < 1e-9
    assert abs(sum(CATEGORY_WEIGHTS.values()) - 1.0) < 1e-9
    factor_names = set(RankingFactors.model_fields)
    for category, factors in FACTOR_WEIGHTS.items():
        assert category in CATEGORY_WEIGHTS
        assert abs(sum(weight for _, weight in factors) - 1.0) < 1e-9
        assert {name for name, _ in factors} <= factor_names


def test_synonym_table_has_no_empty_entries():
    for term, synonyms in LEGAL_SYNONYMS.items():
        assert term
        assert synonyms
