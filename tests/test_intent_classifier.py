import pytest

from mevzuat_search.core.legal import GENERAL_DOMAIN
from mevzuat_search.retrieval.intent import (
    EnhancedIntentClassifier,
    choose_strategy,
    classify_intent,
    complexity_score,
    detect_query_type,
    detect_urgency,
    infer_user_goal,
    map_to_expansion_intent,
    score_intents,
)
from mevzuat_search.retrieval.schema import confidence_level_for

E2E_QUERY = "İşten haksız yere çıkarıldım, kıdem tazminatı alabilir miyim?"


class ExplodingClassifier:
    def classify(self, query):
        raise RuntimeError("beklenmeyen hata")


def test_end_to_end_labour_question():
    result = classify_intent(E2E_QUERY)
    assert result.legal_domain == "İş Hukuku"
    assert result.domain_confidence > 0.7
    assert result.primary_intent in {"rights_question", "legal_advice"}
    assert result.query_expansion.expanded_terms
    assert any("tazminat" in term for term in result.query_expansion.expanded_terms)
    assert 0.0 <= result.domain_confidence <= 1.0
    assert result.confidence_result.confidence_level == confidence_level_for(
        result.confidence_result.overall_confidence
    )


def test_short_query_is_low_confidence():
    result = classify_intent("ab")
    assert result.confidence_result.confidence_level in {"very_low", "low"}
    assert "Çok kısa sorgu" in result.confidence_result.uncertainty_indicators


def test_classifier_failure_returns_general_fallback():
    classifier = EnhancedIntentClassifier(domain_classifier=ExplodingClassifier())
    result = classifier.classify("kira artışı")
    assert result.legal_domain == GENERAL_DOMAIN
    assert result.domain_confidence == pytest.approx(0.3)
    assert result.search_strategy == "semantic_broad"
    assert result.confidence_result.overall_confidence == pytest.approx(0.3)


@pytest.mark.parametrize(
    ("query", "intent"),
    [
        ("kıdem tazminatı nedir", "definition_request"),
        ("nasıl boşanma davası açılır", "procedure_inquiry"),
        ("kiracı olarak haklarım nelerdir", "rights_question"),
        ("hırsızlık cezası nedir", "penalty_question"),
        ("ehliyet için hangi belge gerekir", "document_request"),
        ("benzer kararlar ve emsal içtihat", "precedent_search"),
    ],
)
def test_primary_intent_patterns(query, intent):
    primary, secondary, confidence = score_intents(query)
    assert primary == intent or intent in secondary
    assert 0.0 < confidence <= 1.0


def test_no_pattern_defaults_to_definition():
    assert score_intents("xyzzy") == ("definition_request", [], 0.3)


def test_query_type_urgency_and_goal():
    assert detect_query_type("miras nasıl paylaşılır") == "procedural"
    assert detect_query_type("xyzzy") == "simple_factual"
    assert detect_urgency("acil olarak tahliye") == "critical"
    assert detect_urgency("yarın duruşma var") == "high"
    assert detect_urgency("vergi oranı") == "medium"
    assert infer_user_goal("emsal karar arıyorum", "simple_factual") == "find_precedent"
    assert infer_user_goal("xyzzy", "procedural") == "prepare_action"


def test_complexity_and_strategy():
    assert complexity_score("") == 0.0
    long_query = "kira ve tapu arasında karşılaştırma nasıl yapılır ve nerede başvurulur " * 2
    assert complexity_score(long_query) > 7
    assert choose_strategy("procedure_inquiry", "procedural", 3.0) == (
        "hierarchical_drill",
        ["contextual_expansion"],
    )
    assert choose_strategy("cost_inquiry", "comparative", 3.0)[0] == "comparative_analysis"
    assert choose_strategy("cost_inquiry", "simple_factual", 9.0)[0] == "contextual_expansion"


def test_expansion_intent_mapping():
    assert map_to_expansion_intent("procedure_inquiry") == "procedure"
    assert map_to_expansion_intent("penalty_question") == "penalty"
    assert map_to_expansion_intent("legal_advice") == "general"


@pytest.mark.parametrize(
    ("score", "level"),
    [
        (0.95, "very_high"),
        (0.9, "very_high"),
        (0.75, "high"),
        (0.7499, "medium"),
        (0.6, "medium"),
        (0.4, "low"),
        (0.39, "very_low"),
    ],
)
def test_confidence_level_boundaries(score, level):
    assert confidence_level_for(score) == level
