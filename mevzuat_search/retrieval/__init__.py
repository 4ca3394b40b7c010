"""
Legislation retrieval pipeline (classify, expand, search, filter, rank).

The pipeline is stateless per query; the external search service, the embedding provider
and the optional LLM are injected collaborators.
"""

from .confidence import ConfidenceScorer, calculate_confidence
from .domain import DomainClassifier, detect_legal_intent, detect_legal_intent_hybrid
from .expansion import QueryExpander, expand_query
from .filtering import SemanticFilter, filter_results
from .intent import EnhancedIntentClassifier, classify_intent
from .llm import LLMClient, LocalQwenClient, StaticLLMClient
from .matching import fetch_document_content, semantic_content_matching, split_into_semantic_chunks
from .ranking import ResultRanker, rank_results
from .schema import FilteredSearchResult, SearchResponse
from .search import MevzuatSearcher, enhanced_mevzuat_search

__all__ = [
    "ConfidenceScorer",
    "calculate_confidence",
    "DomainClassifier",
    "detect_legal_intent",
    "detect_legal_intent_hybrid",
    "QueryExpander",
    "expand_query",
    "SemanticFilter",
    "filter_results",
    "EnhancedIntentClassifier",
    "classify_intent",
    "LLMClient",
    "LocalQwenClient",
    "StaticLLMClient",
    "fetch_document_content",
    "semantic_content_matching",
    "split_into_semantic_chunks",
    "ResultRanker",
    "rank_results",
    "FilteredSearchResult",
    "SearchResponse",
    "MevzuatSearcher",
    "enhanced_mevzuat_search",
]
