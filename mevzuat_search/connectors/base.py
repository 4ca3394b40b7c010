from __future__ import annotations

from abc import ABC, abstractmethod

from mevzuat_search.core.schema import ArticleContent, ArticleNode, MevzuatSearchResult, SearchRequest


class SearchServiceError(Exception):
    """Legislation service answered with a non-2xx status or an unreadable body."""


class LegislationConnector(ABC):
    source: str

    @abstractmethod
    def search(self, request: SearchRequest) -> MevzuatSearchResult:
        """Run one search call against the service."""

    @abstractmethod
    def article_tree(self, mevzuat_id: str) -> list[ArticleNode]:
        """Return the article tree of a document."""

    @abstractmethod
    def article_content(self, mevzuat_id: str, madde_id: str) -> ArticleContent:
        """Return the body of a single article."""

    def close(self) -> None:
        return None
