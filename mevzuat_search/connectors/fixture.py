from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

from mevzuat_search.core.schema import ArticleContent, ArticleNode, MevzuatSearchResult, SearchRequest
from mevzuat_search.core.text import turkish_lower

from .base import LegislationConnector, SearchServiceError

DEFAULT_FIXTURE_DIR = Path(__file__).resolve().parents[2] / "tests/fixtures"


class FixtureConnector(LegislationConnector):
    """
    Offline connector serving recorded service responses.

    mevzuat_search.json holds "documents", "articleTrees" keyed by mevzuat id and
    "articleContents" keyed by mevzuat id then madde id. A search matches documents whose
    title or content contains any word of the request term.
    """

    source = "fixture"

    def __init__(self, fixture_dir: str | Path | None = None, name: str = "mevzuat_search.json") -> None:
        self.fixture_dir = Path(fixture_dir or DEFAULT_FIXTURE_DIR)
        self.data: dict[str, Any] = orjson.loads((self.fixture_dir / name).read_bytes())
        self.requests: list[SearchRequest] = []

    def search(self, request: SearchRequest) -> MevzuatSearchResult:
        self.requests.append(request)
        term = turkish_lower(request.phrase or request.mevzuat_adi or "")
        words = [w for w in term.split() if len(w) > 2]
        matches = []
        for raw in self.data.get("documents", []):
            haystack = turkish_lower(f"{raw.get('mevzuatAdi', '')} {raw.get('content', '')}")
            if any(word in haystack for word in words):
                matches.append(raw)
        page = matches[: request.page_size]
        return MevzuatSearchResult.model_validate(
            {
                "documents": page,
                "totalResults": len(matches),
                "currentPage": request.page_number,
                "pageSize": request.page_size,
                "totalPages": -(-len(matches) // request.page_size) if request.page_size else 0,
            }
        )

    def article_tree(self, mevzuat_id: str) -> list[ArticleNode]:
        trees = self.data.get("articleTrees", {})
        if mevzuat_id not in trees:
            raise SearchServiceError(f"/article-tree HTTP 404 ({mevzuat_id})")
        return [ArticleNode.model_validate(node) for node in trees[mevzuat_id]]

    def article_content(self, mevzuat_id: str, madde_id: str) -> ArticleContent:
        contents = self.data.get("articleContents", {}).get(mevzuat_id, {})
        if madde_id not in contents:
            raise SearchServiceError(f"/article-content HTTP 404 ({mevzuat_id}/{madde_id})")
        return ArticleContent.model_validate(contents[madde_id])
