from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError

from mevzuat_search.core.http import HttpClient, HttpError, HttpResponse, RateLimiter
from mevzuat_search.core.schema import ArticleContent, ArticleNode, MevzuatSearchResult, SearchRequest
from mevzuat_search.core.settings import MEVZUAT_RATE_PER_SEC, MEVZUAT_SERVICE_URL, MEVZUAT_TIMEOUT_SEC

from .base import LegislationConnector, SearchServiceError

logger = structlog.get_logger()


class MevzuatMBSConnector(LegislationConnector):
    source = "MBS"

    def __init__(
        self,
        base_url: str = MEVZUAT_SERVICE_URL,
        http: HttpClient | None = None,
        timeout: float = MEVZUAT_TIMEOUT_SEC,
    ) -> None:
        self.http = http or HttpClient(
            base_url=base_url,
            rate_limiter=RateLimiter(rate=MEVZUAT_RATE_PER_SEC, capacity=5),
            timeout=timeout,
        )

    def _post(self, path: str, payload: dict[str, Any]) -> Any:
        try:
            resp: HttpResponse = self.http.post_json(path, payload)
        except HttpError as exc:
            raise SearchServiceError(f"{path} çağrısı başarısız: {exc}") from exc
        if not resp.ok:
            logger.warning("mbs.bad_status", path=path, status=resp.status_code)
            raise SearchServiceError(f"{path} HTTP {resp.status_code}")
        if resp.body is None:
            raise SearchServiceError(f"{path} JSON olmayan yanıt döndü")
        return resp.body

    def search(self, request: SearchRequest) -> MevzuatSearchResult:
        body = self._post("/search", request.to_payload())
        try:
            result = MevzuatSearchResult.model_validate(body)
        except ValidationError as exc:
            raise SearchServiceError(f"/search yanıtı çözülemedi: {exc}") from exc
        logger.info("mbs.search", phrase=request.phrase, title=request.mevzuat_adi, count=len(result.documents))
        return result

    def article_tree(self, mevzuat_id: str) -> list[ArticleNode]:
        body = self._post("/article-tree", {"mevzuat_id": mevzuat_id})
        if not isinstance(body, list):
            raise SearchServiceError("/article-tree liste döndürmedi")
        try:
            return [ArticleNode.model_validate(node) for node in body]
        except ValidationError as exc:
            raise SearchServiceError(f"/article-tree yanıtı çözülemedi: {exc}") from exc

    def article_content(self, mevzuat_id: str, madde_id: str) -> ArticleContent:
        body = self._post("/article-content", {"mevzuat_id": mevzuat_id, "madde_id": madde_id})
        try:
            return ArticleContent.model_validate(body)
        except ValidationError as exc:
            raise SearchServiceError(f"/article-content yanıtı çözülemedi: {exc}") from exc

    def close(self) -> None:
        self.http.close()
