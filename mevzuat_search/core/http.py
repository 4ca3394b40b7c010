from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from .settings import MEVZUAT_TIMEOUT_SEC

DEFAULT_UA = "mevzuat-search/0.1 python-httpx"

logger = structlog.get_logger()


class RateLimiter:
    """Token bucket limiter in front of the legislation service."""

    def __init__(self, rate: float = 1.0, capacity: int = 2):
        self.rate = rate
        self.capacity = capacity
        self.tokens = capacity
        self.updated_at = time.monotonic()

    def acquire(self) -> None:
        now = time.monotonic()
        elapsed = now - self.updated_at
        self.updated_at = now
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        if self.tokens < 1:
            sleep_for = (1 - self.tokens) / self.rate
            time.sleep(sleep_for)
            self.tokens = 0
        self.tokens -= 1


class HttpError(Exception):
    pass


@dataclass
class HttpResponse:
    status_code: int
    text: str
    headers: dict[str, str]
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpClient:
    def __init__(
        self,
        base_url: str = "",
        user_agent: str = DEFAULT_UA,
        rate_limiter: RateLimiter | None = None,
        timeout: float = MEVZUAT_TIMEOUT_SEC,
        session_factory: Callable[..., httpx.Client] = httpx.Client,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter or RateLimiter()
        self.session = session_factory(timeout=timeout, headers={"User-Agent": user_agent})

    def _should_retry_status(self, status: int) -> bool:
        return status in {429, 500, 502, 503, 504}

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> HttpResponse:
        self.rate_limiter.acquire()
        url = self._url(path)
        try:
            resp = self.session.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("http.transport_error", url=url, error=str(exc))
            raise HttpError(str(exc)) from exc

        if self._should_retry_status(resp.status_code):
            logger.warning("http.retryable_status", url=url, status=resp.status_code)
            raise HttpError(f"retryable status {resp.status_code}")
        body: Any = None
        if resp.headers.get("content-type", "").startswith("application/json"):
            try:
                body = resp.json()
            except ValueError:
                body = None
        return HttpResponse(
            status_code=resp.status_code,
            text=resp.text,
            headers=dict(resp.headers),
            body=body,
        )

    def close(self) -> None:
        self.session.close()

    @retry(
        retry=retry_if_exception_type(HttpError),
        wait=wait_exponential_jitter(initial=0.5, max=4),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def post_json(self, path: str, payload: dict[str, Any]) -> HttpResponse:
        return self._request("POST", path, json=payload)
