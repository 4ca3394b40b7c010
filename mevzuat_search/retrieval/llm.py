from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import httpx
import orjson
import structlog

from mevzuat_search.core.legal import DOMAIN_NAMES, GENERAL_DOMAIN
from mevzuat_search.core.settings import OLLAMA_ENDPOINT, OLLAMA_MODEL
from mevzuat_search.core.utils import clamp, unique

from .keywords import extract_keywords, generate_search_terms
from .schema import IntentAnalysis

logger = structlog.get_logger()

LLM_FALLBACK_CONFIDENCE = 0.3

DOMAIN_PROMPT = """Sen, Türk hukuku soru sınıflandırıcısısın.
Kullanıcının sorusunu aşağıdaki hukuk alanlarından YALNIZCA birine ata:
{domains}
Emin değilsen "Genel Hukuk" seç. Yeni alan uydurma.
ÇIKTIYI SADECE JSON olarak döndür. Biçim:
{{"domain": "...", "confidence": 0.0, "keywords": ["..."], "reasoning": "..."}}
Başka açıklama ekleme.

Soru: {message}
"""


class LLMClient(Protocol):
    def generate(self, prompt: str, temperature: float = 0.2) -> str:
        ...


@dataclass
class LocalQwenClient:
    """
    Qwen served by a local Ollama instance, used to double-check low-confidence domains.
    """

    model: str = OLLAMA_MODEL
    endpoint: str = OLLAMA_ENDPOINT
    timeout: float = 30.0

    def generate(self, prompt: str, temperature: float = 0.2) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "temperature": temperature,
            "stream": False,
            "format": "json",
        }
        try:
            resp = httpx.post(self.endpoint, json=payload, timeout=self.timeout)
        except httpx.HTTPError as exc:
            raise RuntimeError(
                "Ollama/Qwen endpoint'a bağlanılamadı. "
                "Lütfen `ollama serve` ve modeli ayakta olduğundan emin olun."
            ) from exc

        if resp.status_code != 200:
            raise RuntimeError(f"Ollama/Qwen API hatası: {resp.status_code} {resp.text}")

        data = resp.json()
        if "response" in data:
            return data["response"]
        raise RuntimeError(f"Beklenmedik Ollama yanıtı: {orjson.dumps(data).decode()}")


@dataclass
class StaticLLMClient:
    """
    Test/deterministic client.
    """

    text: str

    def generate(self, prompt: str, temperature: float = 0.2) -> str:
        return self.text


def build_domain_prompt(message: str) -> str:
    domains = "\n".join(f"- {name}" for name in DOMAIN_NAMES)
    return DOMAIN_PROMPT.format(domains=domains, message=message.strip())


def classify_with_llm(message: str, client: LLMClient | None = None) -> IntentAnalysis:
    keywords = extract_keywords(message)
    fallback = IntentAnalysis(
        domain=GENERAL_DOMAIN,
        confidence=LLM_FALLBACK_CONFIDENCE,
        keywords=keywords,
        search_terms=generate_search_terms(message, keywords),
        method="llm",
        reasoning="LLM sınıflandırması kullanılamadı, genel hukuk varsayıldı.",
    )
    if client is None:
        return fallback

    try:
        raw = client.generate(build_domain_prompt(message), temperature=0.1)
    except RuntimeError as exc:
        logger.warning("llm.generate_failed", error=str(exc))
        return fallback

    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.warning("llm.invalid_json", preview=raw[:120])
        return fallback
    if not isinstance(data, dict) or data.get("domain") not in DOMAIN_NAMES:
        logger.warning("llm.unknown_domain", domain=data.get("domain") if isinstance(data, dict) else None)
        return fallback

    try:
        confidence = clamp(float(data.get("confidence", LLM_FALLBACK_CONFIDENCE)))
    except (TypeError, ValueError):
        confidence = LLM_FALLBACK_CONFIDENCE
    llm_keywords = data.get("keywords")
    if not isinstance(llm_keywords, list):
        llm_keywords = []
    merged = unique([str(k).lower() for k in llm_keywords] + keywords)
    return IntentAnalysis(
        domain=data["domain"],
        confidence=confidence,
        keywords=merged,
        search_terms=generate_search_terms(message, merged),
        method="llm",
        reasoning=data.get("reasoning") or None,
    )
