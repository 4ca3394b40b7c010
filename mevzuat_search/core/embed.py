from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Callable, Literal, Protocol, Sequence

import cohere
import structlog

from .settings import COHERE_EMBED_MODEL, LOCAL_EMBED_MODEL
from .text import normalize_for_embedding
from .utils import chunked

logger = structlog.get_logger()

EmbeddingTask = Literal["query", "document", "similarity"]

COHERE_INPUT_TYPES: dict[EmbeddingTask, str] = {
    "query": "search_query",
    "document": "search_document",
    "similarity": "clustering",
}


class EmbeddingError(Exception):
    pass


class Embedder(Protocol):
    def embed(self, text: str, task: EmbeddingTask = "similarity") -> list[float]:
        ...

    def embed_many(self, texts: Sequence[str], task: EmbeddingTask = "similarity") -> list[list[float]]:
        ...


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    if len(vec_a) != len(vec_b):
        raise ValueError("Vektör boyutları eşleşmiyor")
    dot = sum(a * b for a, b in zip(vec_a, vec_b))
    norm_a = math.sqrt(sum(a * a for a in vec_a))
    norm_b = math.sqrt(sum(b * b for b in vec_b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class CohereEmbedder:
    def __init__(
        self,
        api_key: str | None = None,
        model: str = COHERE_EMBED_MODEL,
        batch_size: int = 48,
    ) -> None:
        key = api_key or os.environ.get("COHERE_API_KEY")
        if not key:
            raise EmbeddingError("COHERE_API_KEY missing")
        self.client = cohere.ClientV2(api_key=key)
        self.model = model
        self.batch_size = batch_size

    def embed(self, text: str, task: EmbeddingTask = "similarity") -> list[float]:
        return self.embed_many([text], task=task)[0]

    def embed_many(self, texts: Sequence[str], task: EmbeddingTask = "similarity") -> list[list[float]]:
        vectors: list[list[float]] = []
        for batch in chunked([normalize_for_embedding(t) for t in texts], self.batch_size):
            try:
                resp = self.client.embed(
                    model=self.model,
                    texts=batch,
                    input_type=COHERE_INPUT_TYPES[task],
                    embedding_types=["float"],
                )
            except Exception as exc:
                raise EmbeddingError(f"Cohere embed çağrısı başarısız: {exc}") from exc
            vectors.extend(list(vec) for vec in resp.embeddings.float_)
            logger.info("embed.batch", provider="cohere", size=len(batch))
        return vectors


class LocalEmbedder:
    """sentence-transformers model loaded in-process."""

    def __init__(self, model: str = LOCAL_EMBED_MODEL, device: str | None = None) -> None:
        from sentence_transformers import SentenceTransformer

        self.model_name = model
        self.model = SentenceTransformer(model, device=device)

    def embed(self, text: str, task: EmbeddingTask = "similarity") -> list[float]:
        return self.embed_many([text], task=task)[0]

    def embed_many(self, texts: Sequence[str], task: EmbeddingTask = "similarity") -> list[list[float]]:
        try:
            encoded = self.model.encode(
                [normalize_for_embedding(t) for t in texts],
                normalize_embeddings=True,
                convert_to_numpy=True,
            )
        except Exception as exc:
            raise EmbeddingError(f"Yerel embed modeli başarısız: {exc}") from exc
        logger.info("embed.batch", provider="local", size=len(texts))
        return [row.tolist() for row in encoded]


@dataclass
class StaticEmbedder:
    """
    Test/deterministic embedder: vectors come from a lookup function.
    """

    lookup: Callable[[str], list[float]]
    calls: list[list[str]] = field(default_factory=list)

    def embed(self, text: str, task: EmbeddingTask = "similarity") -> list[float]:
        return self.embed_many([text], task=task)[0]

    def embed_many(self, texts: Sequence[str], task: EmbeddingTask = "similarity") -> list[list[float]]:
        self.calls.append(list(texts))
        try:
            return [self.lookup(normalize_for_embedding(t)) for t in texts]
        except EmbeddingError:
            raise
        except Exception as exc:
            raise EmbeddingError(f"Sabit embed araması başarısız: {exc}") from exc
