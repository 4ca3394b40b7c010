from __future__ import annotations

import re
import time
from typing import Callable, Sequence

import structlog

from mevzuat_search.connectors.base import LegislationConnector, SearchServiceError
from mevzuat_search.core.embed import Embedder, EmbeddingError, cosine_similarity
from mevzuat_search.core.legal import CHUNK_DOMAIN_TERMS
from mevzuat_search.core.schema import ArticleNode
from mevzuat_search.core.settings import EMBED_BATCH_DELAY_SEC, EMBED_BATCH_SIZE
from mevzuat_search.core.text import ARTICLE_RE, clean_html, looks_like_html, turkish_lower
from mevzuat_search.core.utils import chunked

from .schema import DocumentContent, LegalContext, SemanticChunk, SemanticMatchResult

logger = structlog.get_logger()

SECTION_SPLIT_RE = re.compile(r"(?=\n\s*(?:Madde|MADDE|Fıkra|FIKRA|Bent|BENT)\s+\d+)")
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
STRUCTURE_RE = re.compile(r"madde\s+\d+|fıkra\s+\d+|bent\s+[a-z]")

MIN_CHUNK_CHARS = 20
MIN_CHUNK_SCORE = 0.1
DOMAIN_TERM_BONUS = 0.1
KEYWORD_BONUS = 0.15
STRUCTURE_BONUS = 0.05
MAX_LEGAL_BONUS = 0.5

KEYWORD_ARTICLE_LIMIT = 5
DEFAULT_ARTICLE_LIMIT = 3
ARTICLE_SEPARATOR = "\n\n---\n\n"

TREE_UNAVAILABLE = "Bu mevzuat (ID: {mevzuat_id}) için detaylı içerik şu anda alınamıyor."
TREE_EMPTY = "Bu mevzuat için madde içeriği bulunamadı."
CONTENT_UNAVAILABLE = "Bu mevzuat için içerik alınamadı."


def _split_large_section(text: str, max_size: int, overlap: int) -> list[str]:
    pieces: list[str] = []
    current = ""
    size = 0
    for sentence in SENTENCE_SPLIT_RE.split(text):
        if not sentence.strip():
            continue
        sentence = sentence.strip() + "."
        if size + len(sentence) > max_size and current:
            pieces.append(current.strip())
            words = current.split(" ")
            current = " ".join(words[-min(overlap, len(words)) :]) + " " + sentence
            size = len(current)
        else:
            current += " " + sentence
            size += len(sentence)
    if current.strip():
        pieces.append(current.strip())
    return pieces


def split_into_semantic_chunks(
    content: str, max_chunk_size: int = 500, overlap: int = 50
) -> list[SemanticChunk]:
    """
    Split legislation text at Madde/Fıkra/Bent boundaries.

    Sections longer than max_chunk_size are split by sentence, each new piece starting
    with the last `overlap` words of the previous one. Chunks of 20 characters or less
    are dropped.
    """
    chunks: list[SemanticChunk] = []
    offset = 0
    for section in SECTION_SPLIT_RE.split(content):
        start = offset
        offset += len(section)
        if not section.strip():
            continue
        if len(section) <= max_chunk_size:
            chunks.append(SemanticChunk(text=section.strip(), start_index=start, end_index=start + len(section)))
            continue
        for piece in _split_large_section(section, max_chunk_size, overlap):
            piece_start = start + max(section.find(piece), 0)
            chunks.append(SemanticChunk(text=piece, start_index=piece_start, end_index=piece_start + len(piece)))
    return [chunk for chunk in chunks if len(chunk.text.strip()) > MIN_CHUNK_CHARS]


def _domain_terms(domain: str) -> tuple[str, ...]:
    wanted = turkish_lower(domain)
    for name, terms in CHUNK_DOMAIN_TERMS.items():
        if turkish_lower(name) == wanted:
            return terms
    return ()


def legal_domain_relevance(text: str, domain: str, keywords: Sequence[str]) -> float:
    lowered = turkish_lower(text)
    score = sum(DOMAIN_TERM_BONUS for term in _domain_terms(domain) if term in lowered)
    score += sum(KEYWORD_BONUS for keyword in keywords if turkish_lower(keyword) in lowered)
    if STRUCTURE_RE.search(lowered):
        score += STRUCTURE_BONUS
    return min(score, MAX_LEGAL_BONUS)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _score_batch(
    batch: list[SemanticChunk],
    query_vector: list[float],
    embedder: Embedder,
    legal_context: LegalContext,
) -> list[SemanticChunk]:
    try:
        vectors = embedder.embed_many([chunk.text for chunk in batch], task="document")
        similarities = [cosine_similarity(query_vector, vector) for vector in vectors]
    except (EmbeddingError, ValueError) as exc:
        logger.warning("matching.batch_failed", size=len(batch), error=str(exc))
        return [chunk.model_copy(update={"score": 0.0, "reasoning": "İşleme hatası"}) for chunk in batch]

    scored = []
    for chunk, similarity in zip(batch, similarities):
        bonus = legal_domain_relevance(chunk.text, legal_context.domain, legal_context.keywords)
        scored.append(
            chunk.model_copy(
                update={
                    "score": similarity + bonus,
                    "legal_relevance": bonus,
                    "reasoning": f"Semantic: {similarity:.3f}, Legal: {bonus:.3f}",
                }
            )
        )
    return scored


def semantic_content_matching(
    query: str,
    content: str,
    legal_context: LegalContext,
    embedder: Embedder,
    max_chunks: int = 5,
    batch_size: int = EMBED_BATCH_SIZE,
    batch_delay: float = EMBED_BATCH_DELAY_SEC,
    sleep: Callable[[float], None] = time.sleep,
) -> SemanticMatchResult:
    started = time.perf_counter()
    chunks = split_into_semantic_chunks(content)
    if not chunks:
        return SemanticMatchResult(processing_time=_elapsed_ms(started))

    try:
        query_vector = embedder.embed(query, task="query")
    except EmbeddingError as exc:
        logger.warning("matching.query_embed_failed", error=str(exc))
        return SemanticMatchResult(processing_time=_elapsed_ms(started))

    scored: list[SemanticChunk] = []
    batches = list(chunked(chunks, batch_size))
    for index, batch in enumerate(batches):
        scored.extend(_score_batch(batch, query_vector, embedder, legal_context))
        if index < len(batches) - 1:
            sleep(batch_delay)

    scored.sort(key=lambda chunk: chunk.score, reverse=True)
    top = [chunk for chunk in scored[:max_chunks] if chunk.score > MIN_CHUNK_SCORE]
    average = sum(chunk.score for chunk in top) / len(top) if top else 0.0
    logger.info("matching.done", chunks=len(chunks), kept=len(top), average=round(average, 3))
    return SemanticMatchResult(
        chunks=top,
        total_chunks=len(chunks),
        average_score=average,
        best_match=top[0] if top else None,
        processing_time=_elapsed_ms(started),
    )


def relevance_reasoning(chunk_text: str, query: str, score: float) -> str:
    reasons: list[str] = []
    if score > 0.8:
        reasons.append("Çok yüksek semantic benzerlik")
    elif score > 0.6:
        reasons.append("Yüksek semantic benzerlik")
    elif score > 0.4:
        reasons.append("Orta düzey semantic benzerlik")

    lowered = turkish_lower(chunk_text)
    matching = [word for word in turkish_lower(query).split(" ") if len(word) > 2 and word in lowered]
    if matching:
        reasons.append(f"Anahtar kelime eşleşmesi: {', '.join(matching)}")
    if ARTICLE_RE.search(chunk_text):
        reasons.append("Madde referansı içeriyor")
    return "; ".join(reasons) if reasons else "Genel içerik uyumu"


def select_articles(tree: Sequence[ArticleNode], keywords: Sequence[str]) -> list[ArticleNode]:
    wanted = [turkish_lower(keyword) for keyword in keywords if keyword]
    if wanted:
        matched = [node for node in tree if any(keyword in turkish_lower(node.title) for keyword in wanted)]
        if matched:
            return matched[:KEYWORD_ARTICLE_LIMIT]
    return list(tree[:DEFAULT_ARTICLE_LIMIT])


def fetch_document_content(
    connector: LegislationConnector,
    mevzuat_id: str,
    keywords: Sequence[str] = (),
) -> DocumentContent:
    try:
        tree = connector.article_tree(mevzuat_id)
    except SearchServiceError as exc:
        logger.warning("detail.tree_failed", mevzuat_id=mevzuat_id, error=str(exc))
        return DocumentContent(
            mevzuat_id=mevzuat_id,
            content=TREE_UNAVAILABLE.format(mevzuat_id=mevzuat_id),
            fallback=True,
        )
    if not tree:
        return DocumentContent(mevzuat_id=mevzuat_id, content=TREE_EMPTY)

    titles: list[str] = []
    sections: list[str] = []
    for node in select_articles(tree, keywords):
        try:
            article = connector.article_content(mevzuat_id, node.madde_id)
        except SearchServiceError as exc:
            logger.warning("detail.article_failed", mevzuat_id=mevzuat_id, madde_id=node.madde_id, error=str(exc))
            continue
        if article.error_message and not article.markdown_content:
            continue
        body = article.markdown_content
        if looks_like_html(body):
            body = clean_html(body)
        title = node.title or f"Madde {node.madde_id}"
        titles.append(title)
        sections.append(f"## {title}\n\n{body}")

    logger.info("detail.done", mevzuat_id=mevzuat_id, articles=len(sections), total=len(tree))
    return DocumentContent(
        mevzuat_id=mevzuat_id,
        content=ARTICLE_SEPARATOR.join(sections) if sections else CONTENT_UNAVAILABLE,
        article_count=len(sections),
        total_articles=len(tree),
        article_titles=titles,
    )
