from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Iterator, Sequence, TypeVar

import structlog

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def today() -> date:
    return utcnow().date()


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def chunked(seq: Sequence[T] | Iterable[T], size: int) -> Iterator[list[T]]:
    bucket: list[T] = []
    for item in seq:
        bucket.append(item)
        if len(bucket) >= size:
            yield bucket
            bucket = []
    if bucket:
        yield bucket


def unique(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def parse_date(value: str | date | datetime | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    # ISO timestamps: keep the date part
    if len(text) > 10 and text[4:5] == "-" and text[10:11] in {"T", " "}:
        text = text[:10]
    for fmt in ("%Y-%m-%d", "%d.%m.%Y", "%d/%m/%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def configure_logging(level: int = logging.INFO) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
