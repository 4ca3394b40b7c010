#!/usr/bin/env python

from __future__ import annotations

"""
Manual runner for the legislation retrieval pipeline.

Examples:
  python scripts/run_search.py --query "kıdem tazminatı nasıl hesaplanır" --explain
  MEVZUAT_SERVICE_URL=http://localhost:8080 python scripts/run_search.py --query "kira artışı" --live
  python scripts/run_search.py --query "kıdem tazminatı" --detail 4857

Without --live it answers from tests/fixtures/mevzuat_search.json (offline sanity).
"""

import argparse
import sys
from pathlib import Path

import orjson

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mevzuat_search.connectors.base import LegislationConnector
from mevzuat_search.connectors.fixture import FixtureConnector
from mevzuat_search.connectors.mevzuat_mbs import MevzuatMBSConnector
from mevzuat_search.core.embed import CohereEmbedder, Embedder, LocalEmbedder
from mevzuat_search.core.utils import configure_logging
from mevzuat_search.retrieval import enhanced_mevzuat_search, fetch_document_content
from mevzuat_search.retrieval.keywords import extract_keywords


def build_embedder(kind: str) -> Embedder | None:
    if kind == "cohere":
        return CohereEmbedder()
    if kind == "local":
        return LocalEmbedder()
    return None


def build_connector(live: bool) -> LegislationConnector:
    if live:
        return MevzuatMBSConnector()
    return FixtureConnector()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--query", required=True, help="Free-text Turkish legal question.")
    parser.add_argument("--domain", default=None, help="Legal domain for the filter (default: classified).")
    parser.add_argument("--search-type", choices=("fulltext", "title"), default="fulltext")
    parser.add_argument("--max-results", type=int, default=10)
    parser.add_argument("--live", action="store_true", help="Call MEVZUAT_SERVICE_URL instead of fixtures.")
    parser.add_argument("--embedder", choices=("none", "cohere", "local"), default="none")
    parser.add_argument("--explain", action="store_true", help="Include sprint4Details in the output.")
    parser.add_argument("--detail", metavar="MEVZUAT_ID", help="Also fetch article contents for this document.")
    args = parser.parse_args()

    configure_logging()
    connector = build_connector(args.live)
    try:
        response = enhanced_mevzuat_search(
            args.query,
            domain=args.domain,
            search_type=args.search_type,
            max_results=args.max_results,
            connector=connector,
            embedder=build_embedder(args.embedder),
        )
        payload = response.to_payload()
        if not args.explain:
            payload["stats"].pop("sprint4Details", None)
        if args.detail:
            detail = fetch_document_content(connector, args.detail, extract_keywords(args.query))
            payload["detail"] = detail.model_dump(by_alias=True, mode="json")
    finally:
        connector.close()

    print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


if __name__ == "__main__":
    main()
