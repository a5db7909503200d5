"""Terminal client that reuses the in-process search logic."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable

from shoprank.catalog import ProductStore
from shoprank.config import settings
from shoprank.models import SearchRequest
from shoprank.search import SearchOutcome, search

MAX_RESULTS = 100
GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


def perform_query(store: ProductStore, query: str, sort_by: str = "relevance") -> SearchOutcome:
    request = SearchRequest(query=query, sort_by=sort_by, limit=MAX_RESULTS)
    return search(request, store)


def pretty_print_response(query: str, outcome: SearchOutcome) -> None:
    eta = outcome.took_ms
    color = GREEN if eta < 200 else RED
    eta_label = f"{color}{eta:.1f} ms{RESET}"
    intents = outcome.intent.intents.model_dump(by_alias=True, exclude_none=True)
    print(f"Query: {query} | processed: {outcome.intent.processed_query!r} | results: {outcome.total} | ETA: {eta_label}")
    print(f"  tokens={list(outcome.intent.tokens)} intents={intents}")
    for idx, item in enumerate(outcome.results[:MAX_RESULTS], start=1):
        score_repr = f"{item.score:.2f}" if item.score is not None else "-"
        print(
            f"  {idx:02d}. score={score_repr} | {item.metadata.get('brand')} | "
            f"{item.selling_price:.0f} | stock={item.stock} | {item.title}"
        )


def interactive_shell(store: ProductStore, sort_by: str) -> None:
    print("Interactive product search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not query:
            continue
        if query.lower() in {"exit", "quit"}:
            return
        pretty_print_response(query, perform_query(store, query, sort_by))


def batch_mode(store: ProductStore, file_path: Path, sort_by: str) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query:
                continue
            pretty_print_response(query, perform_query(store, query, sort_by))


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the product search service")
    parser.add_argument("query", nargs="?", help="Query string. If omitted, starts REPL mode.")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    parser.add_argument("--catalog", type=Path, default=Path(settings.catalog_path), help="JSON catalog file")
    parser.add_argument(
        "--sort",
        default="relevance",
        choices=["relevance", "price_asc", "price_desc", "rating", "newest", "popularity", "discount"],
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    store = ProductStore.from_json(args.catalog)
    if args.batch:
        batch_mode(store, args.batch, args.sort)
        return 0
    if args.query:
        pretty_print_response(args.query, perform_query(store, args.query, args.sort))
        return 0
    interactive_shell(store, args.sort)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
