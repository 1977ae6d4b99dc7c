"""Command-line entry point for indexing and querying BankRAG."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from bankrag.banking import BankingDataset
from bankrag.config import config
from bankrag.embeddings import get_embedder
from bankrag.engine import RAGEngine
from bankrag.exceptions import BankRAGError
from bankrag.indexer import DocumentIndexer
from bankrag.vector_store import get_vector_store

if TYPE_CHECKING:
    from collections.abc import Sequence


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Retrieval-augmented question answering over banking data.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("index", "Index banking data and policies if the store is empty."),
        ("reindex", "Delete all embeddings and index from scratch."),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--data",
            type=Path,
            default=None,
            help="JSON export with customers, accounts and transactions.",
        )
        sub.add_argument(
            "--policies",
            type=Path,
            default=None,
            help="Directory of extra TXT/PDF policies (default: POLICY_DIR).",
        )

    query = subparsers.add_parser("query", help="Ask a question.")
    query.add_argument("text", help="The question to answer.")
    query.add_argument(
        "--session-id",
        default=None,
        help="Continue an existing conversation session.",
    )
    query.add_argument(
        "--source-type",
        default=None,
        help="Restrict retrieval to one source type (e.g. policy).",
    )
    query.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        help="Print the full response as JSON.",
    )

    subparsers.add_parser("status", help="Show index size and configuration.")
    subparsers.add_parser("debug", help="Probe embedding and retrieval.")
    return parser.parse_args(argv)


def build_indexer(args: argparse.Namespace) -> DocumentIndexer:
    """Wire an indexer from configuration and CLI options."""  # noqa: DOC201
    embedder = get_embedder()
    store = get_vector_store(dimension=embedder.dimension)
    store.load()
    dataset = (
        BankingDataset.from_json(args.data)
        if getattr(args, "data", None) is not None
        else None
    )
    policy_dir = getattr(args, "policies", None) or config.POLICY_DIR
    return DocumentIndexer(store, embedder, dataset=dataset, policy_dir=policy_dir)


def print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))  # noqa: T201


def run_query(args: argparse.Namespace) -> int:
    """Answer one question and print the result."""  # noqa: DOC201
    with RAGEngine.from_config() as engine:
        response = engine.query(
            args.text,
            session_id=args.session_id,
            source_type=args.source_type,
        )
    if args.as_json:
        print_json(response.to_dict())
        return 0

    print(response.answer)  # noqa: T201
    print()  # noqa: T201
    print(f"session: {response.session_id}")  # noqa: T201
    for source in response.sources:
        print(  # noqa: T201
            f"  [{source.source_type}] {source.source_id} "
            f"({source.similarity:.3f})"
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Validate configuration and dispatch the requested command."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    try:
        config.validate()
    except ValueError:
        logger.exception("Configuration invalid")
        return 1

    try:
        if args.command == "index":
            print_json(build_indexer(args).index_all().to_dict())
        elif args.command == "reindex":
            print_json(build_indexer(args).reindex_all().to_dict())
        elif args.command == "query":
            return run_query(args)
        elif args.command == "status":
            print_json(build_indexer(args).status())
        elif args.command == "debug":
            with RAGEngine.from_config() as engine:
                print_json(engine.debug())
    except (BankRAGError, KeyError, ValueError, OSError):
        logger.exception("Command %s failed", args.command)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
