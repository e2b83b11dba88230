"""CLI entry point for the ranking engine."""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from feedrank.core.config import Settings
from feedrank.core.errors import RankingError
from feedrank.core.schemas import Mode, RankRequest
from feedrank.graph.store import InMemoryGraphStore
from feedrank.pipeline.orchestrator import export_page_json, rank
from feedrank.pipeline.ranker import offset_for_page
from feedrank.sources.documents import candidates_from_documents, viewer_from_document


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Personalized ranking engine - rank jobs, people, or feed posts for a viewer",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    rank_parser = subparsers.add_parser("rank", help="Rank a JSON fixture of documents")
    rank_parser.add_argument(
        "--input",
        required=True,
        help="Path to JSON fixture: {viewer, candidates, graph}",
    )
    rank_parser.add_argument(
        "--mode",
        required=True,
        choices=[m.value for m in Mode],
        help="Which call site to rank for",
    )
    rank_parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in weights)",
    )
    rank_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Page size (default: ranking.default_limit)",
    )
    rank_parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="1-based page number (default: 1)",
    )
    rank_parser.add_argument(
        "--now",
        default=None,
        help="Reference time as ISO 8601 (default: current UTC time)",
    )
    rank_parser.add_argument(
        "--explain",
        action="store_true",
        help="Include the per-signal score breakdown",
    )
    rank_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_fixture(path: str | Path) -> dict[str, Any]:
    """Load a ranking fixture from JSON."""
    path = Path(path)
    if not path.exists():
        msg = f"Input file not found: {path}"
        raise FileNotFoundError(msg)
    data = json.loads(path.read_text())
    if not isinstance(data, dict) or "viewer" not in data:
        msg = "fixture must be a JSON object with a 'viewer' key"
        raise ValueError(msg)
    if not isinstance(data["viewer"], dict):
        msg = "fixture 'viewer' must be a JSON object"
        raise ValueError(msg)
    candidates = data.get("candidates", [])
    if not isinstance(candidates, list) or not all(isinstance(c, dict) for c in candidates):
        msg = "fixture 'candidates' must be a list of JSON objects"
        raise ValueError(msg)
    graph = data.get("graph", {})
    if not isinstance(graph, dict) or not all(isinstance(v, list) for v in graph.values()):
        msg = "fixture 'graph' must map user ids to lists of ids"
        raise ValueError(msg)
    return data


def cmd_rank(args: argparse.Namespace) -> str:
    """Handle the rank subcommand. Returns the page as JSON."""
    settings = Settings.from_yaml(args.config) if args.config else Settings()
    fixture = load_fixture(args.input)
    mode = Mode(args.mode)

    if args.now:
        now = datetime.fromisoformat(args.now.replace("Z", "+00:00"))
    else:
        now = datetime.now(timezone.utc)
    limit = args.limit if args.limit is not None else settings.ranking.default_limit

    request = RankRequest(
        viewer=viewer_from_document(fixture["viewer"]),
        candidates=candidates_from_documents(mode, fixture.get("candidates", [])),
        now=now,
        limit=limit,
        offset=offset_for_page(args.page, limit),
        mode=mode,
    )
    graph_store = InMemoryGraphStore(fixture.get("graph", {}))
    page = rank(request, settings, graph_store)
    return export_page_json(page, explain=args.explain)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "rank":
        try:
            output = cmd_rank(args)
        except (FileNotFoundError, ValueError, ValidationError, RankingError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(output)


if __name__ == "__main__":
    main()
