# ruff: noqa: T201

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from factrecall.adapters.extraction import parse_extraction
from factrecall.app import (
    index,
    ingest_extraction,
    open_application,
    promote,
    record_content,
)
from factrecall.config import ConfigurationError, configure_logging
from factrecall.domain.model import FactScope, RecallScope, SearchMode

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from factrecall.app import Application

log = logging.getLogger(__name__)

DEFAULT_CHANGES_WINDOW = timedelta(days=7)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recall facts remembered across sessions")
    parser.add_argument("--verbose", action="store_true", help="Log at debug level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scope_choices = [scope.value for scope in RecallScope]

    recall = subparsers.add_parser("recall", help="Lexical recall over stored content")
    recall.add_argument("query", type=str, help="Free text to look for")
    recall.add_argument("--limit", type=int, default=10, help="Maximum results (default: %(default)s)")
    recall.add_argument("--scope", choices=scope_choices, default=RecallScope.ALL.value)

    search = subparsers.add_parser("search", help="Semantic search over fact embeddings")
    search.add_argument("query", type=str, help="Free text to embed and compare")
    search.add_argument("--limit", type=int, default=10, help="Maximum results (default: %(default)s)")
    search.add_argument("--scope", choices=scope_choices, default=RecallScope.ALL.value)
    search.add_argument(
        "--mode",
        choices=[mode.value for mode in SearchMode],
        default=SearchMode.BOTH.value,
        help="Vector, text or both (default: %(default)s)",
    )

    concepts = subparsers.add_parser("concepts", help="Facts relevant to all given concepts")
    concepts.add_argument("concepts", nargs="+", help="Two to five concepts")
    concepts.add_argument("--limit", type=int, default=10, help="Maximum results (default: %(default)s)")
    concepts.add_argument("--scope", choices=scope_choices, default=RecallScope.ALL.value)

    explain = subparsers.add_parser("explain", help="Show a fact with receipts, links and conflicts")
    explain.add_argument("fact_id", type=str, help="Fact id")
    explain.add_argument("--scope", choices=scope_choices, default=RecallScope.ALL.value)

    conflicts = subparsers.add_parser("conflicts", help="List open conflicts")
    conflicts.add_argument("--scope", choices=scope_choices, default=RecallScope.ALL.value)

    changes = subparsers.add_parser("changes", help="Facts created since a point in time")
    changes.add_argument(
        "--since",
        type=str,
        help="ISO-8601 timestamp (UTC); defaults to seven days ago",
    )
    changes.add_argument("--limit", type=int, default=50, help="Maximum results (default: %(default)s)")
    changes.add_argument("--scope", choices=scope_choices, default=RecallScope.ALL.value)

    promote_parser = subparsers.add_parser("promote", help="Copy a project fact to the global store")
    promote_parser.add_argument("fact_id", type=str, help="Project fact id")

    ingest = subparsers.add_parser("ingest", help="Resolve an extraction JSON document")
    ingest.add_argument("--file", type=str, required=True, help="Extraction JSON ('-' for stdin)")
    ingest.add_argument("--text-file", type=str, help="Source text the facts were extracted from")
    ingest.add_argument("--source", type=str, default="extraction", help="Content source label")
    ingest.add_argument("--session-id", type=str, help="Session the content belongs to")

    record = subparsers.add_parser("record", help="Store text for lexical recall")
    record.add_argument("--file", type=str, required=True, help="Text file ('-' for stdin)")
    record.add_argument("--source", type=str, default="note", help="Content source label")
    record.add_argument("--session-id", type=str, help="Session the content belongs to")
    record.add_argument(
        "--scope",
        choices=[scope.value for scope in FactScope],
        default=FactScope.PROJECT.value,
    )

    index_parser = subparsers.add_parser("index", help="Compute missing fact embeddings")
    index_parser.add_argument("--scope", choices=scope_choices, default=RecallScope.ALL.value)
    index_parser.add_argument("--batch-size", type=int, default=100)
    index_parser.add_argument(
        "--force", action="store_true", help="Drop existing embeddings and recompute all"
    )

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _since(args: argparse.Namespace, *, now_provider: Callable[[], datetime] = _utcnow) -> datetime:
    if args.since:
        return _parse_iso_datetime(args.since)
    return now_provider() - DEFAULT_CHANGES_WINDOW


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: _jsonable(getattr(value, item.name)) for item in dataclasses.fields(value)
        }
    if isinstance(value, list | tuple):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _emit(payload: object) -> None:
    print(json.dumps(_jsonable(payload), indent=2))


def _run(app: Application, args: argparse.Namespace) -> None:  # noqa: C901, PLR0912
    context = app.context
    command = args.command
    if command == "recall":
        _emit(app.recall.query(args.query, limit=args.limit, scope=args.scope, context=context))
    elif command == "search":
        _emit(
            app.recall.query_semantic(
                args.query, limit=args.limit, scope=args.scope, mode=args.mode, context=context
            )
        )
    elif command == "concepts":
        _emit(
            app.recall.query_concepts(
                args.concepts, limit=args.limit, scope=args.scope, context=context
            )
        )
    elif command == "explain":
        _emit(app.recall.explain(args.fact_id, scope=args.scope, context=context))
    elif command == "conflicts":
        _emit(app.recall.conflicts(scope=args.scope, context=context))
    elif command == "changes":
        _emit(app.recall.changes(_since(args), limit=args.limit, scope=args.scope, context=context))
    elif command == "promote":
        result = promote(app, _parse_uuid(args.fact_id))
        _emit(result)
    elif command == "ingest":
        payload = parse_extraction(_read_input(args.file))
        text = _read_input(args.text_file) if args.text_file else None
        result = ingest_extraction(
            app, payload, text=text, source=args.source, session_id=args.session_id
        )
        _emit({"content_item_ids": result.content_item_ids, "outcomes": result.outcomes})
    elif command == "record":
        content_id = record_content(
            app,
            _read_input(args.file),
            source=args.source,
            scope=FactScope(args.scope),
            session_id=args.session_id,
        )
        _emit({"content_item_id": content_id})
    elif command == "index":
        indexed = index(app, scope=args.scope, batch_size=args.batch_size, force=args.force)
        log.info("Indexed %d fact(s)", indexed)
        _emit({"indexed": indexed})
    else:
        raise ValueError(f"Unsupported command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        configure_logging()
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            logging.getLogger().setLevel(logging.DEBUG)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        with open_application() as app:
            _run(app, parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("Invalid request")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
