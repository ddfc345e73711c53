"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence

from rich.console import Console
from rich.table import Table

from refgraph.authors import resolve_authors
from refgraph.concepts import compute_formal_concepts, name_concepts
from refgraph.config import load_settings, resolve_settings_path
from refgraph.exceptions import ConceptLimitError
from refgraph.keywords import matched_keyword_groups, parse_boost_keywords
from refgraph.models import EngineSettings, PublicationMetadata, PublicationRecord, normalize_doi
from refgraph.suggestions import CatalogMetadataFetcher, SuggestionEngine, SuggestionResult
from refgraph.utils import setup_logging
from refgraph.utils.structured_log import bind_run, configure_run_logging, load_events_from_jsonl, summarize_events

logger = logging.getLogger(__name__)


@dataclass
class Dataset:
    """Reading-list snapshot consumed by the CLI commands."""

    selected: List[PublicationRecord]
    excluded: set[str] = field(default_factory=set)
    read: set[str] = field(default_factory=set)
    boost_keywords: List[str] = field(default_factory=list)
    catalog: Dict[str, PublicationMetadata] = field(default_factory=dict)


def load_dataset(path: str) -> Dataset:
    """Read a JSON dataset; publications without boost keywords get them from their titles."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected object at root of dataset file: {path}")

    keyword_field = data.get("boost_keywords") or ""
    if isinstance(keyword_field, list):
        keyword_field = ", ".join(keyword_field)
    groups = parse_boost_keywords(keyword_field)

    selected = []
    for entry in data.get("selected", []):
        publication = PublicationRecord.model_validate(entry)
        if not publication.boost_keywords and groups:
            matched = matched_keyword_groups(publication.title, groups)
            publication = publication.model_copy(
                update={"boost_keywords": [group for group in groups if group in matched]}
            )
        selected.append(publication)

    return Dataset(
        selected=selected,
        excluded={normalize_doi(doi) for doi in data.get("excluded", [])},
        read={normalize_doi(doi) for doi in data.get("read", [])},
        boost_keywords=groups,
        catalog={
            doi: PublicationMetadata.model_validate(entry) for doi, entry in (data.get("catalog") or {}).items()
        },
    )


def _load_engine_settings(settings_path: str | None) -> EngineSettings:
    if settings_path:
        return load_settings(settings_path)
    resolved = resolve_settings_path()
    if Path(resolved).exists():
        return load_settings(resolved)
    return EngineSettings()


async def _run_suggest(
    dataset: Dataset,
    settings: EngineSettings,
    console: Console,
    max_suggestions: int | None,
) -> SuggestionResult:
    engine = SuggestionEngine(CatalogMetadataFetcher(dataset.catalog), settings)
    with console.status("Computing suggestions...") as status:
        result = await engine.compute_suggestions(
            dataset.selected,
            excluded_dois=dataset.excluded,
            max_suggestions=max_suggestions,
            read_dois=dataset.read,
            on_progress=lambda text: status.update(text),
        )
        if result.prefetch_task is not None:
            await result.prefetch_task
    return result


def _print_suggestions(console: Console, result: SuggestionResult) -> None:
    table = Table(title=f"Suggestions ({len(result.publications)} of {result.total_suggestions})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("DOI", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Cited by", justify="right")
    table.add_column("Cites", justify="right")
    table.add_column("Read", justify="center")
    for rank, publication in enumerate(result.publications, start=1):
        table.add_row(
            str(rank),
            publication.doi,
            publication.title or "[dim]not loaded[/]",
            str(publication.citation_count),
            str(publication.reference_count),
            "x" if publication.is_read else "",
        )
    console.print(table)
    if result.repair.total:
        console.print(f"[yellow]Repaired {result.repair.total} asymmetric citation links.[/]")
    for failure in result.failures:
        console.print(f"[red]Metadata unavailable:[/] {failure.doi} ({failure.error})")


def _print_authors(console: Console, dataset: Dataset, settings: EngineSettings, limit: int) -> None:
    authors = resolve_authors(dataset.selected, settings.authors, settings.scoring)
    table = Table(title=f"Authors ({min(limit, len(authors))} of {len(authors)})")
    table.add_column("Name", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Publications", justify="right")
    table.add_column("First author", justify="right")
    table.add_column("Years", justify="center")
    table.add_column("ORCID", style="dim")
    for author in authors[:limit]:
        if author.year_min is None:
            years = ""
        elif author.year_min == author.year_max:
            years = str(author.year_min)
        else:
            years = f"{author.year_min}-{author.year_max}"
        table.add_row(
            author.name,
            f"{author.score:g}",
            str(author.count),
            str(author.first_author_count),
            years,
            author.orcid or "",
        )
    console.print(table)


def _print_concepts(console: Console, dataset: Dataset, settings: EngineSettings, limit: int) -> None:
    concepts = compute_formal_concepts(dataset.selected, dataset.boost_keywords, settings.concepts)
    ranked = name_concepts(concepts, dataset.selected)
    table = Table(title=f"Concepts ({min(limit, len(ranked))} ranked, {len(concepts)} total)")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Importance", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Keywords", style="white")
    table.add_column("Citations", style="dim")
    table.add_column("Publications", justify="right")
    for concept in ranked[:limit]:
        table.add_row(
            concept.name,
            str(concept.importance),
            str(concept.remaining_importance),
            ", ".join(concept.keywords) or "-",
            ", ".join(concept.citations) or "-",
            str(len(concept.extent)),
        )
    console.print(table)


def _print_events(console: Console, log_dir: str) -> int:
    events_path = Path(log_dir) / "events.jsonl"
    if not events_path.exists():
        console.print(f"[red]Error:[/] No events file at {events_path}")
        return 1
    events = load_events_from_jsonl(str(events_path))
    table = Table(title=f"Events ({len(events)} in {events_path})")
    table.add_column("Run", style="dim", no_wrap=True)
    table.add_column("Event", style="cyan")
    table.add_column("Detail", style="white")
    table.add_column("Count", justify="right")
    for run_id, name, detail, count in summarize_events(events):
        table.add_row(run_id, name, detail or "-", str(count))
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("dataset", help="JSON file with selected, excluded, read, boost_keywords and catalog")
    common.add_argument("--settings", default=None, help="Settings YAML (default: $REFGRAPH_SETTINGS or config/settings.yaml)")
    common.add_argument("--verbose", "-v", action="store_true", help="Debug-level console logging")
    common.add_argument("--debug", "-d", action="store_true", help="Verbose plus timestamps and logger names")
    common.add_argument("--log-dir", default=None, help="Write structured events to <log-dir>/events.jsonl")

    parser = argparse.ArgumentParser(prog="refgraph")
    sub = parser.add_subparsers(dest="command")

    suggest = sub.add_parser("suggest", parents=[common], help="Rank publications linked to the selection")
    suggest.add_argument("--max", type=int, default=None, dest="max_suggestions")

    authors = sub.add_parser("authors", parents=[common], help="Resolve and rank the selection's authors")
    authors.add_argument("--limit", type=int, default=25)

    concepts = sub.add_parser("concepts", parents=[common], help="Formal concepts over boost keywords and citations")
    concepts.add_argument("--limit", type=int, default=10)

    events = sub.add_parser("events", help="Summarize the structured events written with --log-dir")
    events.add_argument("log_dir", help="Directory holding events.jsonl")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    console = Console()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    if args.command == "events":
        return _print_events(console, args.log_dir)

    try:
        settings = _load_engine_settings(args.settings)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    setup_logging(settings.logging, verbose=args.verbose, debug=args.debug)
    if args.log_dir:
        events_path = configure_run_logging(args.log_dir)
        bind_run(uuid.uuid4().hex[:8], args.command)
        logger.debug("Writing structured events to %s", events_path)

    try:
        dataset = load_dataset(args.dataset)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/] Cannot read dataset {args.dataset}: {e}")
        return 1

    if args.command == "suggest":
        result = asyncio.run(_run_suggest(dataset, settings, console, args.max_suggestions))
        _print_suggestions(console, result)
        return 0

    if args.command == "authors":
        _print_authors(console, dataset, settings, args.limit)
        return 0

    if args.command == "concepts":
        try:
            _print_concepts(console, dataset, settings, args.limit)
        except ConceptLimitError as e:
            console.print(f"[red]Error:[/] {e}")
            return 1
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
