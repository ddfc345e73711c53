"""Suggestion engine: rank unselected publications by their links to the selected set.

A candidate's citation_count is the number of selected publications whose
bibliography lists it (cited by N selected); its reference_count is the
number of selected publications it is known to cite (cites N selected).
Their sum is the ranking signal.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Sequence

from refgraph.models import EngineSettings, PublicationRecord, normalize_doi
from refgraph.suggestions.consistency import CitationRepairReport, repair_citation_links
from refgraph.suggestions.hydration import (
    MetadataFetcher,
    MetadataFetchFailure,
    ProgressCallback,
    hydrate_candidates,
    prefetch_candidates,
)
from refgraph.utils.structured_log import log_engine_run

logger = logging.getLogger(__name__)

DoiPredicate = Callable[[str], bool]

# Keeps fire-and-forget prefetch tasks referenced until they finish.
_background_tasks: set[asyncio.Task] = set()


@dataclass
class SuggestionResult:
    """Outcome of one suggestion run.

    ``publications`` is the hydrated visible page in rank order and
    ``total_suggestions`` counts every ranked candidate. ``prefetch`` holds
    the next page unhydrated; ``prefetch_task`` resolves to its hydrated
    copies and is None when there is no next page.
    """

    publications: list[PublicationRecord]
    total_suggestions: int
    selected: list[PublicationRecord] = field(default_factory=list)
    failures: list[MetadataFetchFailure] = field(default_factory=list)
    prefetch: list[PublicationRecord] = field(default_factory=list)
    prefetch_task: asyncio.Task | None = None
    repair: CitationRepairReport = field(default_factory=CitationRepairReport)


def expand_citation_graph(
    selected: Sequence[PublicationRecord],
    is_excluded: DoiPredicate,
    is_selected: DoiPredicate,
) -> dict[str, PublicationRecord]:
    """Count links from the selected set and collect candidate publications.

    Counters on the given selected records are reset and recomputed in place,
    so callers must pass records they own (the repaired copies). Returns the
    candidates keyed by DOI.
    """
    selected_by_doi = {publication.doi: publication for publication in selected}
    for publication in selected:
        publication.citation_count = 0
        publication.reference_count = 0

    candidates: dict[str, PublicationRecord] = {}

    def _candidate(doi: str) -> PublicationRecord:
        if doi not in candidates:
            candidates[doi] = PublicationRecord(doi=doi)
        return candidates[doi]

    for publication in selected:
        for doi in publication.cites_out:
            if doi == publication.doi or is_excluded(doi):
                continue
            if is_selected(doi):
                target = selected_by_doi.get(doi)
                if target is None:
                    logger.warning("DOI %s is marked selected but missing from the selection", doi)
                    continue
                target.citation_count += 1
            else:
                candidate = _candidate(doi)
                candidate.cites_in.append(publication.doi)
                candidate.citation_count += 1

        for doi in publication.cites_in:
            if doi == publication.doi or is_excluded(doi):
                continue
            if is_selected(doi):
                source = selected_by_doi.get(doi)
                if source is None:
                    logger.warning("DOI %s is marked selected but missing from the selection", doi)
                    continue
                source.reference_count += 1
            else:
                candidate = _candidate(doi)
                candidate.cites_out.append(publication.doi)
                candidate.reference_count += 1

    return candidates


def rank_candidates(candidates: Iterable[PublicationRecord], seed: int = 0) -> list[PublicationRecord]:
    """Deterministic ranking by citation_count + reference_count, descending.

    Titles are not loaded yet, so equal scores are ordered by a fixed-seed
    permutation of the DOI-sorted candidates rather than by insertion order.
    """
    ordered = sorted(candidates, key=lambda publication: publication.doi)
    random.Random(seed).shuffle(ordered)
    return sorted(ordered, key=lambda publication: publication.suggestion_score, reverse=True)


def paginate(
    ranked: Sequence[PublicationRecord],
    max_suggestions: int,
    load_more_increment: int,
) -> tuple[list[PublicationRecord], list[PublicationRecord]]:
    """Split into the visible page and the batch to prefetch in the background."""
    visible = list(ranked[:max_suggestions])
    prefetch = list(ranked[max_suggestions: max_suggestions + load_more_increment])
    return visible, prefetch


class SuggestionEngine:
    """Computes ranked suggestions from the citation network of the selected publications."""

    def __init__(self, fetcher: MetadataFetcher, settings: EngineSettings | None = None):
        self.fetcher = fetcher
        self.settings = settings or EngineSettings()

    async def compute_suggestions(
        self,
        selected: Sequence[PublicationRecord],
        *,
        excluded_dois: Iterable[str] = (),
        is_excluded: DoiPredicate | None = None,
        is_selected: DoiPredicate | None = None,
        max_suggestions: int | None = None,
        read_dois: Iterable[str] = (),
        on_progress: ProgressCallback | None = None,
    ) -> SuggestionResult:
        """Rank candidates, hydrate the visible page and start prefetching the next one.

        The selected records passed in are never modified; annotated copies
        with fresh counters are returned in ``SuggestionResult.selected``.

        Records hold lowercased DOIs, so ``is_excluded`` and ``is_selected``
        are called with normalized DOIs; ``excluded_dois`` and ``read_dois``
        may use any spelling.
        """
        if max_suggestions is None:
            max_suggestions = self.settings.pagination.initial_suggestions_count
        excluded_set = {normalize_doi(doi) for doi in excluded_dois}

        def excluded(doi: str) -> bool:
            return doi in excluded_set or (is_excluded is not None and is_excluded(doi))

        selected_dois = {publication.doi for publication in selected}
        selected_check = is_selected or (lambda doi: doi in selected_dois)
        read = {normalize_doi(doi) for doi in read_dois}

        logger.info("Computing suggestions from %d selected publications", len(selected))
        log_engine_run("suggestions", "start", selected=len(selected))

        repaired, report = repair_citation_links(selected)
        candidates = expand_citation_graph(repaired, excluded, selected_check)
        ranked = rank_candidates(candidates.values(), self.settings.suggestions.shuffle_seed)
        logger.info("Identified %d publications as suggestions", len(ranked))

        visible, prefetch = paginate(ranked, max_suggestions, self.settings.pagination.load_more_increment)
        logger.debug("Loading metadata for %d top candidates", len(visible))

        hydrated, failures = await hydrate_candidates(
            visible, self.fetcher, self.settings.suggestions, on_progress
        )
        hydrated = [
            publication.model_copy(update={"is_read": publication.doi in read})
            for publication in hydrated
        ]

        prefetch_task = None
        if prefetch:
            prefetch_task = asyncio.create_task(
                prefetch_candidates(prefetch, self.fetcher, self.settings.suggestions)
            )
            _background_tasks.add(prefetch_task)
            prefetch_task.add_done_callback(_background_tasks.discard)

        if failures:
            logger.warning(
                "%d of %d suggestion metadata fetches failed", len(failures), len(visible)
            )
        log_engine_run(
            "suggestions",
            "done",
            total=len(ranked),
            visible=len(hydrated),
            failed=len(failures),
            prefetch=len(prefetch),
        )
        return SuggestionResult(
            publications=hydrated,
            total_suggestions=len(ranked),
            selected=repaired,
            failures=failures,
            prefetch=prefetch,
            prefetch_task=prefetch_task,
            repair=report,
        )
