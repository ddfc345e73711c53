"""Concurrent metadata hydration of suggestion candidates."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol, Sequence

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from refgraph.exceptions import MetadataNotFoundError
from refgraph.models import PublicationMetadata, PublicationRecord, SuggestionConfig, normalize_doi
from refgraph.utils.structured_log import log_metadata_fetch

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class MetadataFetcher(Protocol):
    async def fetch_metadata(self, publication: PublicationRecord) -> PublicationMetadata:
        """Load title, authors, year and citation lists for a publication."""


class CatalogMetadataFetcher:
    """Metadata source backed by an in-memory DOI -> metadata mapping."""

    def __init__(self, catalog: Mapping[str, PublicationMetadata | dict]):
        self.catalog: dict[str, PublicationMetadata] = {}
        for doi, entry in catalog.items():
            metadata = entry if isinstance(entry, PublicationMetadata) else PublicationMetadata.model_validate(entry)
            self.catalog[normalize_doi(doi)] = metadata

    async def fetch_metadata(self, publication: PublicationRecord) -> PublicationMetadata:
        metadata = self.catalog.get(publication.doi)
        if metadata is None:
            raise MetadataNotFoundError(f"No metadata for {publication.doi}")
        return metadata


@dataclass
class MetadataFetchFailure:
    """A visible candidate whose metadata could not be loaded after all retries."""

    doi: str
    error: str


def _describe(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


async def fetch_with_retry(
    fetcher: MetadataFetcher,
    publication: PublicationRecord,
    config: SuggestionConfig,
) -> PublicationMetadata:
    """Fetch metadata, retrying up to config.fetch_attempts times.

    The last underlying exception is re-raised when every attempt fails.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(config.fetch_attempts),
        wait=wait_exponential(multiplier=config.retry_wait_seconds, max=max(config.retry_wait_seconds * 8, 0.0)),
        reraise=True,
    )
    return await retrying(fetcher.fetch_metadata, publication)


async def hydrate_candidates(
    candidates: Sequence[PublicationRecord],
    fetcher: MetadataFetcher,
    config: SuggestionConfig,
    on_progress: ProgressCallback | None = None,
) -> tuple[list[PublicationRecord], list[MetadataFetchFailure]]:
    """Fetch metadata for every candidate concurrently and wait for all of them.

    Returns candidates in their input order; a candidate whose fetch failed is
    returned unhydrated and listed in the failures. Progress text reports
    completions in the order they happen.
    """
    total = len(candidates)
    loaded = 0
    semaphore = asyncio.Semaphore(config.fetch_concurrency)

    def _report() -> None:
        if on_progress is not None:
            on_progress(f"{loaded}/{total} suggestions loaded")

    async def _hydrate_one(candidate: PublicationRecord) -> PublicationRecord | MetadataFetchFailure:
        nonlocal loaded
        async with semaphore:
            try:
                metadata = await fetch_with_retry(fetcher, candidate, config)
                outcome: PublicationRecord | MetadataFetchFailure = candidate.with_metadata(metadata)
            except Exception as e:
                outcome = MetadataFetchFailure(doi=candidate.doi, error=_describe(e))
        loaded += 1
        _report()
        return outcome

    _report()
    outcomes = await asyncio.gather(*(_hydrate_one(candidate) for candidate in candidates))

    hydrated: list[PublicationRecord] = []
    failures: list[MetadataFetchFailure] = []
    for candidate, outcome in zip(candidates, outcomes):
        if isinstance(outcome, MetadataFetchFailure):
            failures.append(outcome)
            hydrated.append(candidate)
            logger.warning("Metadata fetch failed for %s: %s", outcome.doi, outcome.error)
            log_metadata_fetch(outcome.doi, "failed", attempts=config.fetch_attempts, error=outcome.error)
        else:
            hydrated.append(outcome)
            log_metadata_fetch(outcome.doi, "success")
    return hydrated, failures


async def prefetch_candidates(
    candidates: Sequence[PublicationRecord],
    fetcher: MetadataFetcher,
    config: SuggestionConfig,
) -> list[PublicationRecord]:
    """Background hydration of the next page; failures are only logged at debug level."""

    semaphore = asyncio.Semaphore(config.fetch_concurrency)

    async def _prefetch_one(candidate: PublicationRecord) -> PublicationRecord:
        async with semaphore:
            metadata = await fetcher.fetch_metadata(candidate)
        return candidate.with_metadata(metadata)

    outcomes = await asyncio.gather(
        *(_prefetch_one(candidate) for candidate in candidates), return_exceptions=True
    )
    prefetched: list[PublicationRecord] = []
    for candidate, outcome in zip(candidates, outcomes):
        if isinstance(outcome, BaseException):
            logger.debug("Background prefetch failed for %s: %s", candidate.doi, _describe(outcome))
            log_metadata_fetch(candidate.doi, "failed", background=True, error=_describe(outcome))
            prefetched.append(candidate)
        else:
            prefetched.append(outcome)
    return prefetched
