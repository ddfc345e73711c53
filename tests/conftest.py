"""
Pytest configuration and fixtures.
"""

from typing import Dict, List, Optional

import pytest

from refgraph.models import EngineSettings, PublicationMetadata, PublicationRecord, SuggestionConfig
from refgraph.utils.structured_log import reset_run_logging


def make_publication(
    doi: str,
    *,
    title: Optional[str] = None,
    author: Optional[str] = None,
    author_orcid: Optional[str] = None,
    year: Optional[int] = None,
    score: float = 1.0,
    is_new: bool = False,
    cites_out: Optional[List[str]] = None,
    cites_in: Optional[List[str]] = None,
    boost_keywords: Optional[List[str]] = None,
) -> PublicationRecord:
    """Build a PublicationRecord with only the fields a test cares about."""
    return PublicationRecord(
        doi=doi,
        title=title,
        author=author,
        author_orcid=author_orcid,
        year=year,
        score=score,
        is_new=is_new,
        cites_out=cites_out or [],
        cites_in=cites_in or [],
        boost_keywords=boost_keywords or [],
    )


class FakeFetcher:
    """In-memory metadata source that records calls and can fail on demand."""

    def __init__(self, catalog: Optional[Dict[str, PublicationMetadata]] = None, failing: tuple = ()):
        self.catalog = catalog or {}
        self.failing = set(failing)
        self.calls: List[str] = []

    async def fetch_metadata(self, publication: PublicationRecord) -> PublicationMetadata:
        self.calls.append(publication.doi)
        if publication.doi in self.failing:
            raise ConnectionError(f"metadata service unavailable for {publication.doi}")
        return self.catalog.get(publication.doi, PublicationMetadata(title=f"Title of {publication.doi}"))


@pytest.fixture
def citation_scenario() -> List[PublicationRecord]:
    """A cites B, C cites A, A also cites the unselected D.

    The reverse edges (B.cites_in, A.cites_in) are missing on purpose.
    """
    return [
        make_publication("10.1000/a", title="Paper A", cites_out=["10.1000/b", "10.1000/d"]),
        make_publication("10.1000/b", title="Paper B"),
        make_publication("10.1000/c", title="Paper C", cites_out=["10.1000/a"]),
    ]


@pytest.fixture
def keyword_publications() -> List[PublicationRecord]:
    return [
        make_publication("10.1000/pub1", title="Visual Analytics"),
        make_publication("10.1000/pub2", title="Visual Data"),
        make_publication("10.1000/pub3", title="Machine Learning"),
    ]


@pytest.fixture
def fast_settings() -> EngineSettings:
    """Settings with a single fetch attempt and no retry wait."""
    return EngineSettings(suggestions=SuggestionConfig(fetch_attempts=1, retry_wait_seconds=0))


@pytest.fixture
def run_logging_reset():
    reset_run_logging()
    yield
    reset_run_logging()


@pytest.fixture
def make_pub():
    return make_publication


@pytest.fixture
def fetcher_factory():
    return FakeFetcher
