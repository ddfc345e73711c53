"""Publication models shared by the suggestion, author and concept engines."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_doi(doi: str) -> str:
    """Strip whitespace and the doi.org prefix, then lowercase."""
    value = doi.strip()
    for prefix in ("https://doi.org/", "http://doi.org/", "doi:"):
        if value.lower().startswith(prefix):
            value = value[len(prefix):]
    return value.lower()


def _dedupe_dois(values: List[str]) -> List[str]:
    seen: set[str] = set()
    result: List[str] = []
    for value in values:
        if not value or not value.strip():
            continue
        doi = normalize_doi(value)
        if doi not in seen:
            seen.add(doi)
            result.append(doi)
    return result


class PublicationMetadata(BaseModel):
    """Fields a metadata source supplies for one publication."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    year: Optional[int] = None
    author: Optional[str] = None
    author_orcid: Optional[str] = Field(default=None, alias="authorOrcid")
    abstract: Optional[str] = None
    container: Optional[str] = None
    cites_out: List[str] = Field(default_factory=list, alias="citesOut")
    cites_in: List[str] = Field(default_factory=list, alias="citesIn")

    @field_validator("cites_out", "cites_in")
    @classmethod
    def _normalize_links(cls, value: List[str]) -> List[str]:
        return _dedupe_dois(value)


class PublicationRecord(BaseModel):
    """A publication identified by its DOI.

    cites_out holds the DOIs in this publication's bibliography, cites_in the
    DOIs known to cite it. Counters are recomputed by the suggestion engine on
    every run and are never trusted from input.
    """

    model_config = ConfigDict(populate_by_name=True)

    doi: str
    title: Optional[str] = None
    year: Optional[int] = None
    author: Optional[str] = None
    author_orcid: Optional[str] = Field(default=None, alias="authorOrcid")
    abstract: Optional[str] = None
    container: Optional[str] = None
    cites_out: List[str] = Field(default_factory=list, alias="citesOut")
    cites_in: List[str] = Field(default_factory=list, alias="citesIn")
    score: float = 0.0
    citation_count: int = Field(default=0, alias="citationCount")
    reference_count: int = Field(default=0, alias="referenceCount")
    is_new: bool = Field(default=False, alias="isNew")
    is_read: bool = Field(default=False, alias="isRead")
    is_hydrated: bool = Field(default=False, alias="isHydrated")
    boost_keywords: List[str] = Field(default_factory=list, alias="boostKeywords")

    @field_validator("doi")
    @classmethod
    def _normalize_doi(cls, value: str) -> str:
        doi = normalize_doi(value)
        if not doi:
            raise ValueError("doi must not be empty")
        return doi

    @field_validator("cites_out", "cites_in")
    @classmethod
    def _normalize_links(cls, value: List[str]) -> List[str]:
        return _dedupe_dois(value)

    @property
    def suggestion_score(self) -> int:
        """Ranking signal for candidates: cited-by plus cites counts."""
        return self.citation_count + self.reference_count

    def with_metadata(self, metadata: PublicationMetadata) -> "PublicationRecord":
        """Return a hydrated copy; citation lists are unioned, existing entries first."""
        update = {
            "title": metadata.title if metadata.title is not None else self.title,
            "year": metadata.year if metadata.year is not None else self.year,
            "author": metadata.author if metadata.author is not None else self.author,
            "author_orcid": (
                metadata.author_orcid if metadata.author_orcid is not None else self.author_orcid
            ),
            "abstract": metadata.abstract if metadata.abstract is not None else self.abstract,
            "container": metadata.container if metadata.container is not None else self.container,
            "cites_out": _dedupe_dois([*self.cites_out, *metadata.cites_out]),
            "cites_in": _dedupe_dois([*self.cites_in, *metadata.cites_in]),
            "is_hydrated": True,
        }
        return self.model_copy(update=update, deep=True)
