"""Author aggregate model produced by identity resolution."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


def _merge_counts(left: Dict[str, int], right: Dict[str, int]) -> Dict[str, int]:
    merged = dict(left)
    for key, value in right.items():
        merged[key] = merged.get(key, 0) + value
    return {key: merged[key] for key in sorted(merged)}


def _min_year(left: Optional[int], right: Optional[int]) -> Optional[int]:
    if left is None:
        return right
    if right is None:
        return left
    return min(left, right)


def _max_year(left: Optional[int], right: Optional[int]) -> Optional[int]:
    if left is None:
        return right
    if right is None:
        return left
    return max(left, right)


class AuthorAggregate(BaseModel):
    """All mentions of one author identity across the selected publications.

    Set-valued fields are kept as sorted lists so that serialized output does
    not depend on hash ordering. year_min/year_max stay None when no
    contributing publication has a year.
    """

    id: str
    name: str
    alternative_names: List[str] = Field(default_factory=list)
    orcid: Optional[str] = None
    score: float = 0.0
    count: int = 1
    first_author_count: int = 0
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    coauthors: Dict[str, int] = Field(default_factory=dict)
    keywords: Dict[str, int] = Field(default_factory=dict)
    publication_dois: List[str] = Field(default_factory=list)
    new_publication: bool = False
    initials: str = ""

    @property
    def sort_key(self) -> float:
        """Composite ranking key; counts only matter between equal scores."""
        return self.score + self.first_author_count / 100 + self.count / 1000

    def merge_with(self, other: "AuthorAggregate") -> "AuthorAggregate":
        """Return a new aggregate combining both; identity fields are kept from self."""
        return self.model_copy(
            update={
                "orcid": self.orcid or other.orcid,
                "score": self.score + other.score,
                "count": self.count + other.count,
                "first_author_count": self.first_author_count + other.first_author_count,
                "year_min": _min_year(self.year_min, other.year_min),
                "year_max": _max_year(self.year_max, other.year_max),
                "coauthors": _merge_counts(self.coauthors, other.coauthors),
                "keywords": _merge_counts(self.keywords, other.keywords),
                "alternative_names": sorted(set(self.alternative_names) | set(other.alternative_names)),
                "publication_dois": sorted(set(self.publication_dois) | set(other.publication_dois)),
                "new_publication": self.new_publication or other.new_publication,
            },
            deep=True,
        )
