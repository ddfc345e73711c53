"""Exact-token filtering of publications by author."""

from __future__ import annotations

from typing import Iterable, List

from refgraph.authors.identity import name_to_id, split_author_field, strip_orcid
from refgraph.models import AuthorAggregate, PublicationRecord


def author_ids_of(publication: PublicationRecord) -> set[str]:
    """Normalized ids of every author entry listed on the publication."""
    entries = split_author_field(publication.author) + split_author_field(publication.author_orcid)
    return {name_to_id(strip_orcid(entry)) for entry in entries}


def author_matches(publication: PublicationRecord, author: AuthorAggregate) -> bool:
    """True when one of the publication's author entries is this author.

    Entries are compared whole: "Smith, J." never matches "Smith, John B.".
    """
    known_ids = {author.id} | {name_to_id(name) for name in author.alternative_names}
    return not author_ids_of(publication).isdisjoint(known_ids)


def publications_by_author(
    publications: Iterable[PublicationRecord], author: AuthorAggregate
) -> List[PublicationRecord]:
    return [publication for publication in publications if author_matches(publication, author)]
