"""Two-phase author identity resolution.

Phase one turns every author entry of every publication into an immutable
AuthorMention. Phase two joins mentions into identities with a disjoint-set
forest, applying the merge rules in a fixed order: shared ORCID, equal
normalized id, abbreviated first names (optional) and Eszett surname
transcriptions. The later, heuristic rules never join two identities that
carry different ORCIDs.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from refgraph.authors.identity import (
    abbreviation_prefix,
    eszett_variants,
    extract_orcid,
    initials_of,
    is_abbreviated_id,
    name_to_id,
    split_author_field,
    strip_orcid,
)
from refgraph.models import AuthorAggregate, AuthorConfig, PublicationRecord, ScoringConfig
from refgraph.utils.structured_log import log_engine_run

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorMention:
    """One author entry on one publication."""

    doi: str
    position: int
    raw_name: str
    name_id: str
    orcid: Optional[str]
    score: float
    year: Optional[int]
    is_new: bool
    coauthor_ids: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    def to_aggregate(self) -> AuthorAggregate:
        return AuthorAggregate(
            id=self.name_id,
            name=self.raw_name,
            alternative_names=[self.raw_name],
            orcid=self.orcid,
            score=self.score,
            count=1,
            first_author_count=1 if self.position == 0 else 0,
            year_min=self.year,
            year_max=self.year,
            coauthors={coauthor: 1 for coauthor in sorted(set(self.coauthor_ids))},
            keywords={keyword: 1 for keyword in sorted(set(self.keywords))},
            publication_dois=[self.doi],
            new_publication=self.is_new,
            initials=initials_of(self.raw_name),
        )


def mention_score(
    publication: PublicationRecord,
    position: int,
    config: AuthorConfig,
    scoring: ScoringConfig,
) -> float:
    """Score contributed by one author entry of a publication."""
    score = publication.score if config.score_enabled else 1.0
    if config.first_author_boost_enabled and position == 0:
        score *= scoring.first_author_boost
    if config.new_boost_enabled and publication.is_new:
        score *= scoring.new_publication_boost
    return score


def build_mentions(
    publications: Iterable[PublicationRecord],
    config: AuthorConfig,
    scoring: ScoringConfig,
) -> List[AuthorMention]:
    """Create mentions in (DOI, author position) order, whatever the input order."""
    mentions: List[AuthorMention] = []
    for publication in sorted(publications, key=lambda item: item.doi):
        entries = split_author_field(publication.author_orcid or publication.author)
        coauthor_ids = [name_to_id(strip_orcid(entry)) for entry in split_author_field(publication.author)]
        for position, entry in enumerate(entries):
            raw_name = strip_orcid(entry)
            name_id = name_to_id(raw_name)
            if not name_id:
                continue
            mentions.append(
                AuthorMention(
                    doi=publication.doi,
                    position=position,
                    raw_name=raw_name,
                    name_id=name_id,
                    orcid=extract_orcid(entry),
                    score=mention_score(publication, position, config, scoring),
                    year=publication.year,
                    is_new=publication.is_new,
                    coauthor_ids=tuple(coauthor for coauthor in coauthor_ids if coauthor and coauthor != name_id),
                    keywords=tuple(publication.boost_keywords),
                )
            )
    return mentions


class _DisjointSet:
    """Union-find over mention indices, tracking the ORCIDs of each group."""

    def __init__(self, mentions: Sequence[AuthorMention]):
        self.parent = list(range(len(mentions)))
        self.orcids: Dict[int, set[str]] = {
            index: {mention.orcid} if mention.orcid else set() for index, mention in enumerate(mentions)
        }

    def find(self, index: int) -> int:
        root = index
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[index] != root:
            self.parent[index], index = root, self.parent[index]
        return root

    def union(self, left: int, right: int, *, require_compatible_orcids: bool = False) -> bool:
        left_root, right_root = self.find(left), self.find(right)
        if left_root == right_root:
            return False
        left_orcids, right_orcids = self.orcids[left_root], self.orcids[right_root]
        if require_compatible_orcids and left_orcids and right_orcids and left_orcids != right_orcids:
            return False
        root, child = min(left_root, right_root), max(left_root, right_root)
        self.parent[child] = root
        self.orcids[root] = left_orcids | right_orcids
        del self.orcids[child]
        return True

    def groups(self) -> List[List[int]]:
        members: Dict[int, List[int]] = defaultdict(list)
        for index in range(len(self.parent)):
            members[self.find(index)].append(index)
        return [members[root] for root in sorted(members)]


def _union_all(forest: _DisjointSet, indices: Sequence[int]) -> None:
    for index in indices[1:]:
        forest.union(indices[0], index)


def _merge_abbreviated_names(forest: _DisjointSet, by_id: Dict[str, List[int]]) -> None:
    """Join "smith, j." (or a strict prefix id) into the one full id it abbreviates."""
    ids = sorted(by_id)
    abbreviated = {name_id for name_id in ids if is_abbreviated_id(name_id)}
    for name_id in ids:
        if name_id not in abbreviated and any(
            other != name_id and other.startswith(name_id) for other in ids
        ):
            abbreviated.add(name_id)
    full_ids = [name_id for name_id in ids if name_id not in abbreviated]

    for name_id in sorted(abbreviated):
        prefix = abbreviation_prefix(name_id)
        matches = [full_id for full_id in full_ids if full_id.startswith(prefix)]
        if len(matches) == 1:
            merged = forest.union(by_id[matches[0]][0], by_id[name_id][0], require_compatible_orcids=True)
            if merged:
                logger.debug("Merged abbreviated author %r into %r", name_id, matches[0])


def _merge_eszett_variants(forest: _DisjointSet, by_id: Dict[str, List[int]]) -> None:
    """Join ids whose Eszett surname transcriptions coincide."""
    ids_by_variant: Dict[str, List[str]] = defaultdict(list)
    for name_id in sorted(by_id):
        for variant in sorted(eszett_variants(name_id)):
            ids_by_variant[variant].append(name_id)

    for variant in sorted(ids_by_variant):
        name_ids = ids_by_variant[variant]
        for other in name_ids[1:]:
            merged = forest.union(by_id[name_ids[0]][0], by_id[other][0], require_compatible_orcids=True)
            if merged:
                logger.debug("Merged author transcription %r with %r", other, name_ids[0])


def _aggregate_group(members: Sequence[AuthorMention]) -> AuthorAggregate:
    canonical_id = min({mention.name_id for mention in members}, key=lambda name_id: (-len(name_id), name_id))
    name_counts = Counter(mention.raw_name for mention in members if mention.name_id == canonical_id)
    name = min(name_counts, key=lambda raw_name: (-name_counts[raw_name], raw_name))
    orcids = sorted({mention.orcid for mention in members if mention.orcid})

    aggregate = members[0].to_aggregate()
    for mention in members[1:]:
        aggregate = aggregate.merge_with(mention.to_aggregate())
    return aggregate.model_copy(
        update={
            "id": canonical_id,
            "name": name,
            "orcid": orcids[0] if orcids else None,
            "initials": initials_of(name),
        }
    )


def _remap_coauthors(aggregate: AuthorAggregate, canonical_ids: Dict[str, str]) -> AuthorAggregate:
    coauthors: Dict[str, int] = {}
    for coauthor_id, weight in aggregate.coauthors.items():
        target = canonical_ids.get(coauthor_id, coauthor_id)
        if target == aggregate.id:
            continue
        coauthors[target] = coauthors.get(target, 0) + weight
    return aggregate.model_copy(update={"coauthors": {key: coauthors[key] for key in sorted(coauthors)}})


def resolve_authors(
    publications: Iterable[PublicationRecord],
    config: AuthorConfig | None = None,
    scoring: ScoringConfig | None = None,
) -> List[AuthorAggregate]:
    """
    Compute one AuthorAggregate per author identity of the given publications.

    Args:
        publications: Selected publications; input order does not affect the result
        config: Scoring flags and optional merge phases
        scoring: Boost multipliers

    Returns:
        Authors sorted by score (with first-author and publication counts as
        tie-breakers), then by id
    """
    config = config or AuthorConfig()
    scoring = scoring or ScoringConfig()
    mentions = build_mentions(publications, config, scoring)
    if not mentions:
        return []

    forest = _DisjointSet(mentions)

    by_orcid: Dict[str, List[int]] = defaultdict(list)
    by_id: Dict[str, List[int]] = defaultdict(list)
    for index, mention in enumerate(mentions):
        if mention.orcid:
            by_orcid[mention.orcid].append(index)
        by_id[mention.name_id].append(index)

    for orcid in sorted(by_orcid):
        _union_all(forest, by_orcid[orcid])
    for name_id in sorted(by_id):
        _union_all(forest, by_id[name_id])
    if config.merge_abbreviated_names:
        _merge_abbreviated_names(forest, by_id)
    if config.merge_eszett_variants:
        _merge_eszett_variants(forest, by_id)

    groups = [[mentions[index] for index in group] for group in forest.groups()]
    aggregates = [_aggregate_group(members) for members in groups]

    canonical_ids: Dict[str, str] = {}
    for members, aggregate in zip(groups, aggregates):
        for mention in members:
            canonical_ids[mention.name_id] = aggregate.id
    aggregates = [_remap_coauthors(aggregate, canonical_ids) for aggregate in aggregates]
    aggregates.sort(key=lambda aggregate: (-aggregate.sort_key, aggregate.id))

    logger.info("Resolved %d author mentions into %d authors", len(mentions), len(aggregates))
    log_engine_run("authors", "done", mentions=len(mentions), authors=len(aggregates))
    return aggregates
