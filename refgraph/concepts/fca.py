"""Formal concept analysis over selected publications.

Objects are publications, attributes are boost keyword groups (matched in
titles) plus the most linked selected DOIs. Concepts are found by testing
every attribute subset for closure, so the cost grows with 2^k for k
attributes; ConceptLimitError guards the upper bound.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from refgraph.exceptions import ConceptLimitError
from refgraph.keywords import matched_keyword_groups
from refgraph.models import ConceptConfig, FormalConcept, PublicationRecord
from refgraph.utils.structured_log import log_engine_run

logger = logging.getLogger(__name__)


@dataclass
class FormalContext:
    """Binary publication x attribute relation stored as integer bitsets.

    rows[i] has bit j set when publication i has attribute j; columns[j] has
    bit i set for the same cell.
    """

    objects: List[str]
    attributes: List[str]
    rows: List[int]
    columns: List[int]

    @property
    def all_objects(self) -> int:
        return (1 << len(self.objects)) - 1

    @property
    def all_attributes(self) -> int:
        return (1 << len(self.attributes)) - 1

    def extent_mask(self, attribute_mask: int) -> int:
        extent = self.all_objects
        for index, column in enumerate(self.columns):
            if attribute_mask >> index & 1:
                extent &= column
        return extent

    def intent_mask(self, object_mask: int) -> int:
        """Attributes shared by all given objects; all attributes for no objects."""
        intent = self.all_attributes
        for index, row in enumerate(self.rows):
            if object_mask >> index & 1:
                intent &= row
        return intent

    def objects_of(self, mask: int) -> List[str]:
        return sorted(doi for index, doi in enumerate(self.objects) if mask >> index & 1)

    def attributes_of(self, mask: int) -> List[str]:
        return sorted(attribute for index, attribute in enumerate(self.attributes) if mask >> index & 1)

    def extent_of(self, attributes: Iterable[str]) -> List[str]:
        """Publications having all the given attributes."""
        mask = 0
        for attribute in attributes:
            mask |= 1 << self.attributes.index(attribute)
        return self.objects_of(self.extent_mask(mask))

    def intent_of(self, dois: Iterable[str]) -> List[str]:
        """Attributes shared by all the given publications."""
        mask = 0
        for doi in dois:
            mask |= 1 << self.objects.index(doi)
        return self.attributes_of(self.intent_mask(mask))


def _unique(values: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def top_linked_dois(publications: Sequence[PublicationRecord], limit: int) -> List[str]:
    """Selected DOIs most often listed in other selected publications' citation lists."""
    selected = {publication.doi for publication in publications}
    counts: Counter[str] = Counter()
    for publication in publications:
        for doi in publication.cites_in:
            if doi in selected:
                counts[doi] += 1
        for doi in publication.cites_out:
            if doi in selected:
                counts[doi] += 1
    ranked = sorted((doi for doi, count in counts.items() if count > 0), key=lambda doi: (-counts[doi], doi))
    return ranked[:limit]


def build_context(
    publications: Sequence[PublicationRecord],
    keyword_groups: Sequence[str],
    config: ConceptConfig | None = None,
) -> FormalContext:
    config = config or ConceptConfig()
    unique_publications = list({publication.doi: publication for publication in reversed(publications)}.values())
    unique_publications.sort(key=lambda publication: publication.doi)

    groups = _unique(keyword_groups)
    if len(groups) > config.max_attributes:
        raise ConceptLimitError(
            f"Formal context has {len(groups)} keyword attributes; at most {config.max_attributes} "
            f"can be enumerated (2^k subsets)"
        )

    # Citation attributes only fill what the keyword groups leave of the bound.
    citation_attributes: List[str] = []
    citation_budget = min(config.max_citation_attributes, config.max_attributes - len(groups))
    if config.include_citation_attributes and citation_budget > 0:
        citation_attributes = top_linked_dois(unique_publications, citation_budget)
        if citation_budget < config.max_citation_attributes:
            logger.debug("Citation attributes limited to %d by max_attributes", citation_budget)
    attributes = groups + [doi for doi in citation_attributes if doi not in groups]

    rows: List[int] = []
    columns = [0] * len(attributes)
    for object_index, publication in enumerate(unique_publications):
        matched = matched_keyword_groups(publication.title, groups)
        links = set(publication.cites_out) | set(publication.cites_in)
        row = 0
        for attribute_index, attribute in enumerate(attributes):
            has_attribute = attribute in matched if attribute_index < len(groups) else attribute in links
            if has_attribute:
                row |= 1 << attribute_index
                columns[attribute_index] |= 1 << object_index
        rows.append(row)

    return FormalContext(
        objects=[publication.doi for publication in unique_publications],
        attributes=attributes,
        rows=rows,
        columns=columns,
    )


def enumerate_concepts(context: FormalContext) -> List[FormalConcept]:
    """All closed (extent, intent) pairs, in attribute-subset order, de-duplicated."""
    concepts: List[FormalConcept] = []
    seen: set[str] = set()
    for attribute_mask in range(1 << len(context.attributes)):
        extent = context.extent_mask(attribute_mask)
        if context.intent_mask(extent) != attribute_mask:
            continue
        concept = FormalConcept(extent=context.objects_of(extent), intent=context.attributes_of(attribute_mask))
        key = concept.key()
        if key not in seen:
            seen.add(key)
            concepts.append(concept)
    return concepts


def compute_formal_concepts(
    publications: Sequence[PublicationRecord],
    keyword_groups: Sequence[str],
    config: ConceptConfig | None = None,
) -> List[FormalConcept]:
    """
    Compute the formal concepts of the selected publications.

    Args:
        publications: Selected publications
        keyword_groups: Boost keyword groups, alternatives joined by "|"
        config: Citation attribute and size limits

    Returns:
        De-duplicated concepts; empty when there are no publications or no
        keyword groups

    Raises:
        ConceptLimitError: If the context has more attributes than allowed
    """
    if not publications or not _unique(keyword_groups):
        return []

    context = build_context(publications, keyword_groups, config)
    logger.debug(
        "Formal context: %d publications x %d attributes",
        len(context.objects),
        len(context.attributes),
    )
    concepts = enumerate_concepts(context)
    logger.info("Found %d formal concepts", len(concepts))
    log_engine_run(
        "concepts",
        "done",
        publications=len(context.objects),
        attributes=len(context.attributes),
        concepts=len(concepts),
    )
    return concepts
