"""Greedy importance ranking and TF-IDF naming of formal concepts."""

from __future__ import annotations

import math
import re
from typing import Dict, List, Optional, Sequence, Tuple

from refgraph.keywords.matcher import SHORT_KEYWORD_MAX_LENGTH
from refgraph.models import FormalConcept, PublicationRecord, RankedConcept

STOPWORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has", "he",
        "in", "is", "it", "its", "of", "on", "that", "the", "to", "was", "will", "with",
    }
)

# Two terms whose scores differ by less than this are considered tied.
TIE_TOLERANCE = 0.0001

_NON_WORD = re.compile(r"[^\w\s]")


def stem(word: str) -> str:
    """Strip a plural or verb suffix: "studies" -> "study", "graphs" -> "graph"."""
    word = word.lower()
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith("es") and len(word) > 3:
        return word[:-2]
    if word.endswith("s") and len(word) > 2:
        return word[:-1]
    if word.endswith("ed") and len(word) > 3:
        return word[:-2]
    if word.endswith("ing") and len(word) > 4:
        return word[:-3]
    return word


def tokenize(text: Optional[str]) -> List[str]:
    if not text:
        return []
    words = _NON_WORD.sub(" ", text.lower()).split()
    return [stem(word) for word in words if len(word) > 2 and word not in STOPWORDS]


def sort_concepts_by_importance(concepts: Sequence[FormalConcept]) -> List[RankedConcept]:
    """
    Order concepts so each next one covers the most publications not covered yet.

    Concepts with fewer than two publications are dropped. The first pick is
    the concept with the highest importance (|extent| x |intent|); every later
    pick has the highest remaining importance (uncovered publications x
    |intent|). Selection stops once no concept adds uncovered publications.
    Ties are broken by the concept key.
    """
    remaining = [
        RankedConcept(extent=list(concept.extent), intent=list(concept.intent))
        for concept in concepts
        if len(concept.extent) > 1
    ]
    if not remaining:
        return []

    remaining.sort(key=lambda concept: (-concept.importance, concept.key()))
    first = remaining.pop(0)
    first.remaining_importance = first.importance
    covered = set(first.extent)
    ranked = [first]

    while remaining:
        for concept in remaining:
            uncovered = [doi for doi in concept.extent if doi not in covered]
            concept.remaining_importance = len(uncovered) * len(concept.intent)
        remaining.sort(key=lambda concept: (-concept.remaining_importance, concept.key()))
        top = remaining.pop(0)
        if top.remaining_importance == 0:
            break
        covered.update(top.extent)
        ranked.append(top)

    return ranked


def _keyword_alternatives(intent: Sequence[str]) -> List[str]:
    concept = FormalConcept(intent=list(intent))
    return [
        alternative.strip().upper()
        for keyword in concept.keywords
        for alternative in keyword.split("|")
        if alternative.strip()
    ]


def _is_keyword_term(term: str, alternatives: Sequence[str]) -> bool:
    upper = term.upper()
    for alternative in alternatives:
        if len(alternative) <= SHORT_KEYWORD_MAX_LENGTH:
            if upper.startswith(alternative):
                return True
        elif alternative in upper:
            return True
    return False


def compute_concept_terms(
    extent: Sequence[str],
    publications: Sequence[PublicationRecord],
    intent: Sequence[str] = (),
) -> List[Tuple[str, float]]:
    """TF-IDF of the title terms of a concept's publications, highest first.

    Terms matching one of the concept's keywords count twice. Document
    frequency is taken over all given publications.
    """
    by_doi = {publication.doi: publication for publication in publications}
    titles = [by_doi[doi].title for doi in extent if doi in by_doi and by_doi[doi].title]
    if not titles:
        return []

    alternatives = _keyword_alternatives(intent)
    term_frequency: Dict[str, int] = {}
    for title in titles:
        for term in tokenize(title):
            increment = 2 if _is_keyword_term(term, alternatives) else 1
            term_frequency[term] = term_frequency.get(term, 0) + increment

    document_frequency: Dict[str, int] = {}
    for publication in publications:
        for term in set(tokenize(publication.title)):
            document_frequency[term] = document_frequency.get(term, 0) + 1

    total = len(publications)
    scores = [
        (term, frequency * math.log(total / document_frequency.get(term, 1)))
        for term, frequency in term_frequency.items()
    ]
    return sorted(scores, key=lambda item: (-item[1], item[0]))


def generate_concept_names(
    concepts: Sequence[FormalConcept],
    publications: Sequence[PublicationRecord],
) -> List[str]:
    """Names "C1", "C2", ... with " - TERM" appended when one term clearly leads."""
    names: List[str] = []
    for index, concept in enumerate(concepts, start=1):
        name = f"C{index}"
        terms = compute_concept_terms(concept.extent, publications, concept.intent) if publications else []
        if terms:
            top_score = terms[0][1]
            tied = [term for term, score in terms if abs(score - top_score) < TIE_TOLERANCE]
            if len(tied) == 1:
                name = f"{name} - {terms[0][0].upper()}"
        names.append(name)
    return names


def name_concepts(
    concepts: Sequence[FormalConcept],
    publications: Sequence[PublicationRecord],
) -> List[RankedConcept]:
    """Rank concepts by importance and attach their display names."""
    ranked = sort_concepts_by_importance(concepts)
    names = generate_concept_names(ranked, publications)
    return [concept.model_copy(update={"name": name}) for concept, name in zip(ranked, names)]


def assign_concept_tags(
    publications: Sequence[PublicationRecord],
    concepts: Sequence[FormalConcept],
) -> Dict[str, List[str]]:
    """Map each DOI to the names of the ranked concepts it belongs to, in rank order."""
    tags: Dict[str, List[str]] = {}
    for concept in name_concepts(concepts, publications):
        for doi in concept.extent:
            tags.setdefault(doi, []).append(concept.name)
    return tags
