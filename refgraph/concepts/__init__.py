from refgraph.concepts.fca import FormalContext, build_context, compute_formal_concepts, enumerate_concepts
from refgraph.concepts.ranking import (
    assign_concept_tags,
    compute_concept_terms,
    generate_concept_names,
    name_concepts,
    sort_concepts_by_importance,
)

__all__ = [
    "FormalContext",
    "assign_concept_tags",
    "build_context",
    "compute_concept_terms",
    "compute_formal_concepts",
    "enumerate_concepts",
    "generate_concept_names",
    "name_concepts",
    "sort_concepts_by_importance",
]
