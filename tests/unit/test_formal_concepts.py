"""
Unit tests for formal concept computation.
"""

import pytest

from refgraph.concepts import build_context, compute_formal_concepts
from refgraph.concepts.fca import top_linked_dois
from refgraph.exceptions import ConceptLimitError
from refgraph.models import ConceptConfig


class TestComputeFormalConcepts:
    """Test compute_formal_concepts."""

    def test_visual_data_scenario(self, keyword_publications):
        concepts = compute_formal_concepts(keyword_publications, ["VISUAL", "DATA"])
        pairs = [(concept.extent, concept.intent) for concept in concepts]

        assert (["10.1000/pub1", "10.1000/pub2"], ["VISUAL"]) in pairs
        assert (["10.1000/pub2"], ["DATA", "VISUAL"]) in pairs
        for extent, intent in pairs:
            if "10.1000/pub3" in extent:
                assert intent == []

    def test_closure_law(self, keyword_publications, make_pub):
        publications = keyword_publications + [
            make_pub("10.1000/pub4", title="Data Mining for Machine Vision"),
            make_pub("10.1000/pub5", title="Visual Machine Data"),
        ]
        groups = ["VISUAL", "DATA", "MACHINE|LEARNING"]
        context = build_context(publications, groups)

        concepts = compute_formal_concepts(publications, groups)

        assert concepts
        for concept in concepts:
            assert context.intent_of(context.extent_of(concept.intent)) == concept.intent
            assert context.extent_of(context.intent_of(concept.extent)) == concept.extent

    def test_no_duplicates(self, keyword_publications):
        concepts = compute_formal_concepts(keyword_publications, ["VISUAL", "DATA", "VISUAL"])
        keys = [concept.key() for concept in concepts]

        assert len(keys) == len(set(keys))

    def test_bottom_concept_has_full_intent(self, keyword_publications):
        concepts = compute_formal_concepts(keyword_publications, ["VISUAL", "GRAPH"])

        bottom = [concept for concept in concepts if not concept.extent]
        assert len(bottom) == 1
        assert bottom[0].intent == ["GRAPH", "VISUAL"]

    def test_empty_inputs(self, keyword_publications):
        assert compute_formal_concepts([], ["VISUAL"]) == []
        assert compute_formal_concepts(keyword_publications, []) == []
        assert compute_formal_concepts(keyword_publications, [""]) == []

    def test_attribute_limit(self, keyword_publications):
        groups = [f"KEYWORD{i}" for i in range(21)]

        with pytest.raises(ConceptLimitError):
            compute_formal_concepts(keyword_publications, groups)

    def test_limit_error_is_value_error(self, keyword_publications):
        config = ConceptConfig(max_attributes=1)

        with pytest.raises(ValueError):
            compute_formal_concepts(keyword_publications, ["VISUAL", "DATA"], config)


class TestCitationAttributes:
    """Test citation attributes in the formal context."""

    @pytest.fixture
    def linked_publications(self, make_pub):
        return [
            make_pub("10.1/p1", title="Visual Graphs", cites_out=["10.1/p2"]),
            make_pub("10.1/p2", title="Graph Layout", cites_in=["10.1/p1", "10.1/p3"]),
            make_pub("10.1/p3", title="Visual Layout", cites_out=["10.1/p2", "10.9/outside"]),
        ]

    def test_top_linked_dois(self, linked_publications):
        assert top_linked_dois(linked_publications, 10) == ["10.1/p2", "10.1/p1", "10.1/p3"]
        assert top_linked_dois(linked_publications, 1) == ["10.1/p2"]

    def test_context_includes_citation_attributes(self, linked_publications):
        context = build_context(linked_publications, ["VISUAL"], ConceptConfig(max_citation_attributes=1))

        assert context.attributes == ["VISUAL", "10.1/p2"]
        assert context.extent_of(["10.1/p2"]) == ["10.1/p1", "10.1/p3"]

    def test_citation_concept(self, linked_publications):
        concepts = compute_formal_concepts(
            linked_publications, ["VISUAL"], ConceptConfig(max_citation_attributes=1)
        )

        visual = [concept for concept in concepts if concept.extent == ["10.1/p1", "10.1/p3"]]
        assert visual[0].intent == ["10.1/p2", "VISUAL"]
        assert visual[0].citations == ["10.1/p2"]
        assert visual[0].keywords == ["VISUAL"]

    def test_citation_attributes_fill_remaining_bound(self, linked_publications):
        context = build_context(linked_publications, ["VISUAL", "GRAPH"], ConceptConfig(max_attributes=3))

        assert context.attributes == ["VISUAL", "GRAPH", "10.1/p2"]

    def test_many_keyword_groups_with_default_bound(self, linked_publications):
        groups = [f"KEYWORD{i}" for i in range(11)]

        context = build_context(linked_publications, groups)

        assert context.attributes == groups + ["10.1/p2", "10.1/p1", "10.1/p3"]

    def test_keyword_groups_at_bound_drop_citation_attributes(self, linked_publications):
        concepts = compute_formal_concepts(
            linked_publications, ["VISUAL", "GRAPH"], ConceptConfig(max_attributes=2)
        )

        assert concepts
        assert all(not concept.citations for concept in concepts)

    def test_citation_attributes_can_be_disabled(self, linked_publications):
        context = build_context(linked_publications, ["VISUAL"], ConceptConfig(include_citation_attributes=False))

        assert context.attributes == ["VISUAL"]
