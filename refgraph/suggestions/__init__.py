from refgraph.suggestions.consistency import CitationRepairReport, repair_citation_links
from refgraph.suggestions.engine import (
    SuggestionEngine,
    SuggestionResult,
    expand_citation_graph,
    paginate,
    rank_candidates,
)
from refgraph.suggestions.hydration import (
    CatalogMetadataFetcher,
    MetadataFetcher,
    MetadataFetchFailure,
    hydrate_candidates,
)

__all__ = [
    "CatalogMetadataFetcher",
    "CitationRepairReport",
    "MetadataFetchFailure",
    "MetadataFetcher",
    "SuggestionEngine",
    "SuggestionResult",
    "expand_citation_graph",
    "hydrate_candidates",
    "paginate",
    "rank_candidates",
    "repair_citation_links",
]
