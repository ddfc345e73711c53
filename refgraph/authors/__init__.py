from refgraph.authors.filtering import author_matches, publications_by_author
from refgraph.authors.identity import eszett_variants, extract_orcid, name_to_id, strip_orcid
from refgraph.authors.network import compute_coauthor_graph, to_networkx
from refgraph.authors.resolver import AuthorMention, build_mentions, resolve_authors

__all__ = [
    "AuthorMention",
    "author_matches",
    "build_mentions",
    "compute_coauthor_graph",
    "eszett_variants",
    "extract_orcid",
    "name_to_id",
    "publications_by_author",
    "resolve_authors",
    "strip_orcid",
    "to_networkx",
]
