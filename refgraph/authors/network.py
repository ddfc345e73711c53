"""Co-author network built from resolved authors."""

from __future__ import annotations

from typing import List, Sequence, Tuple

import networkx as nx

from refgraph.models import AuthorAggregate

CoauthorEdge = Tuple[str, str, int]


def compute_coauthor_graph(authors: Sequence[AuthorAggregate]) -> List[CoauthorEdge]:
    """Undirected co-author edges (id_a, id_b, weight) with id_a < id_b, sorted."""
    known_ids = {author.id for author in authors}
    edges: dict[tuple[str, str], int] = {}
    for author in authors:
        for coauthor_id, weight in author.coauthors.items():
            if coauthor_id not in known_ids or coauthor_id == author.id:
                continue
            pair = (min(author.id, coauthor_id), max(author.id, coauthor_id))
            edges[pair] = max(edges.get(pair, 0), weight)
    return sorted((left, right, weight) for (left, right), weight in edges.items())


def to_networkx(authors: Sequence[AuthorAggregate]) -> nx.Graph:
    """Co-author graph with author attributes on the nodes."""
    graph = nx.Graph()
    for author in authors:
        graph.add_node(
            author.id,
            name=author.name,
            score=author.score,
            count=author.count,
            orcid=author.orcid,
        )
    for left, right, weight in compute_coauthor_graph(authors):
        graph.add_edge(left, right, weight=weight)
    return graph
