from .centrality import (
    centrality_betweenness,
    centrality_degree,
    centrality_edge_betweenness,
    centrality_strength,
)
from .community import group_louvain, modularity
from ._common import incidence_matrix

__all__ = [
    "centrality_degree",
    "centrality_strength",
    "centrality_betweenness",
    "centrality_edge_betweenness",
    "group_louvain",
    "modularity",
    "incidence_matrix",
]
