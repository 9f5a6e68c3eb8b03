"""
Centrality metric providers.

Each provider takes the whole graph and returns a list aligned with the node
table (or, for edge betweenness, the edge table), so it can be handed to
``mutate`` directly or through :func:`functools.partial`::

    g.activate("nodes").mutate("degree", centrality_degree)
    g.activate("nodes").mutate("strength", partial(centrality_strength, weights="w"))
"""
from __future__ import annotations

import numpy as np

from ._common import check_mode, incidence_matrix, node_index, simple_projection, weight_values

__all__ = [
    "centrality_degree",
    "centrality_strength",
    "centrality_betweenness",
    "centrality_edge_betweenness",
]


def _incident_sums(graph, values, mode: str, loops: bool) -> np.ndarray:
    end = check_mode(mode) if graph.directed else "all"
    M = incidence_matrix(graph, end=end, values=values, loops=loops)
    return np.asarray(M.sum(axis=1)).ravel()


def centrality_degree(graph, mode: str = "all", loops: bool = True) -> list[int]:
    """
    Number of incident edges per node.

    Parameters
    ----------
    graph : Graph
    mode : {"all", "out", "in"}, default "all"
        On directed graphs, count outgoing (``from``), incoming (``to``) or
        both. Ignored for undirected graphs.
    loops : bool, default True
        Count self-loops (twice under ``"all"``).

    Returns
    -------
    list[int]
        Aligned with the node table.
    """
    return [int(round(x)) for x in _incident_sums(graph, None, mode, loops)]


def centrality_strength(graph, weights: str = "weight", mode: str = "all", loops: bool = True) -> list[float]:
    """
    Sum of edge weights over incident edges per node.

    Parameters
    ----------
    graph : Graph
    weights : str, default "weight"
        Numeric edge column.
    mode : {"all", "out", "in"}, default "all"
    loops : bool, default True

    Returns
    -------
    list[float]
        Aligned with the node table. Nodes without edges get 0.0.

    Raises
    ------
    UnknownColumnError
        If ``weights`` is not an edge column.
    ValueError
        If the weight column has nulls.
    """
    return [float(x) for x in _incident_sums(graph, weight_values(graph, weights), mode, loops)]


def centrality_betweenness(
    graph,
    weights: str | None = None,
    normalized: bool = False,
    backend: str = "networkx",
) -> list[float]:
    """
    Shortest-path betweenness per node.

    Parameters
    ----------
    graph : Graph
    weights : str, optional
        Edge column read as path length. Parallel edges collapse to their
        minimum weight. Default: unweighted.
    normalized : bool, default False
        Divide by the number of node pairs not containing the node.
    backend : {"networkx", "igraph"}

    Returns
    -------
    list[float]
        Aligned with the node table.

    Notes
    -----
    Undirected pairs are counted once, so on a path ``a - b - c`` node ``b``
    scores 1.0.
    """
    w = "weight" if weights is not None else None
    if backend == "networkx":
        import networkx as nx

        G = simple_projection(graph, weights, directed=graph.directed, combine="min")
        G.remove_edges_from(list(nx.selfloop_edges(G)))
        scores = nx.betweenness_centrality(G, weight=w, normalized=normalized)
        return [float(scores[n]) for n in graph.node_ids()]
    if backend == "igraph":
        return _igraph_betweenness(graph, weights, normalized)
    raise ValueError(f"backend must be 'networkx' or 'igraph', got {backend!r}")


def _igraph_betweenness(graph, weights, normalized: bool) -> list[float]:
    from ..adapters.igraph import ig

    index = node_index(graph)
    G = ig.Graph(n=len(index), directed=graph.directed)
    G.add_edges([(index[u], index[v]) for u, v in graph.edge_list()])
    G.es["weight"] = weight_values(graph, weights).tolist()
    G.simplify(multiple=True, loops=True, combine_edges={"weight": "min"})
    scores = np.asarray(
        G.betweenness(directed=graph.directed, weights="weight" if weights is not None else None),
        dtype=float,
    )
    n = G.vcount()
    if normalized and n > 2:
        scale = (n - 1) * (n - 2)
        scores = scores / (scale if graph.directed else scale / 2.0)
    return scores.tolist()


def centrality_edge_betweenness(graph, weights: str | None = None, normalized: bool = False) -> list[float]:
    """
    Shortest-path betweenness per edge, aligned with the edge table.

    Parallel edges of equal length share the paths running through them;
    self-loops score 0.0.
    """
    import networkx as nx

    G = nx.MultiDiGraph() if graph.directed else nx.MultiGraph()
    G.add_nodes_from(graph.node_ids())
    for i, ((u, v), x) in enumerate(zip(graph.edge_list(), weight_values(graph, weights).tolist())):
        G.add_edge(u, v, key=i, weight=x)
    scores = nx.edge_betweenness_centrality(
        G, normalized=normalized, weight="weight" if weights is not None else None
    )
    out = [0.0] * graph.number_of_edges()
    for (_, _, k), val in scores.items():
        out[k] = float(val)
    return out
