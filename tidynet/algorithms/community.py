"""Community detection providers."""
from __future__ import annotations

import random
import warnings
from collections.abc import Sequence

from ._common import node_index, simple_projection, weight_values

__all__ = [
    "group_louvain",
    "modularity",
]


def _labels_by_size(communities, order: list) -> list[int]:
    # 1 = largest community; ties go to the community seen first in table order
    position = {nid: i for i, nid in enumerate(order)}
    ranked = sorted(
        (sorted(c, key=position.__getitem__) for c in communities),
        key=lambda c: (-len(c), position[c[0]]),
    )
    label = {}
    for k, members in enumerate(ranked, start=1):
        for nid in members:
            label[nid] = k
    return [label[nid] for nid in order]


def group_louvain(
    graph,
    weights: str | None = None,
    resolution: float = 1.0,
    seed: int | None = None,
    backend: str = "networkx",
) -> list[int]:
    """
    Louvain community labels per node.

    Parameters
    ----------
    graph : Graph
    weights : str, optional
        Edge column read as similarity. Parallel edges (and, on directed
        graphs, both orientations) add up. Default: every edge weighs 1.
    resolution : float, default 1.0
        Above 1 favours smaller communities, below 1 larger ones.
    seed : int, optional
        Seed for the randomized node visiting order.
    backend : {"networkx", "igraph"}

    Returns
    -------
    list[int]
        Labels ``1..k`` aligned with the node table; ``1`` is the largest
        community. Isolated nodes form singleton communities.

    Warns
    -----
    RuntimeWarning
        On directed graphs, which are clustered as undirected.
    """
    if graph.directed:
        warnings.warn(
            "group_louvain clusters the undirected projection of a directed graph",
            RuntimeWarning,
            stacklevel=2,
        )
    order = graph.node_ids()
    if not order:
        return []
    if backend == "networkx":
        import networkx as nx

        G = simple_projection(graph, weights, directed=False, combine="sum")
        communities = nx.community.louvain_communities(G, weight="weight", resolution=resolution, seed=seed)
        return _labels_by_size(communities, order)
    if backend == "igraph":
        return _labels_by_size(_igraph_louvain(graph, weights, resolution, seed), order)
    raise ValueError(f"backend must be 'networkx' or 'igraph', got {backend!r}")


def _igraph_louvain(graph, weights, resolution, seed):
    from ..adapters.igraph import ig

    index = node_index(graph)
    ids = list(index)
    G = ig.Graph(n=len(index), directed=False)
    G.add_edges([(index[u], index[v]) for u, v in graph.edge_list()])
    G.es["weight"] = weight_values(graph, weights).tolist()
    G.simplify(multiple=True, loops=False, combine_edges={"weight": "sum"})

    if seed is not None:
        ig.set_random_number_generator(random.Random(seed))
    try:
        clustering = G.community_multilevel(weights="weight", resolution=resolution)
    finally:
        if seed is not None:
            ig.set_random_number_generator(random)
    groups = {}
    for i, c in enumerate(clustering.membership):
        groups.setdefault(c, []).append(ids[i])
    return list(groups.values())


def modularity(graph, membership, weights: str | None = None, resolution: float = 1.0) -> float:
    """
    Modularity of a node partition.

    Parameters
    ----------
    graph : Graph
    membership : str | Sequence
        Node column name holding community labels, or labels aligned with
        the node table.
    weights : str, optional
        Edge column read as similarity (summed over parallel edges).
    resolution : float, default 1.0

    Returns
    -------
    float
        Directed modularity on directed graphs, undirected otherwise.

    Raises
    ------
    UnknownColumnError
        If ``membership`` names no node column.
    ValueError
        If labels are missing or not aligned with the nodes.
    """
    import networkx as nx

    if isinstance(membership, str):
        from ..core.errors import UnknownColumnError

        nodes = graph.nodes_view(public_only=False)
        if membership not in nodes.columns:
            raise UnknownColumnError(membership, table="nodes", available=nodes.columns)
        labels = nodes.get_column(membership).to_list()
    elif isinstance(membership, Sequence) or hasattr(membership, "__iter__"):
        labels = list(membership)
    else:
        raise TypeError(f"membership must be a column name or a sequence, got {type(membership).__name__}")

    order = graph.node_ids()
    if len(labels) != len(order):
        raise ValueError(f"membership has {len(labels)} labels for {len(order)} nodes")
    if any(lab is None for lab in labels):
        raise ValueError("membership contains null labels")

    groups = {}
    for nid, lab in zip(order, labels):
        groups.setdefault(lab, set()).add(nid)
    G = simple_projection(graph, weights, directed=graph.directed, combine="sum")
    if G.number_of_edges() == 0:
        return 0.0
    return float(nx.community.modularity(G, list(groups.values()), weight="weight", resolution=resolution))
