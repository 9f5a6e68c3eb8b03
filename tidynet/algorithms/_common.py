"""
Topology helpers shared by the metric providers.

Metrics read the graph through its node/edge tables; these helpers turn the
tables into the structures the numerics need (row indices, weight vectors,
sparse incidence, collapsed networkx projections).
"""
from __future__ import annotations

import numpy as np
import polars as pl
import scipy.sparse as sp

from ..core.errors import UnknownColumnError

MODES = ("all", "out", "in")


def check_mode(mode: str) -> str:
    if mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
    return mode


def node_index(graph) -> dict:
    """Node identity -> row position in the node table."""
    return {nid: i for i, nid in enumerate(graph.node_ids())}


def weight_values(graph, weights: str | None) -> np.ndarray:
    """
    Edge weights aligned with the edge table, as float64.

    ``weights=None`` gives unit weights.

    Raises
    ------
    UnknownColumnError
        If ``weights`` names no edge column.
    TypeError
        If the column is not numeric.
    ValueError
        If the column contains nulls.
    """
    edges = graph.edges_view(public_only=False)
    if weights is None:
        return np.ones(edges.height, dtype=float)
    if weights not in edges.columns:
        raise UnknownColumnError(weights, table="edges", available=edges.columns)
    col = edges.get_column(weights)
    if col.null_count():
        raise ValueError(f"weight column {weights!r} has {col.null_count()} null value(s)")
    if not col.dtype.is_numeric():
        raise TypeError(f"weight column {weights!r} must be numeric, got {col.dtype}")
    return col.cast(pl.Float64).to_numpy()


def incidence_matrix(graph, *, end: str = "all", values=None, loops: bool = True) -> sp.csr_matrix:
    """
    Node x edge incidence matrix (CSR).

    Parameters
    ----------
    graph : Graph
    end : {"all", "out", "in"}
        ``"out"`` marks each edge's ``from`` node, ``"in"`` its ``to`` node,
        ``"all"`` both (a self-loop contributes twice to its node).
    values : array-like, optional
        Per-edge values (e.g. weights). Default: ones.
    loops : bool
        If False, self-loop columns are zeroed.

    Returns
    -------
    scipy.sparse.csr_matrix
        Shape ``(number_of_nodes, number_of_edges)``.
    """
    check_mode(end)
    index = node_index(graph)
    pairs = graph.edge_list()
    n, m = len(index), len(pairs)
    vals = np.ones(m, dtype=float) if values is None else np.asarray(values, dtype=float)
    if not loops:
        vals = np.where([u == v for u, v in pairs], 0.0, vals) if m else vals

    rows, cols, data = [], [], []
    cols_e = np.arange(m)
    if end in ("all", "out"):
        rows.append(np.fromiter((index[u] for u, _ in pairs), dtype=np.int64, count=m))
        cols.append(cols_e)
        data.append(vals)
    if end in ("all", "in"):
        rows.append(np.fromiter((index[v] for _, v in pairs), dtype=np.int64, count=m))
        cols.append(cols_e)
        data.append(vals)
    coo = sp.coo_matrix(
        (np.concatenate(data), (np.concatenate(rows), np.concatenate(cols))),
        shape=(n, m),
        dtype=float,
    )
    # duplicate (node, edge) entries (self-loops) are summed
    return coo.tocsr()


def simple_projection(graph, weights: str | None, *, directed: bool, combine: str = "min"):
    """
    Collapse the edge table into a simple networkx (Di)Graph.

    Parallel edges (and, undirected, both orientations) merge into one edge
    whose ``weight`` is the ``min`` or ``sum`` of the merged weights. Without
    ``weights`` each edge counts 1.
    """
    import networkx as nx

    w = weight_values(graph, weights)
    G = nx.DiGraph() if directed else nx.Graph()
    G.add_nodes_from(graph.node_ids())
    for (u, v), x in zip(graph.edge_list(), w.tolist()):
        if G.has_edge(u, v):
            cur = G[u][v]["weight"]
            G[u][v]["weight"] = min(cur, x) if combine == "min" else cur + x
        else:
            G.add_edge(u, v, weight=x)
    return G

