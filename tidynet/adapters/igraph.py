try:
    import igraph as ig
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'igraph' is not installed. "
        "Install with: pip install tidynet[igraph]"
    ) from e

from enum import Enum
from typing import Any

import polars as pl

from ..core.graph import Graph
from ..core.structure import FROM, NODE_ID, NODE_KEY, TO
from ._base import GraphAdapter

__all__ = [
    "to_igraph",
    "from_igraph",
    "to_backend",
    "IGraphAdapter",
]


def _serialize_value(v: Any) -> Any:
    if isinstance(v, Enum):
        return v.value
    return v


def to_igraph(graph: Graph, *, directed: bool | None = None, public_only: bool = True) -> "ig.Graph":
    """
    Export a Graph to igraph.

    Parameters
    ----------
    graph : Graph
    directed : bool, optional
        Override the graph's directedness.
    public_only : bool, default True
        Strip ``__``-prefixed attribute columns.

    Returns
    -------
    igraph.Graph
        Vertex ``i`` is the ``i``-th row of the node table and edge ``j`` the
        ``j``-th row of the edge table. Node identities live in the vertex
        attribute named after the identity column (``node_key`` or
        ``__node_id``); the graph attribute ``identity`` records the scheme.

    Notes
    -----
    igraph requires integer vertex indices internally; the identity
    attribute preserves the original keys.
    """
    directed = graph.directed if directed is None else bool(directed)
    id_col = graph.identity.column
    nodes = graph.nodes_view(public_only=public_only)
    edges = graph.edges_view(public_only=public_only)

    ids = nodes.get_column(id_col).to_list()
    index = {nid: i for i, nid in enumerate(ids)}

    G = ig.Graph(n=len(ids), directed=directed)
    G["identity"] = graph.identity.value
    for col in nodes.columns:
        G.vs[col] = [_serialize_value(v) for v in nodes.get_column(col).to_list()]

    G.add_edges([(index[u], index[v]) for u, v in graph.edge_list()])
    for col in edges.columns:
        if col in (FROM, TO):
            continue
        G.es[col] = [_serialize_value(v) for v in edges.get_column(col).to_list()]
    return G


def from_igraph(igG: "ig.Graph", *, directed: bool | None = None) -> Graph:
    """
    Build a Graph from an igraph graph.

    Identity is read from the ``node_key`` or ``__node_id`` vertex attribute
    (as written by :func:`to_igraph`); failing that, the ``name`` attribute
    becomes ``node_key``; failing that, the graph is ordinal with vertex
    ``i`` as node ``i + 1``.

    Parameters
    ----------
    igG : igraph.Graph
    directed : bool, optional
        Default: ``igG.is_directed()``.

    Returns
    -------
    Graph
    """
    directed = igG.is_directed() if directed is None else bool(directed)
    v_attrs = igG.vs.attributes()

    if NODE_KEY in v_attrs:
        id_col, rename = NODE_KEY, None
    elif NODE_ID in v_attrs:
        id_col, rename = NODE_ID, None
    elif "name" in v_attrs:
        id_col, rename = NODE_KEY, "name"
    else:
        id_col, rename = NODE_ID, None

    columns = {}
    if rename is not None:
        columns[NODE_KEY] = igG.vs[rename]
    elif id_col not in v_attrs:
        columns[NODE_ID] = list(range(1, igG.vcount() + 1))
    else:
        columns[id_col] = igG.vs[id_col]
    for a in v_attrs:
        if a in (id_col, rename):
            continue
        columns[a] = igG.vs[a]
    nodes = pl.DataFrame(columns, strict=False)

    ids = columns[id_col]
    edge_cols = {
        FROM: [ids[e.source] for e in igG.es],
        TO: [ids[e.target] for e in igG.es],
    }
    for a in igG.es.attributes():
        if a in (FROM, TO):
            continue
        edge_cols[a] = igG.es[a]
    edges = pl.DataFrame(edge_cols, strict=False) if igG.ecount() else None
    return Graph(nodes, edges, directed=directed)


def to_backend(graph, **kwargs):
    """Backend conversion used by ``graph.ig``."""
    return to_igraph(graph, **kwargs)


class IGraphAdapter(GraphAdapter):
    """
    Adapter class for the registry.

    Methods
    -------
    export(graph, **kwargs)
        Export Graph to igraph.Graph.
    load(igG, **kwargs)
        Rebuild a Graph from igraph.Graph.
    """

    name = "igraph"

    def export(self, graph, **kwargs):
        return to_igraph(graph, **kwargs)

    def load(self, obj, **kwargs):
        return from_igraph(obj, **kwargs)


ADAPTER_CLASS = IGraphAdapter
