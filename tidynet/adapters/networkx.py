try:
    import networkx as nx
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'networkx' is not installed. "
        "Install with: pip install networkx"
    ) from e

import warnings
from enum import Enum
from typing import Any

import polars as pl

from ..core.graph import Graph
from ..core.structure import FROM, NODE_ID, NODE_KEY, TO, Identity
from ._base import GraphAdapter

__all__ = [
    "to_networkx",
    "from_networkx",
    "to_backend",
    "NetworkXAdapter",
]


def _serialize_value(v: Any) -> Any:
    if isinstance(v, Enum):
        return v.value
    return v


def _attrs(row: dict, keep=None) -> dict:
    # None never reaches networkx: algorithms read missing attrs as defaults
    out = {}
    for k, v in row.items():
        if v is None or (keep is not None and k not in keep):
            continue
        out[k] = _serialize_value(v)
    return out


def _agg_for(key, aggregations: dict):
    agg = aggregations.get(key)
    if callable(agg):
        return agg
    if agg == "sum":
        return sum
    if agg == "min":
        return min
    if agg == "max":
        return max
    if agg == "mean":
        return lambda vals: sum(vals) / len(vals)
    if agg is not None:
        raise ValueError(f"Unknown aggregation {agg!r} for edge attribute {key!r}")
    # defaults: weight -> min (shortest paths), capacity -> sum (max-flow)
    if key == "capacity":
        return sum
    if key == "weight":
        return min
    return lambda vals: vals[0]


def _collapse_multiedges(nxG, *, directed: bool, aggregations: dict | None = None):
    """
    Collapse parallel edges into a single edge with aggregated attributes.
    Defaults: weight -> min (good for shortest paths), capacity -> sum (good for max-flow).
    """
    H = nx.DiGraph() if directed else nx.Graph()
    H.graph.update(nxG.graph)
    H.add_nodes_from(nxG.nodes(data=True))

    aggregations = aggregations or {}

    # Bucket parallel edges
    bucket = {}  # (u,v) or sorted(u,v) -> {attr: [values]}
    for u, v, d in nxG.edges(data=True):
        key = (u, v) if directed or (v, u) not in bucket else (v, u)
        entry = bucket.setdefault(key, {})
        for k, val in d.items():
            entry.setdefault(k, []).append(val)

    # Aggregate per (u,v)
    for (u, v), attrs in bucket.items():
        H.add_edge(u, v, **{k: _agg_for(k, aggregations)(vals) for k, vals in attrs.items()})
    return H


def to_networkx(
    graph: Graph,
    *,
    simple: bool = False,
    directed: bool | None = None,
    edge_attrs=None,
    edge_aggs: dict | None = None,
    public_only: bool = True,
):
    """
    Export a Graph to NetworkX.

    Parameters
    ----------
    graph : Graph
    simple : bool, default False
        If False, return a ``MultiGraph``/``MultiDiGraph`` whose edge keys are
        edge-table row positions. If True, collapse parallel edges into a
        simple ``Graph``/``DiGraph`` (see ``edge_aggs``).
    directed : bool, optional
        Override the graph's directedness. Exporting an undirected graph as
        directed emits every edge in both directions.
    edge_attrs : list[str], optional
        Edge columns to carry over. Default: all (public) edge columns.
    edge_aggs : dict, optional
        ``{attr: "sum" | "min" | "max" | "mean" | callable}`` used when
        ``simple=True``. Defaults: ``weight`` → min, ``capacity`` → sum,
        anything else → first value.
    public_only : bool, default True
        Strip ``__``-prefixed attribute columns.

    Returns
    -------
    networkx.Graph | networkx.DiGraph | networkx.MultiGraph | networkx.MultiDiGraph
        Nodes are the graph's node identities (``node_key`` values or
        ordinals) in node-table order, with node attributes attached.
        ``nxG.graph["identity"]`` records the identity scheme.

    Warns
    -----
    RuntimeWarning
        If ``simple=True`` collapses parallel edges.

    Notes
    -----
    Null attribute values are omitted rather than stored as ``None``.
    """
    directed = graph.directed if directed is None else bool(directed)
    id_col = graph.identity.column
    keep = None if edge_attrs is None else set(edge_attrs)

    G = nx.MultiDiGraph() if directed else nx.MultiGraph()
    G.graph["identity"] = graph.identity.value

    for row in graph.nodes_view(public_only=public_only).iter_rows(named=True):
        nid = row.pop(id_col)
        G.add_node(nid, **_attrs(row))

    mirror = directed and not graph.directed
    for i, row in enumerate(graph.edges_view(public_only=public_only).iter_rows(named=True)):
        u, v = row.pop(FROM), row.pop(TO)
        attrs = _attrs(row, keep)
        G.add_edge(u, v, key=i, **attrs)
        if mirror and u != v:
            G.add_edge(v, u, key=i, **attrs)

    if not simple:
        return G

    H = _collapse_multiedges(G, directed=directed, aggregations=edge_aggs)
    dropped = G.number_of_edges() - H.number_of_edges()
    if dropped:
        warnings.warn(
            f"to_networkx(simple=True) collapsed {dropped} parallel edge(s); "
            "edge attributes were aggregated",
            RuntimeWarning,
            stacklevel=2,
        )
    return H


def from_networkx(nxG, *, directed: bool | None = None, identity: str | None = None) -> Graph:
    """
    Build a Graph from a NetworkX graph.

    Parameters
    ----------
    nxG : networkx.Graph | networkx.DiGraph | networkx.MultiGraph | networkx.MultiDiGraph
    directed : bool, optional
        Default: ``nxG.is_directed()``.
    identity : {"keyed", "ordinal"}, optional
        Identity scheme of the result. Default: ``nxG.graph["identity"]`` when
        present (graphs exported by :func:`to_networkx`), else ``"keyed"``
        with the networkx node objects as ``node_key`` values.

    Returns
    -------
    Graph
        Node order follows ``nxG.nodes``. Multigraph edges with integer keys
        are ordered by key, other edges follow ``nxG.edges``.

    Notes
    -----
    NetworkX does not keep the orientation of undirected edges, so ``from``
    and ``to`` may come back swapped for undirected graphs.
    """
    scheme = Identity(identity or nxG.graph.get("identity", Identity.KEYED.value))
    id_col = NODE_ID if scheme is Identity.ORDINAL else NODE_KEY
    directed = nxG.is_directed() if directed is None else bool(directed)

    node_rows = [{id_col: n, **{k: v for k, v in d.items() if k != id_col}} for n, d in nxG.nodes(data=True)]
    if node_rows:
        nodes = pl.DataFrame(node_rows, strict=False, infer_schema_length=None)
    else:
        nodes = pl.DataFrame(schema={id_col: pl.Int64 if scheme is Identity.ORDINAL else pl.String})

    if nxG.is_multigraph():
        triples = list(nxG.edges(keys=True, data=True))
        if all(isinstance(k, int) for _, _, k, _ in triples):
            # keys written by to_networkx are edge-table positions
            triples.sort(key=lambda t: t[2])
        pairs = [(u, v, d) for u, v, _, d in triples]
    else:
        pairs = list(nxG.edges(data=True))

    edge_rows = [{FROM: u, TO: v, **{k: val for k, val in d.items() if k not in (FROM, TO)}} for u, v, d in pairs]
    edges = pl.DataFrame(edge_rows, strict=False, infer_schema_length=None) if edge_rows else None
    return Graph(nodes, edges, directed=directed)


def to_backend(graph, **kwargs):
    """Backend conversion used by ``graph.nx``: the lossless multigraph export."""
    return to_networkx(graph, **kwargs)


class NetworkXAdapter(GraphAdapter):
    name = "networkx"

    def export(self, graph, **kwargs):
        return to_networkx(graph, **kwargs)

    def load(self, obj, **kwargs):
        return from_networkx(obj, **kwargs)


ADAPTER_CLASS = NetworkXAdapter
